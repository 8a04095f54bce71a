"""Colored console rendering for diagnostic output.

``Appender`` is a string builder that remembers the current foreground and
background colors, so a colored fragment can be written in the middle of a
line and the previous color restored afterwards. ``RendererUtility`` creates
appenders and lays out common shapes (key/value blocks, aligned tables).
"""

import os
import sys
from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator, List, Mapping, Optional, Sequence, TextIO, Union

import colorama
from colorama import Back, Fore

from cmdtool.shared import AnsiMode, RendererConfig


class AnsiColor(Enum):
    """Foreground colors."""

    DEFAULT = Fore.RESET
    BLACK = Fore.BLACK
    RED = Fore.RED
    GREEN = Fore.GREEN
    YELLOW = Fore.YELLOW
    BLUE = Fore.BLUE
    MAGENTA = Fore.MAGENTA
    CYAN = Fore.CYAN
    WHITE = Fore.WHITE
    BRIGHT_RED = Fore.LIGHTRED_EX
    BRIGHT_GREEN = Fore.LIGHTGREEN_EX
    BRIGHT_YELLOW = Fore.LIGHTYELLOW_EX
    BRIGHT_BLUE = Fore.LIGHTBLUE_EX
    BRIGHT_CYAN = Fore.LIGHTCYAN_EX


class AnsiBackground(Enum):
    """Background colors."""

    DEFAULT = Back.RESET
    BLACK = Back.BLACK
    RED = Back.RED
    GREEN = Back.GREEN
    YELLOW = Back.YELLOW
    BLUE = Back.BLUE
    WHITE = Back.WHITE


class ColorSetting(Enum):
    """Semantic palette used by the tools."""

    TITLE = AnsiColor.BLUE
    INFO = AnsiColor.GREEN
    WARN = AnsiColor.YELLOW
    ERROR = AnsiColor.RED
    KEYWORD = AnsiColor.CYAN
    SYMBOL = AnsiColor.BRIGHT_CYAN


Color = Union[AnsiColor, ColorSetting]


def _resolve(color: Color) -> AnsiColor:
    if isinstance(color, ColorSetting):
        return color.value
    return color


class Appender:
    """Builds colored, indented console text."""

    def __init__(self, ansi_enabled: bool = True, indent_width: int = 2) -> None:
        self.ansi_enabled = ansi_enabled
        self.indent_width = indent_width
        self.indentation = 0
        self.color = AnsiColor.DEFAULT
        self.background = AnsiBackground.DEFAULT
        self._parts: List[str] = []

    def __str__(self) -> str:
        return self.render()

    def render(self) -> str:
        """Return the text built so far, resetting any color left active."""
        text = "".join(self._parts)
        if self.ansi_enabled:
            if self.color is not AnsiColor.DEFAULT:
                text += AnsiColor.DEFAULT.value
            if self.background is not AnsiBackground.DEFAULT:
                text += AnsiBackground.DEFAULT.value
        return text

    def set_color(self, color: Color) -> "Appender":
        self.color = _resolve(color)
        self._encode(self.color.value)
        return self

    def set_background(self, background: AnsiBackground) -> "Appender":
        self.background = background
        self._encode(background.value)
        return self

    @contextmanager
    def indent(self) -> Iterator["Appender"]:
        """Indent every line started inside the ``with`` block."""
        self.indentation += self.indent_width
        try:
            yield self
        finally:
            self.indentation -= self.indent_width

    def append(self, text: str, color: Optional[Color] = None) -> "Appender":
        """Append text, optionally in a color that only applies to this text."""
        if color is None:
            self._parts.append(text)
            return self

        previous = self.color
        wanted = _resolve(color)
        if previous is not wanted:
            self.set_color(wanted)
        self._parts.append(text)
        if previous is not wanted:
            self.set_color(previous)
        return self

    def append_keyword(self, text: str) -> "Appender":
        return self.append(text, ColorSetting.KEYWORD)

    def error(self, text: str) -> "Appender":
        return self.append(text, ColorSetting.ERROR)

    def warn(self, text: str) -> "Appender":
        return self.append(text, ColorSetting.WARN)

    def pad(self, length: int, char: str = " ") -> "Appender":
        if length > 0:
            self._parts.append(char * length)
        return self

    def start_line(self) -> "Appender":
        return self.pad(self.indentation)

    def end_line(self) -> "Appender":
        self._parts.append("\n")
        return self

    def writeln(self, line: str) -> "Appender":
        return self.start_line().append(line).end_line()

    def write_title(self, line: str) -> "Appender":
        return self.start_line().append(line, ColorSetting.TITLE).end_line()

    def _encode(self, code: str) -> None:
        if self.ansi_enabled:
            self._parts.append(code)


class RendererUtility:
    """Creates appenders and renders common layouts."""

    def __init__(
        self,
        config: Optional[RendererConfig] = None,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.config = config or RendererConfig()
        self.stream = stream or sys.stdout
        self.ansi_enabled = self._ansi_enabled()
        if self.ansi_enabled:
            colorama.just_fix_windows_console()

    def _ansi_enabled(self) -> bool:
        if self.config.ansi_mode is AnsiMode.ALWAYS:
            return True
        if self.config.ansi_mode is AnsiMode.NEVER:
            return False
        if "NO_COLOR" in os.environ:
            return False
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())

    def start(self) -> Appender:
        return Appender(self.ansi_enabled, self.config.indent_width)

    def render_mapping(self, out: Appender, mapping: Mapping[Any, Any]) -> None:
        """Render an indented key/value block sorted by key."""
        keys = sorted(mapping, key=str)
        with out.indent():
            self.render_key_values(
                out, [str(key) for key in keys], [str(mapping[key]) for key in keys]
            )

    def render_key_values(
        self, out: Appender, keys: Sequence[str], values: Sequence[str]
    ) -> None:
        """Render one ``key : value`` line per pair with the keys aligned."""
        if not keys:
            return

        width = max(len(key) for key in keys)
        for key, value in zip(keys, values):
            out.start_line()
            out.append_keyword(key)
            out.pad(width - len(key) + 1)
            out.append(": ")
            out.append(value)
            out.end_line()

    def render_columns(
        self,
        out: Appender,
        columns: Sequence[Sequence[str]],
        with_titles: bool = True,
    ) -> None:
        """Render columns as an aligned table.

        The first row is treated as the title row when ``with_titles`` is set
        and is followed by a rule.
        """
        if not columns or not columns[0]:
            return

        widths = [max(len(value) for value in column) for column in columns]
        rule_width = sum(widths) + 3 * (len(columns) - 1)

        for row_idx, row in enumerate(zip(*columns)):
            title_row = with_titles and row_idx == 0
            out.set_color(ColorSetting.TITLE if title_row else AnsiColor.DEFAULT)
            out.start_line()
            for col_idx, value in enumerate(row):
                out.append(value)
                if col_idx < len(row) - 1:
                    out.pad(widths[col_idx] - len(value))
                    out.append(" | ", ColorSetting.SYMBOL)
            out.end_line()

            if title_row:
                out.start_line()
                out.set_color(ColorSetting.SYMBOL).pad(rule_width, "-")
                out.set_color(AnsiColor.DEFAULT)
                out.end_line()
