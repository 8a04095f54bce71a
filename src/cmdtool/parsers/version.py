"""Parsers turning version command output into ``VersionInfo``."""

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

from cmdtool.system import CommandRunner, LineProcessor


@dataclass(frozen=True)
class VersionInfo:
    """A tool version and whatever extra details came with it."""

    version: Optional[str]
    meta: Dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"version: {self.version}"]
        lines.extend(f"  {key}: {value}" for key, value in sorted(self.meta.items()))
        return "\n".join(lines)


class VersionParser(LineProcessor):
    """Base class for line processors extracting version details."""

    def __init__(self) -> None:
        self.version: Optional[str] = None
        self.context: Dict[str, str] = {}

    def split_this(self, line: str) -> None:
        """Store the ``key: value, key: value`` pairs of ``line`` in the context.

        Separators inside double quotes are ignored and surrounding quotes are
        removed from values.
        """
        mark = 0
        open_quote = False
        var_name: Optional[str] = None

        for i, c in enumerate(line):
            if c == '"':
                open_quote = not open_quote
            elif open_quote:
                continue
            elif c == ":":
                var_name = line[mark:i].strip()
                mark = i + 1
            elif c == ",":
                self._put(var_name, line[mark:i])
                var_name = None
                mark = i + 1

        if 0 < mark < len(line) and not open_quote:
            self._put(var_name, line[mark:])

    def _put(self, var_name: Optional[str], value: str) -> None:
        if var_name:
            self.context[var_name] = value.strip().strip('"')

    def to_version_info(self) -> VersionInfo:
        return VersionInfo(self.version, dict(self.context))


class JavaVersionParser(VersionParser):
    """Parses ``java -version`` output.

    Example output::

        openjdk 17.0.7 2023-04-18
        OpenJDK Runtime Environment Temurin-17.0.7+7 (build 17.0.7+7)
        OpenJDK 64-Bit Server VM Temurin-17.0.7+7 (build 17.0.7+7, mixed mode, sharing)
    """

    def process(self, line: str, line_idx: int) -> None:
        if line_idx == 1:
            self.version = line
        elif line_idx == 2:
            self.context["runtime"] = line
        elif line_idx == 3:
            self.context["vm"] = line


def detect_java_version(
    runner: CommandRunner,
    java_home: Optional[Union[str, Path]] = None,
) -> Optional[VersionInfo]:
    """Run ``java -version`` and parse what it reports.

    The executable is looked up under ``java_home`` (or ``JAVA_HOME``), then
    on the ``PATH``.

    Returns:
        Parsed version info, or None when no java executable was found

    Raises:
        RunCommandError: if java exits with an error
    """
    java = None
    home = java_home or os.environ.get("JAVA_HOME")
    if home:
        java = runner.first_path_of(home, "bin", "java")
    if java is None:
        found = shutil.which("java")
        java = Path(found) if found else None

    if java is None:
        return None

    parser = JavaVersionParser()
    # java reports its version on the error stream
    runner.run(java, "-version", parser, read_from_error_out=True)
    return parser.to_version_info()
