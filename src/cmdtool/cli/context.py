"""Working directory context shared by the tool commands."""

from pathlib import Path
from typing import Optional, Union

from cmdtool.render import AnsiColor, Appender, ColorSetting, RendererUtility


class ToolContext:
    """Tracks the tool's current path and resolves relative paths against it."""

    def __init__(
        self,
        renderer: RendererUtility,
        current_path: Optional[Union[str, Path]] = None,
    ) -> None:
        self.renderer = renderer
        self.current_path = Path(current_path or Path.cwd()).absolute()

    def get_path(self, path: Union[str, Path]) -> Path:
        """Resolve ``path`` against the current path (it might not exist)."""
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.current_path / candidate

    def pwd(self) -> str:
        out = self.renderer.start()
        self._append_current_path(out)
        return out.render()

    def cd(self, path: Union[str, Path]) -> str:
        """Change the current path, returning a rendered status line."""
        out = self.renderer.start()
        new_path = self.get_path(path)

        if not new_path.exists():
            out.error(f"{new_path} does not exist")
        elif not new_path.is_dir():
            out.error(f"{new_path} is not a directory")
        else:
            self.current_path = new_path.resolve()
            self._append_current_path(out)

        return out.render()

    def ls(self) -> str:
        """List the current directory, directories first in bright blue."""
        out = self.renderer.start()
        self._append_current_path(out)
        out.end_line()

        try:
            entries = sorted(
                self.current_path.iterdir(),
                key=lambda entry: (not entry.is_dir(), entry.name.lower()),
            )
        except OSError as e:
            out.error(f"Cannot list {self.current_path}: {e.strerror or e}").end_line()
            return out.render()

        with out.indent():
            for entry in entries:
                color = AnsiColor.BRIGHT_BLUE if entry.is_dir() else AnsiColor.BRIGHT_GREEN
                out.start_line().append(entry.name, color).end_line()

        return out.render()

    def _append_current_path(self, out: Appender) -> None:
        out.append("Current path: ")
        out.append(str(self.current_path), ColorSetting.SYMBOL)
