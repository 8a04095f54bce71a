"""Line processors consuming the output of external commands."""

from abc import ABC, abstractmethod
from typing import List


class LineProcessor(ABC):
    """Receives command output one line at a time."""

    @abstractmethod
    def process(self, line: str, line_idx: int) -> None:
        """Handle one output line.

        Args:
            line: Line content without its line terminator
            line_idx: 1-based line number
        """


class StringListLineProcessor(LineProcessor):
    """Accumulates output lines, skipping blank ones unless asked not to."""

    def __init__(self, keep_empty_lines: bool = False) -> None:
        self.keep_empty_lines = keep_empty_lines
        self.strings: List[str] = []

    def process(self, line: str, line_idx: int) -> None:
        if self.keep_empty_lines or line.strip():
            self.strings.append(line)
