"""Operating system helpers: external commands and PowerShell checks."""

from .line_processors import LineProcessor, StringListLineProcessor
from .powershell import PowershellUtility
from .process import CMD_EXTENSIONS, CommandRunner, RunCommandError

__all__ = [
    "LineProcessor",
    "StringListLineProcessor",
    "PowershellUtility",
    "CMD_EXTENSIONS",
    "CommandRunner",
    "RunCommandError",
]
