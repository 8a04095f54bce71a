"""Command-line interface module for cmdtool.

Provides the ``cmdtool`` diagnostic commands and the working path context
they share.
"""

from .context import ToolContext
from .main import main

__all__ = ["ToolContext", "main"]
