"""cmdtool: helpers for quick-and-dirty command-line diagnostic tools.

- Streaming XML walking with a tag trail - TrailWalker, process_xml(), process_xml_file()
- Colored console rendering - RendererUtility, Appender
- External commands and PowerShell checks - CommandRunner, PowershellUtility
- Version output parsing - JavaVersionParser, detect_java_version()
"""

__version__ = "0.1.0"
__author__ = "cmdtool developers"

from .parsers import JavaVersionParser, VersionInfo, detect_java_version
from .render import Appender, RendererUtility
from .shared import ToolConfig
from .system import CommandRunner, PowershellUtility, RunCommandError
from .trail import (
    TrailWalker,
    XmlProcessingError,
    XmlProcessor,
    process_xml,
    process_xml_file,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # XML trail walking
    "TrailWalker",
    "XmlProcessor",
    "XmlProcessingError",
    "process_xml",
    "process_xml_file",

    # Rendering
    "Appender",
    "RendererUtility",

    # External commands
    "CommandRunner",
    "PowershellUtility",
    "RunCommandError",

    # Version parsing
    "JavaVersionParser",
    "VersionInfo",
    "detect_java_version",

    # Configuration
    "ToolConfig",
]
