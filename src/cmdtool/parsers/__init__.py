"""Parsers for the output of external tools."""

from .version import JavaVersionParser, VersionInfo, VersionParser, detect_java_version

__all__ = [
    "JavaVersionParser",
    "VersionInfo",
    "VersionParser",
    "detect_java_version",
]
