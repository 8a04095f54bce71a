"""Colored console rendering."""

from .renderer import (
    AnsiBackground,
    AnsiColor,
    Appender,
    ColorSetting,
    RendererUtility,
)

__all__ = [
    "AnsiBackground",
    "AnsiColor",
    "Appender",
    "ColorSetting",
    "RendererUtility",
]
