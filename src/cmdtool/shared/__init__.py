"""Shared utilities for cmdtool.

This module provides the configuration objects, result types and logging
helpers used across the walker, renderer, process and CLI layers.
"""

from .config import (
    AnsiMode,
    ConfigError,
    ConfigValidationError,
    ProcessConfig,
    RendererConfig,
    ToolConfig,
    WalkerConfig,
)
from .logging import (
    ComponentLogger,
    configure_logging,
    get_logger,
)
from .result import WalkSummary

__all__ = [
    "AnsiMode",
    "ConfigError",
    "ConfigValidationError",
    "ProcessConfig",
    "RendererConfig",
    "ToolConfig",
    "WalkerConfig",
    "ComponentLogger",
    "configure_logging",
    "get_logger",
    "WalkSummary",
]
