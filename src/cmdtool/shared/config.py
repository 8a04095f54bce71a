"""Configuration classes for cmdtool.

Each component gets a small dataclass validated in ``__post_init__``; the
frozen ``ToolConfig`` aggregates them and handles (de)serialization.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
COMPONENTS = ["walker", "renderer", "process"]


class AnsiMode(Enum):
    """When to emit ANSI escape codes."""

    DETECT = auto()   # Only when stdout is a terminal
    ALWAYS = auto()
    NEVER = auto()


@dataclass
class WalkerConfig:
    """Configuration for the streaming XML trail walker."""

    chunk_size: int = 8192
    encoding: str = "utf-8"
    strict_trail: bool = True

    def __post_init__(self) -> None:
        """Validate walker configuration."""
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if not self.encoding:
            raise ValueError("encoding cannot be empty")


@dataclass
class RendererConfig:
    """Configuration for colored console rendering."""

    ansi_mode: AnsiMode = AnsiMode.DETECT
    indent_width: int = 2

    def __post_init__(self) -> None:
        """Validate renderer configuration."""
        if self.indent_width < 0:
            raise ValueError("indent_width must be >= 0")


@dataclass
class ProcessConfig:
    """Configuration for external process execution."""

    encoding: str = "utf-8"
    timeout_seconds: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate process configuration."""
        if not self.encoding:
            raise ValueError("encoding cannot be empty")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0 or None")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ToolConfig:
    """Complete configuration for a cmdtool-based diagnostic tool."""

    walker: WalkerConfig = field(default_factory=WalkerConfig)
    renderer: RendererConfig = field(default_factory=RendererConfig)
    process: ProcessConfig = field(default_factory=ProcessConfig)
    logging_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate the complete configuration."""
        try:
            self.walker.__post_init__()
            self.renderer.__post_init__()
            self.process.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if self.logging_level not in VALID_LOGGING_LEVELS:
            raise ConfigValidationError(
                f"logging_level must be one of {VALID_LOGGING_LEVELS}",
                field_name="logging_level",
                suggestions=VALID_LOGGING_LEVELS,
            )

    def override(self, **kwargs: Any) -> "ToolConfig":
        """Create a new configuration with specific overrides.

        Nested fields use ``component__field`` notation.

        Example:
            >>> config = ToolConfig().override(walker__chunk_size=1024)
            >>> config.walker.chunk_size
            1024
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration section: {component}",
                        field_name=key,
                        suggestions=COMPONENTS,
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = {}
        try:
            for component, overrides in nested_overrides.items():
                new_fields[component] = replace(getattr(self, component), **overrides)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e
        new_fields.update(top_level)
        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            return obj

        return _dataclass_to_dict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToolConfig":
        """Create configuration from dictionary.

        Unknown keys are ignored; enum fields accept their member names.
        """
        try:
            renderer_data = dict(data.get("renderer", {}))
            if isinstance(renderer_data.get("ansi_mode"), str):
                renderer_data["ansi_mode"] = AnsiMode[renderer_data["ansi_mode"].upper()]

            return cls(
                walker=WalkerConfig(**_known_fields(WalkerConfig, data.get("walker", {}))),
                renderer=RendererConfig(**_known_fields(RendererConfig, renderer_data)),
                process=ProcessConfig(**_known_fields(ProcessConfig, data.get("process", {}))),
                logging_level=str(data.get("logging_level", "INFO")).upper(),
            )
        except KeyError as e:
            raise ConfigValidationError(
                f"Unknown ansi_mode: {e}",
                field_name="renderer.ansi_mode",
                suggestions=[mode.name for mode in AnsiMode],
            ) from e
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    @classmethod
    def from_json(cls, json_str: str) -> "ToolConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError("Configuration JSON must be an object")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "ToolConfig":
        """Load configuration from a JSON file."""
        path = Path(config_path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Could not read configuration file: {path}") from e
        return cls.from_json(text)


def _known_fields(target_class: type, data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        name: value
        for name, value in data.items()
        if name in target_class.__dataclass_fields__
    }
