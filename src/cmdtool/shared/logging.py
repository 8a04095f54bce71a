"""Component-aware logging utilities for cmdtool.

Every record emitted through a ``ComponentLogger`` carries the component name
and any bound context (file name, command, ...) in its ``extra`` data, so a
formatter or handler can pick them up without parsing the message.
"""

import logging
from typing import Any, Dict, Optional


class ComponentLogger:
    """Logger that automatically includes component and bound context."""

    def __init__(
        self,
        name: str,
        component: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize component logger.

        Args:
            name: Logger name (typically __name__)
            component: Component name for structured logging
            context: Key/value pairs added to every record
        """
        self.logger = logging.getLogger(name)
        self.component = component or name.split(".")[-1]
        self.context: Dict[str, Any] = dict(context or {})

    def bind(self, **context: Any) -> "ComponentLogger":
        """Return a logger sharing this one's target with extra bound context."""
        merged = dict(self.context)
        merged.update(context)
        return ComponentLogger(self.logger.name, self.component, merged)

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        combined_extra: Dict[str, Any] = {"component": self.component}
        combined_extra.update(self.context)
        if extra:
            combined_extra.update(extra)
        return combined_extra

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log debug message with component info."""
        self.logger.debug(message, extra=self._get_extra(extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log info message with component info."""
        self.logger.info(message, extra=self._get_extra(extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log warning message with component info."""
        self.logger.warning(message, extra=self._get_extra(extra))

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ) -> None:
        """Log error message with component info."""
        self.logger.error(message, extra=self._get_extra(extra), exc_info=exc_info)

    def exception(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log exception message with component info and traceback."""
        self.logger.exception(message, extra=self._get_extra(extra))


def get_logger(
    name: str,
    component: Optional[str] = None,
    **context: Any,
) -> ComponentLogger:
    """Get a component-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        component: Component name for structured logging
        **context: Context bound to every record

    Returns:
        ComponentLogger instance
    """
    return ComponentLogger(name, component, context)


def configure_logging(level: str = "INFO") -> None:
    """Install a basic stderr handler at the given level name."""
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s [%(component)s] %(message)s",
            defaults={"component": "-"},
        )
    )
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
    )
