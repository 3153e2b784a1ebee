"""Simple logger implementation for development."""

import logging
from typing import Any

from ..ports.logger import LoggerPort

# LogRecord attributes that may not be overwritten through ``extra``
_RESERVED_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys() | {"message", "asctime"}
)


def _safe_extra(kwargs: dict[str, Any]) -> dict[str, Any]:
    return {(f"ctx_{k}" if k in _RESERVED_KEYS else k): v for k, v in kwargs.items()}


class SimpleLogger(LoggerPort):
    """Simple logger implementation using Python's standard logging.

    Keyword arguments become attributes of the log record; keys that clash
    with ``LogRecord`` attributes are prefixed with ``ctx_``.
    """

    def __init__(self, name: str = "jetflow", level: int = logging.INFO):
        """Initialize the logger.

        Args:
            name: Logger name (default: "jetflow")
            level: Logging level (default: INFO)
        """
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)

        # Add console handler if not already present
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    @property
    def name(self) -> str:
        """Name of the underlying logger."""
        return self._logger.name

    def debug(self, message: str, /, **kwargs: Any) -> None:
        """Log a debug message."""
        self._logger.debug(message, extra=_safe_extra(kwargs))

    def info(self, message: str, /, **kwargs: Any) -> None:
        """Log an info message."""
        self._logger.info(message, extra=_safe_extra(kwargs))

    def warning(self, message: str, /, **kwargs: Any) -> None:
        """Log a warning message."""
        self._logger.warning(message, extra=_safe_extra(kwargs))

    def error(self, message: str, /, **kwargs: Any) -> None:
        """Log an error message."""
        self._logger.error(message, extra=_safe_extra(kwargs))

    def exception(self, message: str, /, exc_info: Exception | None = None, **kwargs: Any) -> None:
        """Log an exception with traceback."""
        self._logger.exception(message, exc_info=exc_info or True, extra=_safe_extra(kwargs))
