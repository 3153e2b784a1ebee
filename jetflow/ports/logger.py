"""Logger port used by the fetch, dispatch and transport layers."""

from abc import ABC, abstractmethod
from typing import Any


class LoggerPort(ABC):
    """Structured logging contract.

    The message is positional-only; every keyword argument is context
    attached to the record (subject, stream, batch, error and so on), so a
    context key may itself be called ``message``.
    """

    @abstractmethod
    def debug(self, message: str, /, **kwargs: Any) -> None:
        """Log protocol chatter such as pull requests and subscriptions."""
        ...

    @abstractmethod
    def info(self, message: str, /, **kwargs: Any) -> None:
        """Log connection and consumer lifecycle events."""
        ...

    @abstractmethod
    def warning(self, message: str, /, **kwargs: Any) -> None:
        """Log recoverable trouble, e.g. slow consumers or failed drains."""
        ...

    @abstractmethod
    def error(self, message: str, /, **kwargs: Any) -> None:
        """Log failures that were contained, e.g. a raising message handler."""
        ...

    @abstractmethod
    def exception(self, message: str, /, exc_info: Exception | None = None, **kwargs: Any) -> None:
        """Log an error together with its traceback."""
        ...
