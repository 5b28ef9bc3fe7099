"""
Structured logging for the ERC-721 SDK.

Thin helpers over the standard library ``logging`` module. All SDK loggers
live under the ``erc721_sdk`` namespace, which carries a NullHandler so the
library stays silent until the application configures logging.

Example:
    >>> from erc721_sdk.utils.logging import configure_logging, get_logger
    >>> configure_logging("DEBUG")
    >>> logger = get_logger(__name__)
    >>> logger.info("Listener started", extra={"contract": "0x..."})
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict, MutableMapping, Tuple, Union

ROOT_LOGGER_NAME = "erc721_sdk"

DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s%(context)s"

# Attributes present on every LogRecord; anything else came in through `extra`.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime", "context"}

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class _ContextFormatter(logging.Formatter):
    """Formatter that renders `extra` fields as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        record.context = (
            " " + " ".join(f"{k}={v}" for k, v in sorted(fields.items())) if fields else ""
        )
        return super().format(record)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the SDK namespace.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        Logger whose name starts with ``erc721_sdk``.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: Union[int, str] = logging.INFO,
    fmt: str = DEFAULT_FORMAT,
    stream: Any = None,
) -> logging.Handler:
    """
    Attach a stream handler to the SDK root logger.

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Log level name or number.
        fmt: Format string; ``%(context)s`` expands to the `extra` fields.
        stream: Output stream (defaults to stderr).

    Returns:
        The installed handler.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, "_erc721_sdk", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(_ContextFormatter(fmt))
    handler._erc721_sdk = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    set_level(level)
    root.disabled = False
    return handler


def set_level(level: Union[int, str]) -> None:
    """Set the level of the SDK root logger."""
    if isinstance(level, str):
        level = level.upper()
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)


def disable_logging() -> None:
    """Silence every SDK logger."""
    logging.getLogger(ROOT_LOGGER_NAME).disabled = True


def enable_debug() -> None:
    """Shortcut for ``configure_logging(logging.DEBUG)``."""
    configure_logging(logging.DEBUG)


class LogContext(logging.LoggerAdapter):
    """
    Logger adapter that adds fixed context fields to every record.

    Fields passed per call through `extra` take precedence.

    Example:
        >>> log = LogContext(get_logger(__name__), contract="0xabc...")
        >>> log.info("Polling logs", extra={"from_block": 100})
    """

    def __init__(self, logger: logging.Logger, **context: Any) -> None:
        super().__init__(logger, context)

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        extra: Dict[str, Any] = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **context: Any) -> "LogContext":
        """Return a new adapter with additional context fields."""
        merged: Dict[str, Any] = dict(self.extra or {})
        merged.update(context)
        return LogContext(self.logger, **merged)


def get_context_logger(name: str, **context: Any) -> LogContext:
    return LogContext(get_logger(name), **context)

