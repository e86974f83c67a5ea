"""
imagesmith Structured Logger

JSON-per-line logging on top of the standard ``logging`` module. Every record
carries the service (logger) name, any context bound with ``with_context``,
the current build id and the keyword fields passed to the call.

Usage:
    from imagesmith_common.logger import configure_logging, get_logger, set_build_id

    logger = get_logger(__name__)
    set_build_id("build-42")
    logger.info("Resolved main class", main_class="org.example.App")

    scoped = logger.with_context(directory="target")
    scoped.warning("Several archives found", candidates=["a.jar", "b.jar"])

    # Keep stdout for command output
    configure_logging("imagesmith_cli", log_level="WARNING", stream="stderr")
"""

import json
import logging
import os
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .constants import LOG_LEVEL_ENV_VAR, LOG_STREAMS
from .errors import ValidationError

_build_id: ContextVar[Optional[str]] = ContextVar("imagesmith_build_id", default=None)


def set_build_id(build_id: str) -> None:
    """Bind a build id to the current context; it is added to every record."""
    _build_id.set(build_id)


def get_build_id() -> Optional[str]:
    """Return the build id bound to the current context, if any."""
    return _build_id.get()


def clear_build_id() -> None:
    """Remove the build id from the current context."""
    _build_id.set(None)


class _JsonFormatter(logging.Formatter):
    """Render a record as one JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": record.name,
            "message": record.getMessage(),
        }
        build_id = get_build_id()
        if build_id:
            payload["build_id"] = build_id
        payload.update(getattr(record, "fields", {}))
        if record.exc_info:
            payload["exception"] = "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return json.dumps(payload, default=str)


# Name of the sys attribute records are written to, looked up at write time
_output_stream = "stdout"


class _ConsoleHandler(logging.StreamHandler):
    """Stream handler that writes to the current ``sys.stdout`` or ``sys.stderr``."""

    @property
    def stream(self):  # type: ignore[override]
        return getattr(sys, _output_stream)

    @stream.setter
    def stream(self, value):
        pass


def _resolve_level(log_level: Optional[str]) -> int:
    level_name = (log_level or os.environ.get(LOG_LEVEL_ENV_VAR) or "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _std_logger(service_name: str) -> logging.Logger:
    std = logging.getLogger(service_name)
    if not any(getattr(h, "_imagesmith", False) for h in std.handlers):
        handler = _ConsoleHandler()
        handler.setFormatter(_JsonFormatter())
        handler._imagesmith = True  # type: ignore[attr-defined]
        std.addHandler(handler)
        std.propagate = False
    return std


class ImagesmithLogger:
    """
    Structured logger bound to a service name and optional context.

    Attributes:
        service_name: Name records are emitted under
        context: Fields added to every record from this logger
    """

    def __init__(
        self,
        service_name: str,
        log_level: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.service_name = service_name
        self.context: Dict[str, Any] = dict(context or {})
        self._logger = _std_logger(service_name)
        if log_level is not None:
            self._logger.setLevel(_resolve_level(log_level))
        else:
            # Children inherit from the top-level package logger
            top = logging.getLogger(service_name.split(".", 1)[0])
            if top.level == logging.NOTSET:
                top.setLevel(_resolve_level(None))

    def with_context(self, **context: Any) -> "ImagesmithLogger":
        """Return a new logger with extra context; this logger is unchanged."""
        merged = {**self.context, **context}
        return ImagesmithLogger(self.service_name, context=merged)

    def _log(self, level: int, message: str, exc_info: bool = False, **fields: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(
            level,
            message,
            exc_info=exc_info,
            extra={"fields": {**self.context, **fields}},
        )

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, **fields)

    warn = warning

    def error(self, message: str, **fields: Any) -> None:
        self._log(logging.ERROR, message, **fields)

    def critical(self, message: str, **fields: Any) -> None:
        self._log(logging.CRITICAL, message, **fields)

    def exception(self, message: str, **fields: Any) -> None:
        """Log at ERROR level with the active exception's traceback."""
        self._log(logging.ERROR, message, exc_info=True, **fields)

    def set_level(self, log_level: str) -> None:
        self._logger.setLevel(_resolve_level(log_level))


def get_logger(service_name: str, log_level: Optional[str] = None) -> ImagesmithLogger:
    """
    Get a structured logger.

    Args:
        service_name: Logger name, usually ``__name__``
        log_level: Optional level name; defaults to $IMAGESMITH_LOG_LEVEL or INFO

    Returns:
        ImagesmithLogger instance
    """
    return ImagesmithLogger(service_name, log_level=log_level)


def set_log_stream(stream: str) -> None:
    """
    Send every imagesmith record to ``sys.stdout`` or ``sys.stderr``.

    Raises:
        ValidationError: If ``stream`` is not one of LOG_STREAMS
    """
    global _output_stream
    if stream not in LOG_STREAMS:
        raise ValidationError(f"Invalid log stream: '{stream}'. Valid options: {', '.join(LOG_STREAMS)}")
    _output_stream = stream


def get_log_stream() -> str:
    return _output_stream


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    stream: Optional[str] = None,
) -> ImagesmithLogger:
    """
    Configure the level for a service and every ``imagesmith`` logger.

    Args:
        service_name: Logger name to return
        log_level: Level applied to the service logger and the package loggers
        stream: ``stdout`` or ``stderr``; unchanged when None

    Returns:
        ImagesmithLogger for ``service_name``
    """
    if stream is not None:
        set_log_stream(stream)
    level = _resolve_level(log_level)
    for name in ("imagesmith_common", "imagesmith_schema", "imagesmith_sdk", "imagesmith_cli"):
        logging.getLogger(name).setLevel(level)
    return get_logger(service_name, log_level=log_level)
