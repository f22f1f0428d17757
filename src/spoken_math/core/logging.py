#!/usr/bin/env python3
"""
Structured logging for the spoken-math normalizer.

Every record carries the normalization context that was active when it was
logged (language, stage, utterance id). The context lives in a ContextVar,
so normalizations running on different threads or tasks never see each
other's values.

Environment:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL
- LOG_FORMAT: "json" or "text" (default: JSON in production, text otherwise)
- SPOKEN_MATH_ENV=production: marks a production deployment
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
from contextvars import ContextVar, Token
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

_log_context: ContextVar[Dict[str, Any]] = ContextVar("spoken_math_log_context", default={})

# Attributes every LogRecord carries; anything else arrived through ``extra``
_STANDARD_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "context",
}

OUTPUT_CONSOLE = "console"
OUTPUT_FILE = "file"
OUTPUT_BOTH = "both"
OUTPUT_NONE = "none"

MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3


# ==============================================================================
# FORMATTING
# ==============================================================================


class StructuredFormatter(logging.Formatter):
    """Single readable line for development, one JSON object per line for production."""

    def __init__(self, use_json: bool = False):
        super().__init__()
        self.use_json = use_json

    def format(self, record: logging.LogRecord) -> str:
        context = {**_log_context.get(), **(getattr(record, "context", None) or {})}
        if self.use_json:
            return json.dumps(self._entry(record, context), default=str, ensure_ascii=False)
        return self._line(record, context)

    def _entry(self, record: logging.LogRecord, context: Dict[str, Any]) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update({key: value for key, value in vars(record).items() if key not in _STANDARD_RECORD_ATTRS})
        return entry

    def _line(self, record: logging.LogRecord, context: Dict[str, Any]) -> str:
        parts = [
            self.formatTime(record, "%Y-%m-%d %H:%M:%S"),
            f"{record.levelname:5}",
            record.name,
            record.getMessage(),
        ]
        if context:
            parts.append(" ".join(f"{key}={value}" for key, value in context.items()))

        line = " | ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ContextLogger(logging.LoggerAdapter):
    """
    Adapter that attaches the active context to every record.

    Per-call values go in ``extra={"context": {...}}`` and win over the
    adapter's own values, which win over the ContextVar.
    """

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple[str, Dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["context"] = {**_log_context.get(), **(self.extra or {}), **extra.pop("context", {})}
        kwargs["extra"] = extra
        return msg, kwargs


# ==============================================================================
# CONTEXT
# ==============================================================================


def set_context(**kwargs: Any) -> None:
    """Add values to the logging context of the current thread or task."""
    _log_context.set({**_log_context.get(), **kwargs})


def clear_context() -> None:
    _log_context.set({})


def get_context() -> Dict[str, Any]:
    return dict(_log_context.get())


class LogContext:
    """
    Context manager that adds values for the duration of a block.

    Usage:
        with LogContext(language="de"):
            logger.debug("Normalizing")  # record context includes language=de
    """

    def __init__(self, **kwargs: Any):
        self.values = kwargs
        self._token: Optional[Token] = None

    def __enter__(self) -> LogContext:
        self._token = _log_context.set({**_log_context.get(), **self.values})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None


# ==============================================================================
# HANDLERS
# ==============================================================================


@dataclass(frozen=True)
class LogSettings:
    level: str = "WARNING"
    output: str = OUTPUT_CONSOLE
    use_json: bool = False
    log_dir: Optional[str] = None


def is_production_env() -> bool:
    return "production" in (os.environ.get("SPOKEN_MATH_ENV"), os.environ.get("ENVIRONMENT"))


def use_json_format() -> bool:
    log_format = os.environ.get("LOG_FORMAT", "").lower()
    if log_format in ("json", "text"):
        return log_format == "json"
    return is_production_env()


def resolve_output(include_console: Optional[bool], include_file: Optional[bool]) -> str:
    """Map the console/file flags used by the config layer onto an output mode."""
    if include_console and include_file:
        return OUTPUT_BOTH
    if include_file:
        return OUTPUT_FILE
    if include_console is False and include_file is False:
        return OUTPUT_NONE
    return OUTPUT_CONSOLE


def _console_handlers() -> List[logging.Handler]:
    # DEBUG and INFO to stdout, WARNING and above to stderr
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(lambda record: record.levelno < logging.WARNING)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    return [stdout_handler, stderr_handler]


def _file_handler(name: str, log_dir: Optional[str]) -> logging.Handler:
    directory = Path(log_dir) if log_dir else Path.cwd() / "logs"
    directory.mkdir(parents=True, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        directory / f"{name.rsplit('.', 1)[-1]}.log",
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )


def _build_handlers(name: str, settings: LogSettings) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if settings.output in (OUTPUT_CONSOLE, OUTPUT_BOTH):
        handlers.extend(_console_handlers())
    if settings.output in (OUTPUT_FILE, OUTPUT_BOTH):
        handlers.append(_file_handler(name, settings.log_dir))
    if not handlers:
        handlers.append(logging.NullHandler())
    return handlers


def configure_logger(logger: logging.Logger, settings: LogSettings) -> None:
    formatter = StructuredFormatter(use_json=settings.use_json)
    logger.setLevel(getattr(logging, settings.level.upper(), logging.WARNING))
    for handler in _build_handlers(logger.name, settings):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    # Records stop here; the application's root handlers would print them twice
    logger.propagate = False


def get_logger(
    name: str,
    log_level: Optional[str] = None,
    include_console: Optional[bool] = None,
    include_file: Optional[bool] = None,
    context: Optional[Dict[str, Any]] = None,
    log_dir: Optional[str] = None,
) -> ContextLogger:
    """
    Structured logger for ``name``.

    Handlers are attached on the first call for a name; later calls only wrap
    the existing logger in a new adapter.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        configure_logger(
            logger,
            LogSettings(
                level=log_level or os.environ.get("LOG_LEVEL", "WARNING"),
                output=resolve_output(include_console, include_file),
                use_json=use_json_format(),
                log_dir=log_dir,
            ),
        )
    return ContextLogger(logger, context)
