"""Logging setup for the ingest pipeline.

Pipeline modules only create module loggers (``logging.getLogger(__name__)``);
nothing here runs on import. Applications call ``setup_logging`` once, usually
with ``options_from_settings(get_settings())``.

Records may carry the context fields in ``CONTEXT_FIELDS`` (attached through
``with_context``) and an optional ``counts`` dict, which the JSON formatter
emits as-is.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from typing import Any

ROOT_LOGGER = "src"
CONTEXT_FIELDS = ("stage", "source_kind", "file_name")

_HANDLER_MARK = "_order_ingest_handler"


def _context_of(record: logging.LogRecord) -> dict[str, Any]:
    return {
        name: getattr(record, name)
        for name in CONTEXT_FIELDS
        if getattr(record, name, None)
    }


# ---------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_context_of(record))

        counts = getattr(record, "counts", None)
        if isinstance(counts, dict):
            entry["counts"] = counts
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """``LEVEL logger [key=value ...] message`` lines for terminals."""

    def format(self, record: logging.LogRecord) -> str:
        context = _context_of(record)
        head = f"{record.levelname} {record.name}"
        if context:
            head += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"

        line = f"{head} {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


# ---------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingOptions:
    level: str = "INFO"
    json_logs: bool = False


def setup_logging(options: LoggingOptions | None = None) -> logging.Logger:
    """
    Attach a stdout handler to the package logger.

    Calling it again swaps the handler installed by the previous call instead
    of stacking a second one. Unknown level names fall back to INFO.
    """
    options = options or LoggingOptions()
    level = logging.getLevelName(options.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    for handler in [h for h in logger.handlers if getattr(h, _HANDLER_MARK, False)]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if options.json_logs else TextFormatter())
    setattr(handler, _HANDLER_MARK, True)
    logger.addHandler(handler)
    return logger


def options_from_settings(settings: Any) -> LoggingOptions:
    """Build LoggingOptions from an IngestSettings instance."""
    return LoggingOptions(level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)


# ---------------------------------------------------------------------
# Context injection
# ---------------------------------------------------------------------


class ContextAdapter(logging.LoggerAdapter):
    """Adds fixed context fields to every record; call-site ``extra`` wins."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def with_context(
    logger: logging.Logger,
    *,
    stage: str | None = None,
    source_kind: str | None = None,
    file_name: str | None = None,
) -> ContextAdapter:
    """Wrap ``logger`` so every record carries the given context fields."""
    fields = {"stage": stage, "source_kind": source_kind, "file_name": file_name}
    return ContextAdapter(logger, {k: v for k, v in fields.items() if v})
