# ============================================================================
# HEALTHCHECKR LOGGING
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Core - Context-aware logging for check runs
# PURPOSE: Tag every log line with the run and check it belongs to
# CREATED: 07 OCT 2026
# ============================================================================
"""
Healthcheckr Logging

Every query gets a short run id and every check runs under its own name,
so interleaved output from concurrent checks stays attributable:

    2026-10-08 09:15:02 WARNING  healthcheckr.executor [run=3f9c01aa, check=redis]: ...

Context lives in a ContextVar. asyncio copies it into each task at
creation, which is what keeps two concurrently running checks apart.

Usage:
    from healthcheckr.logging import get_logger, log_context

    logger = get_logger(__name__)

    with log_context(check_name="postgres", pool="primary"):
        logger.warning("Slow response", extra={"latency_ms": 950})

Hosts choose the output format with configure_logging(); the library
never installs handlers on its own.
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional, Union


@dataclass(frozen=True)
class LogContext:
    """
    Fields attached to every record logged inside a log_context block.

    Attributes:
        run_id: Identifier of one check()/check_simple() call
        check_name: Name of the check being executed
        operation: Query kind ("check", "check_simple")
        extra: Free-form fields
    """
    run_id: Optional[str] = None
    check_name: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Known fields that are set, followed by extra fields."""
        known = {
            "run_id": self.run_id,
            "check_name": self.check_name,
            "operation": self.operation,
        }
        fields = {key: value for key, value in known.items() if value is not None}
        fields.update(self.extra)
        return fields


_EMPTY = LogContext()
_context: ContextVar[LogContext] = ContextVar("healthcheckr_log_context", default=_EMPTY)


def get_current_context() -> LogContext:
    """Context of the current task (empty outside any log_context block)."""
    return _context.get()


@contextmanager
def log_context(
    run_id: Optional[str] = None,
    check_name: Optional[str] = None,
    operation: Optional[str] = None,
    **extra: Any,
) -> Iterator[LogContext]:
    """
    Layer fields over the current context for the duration of the block.

    Fields left as None are inherited from the enclosing block; extra
    keyword arguments are merged into the inherited extras.

    Example:
        with log_context(run_id="a1b2c3d4", operation="check"):
            with log_context(check_name="redis"):
                logger.info("Probe started")
    """
    current = _context.get()
    changes: Dict[str, Any] = {}
    if run_id is not None:
        changes["run_id"] = run_id
    if check_name is not None:
        changes["check_name"] = check_name
    if operation is not None:
        changes["operation"] = operation
    if extra:
        changes["extra"] = {**current.extra, **extra}

    layered = replace(current, **changes)
    reset_token = _context.set(layered)
    try:
        yield layered
    finally:
        _context.reset(reset_token)


def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return getattr(record, "extra", None) or {}


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line, for log aggregation.

    Keys: timestamp, level, logger, message, context (when set),
    data (call-site extra fields), exception (when present), source.
    static_fields are added to every line, e.g. {"service": "orders-api"}.
    """

    def __init__(
        self,
        static_fields: Optional[Dict[str, Any]] = None,
        include_context: bool = True,
    ):
        super().__init__()
        self.static_fields = dict(static_fields or {})
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            **self.static_fields,
            "timestamp": created.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = get_current_context().to_dict() if self.include_context else {}
        if context:
            payload["context"] = context

        call_fields = {
            key: value for key, value in _record_fields(record).items()
            if key not in context
        }
        if call_fields:
            payload["data"] = call_fields

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        payload["source"] = f"{record.filename}:{record.lineno} ({record.funcName})"
        return json.dumps(payload, default=str)


class HumanFormatter(logging.Formatter):
    """Single-line text with the run id and check name in brackets."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s %(name)s%(hc_prefix)s: %(message)s%(hc_fields)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        context = get_current_context()
        tags = []
        if context.run_id:
            tags.append(f"run={context.run_id}")
        if context.check_name:
            tags.append(f"check={context.check_name}")
        record.hc_prefix = f" [{', '.join(tags)}]" if tags else ""

        skip = {"run_id", "check_name", "operation"}
        shown = {k: v for k, v in _record_fields(record).items() if k not in skip}
        record.hc_fields = f" {shown}" if shown else ""
        return super().format(record)


class ContextLogger(logging.LoggerAdapter):
    """
    Adapter merging the current LogContext into each record.

    Call-site extra fields and context fields end up together in
    record.extra, which both formatters read.
    """

    def process(self, msg, kwargs):
        fields = {**(kwargs.get("extra") or {}), **get_current_context().to_dict()}
        kwargs["extra"] = {"extra": fields}
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    """Context-aware logger for a healthcheckr module or host."""
    return ContextLogger(logging.getLogger(name), {})


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
    stream=None,
) -> logging.Handler:
    """
    Install a single stream handler on the root logger.

    Args:
        level: Level name or number
        json_output: JSON lines instead of human-readable text; also
            enabled by LOG_FORMAT=json
        stream: Output stream (stdout if None)

    Returns:
        The installed handler
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    use_json = json_output or os.getenv("LOG_FORMAT", "").lower() == "json"

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredFormatter() if use_json else HumanFormatter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    return handler


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
]
