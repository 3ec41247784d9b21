"""
Structured JSON logging for the solar proposal kernel.

Every record under the ``solar_kernel`` logger namespace is written as one
JSON object per line: timestamp, level, logger, message, the request-scoped
fields held in ``LogContext``, any ``extra=`` fields, and, when an
exception is attached, its type, ``code`` and structured attributes.

Proposal access tokens and signature images are never written out, and
customer email addresses are masked.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterator
from uuid import UUID

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_CONTEXT_FIELDS = (
    "correlation_id",
    "lead_id",
    "proposal_id",
    "actor_id",
    "trace_id",
)

_context_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"solar_log_{name}", default=None) for name in _CONTEXT_FIELDS
}


class LogContext:
    """Request-scoped log fields, safe across threads and asyncio tasks."""

    FIELDS = _CONTEXT_FIELDS

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Set context fields. None leaves a field unchanged."""
        for name, value in fields.items():
            if value is not None:
                cls._var(name).set(value)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        """Return all fields that currently have a value."""
        return {
            name: var.get() for name, var in _context_vars.items() if var.get() is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in _context_vars.values():
            var.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block, then restore them."""
        tokens = [
            (cls._var(name), cls._var(name).set(value))
            for name, value in fields.items()
            if value is not None
        ]
        try:
            yield cls
        finally:
            for var, token in reversed(tokens):
                var.reset(token)

    @staticmethod
    def _var(name: str) -> ContextVar[str | None]:
        try:
            return _context_vars[name]
        except KeyError:
            raise ValueError(f"Unknown log context field: {name!r}") from None


# ---------------------------------------------------------------------------
# Redaction
# ---------------------------------------------------------------------------

_REDACTED = "[redacted]"
_SECRET_KEYS = frozenset({"access_token", "signature_image"})
_EMAIL_KEYS = frozenset({"customer_email"})


def _mask_email(value: Any) -> Any:
    if not isinstance(value, str) or "@" not in value:
        return value
    local, _, domain = value.partition("@")
    return f"{local[:1]}***@{domain}"


def _scrub(key: str, value: Any) -> Any:
    bare = key[4:] if key.startswith("exc_") else key
    if bare in _SECRET_KEYS:
        return _REDACTED
    if bare in _EMAIL_KEYS:
        return _mask_email(value)
    return value


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if not name.startswith("_"):
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }

        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and key not in payload:
                payload[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        scrubbed = {key: _scrub(key, value) for key, value in payload.items()}
        return json.dumps(scrubbed, default=_json_default)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_NAMESPACE = "solar_kernel"

_state = {"configured": False}
_state_lock = threading.Lock()


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` under the solar_kernel namespace."""
    return logging.getLogger(f"{_NAMESPACE}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach one JSON handler to the solar_kernel namespace.

    Only the first call has an effect until ``reset_logging()``.
    """
    with _state_lock:
        if _state["configured"]:
            return
        _state["configured"] = True

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())

    root = logging.getLogger(_NAMESPACE)
    root.setLevel(level)
    root.propagate = False
    root.addHandler(handler)


def reset_logging() -> None:
    """Undo ``configure_logging``. Tests only."""
    with _state_lock:
        _state["configured"] = False
    root = logging.getLogger(_NAMESPACE)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
