"""
Structured JSON logging for the billboard pricing engine.

Every record under the ``billboard_pricing`` logger hierarchy is written as
one JSON line carrying the timestamp, level, logger and message, the
quote-scoped context (contract, correlation and actor ids) and any
``extra=`` fields.  Exceptions derived from ``BillboardPricingError``
contribute their ``code`` and structured attributes.

Usage:
    from billboard_kernel.logging_config import LogContext, configure_logging, get_logger

    configure_logging()
    logger = get_logger("engines.totals")
    with LogContext.bind(contract_id="C-1042"):
        logger.info("totals_computed", extra={"grand_total": "810.00"})
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
from collections.abc import Mapping
from contextvars import ContextVar, Token
from datetime import UTC, date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any
from uuid import UUID

LOGGER_ROOT = "billboard_pricing"

# ---------------------------------------------------------------------------
# Quote-scoped context
# ---------------------------------------------------------------------------

_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar("billboard_log_context", default=_EMPTY)


class LogContext:
    """
    Context fields merged into every log line of the current task or thread.

    Only ``CONTEXT_FIELDS`` are accepted.  The stored mapping is immutable
    and replaced on every change, so concurrent quotes never share it.
    """

    CONTEXT_FIELDS: tuple[str, ...] = ("contract_id", "correlation_id", "actor_id")

    @classmethod
    def _merged(cls, fields: Mapping[str, str | None]) -> Mapping[str, str]:
        unknown = set(fields) - set(cls.CONTEXT_FIELDS)
        if unknown:
            raise TypeError(f"Unknown log context fields: {sorted(unknown)}")
        merged = dict(_context.get())
        merged.update({k: str(v) for k, v in fields.items() if v is not None})
        return MappingProxyType(merged)

    @classmethod
    def set(
        cls,
        *,
        contract_id: str | None = None,
        correlation_id: str | None = None,
        actor_id: str | None = None,
    ) -> None:
        """Update the given fields; ``None`` leaves a field unchanged."""
        _context.set(cls._merged({
            "contract_id": contract_id,
            "correlation_id": correlation_id,
            "actor_id": actor_id,
        }))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set(_EMPTY)

    @classmethod
    def bind(cls, **fields: str | None) -> "_BoundContext":
        """Context manager: apply ``fields`` on entry, restore the previous context on exit."""
        return _BoundContext(cls._merged(fields))


class _BoundContext:

    def __init__(self, context: Mapping[str, str]):
        self._context = context
        self._token: Token[Mapping[str, str]] | None = None

    def __enter__(self) -> type[LogContext]:
        self._token = _context.set(self._context)
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        if self._token is not None:
            _context.reset(self._token)
            self._token = None


# ---------------------------------------------------------------------------
# JSON lines
# ---------------------------------------------------------------------------

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RECORD_ATTRIBUTES: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    return str(value)


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
    """Renders a record as a single JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and key not in payload
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger ``billboard_pricing.<name>``."""
    return logging.getLogger(f"{LOGGER_ROOT}.{name}")


_setup_lock = threading.Lock()
_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach one JSON handler to the ``billboard_pricing`` hierarchy.

    Only the first call has an effect; later calls keep the existing handler.
    Records stop propagating to the root logger once configured.
    """
    global _handler
    with _setup_lock:
        if _handler is not None:
            return
        _handler = handler or logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(StructuredFormatter())

        root = logging.getLogger(LOGGER_ROOT)
        root.setLevel(level)
        root.propagate = False
        root.addHandler(_handler)


def reset_logging() -> None:
    """Detach the handler and restore propagation.  Used by tests."""
    global _handler
    with _setup_lock:
        root = logging.getLogger(LOGGER_ROOT)
        root.handlers.clear()
        root.setLevel(logging.WARNING)
        root.propagate = True
        _handler = None
