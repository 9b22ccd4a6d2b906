"""
PRICING_ENGINE_TRACE emission for the pricing engines.

``@traced_engine`` wraps an engine entry point and logs one trace record per
call: the engine name and version, the calling function, the elapsed time
and a fingerprint of the arguments named in ``fingerprint_fields``.  Equal
inputs always give the same fingerprint, whichever calling convention was
used, so two quotes can be compared from their logs alone.

The decorator reads its arguments and nothing else; engine results are
returned untouched.

    @traced_engine("totals", "1.0", fingerprint_fields=("base_total",))
    def compute_totals(base_total, ...):
        ...
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import logging
import time
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

# Not routed through billboard_kernel.logging_config: traces only need the
# logger name to land in the billboard_pricing hierarchy.
_logger = logging.getLogger("billboard_pricing.engines.tracer")

TRACE_EVENT = "PRICING_ENGINE_TRACE"
FINGERPRINT_LENGTH = 16


def _stable_repr(value: Any) -> str:
    # Mappings are keyed in sorted order; sequences keep their order.
    match value:
        case None:
            return "null"
        case str():
            return value
        case bool() | int() | float() | Decimal():
            return str(value)
        case Mapping():
            body = ",".join(
                f"{key}:{_stable_repr(value[key])}"
                for key in sorted(value, key=str)
            )
            return "{" + body + "}"
        case list() | tuple():
            return "[" + ",".join(_stable_repr(item) for item in value) + "]"
        case _:
            return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """SHA-256 prefix over ``field=value`` pairs; absent fields count as null."""
    canonical = "|".join(
        f"{name}={_stable_repr(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorate a pure engine so each call logs ``PRICING_ENGINE_TRACE``."""

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        def fingerprint(args: tuple, kwargs: dict) -> str:
            if not fingerprint_fields:
                return ""
            bound = signature.bind_partial(*args, **kwargs)
            return compute_input_fingerprint(fingerprint_fields, bound.arguments)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            input_fingerprint = fingerprint(args, kwargs)
            started = time.monotonic()
            result = func(*args, **kwargs)
            elapsed_ms = (time.monotonic() - started) * 1000

            _logger.info(
                TRACE_EVENT,
                extra={
                    "trace_type": TRACE_EVENT,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "function": func.__qualname__,
                    "input_fingerprint": input_fingerprint,
                    "duration_ms": round(elapsed_ms, 2),
                },
            )
            return result

        return wrapper

    return decorator
