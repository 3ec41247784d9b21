"""
solar_engines.tracer -- SOLAR_ENGINE_TRACE records for engine entry points.

Responsibility:
    ``@traced_engine`` wraps a pure engine function and, after each call,
    logs which engine ran, its version, a fingerprint of the inputs that
    determine its output, and how long it took.  Two proposals with the
    same fingerprint at every stage were computed from the same inputs.

Architecture position:
    Engines -- support for the pure calculation layer.  Emits a log record
    and nothing else.

Invariants enforced:
    - Fingerprints see arguments the same way however they were passed:
      positional, keyword or defaulted.
    - Same inputs give the same 16-hex fingerprint in every process.
    - Inputs and results pass through untouched.

Failure modes:
    - A field name that is not a parameter of the wrapped function is
      fingerprinted as "null".
    - Exceptions from the wrapped function propagate; no trace is logged.

Usage:
    from solar_engines.tracer import traced_engine

    @traced_engine("savings", "1.0", fingerprint_fields=("start_rate",))
    def forecast_savings(per_year_kwh, start_rate, net_price):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from solar_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")


def _canonicalize(value: Any) -> str:
    """Stable text form of a value for hashing."""
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return repr(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _canonicalize(
            {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        )
    if isinstance(value, Mapping):
        pairs = sorted((str(k), _canonicalize(v)) for k, v in value.items())
        return "{" + ",".join(f"{k}:{v}" for k, v in pairs) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """SHA-256 over ``name=value`` pairs of the selected fields, first 16 hex chars."""
    canonical = "|".join(
        f"{name}={_canonicalize(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that logs SOLAR_ENGINE_TRACE after each successful call."""

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind(*args, **kwargs)
                bound.apply_defaults()
                fingerprint = compute_input_fingerprint(
                    fingerprint_fields, bound.arguments
                )

            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = (time.perf_counter() - started) * 1000

            _logger.info(
                "SOLAR_ENGINE_TRACE",
                extra={
                    "trace_type": "SOLAR_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": round(elapsed_ms, 3),
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
