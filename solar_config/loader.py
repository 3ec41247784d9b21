"""
Assumption Loader (``solar_config.loader``).

Responsibility
--------------
Loads assumption-set YAML files and parses them into the engine's frozen
``EngineAssumptions``.  Runtime callers go through
``solar_config.get_active_assumptions()``; the functions here are the
building blocks it uses and are exposed for tests and tooling.

Architecture position
---------------------
**Config layer** -- sits above ``solar_engines``.  Engines and the kernel
never import from ``solar_config``.

Invariants enforced
-------------------
* Unknown keys are rejected, never ignored.
* Keys that are absent fall back to the engine defaults.
* Numeric assumptions must be real numbers (bools rejected) and
  non-negative; ``lifespan_years`` must be a positive integer.
* ``compute_checksum`` is deterministic for equal data.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Bad key or value  -> ``InvalidAssumptionError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from solar_engines.rates import EngineAssumptions, LoanTerm
from solar_kernel.exceptions import InvalidAssumptionError

_LOAN_KEYS = ("loan_10", "loan_15")
_MAPPING_KEYS = ("state_utility_rates",)
_INT_KEYS = ("lifespan_years",)

KNOWN_KEYS = frozenset(f.name for f in fields(EngineAssumptions))


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _parse_number(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidAssumptionError(key, f"expected a number, got {value!r}")
    if value < 0:
        raise InvalidAssumptionError(key, "cannot be negative")
    return float(value)


def _parse_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAssumptionError(key, f"expected an integer, got {value!r}")
    if value <= 0:
        raise InvalidAssumptionError(key, "must be positive")
    return value


def parse_loan_term(key: str, data: Any) -> LoanTerm:
    """Parse ``{years: 10, apr: 0.0699}`` into a LoanTerm."""
    if not isinstance(data, dict):
        raise InvalidAssumptionError(key, "expected a mapping with 'years' and 'apr'")
    if set(data) != {"years", "apr"}:
        raise InvalidAssumptionError(key, "expected exactly 'years' and 'apr'")
    years = _parse_int(f"{key}.years", data["years"])
    apr = _parse_number(f"{key}.apr", data["apr"])
    return LoanTerm(years=years, apr=apr)


def parse_state_rates(key: str, data: Any) -> MappingProxyType:
    """Parse a state -> $/kWh table; state codes are upper-cased."""
    if not isinstance(data, dict):
        raise InvalidAssumptionError(key, "expected a mapping of state code to rate")
    rates: dict[str, float] = {}
    for state, rate in data.items():
        # YAML 1.1 reads some bare two-letter words as booleans.
        if not isinstance(state, str):
            raise InvalidAssumptionError(key, f"state code {state!r} must be a quoted string")
        code = state.strip().upper()
        rates[code] = _parse_number(f"{key}.{code}", rate)
    return MappingProxyType(rates)


def parse_assumptions(data: dict[str, Any]) -> EngineAssumptions:
    """
    Parse an ``assumptions`` mapping into EngineAssumptions.

    Raises:
        InvalidAssumptionError: on an unknown key or unusable value.
    """
    unknown = sorted(set(data) - KNOWN_KEYS)
    if unknown:
        raise InvalidAssumptionError(unknown[0], "unknown assumption")

    parsed: dict[str, Any] = {}
    for key, value in data.items():
        if key in _LOAN_KEYS:
            parsed[key] = parse_loan_term(key, value)
        elif key in _MAPPING_KEYS:
            parsed[key] = parse_state_rates(key, value)
        elif key in _INT_KEYS:
            parsed[key] = _parse_int(key, value)
        else:
            parsed[key] = _parse_number(key, value)
    return EngineAssumptions(**parsed)


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
