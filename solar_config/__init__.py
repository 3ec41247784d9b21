"""
solar_config -- single public entrypoint for engine assumption sets.

Responsibility:
    Provides the way to obtain a named set of engine assumptions at
    runtime through ``get_active_assumptions()``.  Sets live as YAML files
    in ``solar_config/sets/<name>.yaml``; each holds an ``assumptions``
    mapping whose keys are ``EngineAssumptions`` fields.

Architecture position:
    Configuration -- sits above ``solar_engines`` and ``solar_kernel``.
    The engines and the kernel MUST NEVER import from ``solar_config``;
    callers pass the resulting ``EngineAssumptions`` in.

Invariants enforced:
    - Unknown keys are rejected; absent keys use the engine defaults.
    - Same YAML always produces the same checksum.

Failure modes:
    - ``AssumptionSetNotFoundError`` -- no set with the requested name.
    - ``InvalidAssumptionError`` -- unknown key or unusable value.
    - ``yaml.YAMLError`` -- malformed YAML.

Audit relevance:
    Every successful ``get_active_assumptions()`` call emits a
    ``SOLAR_CONFIG_TRACE`` log entry with the set name, version and
    checksum, tying each generated proposal back to the exact assumption
    file it was computed against.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from solar_config.loader import compute_checksum, load_yaml_file, parse_assumptions
from solar_engines.rates import EngineAssumptions
from solar_kernel.exceptions import AssumptionSetNotFoundError, InvalidAssumptionError
from solar_kernel.logging_config import get_logger

_logger = get_logger("config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"


@dataclass(frozen=True)
class AssumptionSet:
    """A loaded, parsed assumption set."""

    name: str
    version: str
    checksum: str
    assumptions: EngineAssumptions
    description: str = ""


def get_active_assumptions(
    name: str = "default",
    config_dir: Path | None = None,
) -> AssumptionSet:
    """Load the assumption set called ``name``.

    Args:
        name: File stem of the set (``default`` -> ``default.yaml``).
        config_dir: Override path to the sets directory.
            Defaults to solar_config/sets/.

    Returns:
        AssumptionSet whose ``assumptions`` feed ``generate_proposal``.

    Raises:
        AssumptionSetNotFoundError: If no such set exists.
        InvalidAssumptionError: If the set contains a bad key or value.
    """
    sets_dir = Path(config_dir) if config_dir else _DEFAULT_CONFIG_DIR
    path = sets_dir / f"{name}.yaml"
    if not path.is_file():
        raise AssumptionSetNotFoundError(name, str(sets_dir))

    data = load_yaml_file(path)
    raw = data.get("assumptions") or {}
    if not isinstance(raw, dict):
        raise InvalidAssumptionError("assumptions", "expected a mapping")

    assumption_set = AssumptionSet(
        name=str(data.get("name", name)),
        version=str(data.get("version", "1")),
        checksum=compute_checksum(data),
        assumptions=parse_assumptions(raw),
        description=str(data.get("description", "")),
    )

    _logger.info(
        "SOLAR_CONFIG_TRACE",
        extra={
            "trace_type": "SOLAR_CONFIG_TRACE",
            "assumption_set": assumption_set.name,
            "assumption_set_version": assumption_set.version,
            "checksum": assumption_set.checksum,
            "key_count": len(raw),
        },
    )

    return assumption_set


__all__ = [
    "AssumptionSet",
    "get_active_assumptions",
]
