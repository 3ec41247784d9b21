"""
solar_engines.rates -- Fixed assumptions and rate tables.

Responsibility:
    Hold every constant the projection engine consumes (efficiencies,
    degradation, horizon, cost per watt, utility rates, loan terms, ITC,
    PPA pricing) and bundle them into ``EngineAssumptions`` so a whole
    proposal can be computed against one explicit, auditable set.

Architecture position:
    Engines -- leaf module, imports nothing from the rest of the package.
    ``solar_config`` builds ``EngineAssumptions`` from YAML; every other
    engine module receives it (or its fields) as parameters.

Invariants enforced:
    - ``LoanTerm.years`` is positive and ``LoanTerm.apr`` is non-negative.
    - Utility-rate resolution is total: a custom rate wins whenever it is
      supplied, known state codes use the table, anything else falls back
      to the national average.  Unknown states are never an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Mapping

# ---------------------------------------------------------------------------
# System and production
# ---------------------------------------------------------------------------

PANEL_EFFICIENCY = 0.20  # modern residential monocrystalline
INVERTER_EFFICIENCY = 0.96  # DC -> AC
DEGRADATION_RATE = 0.005  # 0.5% output loss per year
SYSTEM_LIFESPAN_YRS = 25  # standard panel warranty
STANDARD_PANEL_WATTAGE = 400
DEFAULT_COST_PER_WATT = 2.50  # before incentives

# Empirical multiplier applied with the efficiencies; not physically derived.
PERFORMANCE_ADJUSTMENT = 5

# ---------------------------------------------------------------------------
# Utility and incentives
# ---------------------------------------------------------------------------

DEFAULT_UTILITY_RATE = 0.1762  # $/kWh, U.S. residential average
UTILITY_RATE_ESCALATION = 0.03
FEDERAL_ITC = 0.30

STATE_UTILITY_RATES: Mapping[str, float] = MappingProxyType(
    {
        "CA": 0.3158,
        "NY": 0.2450,
        "MA": 0.2890,
        "CT": 0.2650,
        "NH": 0.2340,
        "HI": 0.4320,
        "AK": 0.2410,
        "TX": 0.1420,
        "FL": 0.1580,
        "AZ": 0.1390,
        "NV": 0.1520,
        "CO": 0.1480,
        "WA": 0.1180,
        "OR": 0.1290,
        "GA": 0.1450,
        "NC": 0.1380,
        "VA": 0.1520,
        "MD": 0.1680,
        "NJ": 0.1890,
        "PA": 0.1720,
        "OH": 0.1540,
        "MI": 0.1820,
        "IL": 0.1650,
    }
)

# ---------------------------------------------------------------------------
# Financing
# ---------------------------------------------------------------------------

PPA_RATE_PER_KWH = 0.12
PPA_ESCALATION_RATE = 0.029


@dataclass(frozen=True)
class LoanTerm:
    """A loan product: term length and annual percentage rate."""

    years: int
    apr: float

    def __post_init__(self) -> None:
        if self.years <= 0:
            raise ValueError("Loan term must be at least one year")
        if self.apr < 0:
            raise ValueError("Loan APR cannot be negative")

    @property
    def months(self) -> int:
        return self.years * 12


LOAN_TERMS: Mapping[int, LoanTerm] = MappingProxyType(
    {
        10: LoanTerm(years=10, apr=0.0699),
        15: LoanTerm(years=15, apr=0.0799),
        20: LoanTerm(years=20, apr=0.0849),
        25: LoanTerm(years=25, apr=0.0899),
    }
)


@dataclass(frozen=True)
class EngineAssumptions:
    """
    Complete set of constants a proposal is computed against.

    Immutable value object.  Defaults are the module constants; use
    ``with_overrides`` to derive a variant.
    """

    panel_wattage: float = STANDARD_PANEL_WATTAGE
    panel_efficiency: float = PANEL_EFFICIENCY
    inverter_efficiency: float = INVERTER_EFFICIENCY
    degradation_rate: float = DEGRADATION_RATE
    lifespan_years: int = SYSTEM_LIFESPAN_YRS
    cost_per_watt: float = DEFAULT_COST_PER_WATT
    federal_itc: float = FEDERAL_ITC
    national_utility_rate: float = DEFAULT_UTILITY_RATE
    utility_escalation: float = UTILITY_RATE_ESCALATION
    state_utility_rates: Mapping[str, float] = field(
        default_factory=lambda: STATE_UTILITY_RATES
    )
    loan_10: LoanTerm = LOAN_TERMS[10]
    loan_15: LoanTerm = LOAN_TERMS[15]
    ppa_rate: float = PPA_RATE_PER_KWH
    ppa_escalation: float = PPA_ESCALATION_RATE

    # The state table is a read-only mapping, so instances are not hashable.
    __hash__ = None

    def with_overrides(self, **changes) -> EngineAssumptions:
        return replace(self, **changes)


DEFAULT_ASSUMPTIONS = EngineAssumptions()


class RateSource(str, Enum):
    """Where the starting utility rate came from."""

    CUSTOM = "custom"
    STATE = "state"
    NATIONAL = "national"


@dataclass(frozen=True)
class UtilityRate:
    """Resolved starting utility rate and its provenance."""

    rate: float
    source: RateSource
    state_code: str | None = None


def resolve_utility_rate(
    state_code: str | None = None,
    custom_rate: float | None = None,
    assumptions: EngineAssumptions = DEFAULT_ASSUMPTIONS,
) -> UtilityRate:
    """
    Pick the starting $/kWh rate for a site.

    A supplied ``custom_rate`` always wins.  Otherwise the state code is
    matched case-insensitively against the table; unknown or missing codes
    use the national average.
    """
    normalized = state_code.strip().upper() if state_code else None
    if custom_rate is not None:
        return UtilityRate(custom_rate, RateSource.CUSTOM, normalized or None)
    if normalized and normalized in assumptions.state_utility_rates:
        return UtilityRate(
            assumptions.state_utility_rates[normalized], RateSource.STATE, normalized
        )
    return UtilityRate(
        assumptions.national_utility_rate, RateSource.NATIONAL, normalized or None
    )
