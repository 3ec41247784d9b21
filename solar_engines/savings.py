"""
solar_engines.savings -- Avoided utility cost over the horizon.

Responsibility:
    Price each year's production at an escalating utility rate, accumulate
    the avoided cost, and locate the break-even year against the net
    system price.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Consumes the production
    series and the net price; its forecast is shared by all four financing
    scenarios.

Invariants enforced:
    - ``utility_rate_by_year[y] == start_rate * (1 + escalation) ** y``.
    - ``cumulative_by_year[i]`` is the running sum of production x rate
      and is non-decreasing for non-negative production and rates.
    - ``break_even_year`` is the first 1-based year whose cumulative
      savings reach the net price, or None when the horizon ends first.
      None means "never pays back"; it is never 0 or -1.
    - The horizon is the length of the production series.

Failure modes:
    None.  Snapshots past the end of a short horizon read as 0.0.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Sequence

from solar_engines.rates import (
    DEFAULT_UTILITY_RATE,
    SYSTEM_LIFESPAN_YRS,
    UTILITY_RATE_ESCALATION,
)
from solar_engines.tracer import traced_engine


@dataclass(frozen=True)
class SavingsForecast:
    """
    Avoided-cost projection for a purchased system.

    ``net_savings_25yr`` is cumulative savings at the end of the modeled
    horizon minus the net price.  The name follows the default 25-year
    lifespan; with a longer or shorter horizon it covers the whole horizon,
    while ``year25`` stays the year-25 snapshot.
    """

    year1: float
    year5: float
    year10: float
    year25: float
    net_savings_25yr: float
    cumulative_by_year: tuple[float, ...]
    utility_rate_by_year: tuple[float, ...]
    break_even_year: int | None

    @property
    def total_savings(self) -> float:
        """Cumulative savings at the end of the horizon."""
        return self.cumulative_by_year[-1] if self.cumulative_by_year else 0.0

    def as_dict(self) -> dict:
        data = asdict(self)
        data["cumulative_by_year"] = list(self.cumulative_by_year)
        data["utility_rate_by_year"] = list(self.utility_rate_by_year)
        return data


def utility_rates_by_year(
    start_rate: float = DEFAULT_UTILITY_RATE,
    years: int = SYSTEM_LIFESPAN_YRS,
    escalation: float = UTILITY_RATE_ESCALATION,
) -> tuple[float, ...]:
    """Escalated $/kWh for years 0..years-1."""
    return tuple(start_rate * (1 + escalation) ** year for year in range(years))


def _snapshot(cumulative: Sequence[float], year: int) -> float:
    return cumulative[year - 1] if len(cumulative) >= year else 0.0


@traced_engine(
    "savings",
    "1.0",
    fingerprint_fields=("start_rate", "net_price", "escalation"),
)
def forecast_savings(
    per_year_kwh: Sequence[float],
    start_rate: float = DEFAULT_UTILITY_RATE,
    net_price: float = 0.0,
    escalation: float = UTILITY_RATE_ESCALATION,
) -> SavingsForecast:
    """
    Build the savings forecast for a production series.

    Args:
        per_year_kwh: Degraded production, one entry per modeled year.
        start_rate: Year-one utility rate in $/kWh.
        net_price: Price after incentives; the break-even target.
        escalation: Annual utility rate escalation.

    Returns:
        SavingsForecast whose sequences have one entry per production year.
    """
    rates = utility_rates_by_year(start_rate, len(per_year_kwh), escalation)

    cumulative_by_year: list[float] = []
    cumulative = 0.0
    break_even_year: int | None = None
    for year, (kwh, rate) in enumerate(zip(per_year_kwh, rates)):
        cumulative += kwh * rate
        cumulative_by_year.append(cumulative)
        if break_even_year is None and cumulative >= net_price:
            break_even_year = year + 1

    year1 = per_year_kwh[0] * rates[0] if per_year_kwh else 0.0

    return SavingsForecast(
        year1=year1,
        year5=_snapshot(cumulative_by_year, 5),
        year10=_snapshot(cumulative_by_year, 10),
        year25=_snapshot(cumulative_by_year, 25),
        net_savings_25yr=cumulative - net_price,
        cumulative_by_year=tuple(cumulative_by_year),
        utility_rate_by_year=rates,
        break_even_year=break_even_year,
    )
