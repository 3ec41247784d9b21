"""
solar_engines.production -- Year-one output and the degraded production series.

Responsibility:
    Convert annual peak-sun-hours and array size into first-year kWh, then
    project it across the modeled horizon with compounding panel
    degradation.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Consumes the sizing
    inputs; its per-year series drives the savings forecast and the PPA
    scenario.

Invariants enforced:
    - ``per_year_kwh[0] == year1_kwh``.
    - ``per_year_kwh[i] == year1_kwh * (1 - degradation_rate) ** i``.
    - ``lifetime_kwh == sum(per_year_kwh)``.
    - The series length is exactly the requested horizon.

Failure modes:
    None.  This is not an irradiance model: shading, tilt and orientation
    are already folded into the sunshine-hours input.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from solar_engines.rates import (
    DEGRADATION_RATE,
    INVERTER_EFFICIENCY,
    PANEL_EFFICIENCY,
    PERFORMANCE_ADJUSTMENT,
    STANDARD_PANEL_WATTAGE,
    SYSTEM_LIFESPAN_YRS,
)
from solar_engines.tracer import traced_engine


@dataclass(frozen=True)
class ProductionEstimate:
    """Energy output profile over the horizon."""

    system_watts: float
    system_kw: float
    year1_kwh: float
    lifetime_kwh: float
    per_year_kwh: tuple[float, ...]

    @property
    def years(self) -> int:
        return len(self.per_year_kwh)

    def as_dict(self) -> dict:
        data = asdict(self)
        data["per_year_kwh"] = list(self.per_year_kwh)
        return data


def performance_ratio(
    panel_efficiency: float = PANEL_EFFICIENCY,
    inverter_efficiency: float = INVERTER_EFFICIENCY,
) -> float:
    """Empirical multiplier turning sunshine hours x kW into kWh."""
    return panel_efficiency * inverter_efficiency * PERFORMANCE_ADJUSTMENT


def calculate_annual_production(
    sunshine_hours_year: float,
    panel_count: int,
    panel_wattage: float = STANDARD_PANEL_WATTAGE,
    panel_efficiency: float = PANEL_EFFICIENCY,
    inverter_efficiency: float = INVERTER_EFFICIENCY,
) -> float:
    """First-year production in kWh."""
    system_kw = (panel_count * panel_wattage) / 1000
    return sunshine_hours_year * system_kw * performance_ratio(
        panel_efficiency, inverter_efficiency
    )


def production_by_year(
    year1_kwh: float,
    years: int = SYSTEM_LIFESPAN_YRS,
    degradation_rate: float = DEGRADATION_RATE,
) -> tuple[float, ...]:
    """Degraded output for years 0..years-1."""
    return tuple(year1_kwh * (1 - degradation_rate) ** year for year in range(years))


@traced_engine(
    "production",
    "1.0",
    fingerprint_fields=(
        "sunshine_hours_year",
        "panel_count",
        "panel_wattage",
        "degradation_rate",
        "years",
    ),
)
def project_production(
    sunshine_hours_year: float,
    panel_count: int,
    panel_wattage: float = STANDARD_PANEL_WATTAGE,
    panel_efficiency: float = PANEL_EFFICIENCY,
    inverter_efficiency: float = INVERTER_EFFICIENCY,
    degradation_rate: float = DEGRADATION_RATE,
    years: int = SYSTEM_LIFESPAN_YRS,
) -> ProductionEstimate:
    """Full production profile for a site."""
    system_watts = panel_count * panel_wattage
    year1_kwh = calculate_annual_production(
        sunshine_hours_year,
        panel_count,
        panel_wattage,
        panel_efficiency,
        inverter_efficiency,
    )
    per_year = production_by_year(year1_kwh, years, degradation_rate)

    # Plain left-to-right accumulation; sum() compensates on newer interpreters.
    lifetime_kwh = 0.0
    for kwh in per_year:
        lifetime_kwh += kwh

    return ProductionEstimate(
        system_watts=system_watts,
        system_kw=system_watts / 1000,
        year1_kwh=year1_kwh,
        lifetime_kwh=lifetime_kwh,
        per_year_kwh=per_year,
    )
