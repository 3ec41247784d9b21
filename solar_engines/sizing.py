"""
solar_engines.sizing -- System size and incentive-adjusted cost.

Responsibility:
    Turn a panel count into array wattage, price it at a cost per watt,
    and apply the federal Investment Tax Credit and any state rebate to
    reach the net price the customer pays.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  First stage of the
    projection pipeline; its net price feeds savings and every scenario.

Invariants enforced:
    - ``kw == watts / 1000``.
    - ``total_incentives == federal_credit + state_rebate``.
    - ``net_price == gross_cost - total_incentives``.
    - ``net_price >= 0`` is expected but not enforced; the caller validates.

Failure modes:
    None.  Inputs are not validated; a zero gross cost reports an
    effective cost per watt of 0.0 instead of dividing by zero.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from solar_engines.rates import DEFAULT_COST_PER_WATT, FEDERAL_ITC, STANDARD_PANEL_WATTAGE
from solar_engines.tracer import traced_engine


@dataclass(frozen=True)
class SystemSize:
    """Physical array size."""

    watts: float
    kw: float

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CostBreakdown:
    """
    System price after incentives.

    All amounts in dollars.
    """

    gross_cost: float
    federal_credit: float
    state_rebate: float
    total_incentives: float
    net_price: float
    effective_cost_per_watt: float

    def as_dict(self) -> dict:
        return asdict(self)


def calculate_system_size(
    panel_count: int,
    panel_wattage: float = STANDARD_PANEL_WATTAGE,
) -> SystemSize:
    """Array size in watts and kilowatts."""
    watts = panel_count * panel_wattage
    return SystemSize(watts=watts, kw=watts / 1000)


def calculate_gross_cost(
    system_watts: float,
    cost_per_watt: float = DEFAULT_COST_PER_WATT,
) -> float:
    """Cost before incentives: watts x cost per watt."""
    return system_watts * cost_per_watt


@traced_engine(
    "cost_breakdown",
    "1.0",
    fingerprint_fields=("gross_cost", "itc_rate", "state_rebate", "cost_per_watt"),
)
def calculate_cost_breakdown(
    gross_cost: float,
    itc_rate: float = FEDERAL_ITC,
    state_rebate: float = 0.0,
    cost_per_watt: float = DEFAULT_COST_PER_WATT,
) -> CostBreakdown:
    """
    Apply the ITC and state rebate to a gross cost.

    The effective cost per watt is evaluated as
    ``net_price / (gross_cost / cost_per_watt)``; keep that order so stored
    proposals reproduce to the last bit.
    """
    federal_credit = gross_cost * itc_rate
    total_incentives = federal_credit + state_rebate
    net_price = gross_cost - total_incentives

    if gross_cost == 0:
        effective_cost_per_watt = 0.0
    else:
        effective_cost_per_watt = net_price / (gross_cost / cost_per_watt)

    return CostBreakdown(
        gross_cost=gross_cost,
        federal_credit=federal_credit,
        state_rebate=state_rebate,
        total_incentives=total_incentives,
        net_price=net_price,
        effective_cost_per_watt=effective_cost_per_watt,
    )
