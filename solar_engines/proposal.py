"""
solar_engines.proposal -- Proposal assembler, the engine's single entry point.

Responsibility:
    Run sizing -> cost -> production -> savings -> scenarios ->
    recommendation in that fixed order and package the results, together
    with every assumption actually used, into one immutable
    ``ProposalResult``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Called in-process by the
    proposal service (or any other caller); the caller owns persistence,
    identity, expiry and acceptance.

Invariants enforced:
    - Determinism: for equal inputs and assumptions every field except
      ``generated_at`` is equal.
    - The engine never reads the wall clock itself; ``generated_at`` comes
      from the injected ``Clock``.
    - No input validation.  Degenerate inputs give degenerate numbers, not
      exceptions; see ``solar_engines.validation`` for the opt-in checks.

Usage:
    from solar_engines import generate_proposal

    result = generate_proposal("lead-42", panel_count=20, sunshine_hours_year=1600,
                               state_code="ca")
    result.costs.net_price              # 14000.0
    result.scenarios.recommended        # ScenarioOption.CASH
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime

from solar_engines.financing import ScenarioSet, generate_scenarios
from solar_engines.production import ProductionEstimate, project_production
from solar_engines.rates import (
    DEFAULT_ASSUMPTIONS,
    EngineAssumptions,
    LoanTerm,
    RateSource,
    resolve_utility_rate,
)
from solar_engines.savings import SavingsForecast, forecast_savings
from solar_engines.sizing import (
    CostBreakdown,
    calculate_cost_breakdown,
    calculate_gross_cost,
    calculate_system_size,
)
from solar_engines.tracer import traced_engine
from solar_kernel.domain.clock import Clock, SystemClock
from solar_kernel.logging_config import get_logger

logger = get_logger("engines.proposal")


@dataclass(frozen=True)
class AssumptionsUsed:
    """Echo of the constants behind a proposal, for audit."""

    panel_wattage: float
    panel_efficiency: float
    inverter_efficiency: float
    degradation_rate: float
    lifespan_years: int
    utility_rate: float
    utility_rate_source: RateSource
    state_code: str | None
    utility_escalation: float
    federal_itc: float
    cost_per_watt: float
    ppa_rate: float
    ppa_escalation: float
    loan_10: LoanTerm
    loan_15: LoanTerm

    def as_dict(self) -> dict:
        data = asdict(self)
        data["utility_rate_source"] = self.utility_rate_source.value
        return data


@dataclass(frozen=True)
class ProposalResult:
    """Complete financial proposal for one lead."""

    lead_id: str
    generated_at: datetime
    production: ProductionEstimate
    costs: CostBreakdown
    savings: SavingsForecast
    scenarios: ScenarioSet
    assumptions: AssumptionsUsed

    def as_dict(self) -> dict:
        return {
            "lead_id": self.lead_id,
            "generated_at": self.generated_at.isoformat(),
            "production": self.production.as_dict(),
            "costs": self.costs.as_dict(),
            "savings": self.savings.as_dict(),
            "scenarios": self.scenarios.as_dict(),
            "assumptions": self.assumptions.as_dict(),
        }


@traced_engine(
    "proposal",
    "1.0",
    fingerprint_fields=(
        "panel_count",
        "sunshine_hours_year",
        "state_code",
        "custom_utility_rate",
        "state_rebate",
    ),
)
def generate_proposal(
    lead_id: str,
    panel_count: int,
    sunshine_hours_year: float,
    state_code: str | None = None,
    custom_utility_rate: float | None = None,
    *,
    state_rebate: float = 0.0,
    assumptions: EngineAssumptions | None = None,
    clock: Clock | None = None,
) -> ProposalResult:
    """
    Turn a site-survey result into a full financial proposal.

    Args:
        lead_id: Opaque caller identifier, echoed back.
        panel_count: Panels that fit on the roof.
        sunshine_hours_year: Annual peak sun hours at the site.
        state_code: Two-letter state, any case; unknown codes use the
            national utility rate.
        custom_utility_rate: $/kWh override; wins over the state table.
        state_rebate: Dollar rebate subtracted alongside the ITC.
        assumptions: Constant set to compute against (defaults to the
            module constants).
        clock: Source of ``generated_at``.

    Returns:
        ProposalResult.
    """
    assumptions = assumptions or DEFAULT_ASSUMPTIONS
    clock = clock or SystemClock()

    size = calculate_system_size(panel_count, assumptions.panel_wattage)
    gross_cost = calculate_gross_cost(size.watts, assumptions.cost_per_watt)
    costs = calculate_cost_breakdown(
        gross_cost=gross_cost,
        itc_rate=assumptions.federal_itc,
        state_rebate=state_rebate,
        cost_per_watt=assumptions.cost_per_watt,
    )

    production = project_production(
        sunshine_hours_year=sunshine_hours_year,
        panel_count=panel_count,
        panel_wattage=assumptions.panel_wattage,
        panel_efficiency=assumptions.panel_efficiency,
        inverter_efficiency=assumptions.inverter_efficiency,
        degradation_rate=assumptions.degradation_rate,
        years=assumptions.lifespan_years,
    )

    utility = resolve_utility_rate(state_code, custom_utility_rate, assumptions)

    savings = forecast_savings(
        production.per_year_kwh,
        start_rate=utility.rate,
        net_price=costs.net_price,
        escalation=assumptions.utility_escalation,
    )

    scenarios = generate_scenarios(
        net_price=costs.net_price,
        savings=savings,
        per_year_kwh=production.per_year_kwh,
        assumptions=assumptions,
    )

    logger.debug(
        "proposal_computed",
        extra={
            "lead_id": lead_id,
            "system_kw": size.kw,
            "net_price": costs.net_price,
            "break_even_year": savings.break_even_year,
            "recommended": scenarios.recommended.value,
            "utility_rate_source": utility.source.value,
        },
    )

    return ProposalResult(
        lead_id=lead_id,
        generated_at=clock.now(),
        production=production,
        costs=costs,
        savings=savings,
        scenarios=scenarios,
        assumptions=AssumptionsUsed(
            panel_wattage=assumptions.panel_wattage,
            panel_efficiency=assumptions.panel_efficiency,
            inverter_efficiency=assumptions.inverter_efficiency,
            degradation_rate=assumptions.degradation_rate,
            lifespan_years=assumptions.lifespan_years,
            utility_rate=utility.rate,
            utility_rate_source=utility.source,
            state_code=utility.state_code,
            utility_escalation=assumptions.utility_escalation,
            federal_itc=assumptions.federal_itc,
            cost_per_watt=assumptions.cost_per_watt,
            ppa_rate=assumptions.ppa_rate,
            ppa_escalation=assumptions.ppa_escalation,
            loan_10=assumptions.loan_10,
            loan_15=assumptions.loan_15,
        ),
    )
