"""
Module: solar_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the solar
    financial projection engine.  This is the canonical import surface for
    the proposal service and any other in-process caller.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import solar_kernel.logging_config, solar_kernel.exceptions
    and solar_kernel.domain (and sibling engine modules).
    MUST NOT import solar_kernel.services, solar_kernel.models or solar_config.

Invariants enforced:
    - Purity: engines never call ``datetime.now()``; the assembler takes
      an injected Clock.
    - Determinism: identical inputs always produce identical outputs.
    - Data flows one way: rates -> sizing -> production -> savings ->
      financing -> proposal.

Failure modes:
    - ValueError from ``LoanTerm`` on an invalid loan product.
    - ProposalValidationError from ``ProposalOutcome.unwrap()`` when the
      opt-in checks reject the inputs.

Audit relevance:
    Every traced entry point emits a SOLAR_ENGINE_TRACE log record with an
    input fingerprint, and every ProposalResult echoes the assumptions it
    was computed against.

Usage:
    from solar_engines import generate_proposal, ScenarioOption

    result = generate_proposal("lead-1", panel_count=20, sunshine_hours_year=1600)
"""

from solar_kernel.logging_config import get_logger

logger = get_logger("engines")

from solar_engines.financing import (  # noqa: E402
    EVALUATION_ORDER,
    CashScenario,
    FinancingScenario,
    FinancingType,
    LoanScenario,
    PPAScenario,
    ScenarioOption,
    ScenarioSet,
    cash_scenario,
    generate_scenarios,
    loan_scenario,
    monthly_payment,
    ppa_scenario,
    recommend,
)
from solar_engines.production import (  # noqa: E402
    ProductionEstimate,
    calculate_annual_production,
    performance_ratio,
    production_by_year,
    project_production,
)
from solar_engines.proposal import (  # noqa: E402
    AssumptionsUsed,
    ProposalResult,
    generate_proposal,
)
from solar_engines.rates import (  # noqa: E402
    DEFAULT_ASSUMPTIONS,
    LOAN_TERMS,
    STATE_UTILITY_RATES,
    EngineAssumptions,
    LoanTerm,
    RateSource,
    UtilityRate,
    resolve_utility_rate,
)
from solar_engines.savings import (  # noqa: E402
    SavingsForecast,
    forecast_savings,
    utility_rates_by_year,
)
from solar_engines.sizing import (  # noqa: E402
    CostBreakdown,
    SystemSize,
    calculate_cost_breakdown,
    calculate_gross_cost,
    calculate_system_size,
)
from solar_engines.tracer import traced_engine  # noqa: E402
from solar_engines.validation import (  # noqa: E402
    FieldError,
    ProposalOutcome,
    generate_validated_proposal,
    validate_proposal_inputs,
)

__all__ = [
    # rates
    "DEFAULT_ASSUMPTIONS",
    "EngineAssumptions",
    "LOAN_TERMS",
    "LoanTerm",
    "RateSource",
    "STATE_UTILITY_RATES",
    "UtilityRate",
    "resolve_utility_rate",
    # sizing
    "CostBreakdown",
    "SystemSize",
    "calculate_cost_breakdown",
    "calculate_gross_cost",
    "calculate_system_size",
    # production
    "ProductionEstimate",
    "calculate_annual_production",
    "performance_ratio",
    "production_by_year",
    "project_production",
    # savings
    "SavingsForecast",
    "forecast_savings",
    "utility_rates_by_year",
    # financing
    "CashScenario",
    "EVALUATION_ORDER",
    "FinancingScenario",
    "FinancingType",
    "LoanScenario",
    "PPAScenario",
    "ScenarioOption",
    "ScenarioSet",
    "cash_scenario",
    "generate_scenarios",
    "loan_scenario",
    "monthly_payment",
    "ppa_scenario",
    "recommend",
    # proposal
    "AssumptionsUsed",
    "ProposalResult",
    "generate_proposal",
    # validation
    "FieldError",
    "ProposalOutcome",
    "generate_validated_proposal",
    "validate_proposal_inputs",
    # tracing
    "traced_engine",
]
