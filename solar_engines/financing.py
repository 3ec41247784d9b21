"""
solar_engines.financing -- Cash, loan and PPA scenarios plus the recommendation.

Responsibility:
    Express the same system as four ways to pay for it (cash, 10-year
    loan, 15-year loan, power purchase agreement), each with its own
    net-savings figure, and pick the option that saves the customer the
    most over the horizon.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Each generator is a
    function of (net price, savings forecast, production series) and its
    own rate constants; generators never consult one another.  The
    selector only reads their ``net_savings_25yr``.

Invariants enforced:
    - Zero-APR loans amortize as ``principal / months``; no division by
      zero.
    - Loan net savings subtract only the payments that fall inside the
      horizon.  For terms no longer than the horizon this is the full
      loan cost.
    - Every ``net_savings_25yr`` is measured at the end of the horizon,
      which is 25 years unless ``lifespan_years`` says otherwise.
    - ``recommend`` scans ``EVALUATION_ORDER`` and replaces the leader only
      on a strictly greater value, so ties go to the earlier option.

Failure modes:
    - ValueError from ``LoanTerm`` for non-positive terms or negative APR.
    - A zero net price reports a cash ROI of 0.0.

Usage:
    from solar_engines.financing import generate_scenarios

    scenarios = generate_scenarios(
        net_price=costs.net_price,
        savings=forecast,
        per_year_kwh=production.per_year_kwh,
    )
    scenarios.recommended        # ScenarioOption.CASH
    scenarios.best.net_savings_25yr
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Mapping, Sequence, Union

from solar_engines.rates import (
    DEFAULT_ASSUMPTIONS,
    PPA_ESCALATION_RATE,
    PPA_RATE_PER_KWH,
    EngineAssumptions,
    LoanTerm,
)
from solar_engines.savings import SavingsForecast
from solar_engines.tracer import traced_engine


class FinancingType(str, Enum):
    """Variant tag carried by every scenario."""

    CASH = "CASH"
    LOAN = "LOAN"
    PPA = "PPA"


class ScenarioOption(str, Enum):
    """The four options offered on a proposal."""

    CASH = "CASH"
    LOAN_10 = "LOAN_10"
    LOAN_15 = "LOAN_15"
    PPA = "PPA"


# Tie-break order for the recommendation: first listed wins.
EVALUATION_ORDER: tuple[ScenarioOption, ...] = (
    ScenarioOption.CASH,
    ScenarioOption.LOAN_10,
    ScenarioOption.LOAN_15,
    ScenarioOption.PPA,
)


def _enum_values(data: dict) -> dict:
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in data.items()}


@dataclass(frozen=True)
class CashScenario:
    """Customer pays the net price up front."""

    upfront_cost: float
    year1_savings: float
    payback_years: int
    roi_25yr: float  # percent
    net_savings_25yr: float
    type: FinancingType = FinancingType.CASH

    def as_dict(self) -> dict:
        return _enum_values(asdict(self))


@dataclass(frozen=True)
class LoanScenario:
    """Net price financed over a fixed term."""

    term_years: int
    apr: float
    monthly_payment: float
    total_interest: float
    total_cost: float
    year1_cash_flow: float
    net_savings_25yr: float
    type: FinancingType = FinancingType.LOAN

    def as_dict(self) -> dict:
        return _enum_values(asdict(self))


@dataclass(frozen=True)
class PPAScenario:
    """Customer buys the system's output per kWh instead of the system."""

    year1_rate: float
    escalation_rate: float
    year1_payment: float
    total_payments_25yr: float
    net_savings_25yr: float
    ownership_transfer: bool = True
    type: FinancingType = FinancingType.PPA

    def as_dict(self) -> dict:
        return _enum_values(asdict(self))


FinancingScenario = Union[CashScenario, LoanScenario, PPAScenario]


@dataclass(frozen=True)
class ScenarioSet:
    """All four scenarios and the recommended option."""

    cash: CashScenario
    loan10: LoanScenario
    loan15: LoanScenario
    ppa: PPAScenario
    recommended: ScenarioOption

    def get(self, option: ScenarioOption | str) -> FinancingScenario:
        return self.by_option()[ScenarioOption(option)]

    def by_option(self) -> dict[ScenarioOption, FinancingScenario]:
        return {
            ScenarioOption.CASH: self.cash,
            ScenarioOption.LOAN_10: self.loan10,
            ScenarioOption.LOAN_15: self.loan15,
            ScenarioOption.PPA: self.ppa,
        }

    @property
    def best(self) -> FinancingScenario:
        return self.get(self.recommended)

    def as_dict(self) -> dict:
        return {
            "cash": self.cash.as_dict(),
            "loan10": self.loan10.as_dict(),
            "loan15": self.loan15.as_dict(),
            "ppa": self.ppa.as_dict(),
            "recommended": self.recommended.value,
        }


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------


def monthly_payment(principal: float, apr: float, term_years: int) -> float:
    """
    Level monthly payment for an amortizing loan.

    M = P * r(1+r)^n / ((1+r)^n - 1), with r = apr / 12 and n = months.
    """
    monthly_rate = apr / 12
    num_payments = term_years * 12

    if monthly_rate == 0:
        return principal / num_payments

    growth = (1 + monthly_rate) ** num_payments
    return principal * (monthly_rate * growth) / (growth - 1)


def cash_scenario(net_price: float, savings: SavingsForecast) -> CashScenario:
    """Outright purchase at the net price."""
    if net_price == 0:
        roi = 0.0
    else:
        roi = ((savings.net_savings_25yr + net_price) / net_price - 1) * 100

    return CashScenario(
        upfront_cost=net_price,
        year1_savings=savings.year1,
        payback_years=savings.break_even_year or 0,
        roi_25yr=roi,
        net_savings_25yr=savings.net_savings_25yr,
    )


def loan_scenario(
    net_price: float,
    savings: SavingsForecast,
    term: LoanTerm,
) -> LoanScenario:
    """Finance the net price over ``term``."""
    payment = monthly_payment(net_price, term.apr, term.years)
    total_cost = payment * term.years * 12
    total_interest = total_cost - net_price
    year1_cash_flow = savings.year1 - payment * 12

    horizon_months = len(savings.cumulative_by_year) * 12
    if term.months > horizon_months:
        payments_in_horizon = payment * horizon_months
    else:
        payments_in_horizon = total_cost

    return LoanScenario(
        term_years=term.years,
        apr=term.apr,
        monthly_payment=payment,
        total_interest=total_interest,
        total_cost=total_cost,
        year1_cash_flow=year1_cash_flow,
        net_savings_25yr=savings.total_savings - payments_in_horizon,
    )


def ppa_scenario(
    per_year_kwh: Sequence[float],
    savings: SavingsForecast,
    ppa_rate: float = PPA_RATE_PER_KWH,
    escalation_rate: float = PPA_ESCALATION_RATE,
) -> PPAScenario:
    """Pay per kWh produced at an escalating contract rate."""
    total_payments = 0.0
    current_rate = ppa_rate
    for kwh in per_year_kwh:
        total_payments += kwh * current_rate
        current_rate *= 1 + escalation_rate

    year1_payment = per_year_kwh[0] * ppa_rate if per_year_kwh else 0.0

    return PPAScenario(
        year1_rate=ppa_rate,
        escalation_rate=escalation_rate,
        year1_payment=year1_payment,
        total_payments_25yr=total_payments,
        net_savings_25yr=savings.total_savings - total_payments,
    )


# ---------------------------------------------------------------------------
# Recommendation
# ---------------------------------------------------------------------------


def recommend(scenarios: Mapping[ScenarioOption, FinancingScenario]) -> ScenarioOption:
    """Option with the highest net savings; earliest in EVALUATION_ORDER on ties."""
    best_option = EVALUATION_ORDER[0]
    best_savings = scenarios[best_option].net_savings_25yr
    for option in EVALUATION_ORDER[1:]:
        candidate = scenarios[option].net_savings_25yr
        if candidate > best_savings:
            best_option, best_savings = option, candidate
    return best_option


@traced_engine("financing", "1.0", fingerprint_fields=("net_price",))
def generate_scenarios(
    net_price: float,
    savings: SavingsForecast,
    per_year_kwh: Sequence[float],
    assumptions: EngineAssumptions = DEFAULT_ASSUMPTIONS,
) -> ScenarioSet:
    """Build all four scenarios and pick the recommended one."""
    cash = cash_scenario(net_price, savings)
    loan10 = loan_scenario(net_price, savings, assumptions.loan_10)
    loan15 = loan_scenario(net_price, savings, assumptions.loan_15)
    ppa = ppa_scenario(
        per_year_kwh, savings, assumptions.ppa_rate, assumptions.ppa_escalation
    )

    recommended = recommend(
        {
            ScenarioOption.CASH: cash,
            ScenarioOption.LOAN_10: loan10,
            ScenarioOption.LOAN_15: loan15,
            ScenarioOption.PPA: ppa,
        }
    )

    return ScenarioSet(
        cash=cash,
        loan10=loan10,
        loan15=loan15,
        ppa=ppa,
        recommended=recommended,
    )


__all__ = [
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
]
