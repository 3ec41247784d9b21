"""
solar_engines.validation -- Opt-in precondition checks for the assembler.

``generate_proposal`` trusts its caller: a zero panel count yields a zero
system, not an error.  Callers that want stricter guarantees go through
``generate_validated_proposal`` instead, which returns a ``ProposalOutcome``
holding either the result or the list of field errors.  Nothing here
changes what ``generate_proposal`` does on its own.
"""

from __future__ import annotations

import numbers
from dataclasses import asdict, dataclass

from solar_engines.proposal import ProposalResult, generate_proposal
from solar_engines.rates import EngineAssumptions
from solar_kernel.domain.clock import Clock
from solar_kernel.exceptions import ProposalValidationError
from solar_kernel.logging_config import get_logger

logger = get_logger("engines.validation")


@dataclass(frozen=True)
class FieldError:
    """One rejected input."""

    field: str
    message: str
    value: object = None

    def as_dict(self) -> dict:
        data = asdict(self)
        data["value"] = repr(self.value)
        return data


@dataclass(frozen=True)
class ProposalOutcome:
    """Either a computed proposal or the reasons it was refused."""

    result: ProposalResult | None
    errors: tuple[FieldError, ...] = ()

    @property
    def is_ok(self) -> bool:
        return self.result is not None and not self.errors

    def unwrap(self) -> ProposalResult:
        """Return the result or raise ProposalValidationError."""
        if not self.is_ok:
            raise ProposalValidationError([e.as_dict() for e in self.errors])
        return self.result


def _is_real(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def validate_proposal_inputs(
    panel_count: object,
    sunshine_hours_year: object,
    custom_utility_rate: object = None,
    state_rebate: object = 0.0,
) -> tuple[FieldError, ...]:
    """Check the scalar inputs the engine would otherwise trust."""
    errors: list[FieldError] = []

    if not isinstance(panel_count, numbers.Integral) or isinstance(panel_count, bool):
        errors.append(FieldError("panel_count", "must be an integer", panel_count))
    elif panel_count <= 0:
        errors.append(FieldError("panel_count", "must be positive", panel_count))

    if not _is_real(sunshine_hours_year):
        errors.append(
            FieldError("sunshine_hours_year", "must be a number", sunshine_hours_year)
        )
    elif sunshine_hours_year <= 0:
        errors.append(
            FieldError("sunshine_hours_year", "must be positive", sunshine_hours_year)
        )

    if custom_utility_rate is not None:
        if not _is_real(custom_utility_rate):
            errors.append(
                FieldError("custom_utility_rate", "must be a number", custom_utility_rate)
            )
        elif custom_utility_rate <= 0:
            errors.append(
                FieldError("custom_utility_rate", "must be positive", custom_utility_rate)
            )

    if not _is_real(state_rebate):
        errors.append(FieldError("state_rebate", "must be a number", state_rebate))
    elif state_rebate < 0:
        errors.append(FieldError("state_rebate", "cannot be negative", state_rebate))

    return tuple(errors)


def generate_validated_proposal(
    lead_id: str,
    panel_count: int,
    sunshine_hours_year: float,
    state_code: str | None = None,
    custom_utility_rate: float | None = None,
    *,
    state_rebate: float = 0.0,
    assumptions: EngineAssumptions | None = None,
    clock: Clock | None = None,
) -> ProposalOutcome:
    """``generate_proposal`` behind the input checks."""
    errors = validate_proposal_inputs(
        panel_count, sunshine_hours_year, custom_utility_rate, state_rebate
    )
    if errors:
        logger.info(
            "proposal_inputs_rejected",
            extra={"lead_id": lead_id, "fields": [e.field for e in errors]},
        )
        return ProposalOutcome(result=None, errors=errors)

    result = generate_proposal(
        lead_id,
        panel_count,
        sunshine_hours_year,
        state_code,
        custom_utility_rate,
        state_rebate=state_rebate,
        assumptions=assumptions,
        clock=clock,
    )
    return ProposalOutcome(result=result)
