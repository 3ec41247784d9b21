"""
Typed exception hierarchy for the solar proposal kernel.

Every error has its own class, a class-level ``code`` that is safe to hand
to an API client, and the structured data needed to act on it.  Callers
catch by type and read attributes; they never parse messages.

    SolarKernelError (base)
    |
    +-- ValidationError
    |   +-- ProposalValidationError
    |   +-- SiteSurveyRequiredError
    |
    +-- ProposalError
    |   +-- ProposalNotFoundError
    |   +-- ProposalAccessDeniedError
    |   +-- ProposalExpiredError
    |   +-- ProposalAlreadyAcceptedError
    |   +-- InvalidStatusTransitionError
    |
    +-- AcceptanceError
    |   +-- InvalidScenarioSelectionError
    |   +-- InvalidSignatureError
    |   +-- InvalidCustomerDetailsError
    |
    +-- ConfigError
        +-- AssumptionSetNotFoundError
        +-- InvalidAssumptionError

Category        | Code                         | When Raised
----------------|------------------------------|----------------------------------------
Validation      | PROPOSAL_VALIDATION_FAILED   | Opt-in engine input checks failed
                | SITE_SURVEY_REQUIRED         | Lead has no panel count / sunshine hours
----------------|------------------------------|----------------------------------------
Proposal        | PROPOSAL_NOT_FOUND           | Proposal ID doesn't exist
                | PROPOSAL_ACCESS_DENIED       | Access token doesn't match
                | PROPOSAL_EXPIRED             | Past expires_at
                | PROPOSAL_ALREADY_ACCEPTED    | Second acceptance attempt
                | INVALID_STATUS_TRANSITION    | Leaving the terminal accepted state
----------------|------------------------------|----------------------------------------
Acceptance      | INVALID_SCENARIO_SELECTION   | Not one of CASH/LOAN_10/LOAN_15/PPA
                | INVALID_SIGNATURE            | Missing, malformed or oversized image
                | INVALID_CUSTOMER_DETAILS     | Bad name or email
----------------|------------------------------|----------------------------------------
Config          | ASSUMPTION_SET_NOT_FOUND     | No YAML set with that name
                | INVALID_ASSUMPTION           | Unknown key or unusable value
"""

from __future__ import annotations

from datetime import datetime
from typing import Any


class SolarKernelError(Exception):
    """
    Base exception for all solar kernel errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "SOLAR_KERNEL_ERROR"


# Validation


class ValidationError(SolarKernelError):
    """Base exception for rejected inputs."""

    code: str = "VALIDATION_ERROR"


class ProposalValidationError(ValidationError):
    """Engine inputs failed the opt-in precondition checks."""

    code: str = "PROPOSAL_VALIDATION_FAILED"

    def __init__(self, field_errors: list[dict[str, Any]]):
        self.field_errors = field_errors
        fields = ", ".join(e["field"] for e in field_errors)
        super().__init__(
            f"Proposal inputs invalid: {len(field_errors)} error(s) ({fields})"
        )


class SiteSurveyRequiredError(ValidationError):
    """Lead lacks the solar analysis needed to generate a proposal."""

    code: str = "SITE_SURVEY_REQUIRED"

    def __init__(self, lead_id: str):
        self.lead_id = lead_id
        super().__init__(
            f"Solar analysis required before generating a proposal for lead {lead_id}"
        )


# Proposal lifecycle


class ProposalError(SolarKernelError):
    """Base exception for proposal lifecycle errors."""

    code: str = "PROPOSAL_ERROR"


class ProposalNotFoundError(ProposalError):
    """Proposal with given ID was not found."""

    code: str = "PROPOSAL_NOT_FOUND"

    def __init__(self, proposal_id: str):
        self.proposal_id = proposal_id
        super().__init__(f"Proposal not found: {proposal_id}")


class ProposalAccessDeniedError(ProposalError):
    """
    Access token does not match the proposal.

    Deliberately indistinguishable from a missing proposal in the message.
    """

    code: str = "PROPOSAL_ACCESS_DENIED"

    def __init__(self, proposal_id: str):
        self.proposal_id = proposal_id
        super().__init__("Proposal not found or access denied")


class ProposalExpiredError(ProposalError):
    """Proposal is past its expiry timestamp or has been marked expired."""

    code: str = "PROPOSAL_EXPIRED"

    def __init__(self, proposal_id: str, expires_at: datetime | None):
        self.proposal_id = proposal_id
        self.expires_at = expires_at.isoformat() if expires_at else None
        if self.expires_at:
            super().__init__(f"Proposal {proposal_id} expired at {self.expires_at}")
        else:
            super().__init__(f"Proposal {proposal_id} has expired")


class ProposalAlreadyAcceptedError(ProposalError):
    """Proposal has already been accepted; acceptance happens at most once."""

    code: str = "PROPOSAL_ALREADY_ACCEPTED"

    def __init__(self, proposal_id: str):
        self.proposal_id = proposal_id
        super().__init__(f"Proposal {proposal_id} has already been accepted")


class InvalidStatusTransitionError(ProposalError):
    """Requested status change is not allowed."""

    code: str = "INVALID_STATUS_TRANSITION"

    def __init__(self, proposal_id: str, from_status: str, to_status: str):
        self.proposal_id = proposal_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Proposal {proposal_id} cannot move from {from_status} to {to_status}"
        )


# Acceptance


class AcceptanceError(SolarKernelError):
    """Base exception for rejected acceptance submissions."""

    code: str = "ACCEPTANCE_ERROR"


class InvalidScenarioSelectionError(AcceptanceError):
    """Selected payment option is not one of the generated scenarios."""

    code: str = "INVALID_SCENARIO_SELECTION"

    def __init__(self, selection: str):
        self.selection = selection
        super().__init__(f"Unknown payment option: {selection!r}")


class InvalidSignatureError(AcceptanceError):
    """Signature image is missing, malformed, oversized or unsafe."""

    code: str = "INVALID_SIGNATURE"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid signature: {reason}")


class InvalidCustomerDetailsError(AcceptanceError):
    """Customer name or email failed validation."""

    code: str = "INVALID_CUSTOMER_DETAILS"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


# Configuration


class ConfigError(SolarKernelError):
    """Base exception for assumption-set configuration errors."""

    code: str = "CONFIG_ERROR"


class AssumptionSetNotFoundError(ConfigError):
    """No assumption set with the requested name exists."""

    code: str = "ASSUMPTION_SET_NOT_FOUND"

    def __init__(self, name: str, config_dir: str):
        self.name = name
        self.config_dir = config_dir
        super().__init__(f"Assumption set {name!r} not found in {config_dir}")


class InvalidAssumptionError(ConfigError):
    """An assumption key is unknown or its value is unusable."""

    code: str = "INVALID_ASSUMPTION"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid assumption {key!r}: {reason}")
