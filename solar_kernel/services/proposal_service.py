"""
ProposalService -- generation, sharing and acceptance of solar proposals.

Responsibility:
    The caller-side shell around ``solar_engines.generate_proposal``:
    checks that the lead's site survey is usable, resolves the state from
    the address, runs the engine, persists the result as a draft with an
    expiry and an access token, and moves the proposal through its
    lifecycle (sent, viewed, accepted, expired).

Architecture position:
    Kernel > Services -- imperative shell.  Imports the engines; the
    engines never import this module.

Invariants enforced:
    - Flush only; the caller owns commit/rollback.
    - Public methods return frozen DTOs, never ORM rows.
    - Public access requires the matching access token.
    - At most one acceptance per proposal: ``accept`` locks the row with
      SELECT ... FOR UPDATE before checking the status, so a concurrent
      second acceptance sees ACCEPTED and is refused.
    - ACCEPTED is terminal.

Failure modes:
    - SiteSurveyRequiredError when panel count or sunshine hours are missing.
    - ProposalNotFoundError / ProposalAccessDeniedError on unknown IDs or
      tokens.
    - ProposalExpiredError, ProposalAlreadyAcceptedError,
      InvalidStatusTransitionError on lifecycle violations.
    - InvalidCustomerDetailsError, InvalidScenarioSelectionError,
      InvalidSignatureError on a malformed acceptance.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from solar_engines import EngineAssumptions, ProposalResult, ScenarioOption, generate_proposal
from solar_kernel.domain.acceptance import (
    validate_customer_email,
    validate_customer_name,
    validate_signature_image,
)
from solar_kernel.domain.address import extract_state_code
from solar_kernel.domain.clock import Clock, SystemClock
from solar_kernel.exceptions import (
    InvalidScenarioSelectionError,
    InvalidStatusTransitionError,
    ProposalAccessDeniedError,
    ProposalAlreadyAcceptedError,
    ProposalExpiredError,
    ProposalNotFoundError,
    SiteSurveyRequiredError,
)
from solar_kernel.logging_config import LogContext, get_logger
from solar_kernel.models.proposal import Proposal, ProposalStatus
from solar_kernel.services.base import BaseService

logger = get_logger("services.proposal")

PROPOSAL_VALIDITY = timedelta(days=30)


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything stored here is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class ProposalSummary:
    """Row in a lead's proposal list."""

    id: UUID
    lead_id: str
    system_size_kw: float
    panel_count: int
    net_price: float
    net_savings_25yr: float
    break_even_year: int | None
    recommended_option: ScenarioOption
    status: ProposalStatus
    generated_at: datetime


@dataclass(frozen=True)
class ProposalInfo:
    """Immutable DTO for a stored proposal."""

    id: UUID
    lead_id: str
    status: ProposalStatus
    state_code: str | None
    system_size_watts: float
    system_size_kw: float
    panel_count: int
    panel_wattage: float
    annual_production_kwh: float
    lifetime_production_kwh: float
    gross_system_cost: float
    federal_itc: float
    state_rebate: float
    net_price: float
    effective_cost_per_watt: float
    year1_savings: float
    net_savings_25yr: float
    break_even_year: int | None
    scenarios: dict[str, dict[str, Any]]
    recommended_option: ScenarioOption
    utility_rate: float
    utility_rate_source: str
    utility_escalation: float
    assumptions: dict[str, Any]
    generated_at: datetime
    expires_at: datetime | None
    access_token: str
    signed_at: datetime | None
    selected_scenario: ScenarioOption | None
    customer_name: str | None
    customer_email: str | None

    @property
    def is_accepted(self) -> bool:
        return self.status == ProposalStatus.ACCEPTED


@dataclass(frozen=True)
class ShareLink:
    """Customer-facing link for a proposal."""

    url: str
    expires_at: datetime | None


@dataclass(frozen=True)
class AcceptanceRequest:
    """What the customer submits from the signature page."""

    proposal_id: UUID
    access_token: str
    signature_image: str
    selected_scenario: str
    customer_name: str
    customer_email: str
    ip_address: str | None = None


@dataclass(frozen=True)
class AcceptanceReceipt:
    """Confirmation returned after a successful acceptance."""

    proposal_id: UUID
    lead_id: str
    accepted_at: datetime
    selected_scenario: ScenarioOption


class ProposalService(BaseService[Proposal]):
    """
    Service for the proposal lifecycle.

    Contract:
        Accepts lead/site-survey scalars or proposal IDs and returns frozen
        DTOs.  Every write is flushed within the caller's transaction.

    Non-goals:
        - Does NOT authenticate sales reps; callers pass ``actor_id``.
        - Does NOT render or store the signature pad UI.
        - Does NOT move the lead through the sales pipeline.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        assumptions: EngineAssumptions | None = None,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._assumptions = assumptions

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def _to_dto(self, proposal: Proposal) -> ProposalInfo:
        return ProposalInfo(
            id=proposal.id,
            lead_id=proposal.lead_id,
            status=ProposalStatus(proposal.status),
            state_code=proposal.state_code,
            system_size_watts=proposal.system_size_watts,
            system_size_kw=proposal.system_size_kw,
            panel_count=proposal.panel_count,
            panel_wattage=proposal.panel_wattage,
            annual_production_kwh=proposal.annual_production_kwh,
            lifetime_production_kwh=proposal.lifetime_production_kwh,
            gross_system_cost=proposal.gross_system_cost,
            federal_itc=proposal.federal_itc,
            state_rebate=proposal.state_rebate,
            net_price=proposal.net_price,
            effective_cost_per_watt=proposal.effective_cost_per_watt,
            year1_savings=proposal.year1_savings,
            net_savings_25yr=proposal.net_savings_25yr,
            break_even_year=proposal.break_even_year,
            scenarios={
                ScenarioOption.CASH.value: proposal.cash_scenario,
                ScenarioOption.LOAN_10.value: proposal.loan10_scenario,
                ScenarioOption.LOAN_15.value: proposal.loan15_scenario,
                ScenarioOption.PPA.value: proposal.ppa_scenario,
            },
            recommended_option=ScenarioOption(proposal.recommended_option),
            utility_rate=proposal.utility_rate,
            utility_rate_source=proposal.utility_rate_source,
            utility_escalation=proposal.utility_escalation,
            assumptions=proposal.assumptions,
            generated_at=_as_utc(proposal.generated_at),
            expires_at=_as_utc(proposal.expires_at) if proposal.expires_at else None,
            access_token=proposal.access_token,
            signed_at=_as_utc(proposal.signed_at) if proposal.signed_at else None,
            selected_scenario=(
                ScenarioOption(proposal.selected_scenario)
                if proposal.selected_scenario
                else None
            ),
            customer_name=proposal.customer_name,
            customer_email=proposal.customer_email,
        )

    def _to_summary(self, proposal: Proposal) -> ProposalSummary:
        return ProposalSummary(
            id=proposal.id,
            lead_id=proposal.lead_id,
            system_size_kw=proposal.system_size_kw,
            panel_count=proposal.panel_count,
            net_price=proposal.net_price,
            net_savings_25yr=proposal.net_savings_25yr,
            break_even_year=proposal.break_even_year,
            recommended_option=ScenarioOption(proposal.recommended_option),
            status=ProposalStatus(proposal.status),
            generated_at=_as_utc(proposal.generated_at),
        )

    @staticmethod
    def _to_row(
        result: ProposalResult,
        panel_count: int,
        actor_id: UUID,
        expires_at: datetime,
        access_token: str,
    ) -> Proposal:
        production = result.production
        costs = result.costs
        savings = result.savings
        scenarios = result.scenarios
        assumptions = result.assumptions
        return Proposal(
            lead_id=result.lead_id,
            state_code=assumptions.state_code,
            system_size_watts=production.system_watts,
            system_size_kw=production.system_kw,
            panel_count=panel_count,
            panel_wattage=assumptions.panel_wattage,
            annual_production_kwh=production.year1_kwh,
            lifetime_production_kwh=production.lifetime_kwh,
            gross_system_cost=costs.gross_cost,
            federal_itc=costs.federal_credit,
            state_rebate=costs.state_rebate,
            net_price=costs.net_price,
            effective_cost_per_watt=costs.effective_cost_per_watt,
            year1_savings=savings.year1,
            net_savings_25yr=savings.net_savings_25yr,
            break_even_year=savings.break_even_year,
            cash_scenario=scenarios.cash.as_dict(),
            loan10_scenario=scenarios.loan10.as_dict(),
            loan15_scenario=scenarios.loan15.as_dict(),
            ppa_scenario=scenarios.ppa.as_dict(),
            recommended_option=scenarios.recommended.value,
            utility_rate=assumptions.utility_rate,
            utility_rate_source=assumptions.utility_rate_source.value,
            utility_escalation=assumptions.utility_escalation,
            panel_efficiency=assumptions.panel_efficiency,
            degradation_rate=assumptions.degradation_rate,
            assumptions=assumptions.as_dict(),
            generated_at=result.generated_at,
            status=ProposalStatus.DRAFT.value,
            expires_at=expires_at,
            access_token=access_token,
            created_by_id=actor_id,
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_by_id(self, proposal_id: UUID) -> Proposal:
        proposal = self.session.get(Proposal, proposal_id)
        if proposal is None:
            raise ProposalNotFoundError(str(proposal_id))
        return proposal

    def _get_with_token(
        self, proposal_id: UUID, access_token: str, for_update: bool = False
    ) -> Proposal:
        """Fetch by ID and token; a wrong token looks exactly like a missing row."""
        if not access_token:
            raise ProposalAccessDeniedError(str(proposal_id))
        stmt = select(Proposal).where(
            Proposal.id == proposal_id,
            Proposal.access_token == access_token,
        )
        if for_update:
            stmt = stmt.with_for_update()
        proposal = self.session.execute(stmt).scalar_one_or_none()
        if proposal is None:
            raise ProposalAccessDeniedError(str(proposal_id))
        return proposal

    def _check_not_expired(self, proposal: Proposal) -> None:
        if proposal.status == ProposalStatus.EXPIRED:
            raise ProposalExpiredError(
                str(proposal.id),
                _as_utc(proposal.expires_at) if proposal.expires_at else None,
            )
        if proposal.expires_at and self._clock.now() > _as_utc(proposal.expires_at):
            raise ProposalExpiredError(str(proposal.id), _as_utc(proposal.expires_at))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def generate(
        self,
        lead_id: str,
        panel_count: int | None,
        sunshine_hours_year: float | None,
        actor_id: UUID,
        state_code: str | None = None,
        address: str | None = None,
        custom_utility_rate: float | None = None,
    ) -> ProposalInfo:
        """
        Generate and store a draft proposal for a surveyed lead.

        Args:
            lead_id: Lead the proposal belongs to.
            panel_count: Panels from the site survey.
            sunshine_hours_year: Annual peak sun hours from the site survey.
            actor_id: Sales rep generating the proposal.
            state_code: Explicit state; derived from ``address`` when absent.
            address: Free-text site address.
            custom_utility_rate: $/kWh override.

        Returns:
            ProposalInfo for the new draft.

        Raises:
            SiteSurveyRequiredError: If the survey figures are missing or
                not positive.
        """
        if not panel_count or panel_count <= 0 or not sunshine_hours_year or sunshine_hours_year <= 0:
            raise SiteSurveyRequiredError(lead_id)

        if not state_code:
            state_code = extract_state_code(address)

        with LogContext.bind(lead_id=lead_id, actor_id=str(actor_id)):
            result = generate_proposal(
                lead_id,
                panel_count,
                sunshine_hours_year,
                state_code,
                custom_utility_rate,
                assumptions=self._assumptions,
                clock=self._clock,
            )

            proposal = self._to_row(
                result,
                panel_count=panel_count,
                actor_id=actor_id,
                expires_at=result.generated_at + PROPOSAL_VALIDITY,
                access_token=secrets.token_urlsafe(32),
            )
            self.session.add(proposal)
            self.session.flush()

            logger.info(
                "proposal_generated",
                extra={
                    "proposal_id": str(proposal.id),
                    "system_kw": result.production.system_kw,
                    "net_price": result.costs.net_price,
                    "net_savings_25yr": result.savings.net_savings_25yr,
                    "recommended": result.scenarios.recommended.value,
                },
            )

        return self._to_dto(proposal)

    def list_for_lead(self, lead_id: str) -> list[ProposalSummary]:
        """All proposals for a lead, newest first."""
        stmt = (
            select(Proposal)
            .where(Proposal.lead_id == lead_id)
            .order_by(Proposal.generated_at.desc())
        )
        return [self._to_summary(p) for p in self.session.execute(stmt).scalars()]

    def get_details(self, proposal_id: UUID) -> ProposalInfo:
        """
        Full stored proposal.

        Raises:
            ProposalNotFoundError: If the proposal doesn't exist.
        """
        return self._to_dto(self._get_by_id(proposal_id))

    def share(self, proposal_id: UUID, base_url: str) -> ShareLink:
        """
        Build the customer link; a draft becomes SENT.

        Raises:
            ProposalNotFoundError: If the proposal doesn't exist.
            ProposalAlreadyAcceptedError: If it was already accepted.
        """
        proposal = self._get_by_id(proposal_id)
        if proposal.is_accepted:
            raise ProposalAlreadyAcceptedError(str(proposal_id))

        if proposal.status == ProposalStatus.DRAFT:
            proposal.status = ProposalStatus.SENT.value
            self.session.flush()

        logger.info("proposal_shared", extra={"proposal_id": str(proposal_id)})

        url = f"{base_url.rstrip('/')}/proposals/{proposal.id}/{proposal.access_token}"
        expires_at = _as_utc(proposal.expires_at) if proposal.expires_at else None
        return ShareLink(url=url, expires_at=expires_at)

    def view_public(self, proposal_id: UUID, access_token: str) -> ProposalInfo:
        """
        Token-gated customer view; a draft or sent proposal becomes VIEWED.

        Raises:
            ProposalAccessDeniedError: Unknown proposal or wrong token.
            ProposalExpiredError: Past expiry.
            ProposalAlreadyAcceptedError: Already accepted.
        """
        proposal = self._get_with_token(proposal_id, access_token)
        self._check_not_expired(proposal)
        if proposal.is_accepted:
            raise ProposalAlreadyAcceptedError(str(proposal_id))

        if proposal.status in (ProposalStatus.DRAFT, ProposalStatus.SENT):
            proposal.status = ProposalStatus.VIEWED.value
            self.session.flush()
            logger.info("proposal_viewed", extra={"proposal_id": str(proposal_id)})

        return self._to_dto(proposal)

    def accept(self, request: AcceptanceRequest) -> AcceptanceReceipt:
        """
        Record the customer's signature and chosen payment option.

        The submission is validated before the row is touched; the row is
        then locked so two concurrent acceptances cannot both succeed.

        Raises:
            InvalidCustomerDetailsError: Bad name or email.
            InvalidScenarioSelectionError: Unknown payment option.
            InvalidSignatureError: Missing or malformed signature.
            ProposalAccessDeniedError: Unknown proposal or wrong token.
            ProposalAlreadyAcceptedError: Already accepted.
            ProposalExpiredError: Past expiry.
        """
        customer_name = validate_customer_name(request.customer_name)
        customer_email = validate_customer_email(request.customer_email)
        try:
            selected = ScenarioOption(request.selected_scenario)
        except ValueError:
            raise InvalidScenarioSelectionError(str(request.selected_scenario))
        signature = validate_signature_image(request.signature_image)

        proposal = self._get_with_token(
            request.proposal_id, request.access_token, for_update=True
        )
        if proposal.is_accepted:
            logger.warning(
                "proposal_acceptance_rejected",
                extra={"proposal_id": str(proposal.id), "reason": "already_accepted"},
            )
            raise ProposalAlreadyAcceptedError(str(proposal.id))
        self._check_not_expired(proposal)

        signed_at = self._clock.now()
        proposal.status = ProposalStatus.ACCEPTED.value
        proposal.signed_at = signed_at
        proposal.signature_image = signature
        proposal.selected_scenario = selected.value
        proposal.customer_name = customer_name
        proposal.customer_email = customer_email
        proposal.ip_address = request.ip_address or "unknown"
        self.session.flush()

        logger.info(
            "proposal_accepted",
            extra={
                "proposal_id": str(proposal.id),
                "lead_id": proposal.lead_id,
                "selected_scenario": selected.value,
            },
        )

        return AcceptanceReceipt(
            proposal_id=proposal.id,
            lead_id=proposal.lead_id,
            accepted_at=signed_at,
            selected_scenario=selected,
        )

    def update_status(self, proposal_id: UUID, status: ProposalStatus | str) -> ProposalInfo:
        """
        Set the status directly (sales-rep action).

        Raises:
            ProposalNotFoundError: If the proposal doesn't exist.
            InvalidStatusTransitionError: If the proposal is already accepted
                and a different status is requested.
        """
        new_status = ProposalStatus(status)
        proposal = self._get_by_id(proposal_id)
        current = ProposalStatus(proposal.status)

        if current == ProposalStatus.ACCEPTED and new_status != ProposalStatus.ACCEPTED:
            raise InvalidStatusTransitionError(
                str(proposal_id), current.value, new_status.value
            )

        proposal.status = new_status.value
        self.session.flush()

        logger.info(
            "proposal_status_updated",
            extra={
                "proposal_id": str(proposal_id),
                "from_status": current.value,
                "to_status": new_status.value,
            },
        )
        return self._to_dto(proposal)

    def expire_overdue(self) -> int:
        """Mark every unaccepted proposal past its expiry as EXPIRED."""
        now = self._clock.now()
        stmt = select(Proposal).where(
            Proposal.status.in_(
                [
                    ProposalStatus.DRAFT.value,
                    ProposalStatus.SENT.value,
                    ProposalStatus.VIEWED.value,
                ]
            ),
            Proposal.expires_at.is_not(None),
        )
        expired = 0
        for proposal in self.session.execute(stmt).scalars():
            if now > _as_utc(proposal.expires_at):
                proposal.status = ProposalStatus.EXPIRED.value
                expired += 1
        if expired:
            self.session.flush()
            logger.info("proposals_expired", extra={"count": expired})
        return expired
