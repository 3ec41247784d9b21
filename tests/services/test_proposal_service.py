"""
Tests for Proposal model and ProposalService.

Covers:
- Generation from a site survey (state from address, expiry, token)
- Listing and detail lookups
- Sharing and token-gated public viewing
- Acceptance: validation, single acceptance, expiry
- Manual status changes and bulk expiry
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from solar_engines import DEFAULT_ASSUMPTIONS, ScenarioOption
from solar_kernel.exceptions import (
    InvalidCustomerDetailsError,
    InvalidScenarioSelectionError,
    InvalidSignatureError,
    InvalidStatusTransitionError,
    ProposalAccessDeniedError,
    ProposalAlreadyAcceptedError,
    ProposalExpiredError,
    ProposalNotFoundError,
    SiteSurveyRequiredError,
)
from solar_kernel.models.proposal import Proposal, ProposalStatus
from solar_kernel.services.proposal_service import (
    PROPOSAL_VALIDITY,
    AcceptanceRequest,
    ProposalService,
)

SIGNATURE = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJ"
ADDRESS = "123 Main St, Sacramento, CA 95814"


@pytest.fixture
def service(session, deterministic_clock):
    return ProposalService(session, clock=deterministic_clock)


@pytest.fixture
def proposal(service, test_actor_id):
    return service.generate(
        lead_id="lead-100",
        panel_count=20,
        sunshine_hours_year=1600,
        actor_id=test_actor_id,
        address=ADDRESS,
    )


def _request(proposal, **overrides):
    data = dict(
        proposal_id=proposal.id,
        access_token=proposal.access_token,
        signature_image=SIGNATURE,
        selected_scenario="LOAN_10",
        customer_name="Jordan Lee",
        customer_email="Jordan@Example.com",
        ip_address="203.0.113.9",
    )
    data.update(overrides)
    return AcceptanceRequest(**data)


class TestGenerate:
    """Tests for ProposalService.generate."""

    def test_creates_draft(self, proposal, deterministic_clock):
        assert proposal.status == ProposalStatus.DRAFT
        assert proposal.lead_id == "lead-100"
        assert proposal.generated_at == deterministic_clock.now()
        assert proposal.expires_at == deterministic_clock.now() + PROPOSAL_VALIDITY
        assert len(proposal.access_token) >= 32

    def test_state_from_address(self, proposal):
        assert proposal.state_code == "CA"
        assert proposal.utility_rate == 0.3158
        assert proposal.utility_rate_source == "state"

    def test_explicit_state_beats_address(self, service, test_actor_id):
        info = service.generate(
            "lead-101", 20, 1600, test_actor_id, state_code="TX", address=ADDRESS
        )

        assert info.state_code == "TX"
        assert info.utility_rate == 0.1420

    def test_figures_persisted(self, proposal):
        assert proposal.system_size_kw == 8.0
        assert proposal.panel_count == 20
        assert proposal.gross_system_cost == 20000.0
        assert proposal.net_price == pytest.approx(14000.0)
        assert proposal.annual_production_kwh == pytest.approx(12288.0)
        assert proposal.recommended_option == ScenarioOption.CASH
        assert set(proposal.scenarios) == {"CASH", "LOAN_10", "LOAN_15", "PPA"}
        assert proposal.scenarios["LOAN_10"]["term_years"] == 10
        assert proposal.assumptions["utility_rate_source"] == "state"

    def test_row_written(self, session, proposal, test_actor_id):
        row = session.get(Proposal, proposal.id)

        assert row is not None
        assert row.created_by_id == test_actor_id
        assert row.access_token == proposal.access_token

    def test_tokens_unique(self, service, test_actor_id):
        first = service.generate("lead-102", 20, 1600, test_actor_id)
        second = service.generate("lead-102", 20, 1600, test_actor_id)

        assert first.access_token != second.access_token

    @pytest.mark.parametrize(
        "panels, hours",
        [(None, 1600), (0, 1600), (20, None), (20, 0), (-5, 1600)],
    )
    def test_requires_site_survey(self, service, test_actor_id, panels, hours):
        with pytest.raises(SiteSurveyRequiredError) as exc_info:
            service.generate("lead-103", panels, hours, test_actor_id)

        assert exc_info.value.lead_id == "lead-103"

    def test_uses_service_assumptions(self, session, deterministic_clock, test_actor_id):
        assumptions = DEFAULT_ASSUMPTIONS.with_overrides(cost_per_watt=3.0)
        service = ProposalService(session, clock=deterministic_clock, assumptions=assumptions)

        info = service.generate("lead-104", 20, 1600, test_actor_id)

        assert info.gross_system_cost == 24000.0

    def test_logs_generation(self, service, test_actor_id, captured_logs):
        service.generate("lead-105", 20, 1600, test_actor_id)

        records = [r for r in captured_logs() if r["message"] == "proposal_generated"]
        assert len(records) == 1
        assert records[0]["lead_id"] == "lead-105"
        assert records[0]["recommended"] == "CASH"


class TestQueries:
    def test_list_for_lead_newest_first(self, service, test_actor_id, deterministic_clock):
        older = service.generate("lead-200", 20, 1600, test_actor_id)
        deterministic_clock.advance(days=1)
        newer = service.generate("lead-200", 24, 1600, test_actor_id)
        service.generate("lead-other", 20, 1600, test_actor_id)

        summaries = service.list_for_lead("lead-200")

        assert [s.id for s in summaries] == [newer.id, older.id]
        assert summaries[0].panel_count == 24

    def test_list_empty(self, service):
        assert service.list_for_lead("nobody") == []

    def test_get_details(self, service, proposal):
        info = service.get_details(proposal.id)

        assert info == proposal

    def test_get_details_missing(self, service):
        with pytest.raises(ProposalNotFoundError):
            service.get_details(uuid4())


class TestShareAndView:
    def test_share_marks_sent(self, service, proposal):
        link = service.share(proposal.id, "https://solar.example.com/")

        assert link.url == (
            f"https://solar.example.com/proposals/{proposal.id}/{proposal.access_token}"
        )
        assert link.expires_at == proposal.expires_at
        assert service.get_details(proposal.id).status == ProposalStatus.SENT

    def test_view_marks_viewed(self, service, proposal):
        service.share(proposal.id, "https://solar.example.com")

        info = service.view_public(proposal.id, proposal.access_token)

        assert info.status == ProposalStatus.VIEWED

    def test_view_marked_expired(self, service, proposal):
        service.update_status(proposal.id, ProposalStatus.EXPIRED)

        with pytest.raises(ProposalExpiredError):
            service.view_public(proposal.id, proposal.access_token)

        assert service.get_details(proposal.id).status == ProposalStatus.EXPIRED

    def test_view_wrong_token(self, service, proposal):
        with pytest.raises(ProposalAccessDeniedError):
            service.view_public(proposal.id, "not-the-token")

    def test_view_unknown_proposal(self, service, proposal):
        with pytest.raises(ProposalAccessDeniedError):
            service.view_public(uuid4(), proposal.access_token)

    def test_view_empty_token(self, service, proposal):
        with pytest.raises(ProposalAccessDeniedError):
            service.view_public(proposal.id, "")

    def test_view_expired(self, service, proposal, deterministic_clock):
        deterministic_clock.advance(days=31)

        with pytest.raises(ProposalExpiredError):
            service.view_public(proposal.id, proposal.access_token)

    def test_view_on_last_valid_instant(self, service, proposal, deterministic_clock):
        deterministic_clock.advance(days=30)

        info = service.view_public(proposal.id, proposal.access_token)

        assert info.status == ProposalStatus.VIEWED


class TestAccept:
    """Tests for ProposalService.accept."""

    def test_accepts(self, service, proposal, deterministic_clock):
        receipt = service.accept(_request(proposal))

        assert receipt.proposal_id == proposal.id
        assert receipt.lead_id == "lead-100"
        assert receipt.selected_scenario == ScenarioOption.LOAN_10
        assert receipt.accepted_at == deterministic_clock.now()

        info = service.get_details(proposal.id)
        assert info.status == ProposalStatus.ACCEPTED
        assert info.is_accepted
        assert info.selected_scenario == ScenarioOption.LOAN_10
        assert info.customer_name == "Jordan Lee"
        assert info.customer_email == "jordan@example.com"

    def test_acceptance_row_fields(self, session, service, proposal):
        service.accept(_request(proposal, ip_address=None))
        row = session.get(Proposal, proposal.id)

        assert row.signature_image == SIGNATURE
        assert row.ip_address == "unknown"
        assert row.signed_at is not None

    def test_second_acceptance_refused(self, service, proposal):
        service.accept(_request(proposal))

        with pytest.raises(ProposalAlreadyAcceptedError):
            service.accept(_request(proposal, selected_scenario="CASH"))

        assert service.get_details(proposal.id).selected_scenario == ScenarioOption.LOAN_10

    def test_expired(self, service, proposal, deterministic_clock):
        deterministic_clock.advance(days=30, seconds=1)

        with pytest.raises(ProposalExpiredError) as exc_info:
            service.accept(_request(proposal))

        assert exc_info.value.code == "PROPOSAL_EXPIRED"
        assert service.get_details(proposal.id).status == ProposalStatus.DRAFT

    def test_marked_expired_before_deadline(self, service, proposal):
        service.update_status(proposal.id, ProposalStatus.EXPIRED)

        with pytest.raises(ProposalExpiredError) as exc_info:
            service.accept(_request(proposal, selected_scenario="CASH"))

        assert exc_info.value.expires_at == proposal.expires_at.isoformat()
        info = service.get_details(proposal.id)
        assert info.status == ProposalStatus.EXPIRED
        assert not info.is_accepted
        assert info.selected_scenario is None

    def test_wrong_token(self, service, proposal):
        with pytest.raises(ProposalAccessDeniedError):
            service.accept(_request(proposal, access_token="guess"))

    def test_unknown_scenario(self, service, proposal):
        with pytest.raises(InvalidScenarioSelectionError) as exc_info:
            service.accept(_request(proposal, selected_scenario="LOAN_20"))

        assert exc_info.value.selection == "LOAN_20"

    def test_bad_signature(self, service, proposal):
        with pytest.raises(InvalidSignatureError):
            service.accept(_request(proposal, signature_image="data:image/gif;base64,R0lG"))

    def test_bad_email(self, service, proposal):
        with pytest.raises(InvalidCustomerDetailsError):
            service.accept(_request(proposal, customer_email="jordan@"))

    def test_details_checked_before_token(self, service, proposal):
        """A malformed submission is refused before the row is looked up."""
        with pytest.raises(InvalidCustomerDetailsError):
            service.accept(_request(proposal, access_token="guess", customer_name="J"))

    def test_view_after_acceptance(self, service, proposal):
        service.accept(_request(proposal))

        with pytest.raises(ProposalAlreadyAcceptedError):
            service.view_public(proposal.id, proposal.access_token)

    def test_share_after_acceptance(self, service, proposal):
        service.accept(_request(proposal))

        with pytest.raises(ProposalAlreadyAcceptedError):
            service.share(proposal.id, "https://solar.example.com")

    def test_logs_acceptance(self, service, proposal, captured_logs):
        service.accept(_request(proposal))

        records = [r for r in captured_logs() if r["message"] == "proposal_accepted"]
        assert len(records) == 1
        assert records[0]["selected_scenario"] == "LOAN_10"


class TestStatusUpdates:
    def test_manual_update(self, service, proposal):
        info = service.update_status(proposal.id, "sent")

        assert info.status == ProposalStatus.SENT

    def test_accepted_is_terminal(self, service, proposal):
        service.accept(_request(proposal))

        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            service.update_status(proposal.id, ProposalStatus.EXPIRED)

        assert exc_info.value.from_status == "accepted"
        assert exc_info.value.to_status == "expired"

    def test_unknown_status(self, service, proposal):
        with pytest.raises(ValueError):
            service.update_status(proposal.id, "archived")

    def test_expire_overdue(self, service, test_actor_id, deterministic_clock):
        stale = service.generate("lead-300", 20, 1600, test_actor_id)
        accepted = service.generate("lead-300", 20, 1600, test_actor_id)
        service.accept(_request(accepted))
        deterministic_clock.advance(days=20)
        fresh = service.generate("lead-300", 20, 1600, test_actor_id)
        deterministic_clock.advance(days=11)

        assert service.expire_overdue() == 1

        assert service.get_details(stale.id).status == ProposalStatus.EXPIRED
        assert service.get_details(accepted.id).status == ProposalStatus.ACCEPTED
        assert service.get_details(fresh.id).status == ProposalStatus.DRAFT

    def test_expire_overdue_nothing_due(self, service, proposal):
        assert service.expire_overdue() == 0

    def test_validity_window(self):
        assert PROPOSAL_VALIDITY == timedelta(days=30)
