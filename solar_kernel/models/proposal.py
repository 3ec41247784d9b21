"""
Module: solar_kernel.models.proposal
Responsibility: ORM persistence for generated solar proposals.  A row holds
    the engine's ProposalResult flattened into scalar columns (the four
    financing scenarios as JSON blobs) plus the lifecycle fields the engine
    does not produce: status, expiry, access token and acceptance details.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - access_token is unique (uq_proposal_access_token); it is the only
      credential a customer presents.
    - Computed figures are written once at generation and never updated;
      only lifecycle and acceptance columns change afterwards.
    - ACCEPTED is terminal.  The at-most-one acceptance guarantee is
      enforced by ProposalService under a row lock.

Failure modes:
    - IntegrityError on a duplicate access token.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from solar_kernel.db.base import TrackedBase


class ProposalStatus(str, Enum):
    """Lifecycle status of a proposal.

    Contract: DRAFT -> SENT -> VIEWED -> ACCEPTED, with EXPIRED reachable
    from any non-accepted state.  ACCEPTED never changes.
    """

    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    ACCEPTED = "accepted"
    EXPIRED = "expired"


class Proposal(TrackedBase):
    """
    A persisted financial proposal for one lead.

    Non-goals:
        - Does NOT recompute anything; the figures are the engine output
          verbatim.
        - Does NOT store the per-year series; they can be regenerated from
          the inputs and assumptions kept here.
    """

    __tablename__ = "proposals"

    __table_args__ = (
        UniqueConstraint("access_token", name="uq_proposal_access_token"),
        Index("idx_proposal_lead", "lead_id"),
        Index("idx_proposal_status", "status"),
    )

    lead_id: Mapped[str] = mapped_column(String(64), nullable=False)
    state_code: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # System specification
    system_size_watts: Mapped[float] = mapped_column(nullable=False)
    system_size_kw: Mapped[float] = mapped_column(nullable=False)
    panel_count: Mapped[int] = mapped_column(Integer, nullable=False)
    panel_wattage: Mapped[float] = mapped_column(nullable=False)

    # Production
    annual_production_kwh: Mapped[float] = mapped_column(nullable=False)
    lifetime_production_kwh: Mapped[float] = mapped_column(nullable=False)

    # Cost breakdown
    gross_system_cost: Mapped[float] = mapped_column(nullable=False)
    federal_itc: Mapped[float] = mapped_column(nullable=False)
    state_rebate: Mapped[float] = mapped_column(nullable=False, default=0.0)
    net_price: Mapped[float] = mapped_column(nullable=False)
    effective_cost_per_watt: Mapped[float] = mapped_column(nullable=False)

    # Savings
    year1_savings: Mapped[float] = mapped_column(nullable=False)
    # End-of-horizon net savings; the horizon is 25 years by default.
    net_savings_25yr: Mapped[float] = mapped_column(nullable=False)
    break_even_year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Financing scenarios
    cash_scenario: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    loan10_scenario: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    loan15_scenario: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    ppa_scenario: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    recommended_option: Mapped[str] = mapped_column(String(10), nullable=False)

    # Assumptions
    utility_rate: Mapped[float] = mapped_column(nullable=False)
    utility_rate_source: Mapped[str] = mapped_column(String(10), nullable=False)
    utility_escalation: Mapped[float] = mapped_column(nullable=False)
    panel_efficiency: Mapped[float] = mapped_column(nullable=False)
    degradation_rate: Mapped[float] = mapped_column(nullable=False)
    assumptions: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    # Lifecycle
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[ProposalStatus] = mapped_column(
        String(10), nullable=False, default=ProposalStatus.DRAFT.value
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    access_token: Mapped[str] = mapped_column(String(64), nullable=False)

    # Acceptance
    signed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    signature_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    selected_scenario: Mapped[str | None] = mapped_column(String(10), nullable=True)
    customer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    customer_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)

    @property
    def is_accepted(self) -> bool:
        return self.status == ProposalStatus.ACCEPTED

    def __repr__(self) -> str:
        return f"<Proposal {self.id} lead={self.lead_id} status={self.status}>"
