"""ORM models for the solar kernel."""

from solar_kernel.models.proposal import Proposal, ProposalStatus

__all__ = [
    "Proposal",
    "ProposalStatus",
]
