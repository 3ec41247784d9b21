"""Services for the solar kernel (write side)."""

from solar_kernel.services.proposal_service import (
    PROPOSAL_VALIDITY,
    AcceptanceReceipt,
    AcceptanceRequest,
    ProposalInfo,
    ProposalService,
    ProposalSummary,
    ShareLink,
)

__all__ = [
    "AcceptanceReceipt",
    "AcceptanceRequest",
    "PROPOSAL_VALIDITY",
    "ProposalInfo",
    "ProposalService",
    "ProposalSummary",
    "ShareLink",
]
