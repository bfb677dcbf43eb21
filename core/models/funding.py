# =============================================================================
# core/models/funding.py - Funding Request Schemas
# =============================================================================
# A startup asks a funding agency for money; the agency accepts or rejects,
# and later marks accepted requests as transferred.
#
# Lifecycle:
#   pending --accept--> accepted --transferred--> transferred
#   pending --reject--> rejected
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field

from .forms import FundingType


class FundingStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    TRANSFERRED = "transferred"


class FundingAction(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    TRANSFERRED = "transferred"


# action -> (required current status, new status)
FUNDING_TRANSITIONS: dict[FundingAction, tuple[FundingStatus, FundingStatus]] = {
    FundingAction.ACCEPT: (FundingStatus.PENDING, FundingStatus.ACCEPTED),
    FundingAction.REJECT: (FundingStatus.PENDING, FundingStatus.REJECTED),
    FundingAction.TRANSFERRED: (FundingStatus.ACCEPTED, FundingStatus.TRANSFERRED),
}


class FundingRequestCreate(BaseModel):
    """
    Startup's request to an agency. All fields are required.

    Example:
        {"amount": 250000, "funding_type": "Grants", "message": "Seed round for pilot"}
    """
    amount: float = Field(..., gt=0)
    funding_type: FundingType
    message: str = Field(..., min_length=1, max_length=5000)


class FundraisingUpdate(BaseModel):
    """Toggle whether a startup shows up as actively fundraising."""
    is_actively_fundraising: bool
