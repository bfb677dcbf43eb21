# =============================================================================
# core/models/ipr.py - IP Filing Schemas
# =============================================================================
# An IP filing (patent, trademark, copyright or trade secret) is submitted
# by a startup or researcher and reviewed by an IP professional.
#
# Lifecycle:
#   Pending --review--> Accepted | Rejected
#
# A reviewed filing always carries a transaction_hash. While the ledger
# call is in flight it holds the WAITING_HASH sentinel; if the ledger call
# fails the filing goes back to Pending with the hash cleared.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from .forms import FileReference

# transaction_hash value while the ledger call is in flight
WAITING_HASH = "WAITING"


class FilingType(str, Enum):
    PATENT = "Patent"
    TRADEMARK = "Trademark"
    COPYRIGHT = "Copyright"
    TRADE_SECRET = "Trade Secret"


# URL slug -> filing type (GET /ipr/types/{slug})
FILING_TYPE_SLUGS: dict[str, FilingType] = {
    "patents": FilingType.PATENT,
    "trademarks": FilingType.TRADEMARK,
    "copyrights": FilingType.COPYRIGHT,
    "trade_secrets": FilingType.TRADE_SECRET,
}


class FilingStatus(str, Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class OwnerType(str, Enum):
    STARTUP = "Startup"
    RESEARCHER = "Researcher"


class IprCreate(BaseModel):
    """
    New filing submitted by a startup or researcher.

    Example:
        {
            "title": "Self-cleaning solar roof tile",
            "description": "A roof tile with a hydrophobic coating...",
            "type": "Patent",
            "related_documents": [{"public_id": "ipr/abc", "secure_url": "https://..."}]
        }
    """
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1, max_length=20000)
    type: FilingType
    related_documents: list[FileReference] = Field(default_factory=list)


class IprReviewRequest(BaseModel):
    """Reviewer decision. Only Accepted/Rejected are decisions."""
    status: FilingStatus = Field(..., description="Accepted or Rejected")
    message: str = Field(default="", max_length=2000)

    @field_validator("status")
    @classmethod
    def status_must_be_decision(cls, v: FilingStatus) -> FilingStatus:
        if v == FilingStatus.PENDING:
            raise ValueError("status must be Accepted or Rejected")
        return v


class TransactionHashRequest(BaseModel):
    """Hash of a decision the reviewer signed with their own wallet."""
    transaction_hash: str = Field(..., pattern=r"^0x[0-9a-fA-F]{64}$")


class IprFiling(BaseModel):
    """Stored filing, as returned to clients."""
    id: str
    title: str
    description: str
    type: FilingType
    owner_type: OwnerType
    owner_id: str
    filing_date: datetime | None = None
    status: FilingStatus = FilingStatus.PENDING
    related_documents: list[FileReference] = Field(default_factory=list)
    transaction_hash: str | None = None
    reviewer_id: str | None = None
    review_message: str | None = None
