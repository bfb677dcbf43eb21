# =============================================================================
# core/models/policies.py - Policy Schemas
# =============================================================================
# Policy makers publish policies; startups, researchers and funding agencies
# leave one review each. Review counts per reviewer type are derived from
# the stored reviews, never kept as counters.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from .forms import FileReference
from .users import Role


class ReviewerType(str, Enum):
    STARTUP = "Startup"
    RESEARCHER = "Researcher"
    FUNDING_AGENCY = "FundingAgency"


# Roles allowed to review a policy -> how their review is labelled
REVIEWER_TYPES: dict[Role, ReviewerType] = {
    Role.STARTUP: ReviewerType.STARTUP,
    Role.RESEARCHER: ReviewerType.RESEARCHER,
    Role.FUNDING_AGENCY: ReviewerType.FUNDING_AGENCY,
}


def _non_blank(values: list[str]) -> list[str]:
    cleaned = [v.strip() for v in values if v and v.strip()]
    if not cleaned:
        raise ValueError("at least one non-empty entry is required")
    return cleaned


class PolicyCreate(BaseModel):
    """
    New policy.

    Example:
        {
            "title": "Startup Gujarat 2025",
            "description": "Support scheme for early-stage startups",
            "vision": "A startup in every district",
            "objectives": ["Seed grants", "Incubator network"],
            "sectors": ["Clean Tech"],
            "industries": ["Renewable Energy"]
        }
    """
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1, max_length=20000)
    vision: str = Field(..., min_length=1, max_length=5000)
    objectives: list[str] = Field(..., min_length=1)
    sectors: list[str] = Field(..., min_length=1)
    industries: list[str] = Field(..., min_length=1)
    documents: list[FileReference] = Field(default_factory=list)

    @field_validator("objectives", "sectors", "industries")
    @classmethod
    def entries_not_blank(cls, v: list[str]) -> list[str]:
        return _non_blank(v)


class PolicyUpdate(BaseModel):
    """Policy maker edit; only the fields sent are changed."""
    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = Field(default=None, min_length=1, max_length=20000)
    vision: str | None = Field(default=None, min_length=1, max_length=5000)
    objectives: list[str] | None = None
    sectors: list[str] | None = None
    industries: list[str] | None = None
    documents: list[FileReference] | None = None

    @field_validator("objectives", "sectors", "industries")
    @classmethod
    def entries_not_blank(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else _non_blank(v)


class PolicyReviewCreate(BaseModel):
    message: str = Field(..., max_length=5000)

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("review message is required")
        return v


class PolicyMetrics(BaseModel):
    """Review counts, camelCase as the dashboards read them."""
    totalReviews: int = 0
    startupReviews: int = 0
    researcherReviews: int = 0
    fundingAgencyReviews: int = 0


class PolicyReview(BaseModel):
    id: str
    policy_id: str
    reviewer_id: str
    reviewer_type: ReviewerType
    message: str
    reviewer: dict | None = None
    created_at: datetime | None = None


class Policy(BaseModel):
    """Stored policy, as returned to clients."""
    id: str
    title: str
    description: str
    vision: str
    objectives: list[str] = Field(default_factory=list)
    sectors: list[str] = Field(default_factory=list)
    industries: list[str] = Field(default_factory=list)
    documents: list[FileReference] = Field(default_factory=list)
    created_by: str | None = None
    metrics: PolicyMetrics = Field(default_factory=PolicyMetrics)
    created_at: datetime | None = None
    updated_at: datetime | None = None
