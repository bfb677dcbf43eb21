# =============================================================================
# core/models/research.py - Research Paper Schemas
# =============================================================================
# Researchers keep their papers (finished or still in progress) here and
# publish them to the public catalogue, either free or at a price.
#
# Lifecycle:
#   draft (is_published = false) --publish--> published
#
# Publishing is one-way; a published paper can still be edited by its
# owner but never goes back to draft.
# =============================================================================

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from .forms import FileReference


class ResearchStage(str, Enum):
    """Where the research is; only Completed papers count as finished work."""
    PROBLEM = "Identifying a Research Problem or Question"
    LITERATURE_REVIEW = "Conducting a Literature Review"
    HYPOTHESIS = "Formulating a Hypothesis or Research Objective"
    METHODOLOGY = "Designing the Research Methodology"
    DATA_COLLECTION = "Data Collection"
    DATA_ANALYSIS = "Data Analysis"
    INTERPRETATION = "Interpreting Results"
    CONCLUSIONS = "Drawing Conclusions"
    REPORTING = "Reporting and Presenting Findings"
    PUBLISHING = "Publishing or Disseminating Results"
    REFLECTION = "Reflection and Future Research"
    COMPLETED = "Completed"


class PaperPricing(BaseModel):
    """Free, or paid with a positive price."""
    is_free: bool = True
    price: float | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def price_when_paid(self):
        if not self.is_free and self.price is None:
            raise ValueError("price is required for paid papers")
        if self.is_free:
            self.price = None
        return self


class PaperCreate(PaperPricing):
    """
    New paper, stored as a draft.

    Example:
        {
            "title": "Stable perovskite cells",
            "description": "Encapsulation that survives 1000 h damp heat",
            "publication_date": "2024-02-10",
            "stage": "Completed",
            "doi": "10.1000/xyz123",
            "images": [{"public_id": "papers/abc", "secure_url": "https://..."}]
        }
    """
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1, max_length=20000)
    publication_date: date
    stage: ResearchStage
    doi: str | None = Field(default=None, max_length=200)
    images: list[FileReference] = Field(default_factory=list)


class PaperUpdate(BaseModel):
    """Owner edit; only the fields sent are changed. Pricing is set when publishing."""
    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = Field(default=None, min_length=1, max_length=20000)
    publication_date: date | None = None
    stage: ResearchStage | None = None
    doi: str | None = Field(default=None, max_length=200)
    images: list[FileReference] | None = None


class PublishRequest(PaperPricing):
    """Pricing the paper is published with."""


class ResearchPaper(BaseModel):
    """Stored paper, as returned to clients."""
    id: str
    researcher_id: str
    title: str
    description: str
    publication_date: date | None = None
    stage: ResearchStage
    doi: str | None = None
    images: list[FileReference] = Field(default_factory=list)
    is_published: bool = False
    is_free: bool = True
    price: float | None = None
    downloads: int = 0
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
