# =============================================================================
# core/models/forms.py - Onboarding Form Schemas
# =============================================================================
# A user asks for a role by submitting that role's onboarding form. Admins
# approve (creating the role profile) or reject (with a reason).
#
# Payloads use the camelCase keys the web client sends; models accept either
# camelCase or snake_case and are stored camelCase (by_alias=True).
#
# Documents are never uploaded through this API. The client uploads to the
# media host and submits {public_id, secure_url} references.
# =============================================================================

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .users import Role

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class FormType(str, Enum):
    """Forms a user can submit. Values match the role they grant."""
    STARTUP = "startup"
    RESEARCHER = "researcher"
    IPR_PROFESSIONAL = "iprProfessional"
    FUNDING_AGENCY = "fundingAgency"
    MENTOR = "mentor"

    @property
    def role(self) -> Role:
        return Role(self.value)


class FormStatus(str, Enum):
    """
    Review state of a submission.

    Flow: pending -> approved | rejected (terminal)
    """
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class FormAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class CamelModel(BaseModel):
    """Base for form payloads: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileReference(BaseModel):
    """A document already uploaded to the media host."""
    public_id: str = Field(..., min_length=1)
    secure_url: str = Field(..., pattern=r"^https?://")


# =============================================================================
# Startup Form
# =============================================================================
# Every section is optional (the client saves partial progress), but an
# identity proof document is required to submit.

class Address(CamelModel):
    physical_address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None


class IdentityProof(CamelModel):
    type: str | None = None
    number: str | None = None


class StartupOwner(CamelModel):
    full_name: str | None = None
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    phone: str | None = None
    business_address: Address | None = None
    date_of_birth: str | None = None
    gender: str | None = None
    identity_proof: IdentityProof | None = None


class Person(CamelModel):
    name: str
    role: str | None = None
    contact_details: str | None = None


class EquitySplit(CamelModel):
    owner_name: str
    equity_percentage: float = Field(..., ge=0, le=100)


class StartupDetails(CamelModel):
    startup_name: str | None = Field(default=None, min_length=1)
    industry: str | None = None
    custom_industry: str | None = None
    stage: str | None = None
    registration_number: str | None = None
    incorporation_date: str | None = None
    business_model: str | None = None
    revenue_model: str | None = None
    founders: list[Person] = Field(default_factory=list)
    equity_splits: list[EquitySplit] = Field(default_factory=list)
    directors: list[Person] = Field(default_factory=list)
    ownership_percentage: float | None = Field(default=None, ge=0, le=100)
    gst_number: str | None = None
    pan_number: str | None = None
    cin_number: str | None = None
    msme_registration: str | None = None


class StartupForm(CamelModel):
    """Startup onboarding form."""
    owner: StartupOwner | None = None
    startup_details: StartupDetails | None = None
    financial_details: dict[str, Any] | None = None
    business_activities: dict[str, Any] | None = None
    legal_and_compliance: dict[str, Any] | None = None
    support_and_networking: dict[str, Any] | None = None
    additional_info: dict[str, Any] | None = None
    identity_proof: FileReference = Field(..., description="Owner's identity document")
    business_plan: FileReference | None = None


# =============================================================================
# Researcher Form
# =============================================================================

class ResearcherIdentityProof(CamelModel):
    type: str = Field(..., pattern=r"^(Aadhar|PAN|Passport)$")
    number: str = Field(..., min_length=1)
    document: FileReference | None = None


class ResearcherPersonalInfo(CamelModel):
    full_name: str = Field(..., min_length=2)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone: str = Field(..., min_length=10)
    institution: str = Field(..., min_length=2)
    department: str = Field(..., min_length=2)
    designation: str = Field(..., min_length=2)
    orcid: str = Field(..., min_length=2)
    identity_proof: ResearcherIdentityProof


class Publication(CamelModel):
    title: str = Field(..., min_length=2)
    journal: str = Field(..., min_length=2)
    year: int = Field(..., ge=1900)
    link: str | None = Field(default=None, pattern=r"^https?://")


class ResearcherAcademicInfo(CamelModel):
    highest_qualification: str = Field(..., min_length=2)
    specialization: str = Field(..., min_length=2)
    years_of_experience: float = Field(..., ge=0)
    research_interests: list[str] = Field(..., min_length=1)
    publications: list[Publication] = Field(default_factory=list)


class ResearchProposal(CamelModel):
    title: str = Field(..., min_length=5)
    abstract: str = Field(..., min_length=100)
    objectives: str = Field(..., min_length=50)
    methodology: str = Field(..., min_length=50)
    expected_outcome: str = Field(..., min_length=50)
    timeline: str = Field(..., min_length=20)
    funding_required: bool
    funding_amount: float | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def funding_amount_when_required(self):
        if self.funding_required and self.funding_amount is None:
            raise ValueError("fundingAmount is required when fundingRequired is true")
        return self


class ResearcherDocuments(CamelModel):
    cv: FileReference | None = None
    research_paper: FileReference | None = None
    certificates: list[FileReference] = Field(default_factory=list)
    other_documents: list[FileReference] = Field(default_factory=list)


class ResearcherForm(CamelModel):
    """Researcher onboarding form."""
    personal_info: ResearcherPersonalInfo
    academic_info: ResearcherAcademicInfo
    research_proposal: ResearchProposal
    documents: ResearcherDocuments = Field(default_factory=ResearcherDocuments)


# =============================================================================
# IPR Professional Form
# =============================================================================

class IprProfessionalForm(CamelModel):
    """IP professional onboarding form. The wallet signs ledger decisions."""
    name: str = Field(..., min_length=2)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    wallet_address: str = Field(
        ...,
        pattern=r"^0x[0-9a-fA-F]{40}$",
        description="Reviewer's wallet address (0x + 40 hex chars)"
    )
    certifications: list[FileReference] = Field(default_factory=list)


# =============================================================================
# Funding Agency Form
# =============================================================================

class AgencyType(str, Enum):
    VENTURE_CAPITAL = "Venture_Capital"
    ANGEL_NETWORK = "Angel_Network"
    CROWDFUNDING_PLATFORM = "Crowdfunding_Platform"
    GOVERNMENT_BODY = "Government_Body"
    FINANCIAL_INSTITUTION = "Financial_Institution"
    CORPORATE_INVESTOR = "Corporate_Investor"
    NGO_FOUNDATION = "NGO_Foundation"


class FundingType(str, Enum):
    EQUITY_FUNDING = "Equity_Funding"
    DEBT_FUNDING = "Debt_Funding"
    GRANTS = "Grants"
    CONVERTIBLE_NOTES = "Convertible_Notes"
    REVENUE_BASED_FINANCING = "Revenue_Based_Financing"
    SCHOLARSHIP = "Scholarship"


class AgencyDetails(CamelModel):
    name: str = Field(..., min_length=2)
    registration_number: str = Field(..., min_length=1)
    type: AgencyType
    establishment_date: date
    description: str = Field(..., min_length=1)


class InvestmentRange(CamelModel):
    minimum: float = Field(..., ge=0)
    maximum: float = Field(..., ge=0)

    @model_validator(mode="after")
    def minimum_not_above_maximum(self):
        if self.minimum > self.maximum:
            raise ValueError("investmentRange.minimum must not exceed maximum")
        return self


class FundingPreferences(CamelModel):
    investment_range: InvestmentRange
    preferred_stages: list[str] = Field(default_factory=list)
    funding_types: list[FundingType] = Field(default_factory=list)
    preferred_sectors: list[str] = Field(default_factory=list)
    disbursement_mode: str = Field(..., pattern=r"^(Direct_Transfer|Installments|Milestone_Based)$")


class AgencyOwner(CamelModel):
    full_name: str = Field(..., min_length=2)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone: str = Field(..., min_length=7)


class FundingAgencyForm(CamelModel):
    """Funding agency onboarding form."""
    owner: AgencyOwner
    agency_details: AgencyDetails
    contact_information: dict[str, Any] | None = None
    representatives: list[dict[str, Any]] = Field(default_factory=list)
    funding_preferences: FundingPreferences
    documentation: dict[str, FileReference] = Field(default_factory=dict)
    experience: dict[str, Any] | None = None


# =============================================================================
# Mentor Form
# =============================================================================

class MentorForm(CamelModel):
    """Mentor onboarding form."""
    name: str = Field(..., min_length=2)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    about: str = Field(..., min_length=1)
    focused_industries: list[str] = Field(..., min_length=1)
    focused_sectors: list[str] = Field(..., min_length=1)
    stage: list[str] = Field(..., min_length=1)
    certificates: list[FileReference] = Field(default_factory=list)


# Form type -> payload schema
FORM_SCHEMAS: dict[FormType, type[CamelModel]] = {
    FormType.STARTUP: StartupForm,
    FormType.RESEARCHER: ResearcherForm,
    FormType.IPR_PROFESSIONAL: IprProfessionalForm,
    FormType.FUNDING_AGENCY: FundingAgencyForm,
    FormType.MENTOR: MentorForm,
}


class FormActionRequest(BaseModel):
    """Body of an approve/reject call."""
    reason: str | None = Field(
        default=None,
        max_length=2000,
        description="Shown to the applicant (used for rejections)"
    )
