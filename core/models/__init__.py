# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - users.py: Roles, access levels, user summaries
# - forms.py: Onboarding form payloads per role
# - ipr.py: IP filing schemas and status enums
# - messages.py: Direct message schemas
# - funding.py: Funding request schemas and transitions
# - research.py: Research paper schemas and stages
# - policies.py: Policy and policy review schemas
# - notifications.py: In-app notification schemas
# - metrics.py: Metrics query schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# User Models
# -----------------------------------------------------------------------------
from .users import (
    PROFILE_TABLES,
    ROLE_ACCESS_LEVELS,
    Role,
    RoleUpdateRequest,
    UserRecord,
    UserSummary,
    has_access,
    parse_role,
)

# -----------------------------------------------------------------------------
# Form Models
# -----------------------------------------------------------------------------
from .forms import (
    FORM_SCHEMAS,
    FileReference,
    FormAction,
    FormActionRequest,
    FormStatus,
    FormType,
    FundingAgencyForm,
    FundingType,
    IprProfessionalForm,
    MentorForm,
    ResearcherForm,
    StartupForm,
)

# -----------------------------------------------------------------------------
# IP Filing Models
# -----------------------------------------------------------------------------
from .ipr import (
    FILING_TYPE_SLUGS,
    WAITING_HASH,
    FilingStatus,
    FilingType,
    IprCreate,
    IprFiling,
    IprReviewRequest,
    OwnerType,
    TransactionHashRequest,
)

# -----------------------------------------------------------------------------
# Messaging, Funding, Notifications, Research, Policies, Metrics
# -----------------------------------------------------------------------------
from .messages import MessageCreate, MessageResponse
from .funding import (
    FUNDING_TRANSITIONS,
    FundingAction,
    FundingRequestCreate,
    FundingStatus,
    FundraisingUpdate,
)
from .notifications import NotificationList, NotificationResponse
from .research import (
    PaperCreate,
    PaperUpdate,
    PublishRequest,
    ResearchPaper,
    ResearchStage,
)
from .policies import (
    REVIEWER_TYPES,
    Policy,
    PolicyCreate,
    PolicyMetrics,
    PolicyReview,
    PolicyReviewCreate,
    PolicyUpdate,
    ReviewerType,
)
from .metrics import AgencyMetricsRequest, MetricKey, Timeframe

__all__ = [
    # Users
    "PROFILE_TABLES",
    "ROLE_ACCESS_LEVELS",
    "Role",
    "RoleUpdateRequest",
    "UserRecord",
    "UserSummary",
    "has_access",
    "parse_role",
    # Forms
    "FORM_SCHEMAS",
    "FileReference",
    "FormAction",
    "FormActionRequest",
    "FormStatus",
    "FormType",
    "FundingAgencyForm",
    "FundingType",
    "IprProfessionalForm",
    "MentorForm",
    "ResearcherForm",
    "StartupForm",
    # IP filings
    "FILING_TYPE_SLUGS",
    "WAITING_HASH",
    "FilingStatus",
    "FilingType",
    "IprCreate",
    "IprFiling",
    "IprReviewRequest",
    "OwnerType",
    "TransactionHashRequest",
    # Messages
    "MessageCreate",
    "MessageResponse",
    # Funding
    "FUNDING_TRANSITIONS",
    "FundingAction",
    "FundingRequestCreate",
    "FundingStatus",
    "FundraisingUpdate",
    # Research papers
    "PaperCreate",
    "PaperUpdate",
    "PublishRequest",
    "ResearchPaper",
    "ResearchStage",
    # Policies
    "REVIEWER_TYPES",
    "Policy",
    "PolicyCreate",
    "PolicyMetrics",
    "PolicyReview",
    "PolicyReviewCreate",
    "PolicyUpdate",
    "ReviewerType",
    # Notifications
    "NotificationList",
    "NotificationResponse",
    # Metrics
    "AgencyMetricsRequest",
    "MetricKey",
    "Timeframe",
]
