# =============================================================================
# core/services/ - Business Logic Services
# =============================================================================
# Each service is a class of static methods wrapping SupabaseClient calls
# for one area of the platform:
# - user_service.py: Users, roles, role profiles
# - notification_service.py: In-app notifications
# - form_service.py: Onboarding form submissions and review
# - ipr_service.py: IP filings and review decisions
# - similarity_service.py: Filing similarity analysis
# - message_service.py: Direct messages
# - funding_service.py: Funding agencies and requests
# - research_service.py: Research papers and the public catalogue
# - policy_service.py: Policies and stakeholder reviews
# - metrics_service.py: Dashboard sample metrics
# =============================================================================

from .user_service import UserService
from .notification_service import NotificationService
from .form_service import FormService
from .ipr_service import IprService
from .similarity_service import SimilarityService
from .message_service import MessageService
from .funding_service import FundingService
from .research_service import ResearchService
from .policy_service import PolicyService
from .metrics_service import MetricsService

__all__ = [
    "UserService",
    "NotificationService",
    "FormService",
    "IprService",
    "SimilarityService",
    "MessageService",
    "FundingService",
    "ResearchService",
    "PolicyService",
    "MetricsService",
]
