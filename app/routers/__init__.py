# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - users.py: Caller profile, user picker, public user info
# - admin.py: Role management and form review
# - forms.py: Onboarding form submission
# - ipr.py: IP filings, review, ledger hash, similarity analysis
# - similarity.py: Direct two-filing comparison
# - messages.py: Direct messages (send, poll, stream)
# - funding.py: Funding agencies and requests
# - research.py: Research papers (researcher drafts, public catalogue)
# - policies.py: Policies and stakeholder reviews
# - notifications.py: In-app notifications
# - metrics.py: Dashboard sample metrics
# - tasks.py: Background task status endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import users
from . import admin
from . import forms
from . import ipr
from . import similarity
from . import messages
from . import funding
from . import research
from . import policies
from . import notifications
from . import metrics
from . import tasks

__all__ = [
    "health",
    "users",
    "admin",
    "forms",
    "ipr",
    "similarity",
    "messages",
    "funding",
    "research",
    "policies",
    "notifications",
    "metrics",
    "tasks",
]
