# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# ledger writes and similarity analysis.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (ledger decisions, similarity analysis)
# - config.py: Worker-specific settings
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker -Q default,ledger --loglevel=info
#
#   # Submit task (from API)
#   from workers.tasks import analyze_ipr_similarity
#   result = analyze_ipr_similarity.delay(filing_id=filing_id)
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
