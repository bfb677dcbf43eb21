# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Defines background tasks for work too slow for a request.
#
# Tasks:
# - record_ipr_decision: Write a review decision to the ledger contract
# - analyze_ipr_similarity: Compare a filing against accepted filings
# =============================================================================

import logging
from typing import Any
from celery import shared_task, current_task

logger = logging.getLogger(__name__)


# =============================================================================
# Task State Updates
# =============================================================================

def update_progress(current: int, total: int, message: str = "Processing..."):
    """
    Update task progress for polling.

    Args:
        current: Current step number
        total: Total steps
        message: Status message
    """
    if current_task:
        current_task.update_state(
            state="PROGRESS",
            meta={
                "current": current,
                "total": total,
                "percent": int((current / total) * 100) if total else 100,
                "message": message,
            }
        )


# =============================================================================
# Ledger Task
# =============================================================================

@shared_task(bind=True, name="workers.tasks.record_ipr_decision")
def record_ipr_decision(
    self,
    filing_id: str,
    status: str,
    message: str = "",
) -> dict[str, Any]:
    """
    Record a review decision on the ledger.

    The filing was already moved to Accepted/Rejected with the WAITING
    hash. On success the hash is stored and the owner notified; on any
    failure the filing goes back to Pending and the reviewer is told to
    review again. Never retried: a retry could write the decision twice.

    Args:
        filing_id: The filing UUID
        status: "Accepted" or "Rejected"
        message: Reviewer's message, stored on chain with the decision

    Returns:
        Dict with success flag and transaction hash or error
    """
    from lib.ledger import LedgerClient
    from core.models.ipr import WAITING_HASH
    from core.services.ipr_service import IprService
    from core.services.notification_service import NotificationService
    from app.streaming.broadcast import (
        publish_ipr_decision_failed,
        publish_ipr_decision_recorded,
    )

    logger.info(f"Recording {status} decision for filing {filing_id}")

    try:
        filing = IprService.get(filing_id)
    except Exception as e:
        error_code = getattr(e, "code", "FILING_LOOKUP_FAILED")
        error_message = getattr(e, "message", str(e))
        logger.error(f"Could not load filing {filing_id}: [{error_code}] {error_message}")
        return {
            "success": False,
            "filing_id": filing_id,
            "error": error_code,
            "message": error_message,
        }

    if filing.get("transaction_hash") != WAITING_HASH:
        logger.warning(f"Filing {filing_id} is not waiting on the ledger, skipping")
        return {"success": False, "filing_id": filing_id, "error": "FILING_NOT_WAITING"}

    update_progress(1, 3, "Submitting decision to the ledger")

    try:
        client = LedgerClient.from_settings()
        tx_hash = client.submit_decision(filing_id, status, message)

    except Exception as e:
        error_code = getattr(e, "code", "LEDGER_ERROR")
        error_message = getattr(e, "message", str(e))
        logger.error(f"Ledger call failed for filing {filing_id}: [{error_code}] {error_message}")

        reverted = IprService.revert_decision(filing_id)

        reviewer_user_id = IprService.reviewer_user_id(filing.get("reviewer_id"))
        if reviewer_user_id:
            NotificationService.add(
                reviewer_user_id,
                name="Ledger recording failed",
                message=(
                    f'Your decision on "{filing["title"]}" could not be recorded '
                    f"({error_message}). The filing is Pending again."
                ),
                role="iprProfessional",
            )
            publish_ipr_decision_failed(reviewer_user_id, filing_id, error_message)

        return {
            "success": False,
            "filing_id": filing_id,
            "error": error_code,
            "message": error_message,
            "reverted": reverted is not None,
        }

    update_progress(2, 3, "Storing transaction hash")

    updated = IprService.complete_decision(filing_id, tx_hash)
    if updated is None:
        logger.warning(f"Filing {filing_id} changed while its transaction {tx_hash} was pending")
        return {
            "success": False,
            "filing_id": filing_id,
            "error": "FILING_NOT_WAITING",
            "transaction_hash": tx_hash,
        }

    update_progress(3, 3, "Notifying owner")

    explorer_url = client.explorer_link(tx_hash)
    IprService.notify_owner(updated)
    owner_user_id = IprService.owner_user_id(updated)
    if owner_user_id:
        publish_ipr_decision_recorded(owner_user_id, filing_id, status, tx_hash, explorer_url)

    logger.info(f"Recorded filing {filing_id} decision in transaction {tx_hash}")
    return {
        "success": True,
        "filing_id": filing_id,
        "status": status,
        "transaction_hash": tx_hash,
        "explorer_url": explorer_url,
    }


# =============================================================================
# Similarity Task
# =============================================================================

@shared_task(bind=True, name="workers.tasks.analyze_ipr_similarity")
def analyze_ipr_similarity(self, filing_id: str) -> dict[str, Any]:
    """
    Compare a filing against every Accepted filing of its type.

    Reports PROGRESS after each comparison.

    Returns:
        Dict with filing_id, compared count and matches (highest first)
    """
    logger.info(f"Analyzing similarity for filing {filing_id}")

    try:
        from core.services.similarity_service import SimilarityService

        result = SimilarityService.analyze(
            filing_id,
            progress=lambda done, total: update_progress(
                done, total, f"Compared {done} of {total} filings"
            ),
        )
        return {"success": True, **result}

    except Exception as e:
        logger.exception(f"Similarity analysis failed: {e}")
        return {"success": False, "filing_id": filing_id, "error": str(e)}
