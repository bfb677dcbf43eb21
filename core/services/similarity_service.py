# =============================================================================
# core/services/similarity_service.py - Filing Similarity Analysis
# =============================================================================
# Compares a filing with every Accepted filing of the same type so a
# reviewer can spot near-duplicates. The comparison loop is slow (one AI
# call per candidate, spaced out), so it runs in a Celery worker.
# =============================================================================

import logging
from typing import Any, Callable

from lib.similarity import FilingText, SimilarityChecker, SimilarityScore
from core.models.ipr import FilingStatus
from core.services.ipr_service import IprService, TABLE
from lib.supabase_client import SupabaseClient
from app.config import settings
from app.exceptions import TaskQueueError

logger = logging.getLogger(__name__)


class SimilarityService:
    """Service for similarity checks between IP filings."""

    @staticmethod
    def compare(pending: FilingText, accepted: FilingText) -> SimilarityScore:
        """Score two filings directly."""
        return SimilarityChecker().compare(pending, accepted)

    @staticmethod
    def enqueue_analysis(filing_id: str) -> str:
        """
        Queue a background analysis of a filing.

        Returns:
            Celery task id

        Raises:
            RecordNotFoundError: If the filing doesn't exist
            TaskQueueError: If the task cannot be queued
        """
        IprService.get(filing_id)

        try:
            from workers.tasks import analyze_ipr_similarity

            result = analyze_ipr_similarity.delay(filing_id=filing_id)
        except Exception as e:
            logger.exception(f"Failed to queue similarity analysis for {filing_id}: {e}")
            raise TaskQueueError("analyze_ipr_similarity", str(e))

        logger.info(f"Queued similarity analysis {result.id} for filing {filing_id}")
        return result.id

    @staticmethod
    def analyze(
        filing_id: str,
        checker: SimilarityChecker | None = None,
        progress: Callable[[int, int], None] | None = None,
    ) -> dict[str, Any]:
        """
        Compare a filing against all Accepted filings of its type.

        Returns:
            {"filing_id", "compared", "matches": [...]} with matches sorted
            by overall score, highest first
        """
        filing = IprService.get(filing_id)

        candidates = [
            record for record in SupabaseClient.fetch_many(
                TABLE,
                filters={"type": filing["type"], "status": FilingStatus.ACCEPTED.value},
                columns="id, title, description",
            )
            if str(record["id"]) != str(filing_id)
        ]

        checker = checker or SimilarityChecker()
        matches = checker.analyze(
            FilingText(title=filing.get("title") or "", description=filing.get("description") or ""),
            candidates,
            delay=settings.SIMILARITY_CALL_DELAY_SECONDS,
            threshold=settings.SIMILARITY_FLAG_THRESHOLD,
            progress=progress,
        )

        flagged = sum(1 for m in matches if m.flagged)
        logger.info(
            f"Similarity analysis of {filing_id}: {len(candidates)} compared, {flagged} flagged"
        )

        return {
            "filing_id": str(filing_id),
            "compared": len(candidates),
            "matches": [m.model_dump() for m in matches],
        }
