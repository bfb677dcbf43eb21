# =============================================================================
# app/routers/similarity.py - Direct Similarity Comparison
# =============================================================================
# Scores two filings' texts on demand. Whole-filing analyses against the
# accepted corpus run in the background (POST /ipr/{id}/similarity).
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.auth import require_role, AuthUser
from core.models.users import Role
from core.services.similarity_service import SimilarityService
from lib.similarity import FilingText, SimilarityScore

router = APIRouter()


class CompareRequest(BaseModel):
    """
    Two filings to compare.

    Example:
        {
            "pending": {"title": "Solar roof tile", "description": "..."},
            "accepted": {"title": "Roof tile", "description": "..."}
        }
    """
    pending: FilingText
    accepted: FilingText


@router.post("/compare", response_model=SimilarityScore)
async def compare_filings(
    request: CompareRequest,
    user: Annotated[AuthUser, Depends(require_role(Role.IPR_PROFESSIONAL, Role.ADMIN))],
):
    """
    Score title and description similarity (0-100 each).

    `source` is "ai" when the AI endpoint answered, "heuristic" when the
    word overlap fallback was used.
    """
    return SimilarityService.compare(request.pending, request.accepted)
