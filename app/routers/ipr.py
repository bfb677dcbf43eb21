# =============================================================================
# app/routers/ipr.py - IP Filing Endpoints
# =============================================================================
# Startups and researchers file; IP professionals review.
#
# Review flow:
#   POST /ipr/{id}/review             -> Accepted/Rejected, hash "WAITING"
#   (ledger configured)  worker task  -> real hash, or back to Pending
#   (no ledger)  POST /ipr/{id}/transaction-hash with the reviewer's own tx
# =============================================================================

from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel

from app.auth import get_current_user, require_role, AuthUser
from app.routers.tasks import TaskSubmitResponse
from core.models.ipr import (
    IprCreate,
    IprFiling,
    IprReviewRequest,
    TransactionHashRequest,
)
from core.models.users import Role
from core.services.ipr_service import IprService
from core.services.similarity_service import SimilarityService

router = APIRouter()

OwnerUser = Annotated[AuthUser, Depends(require_role(Role.STARTUP, Role.RESEARCHER))]
ReviewerUser = Annotated[AuthUser, Depends(require_role(Role.IPR_PROFESSIONAL))]
ReviewerOrAdmin = Annotated[AuthUser, Depends(require_role(Role.IPR_PROFESSIONAL, Role.ADMIN))]


# =============================================================================
# Response Models
# =============================================================================

class IprFilingResponse(IprFiling):
    """A filing with owner/reviewer summaries where the endpoint includes them."""
    owner: dict[str, Any] | None = None
    reviewer: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class IprFilingList(BaseModel):
    filings: list[IprFilingResponse]
    count: int


class IprReviewResponse(BaseModel):
    """Result of a review; task_id is set when the ledger write was queued."""
    filing: IprFilingResponse
    task_id: str | None = None
    message: str


# =============================================================================
# Owner Endpoints
# =============================================================================

@router.post("", response_model=IprFilingResponse, status_code=status.HTTP_201_CREATED)
async def create_filing(request: IprCreate, user: OwnerUser):
    """
    File a new IP filing (status Pending).

    Raises:
        404: The caller has no approved startup/researcher profile
    """
    return IprFilingResponse(**IprService.create(str(user.id), user.role, request))


@router.get("/mine", response_model=IprFilingList)
async def list_my_filings(user: OwnerUser):
    """List the caller's filings with reviewer name/email and message."""
    filings = IprService.list_mine(str(user.id), user.role)
    return IprFilingList(
        filings=[IprFilingResponse(**f) for f in filings],
        count=len(filings),
    )


# =============================================================================
# Reviewer Endpoints
# =============================================================================

@router.get("/types/{slug}", response_model=IprFilingList)
async def list_filings_by_type(
    slug: Annotated[str, Path(description="patents, trademarks, copyrights or trade_secrets")],
    user: ReviewerOrAdmin,
):
    """
    List filings of one type with owner summaries.

    Raises:
        400: Unknown type slug
    """
    filings = IprService.list_by_type(slug)
    return IprFilingList(
        filings=[IprFilingResponse(**f) for f in filings],
        count=len(filings),
    )


@router.get("/{filing_id}", response_model=IprFilingResponse)
async def get_filing(
    filing_id: Annotated[UUID, Path(description="Filing UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """
    Get a filing with its owner's details.

    Raises:
        404: Filing not found
    """
    return IprFilingResponse(**IprService.get_with_owner(str(filing_id)))


@router.post("/{filing_id}/review", response_model=IprReviewResponse)
async def review_filing(
    filing_id: Annotated[UUID, Path(description="Filing UUID")],
    request: IprReviewRequest,
    user: ReviewerUser,
):
    """
    Accept or reject a Pending filing.

    When the ledger is configured the decision is written on chain in the
    background; poll /tasks/{task_id}. If that fails the filing returns to
    Pending. Without a ledger, post the hash of your own transaction to
    /ipr/{id}/transaction-hash.

    Raises:
        404: Filing not found, or the caller has no IP professional profile
        409: Filing is no longer Pending
        503: Ledger task could not be queued (filing stays Pending)
    """
    filing, task_id = IprService.review(str(filing_id), str(user.id), request.status, request.message)

    if task_id:
        message = "Decision saved; recording on the ledger."
    else:
        message = "Decision saved; submit the transaction hash once signed."

    return IprReviewResponse(
        filing=IprFilingResponse(**filing),
        task_id=task_id,
        message=message,
    )


@router.post("/{filing_id}/transaction-hash", response_model=IprFilingResponse)
async def record_transaction_hash(
    filing_id: Annotated[UUID, Path(description="Filing UUID")],
    request: TransactionHashRequest,
    user: ReviewerUser,
):
    """
    Record the hash of a decision the reviewer signed with their own wallet.

    Raises:
        404: Filing not found
        409: Filing hasn't been reviewed
    """
    return IprFilingResponse(**IprService.record_transaction_hash(str(filing_id), request.transaction_hash))


@router.post("/{filing_id}/similarity", response_model=TaskSubmitResponse)
async def analyze_similarity(
    filing_id: Annotated[UUID, Path(description="Filing UUID")],
    user: ReviewerOrAdmin,
):
    """
    Queue a comparison of this filing against all Accepted filings of its type.

    Poll /tasks/{task_id}; the result is {filing_id, compared, matches[]}.

    Raises:
        404: Filing not found
        503: Task could not be queued
    """
    task_id = SimilarityService.enqueue_analysis(str(filing_id))
    return TaskSubmitResponse(
        task_id=task_id,
        message="Similarity analysis queued. Use GET /api/v1/tasks/{task_id} to check status.",
    )
