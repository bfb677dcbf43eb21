# =============================================================================
# app/routers/funding.py - Funding Endpoints
# =============================================================================
# Agency directory, startup-side requests and agency-side decisions.
#
#   /funding-agencies                          directory (authenticated)
#   /startup/fundings...                       startup role
#   /funding-agency/requests...                fundingAgency role
# =============================================================================

from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from pydantic import BaseModel

from app.auth import get_current_user, require_role, AuthUser
from core.models.funding import (
    FundingAction,
    FundingRequestCreate,
    FundingStatus,
    FundraisingUpdate,
)
from core.models.users import Role
from core.services.funding_service import FundingService

router = APIRouter()

StartupUser = Annotated[AuthUser, Depends(require_role(Role.STARTUP))]
AgencyUser = Annotated[AuthUser, Depends(require_role(Role.FUNDING_AGENCY))]


# =============================================================================
# Response Models
# =============================================================================

class FundingAgencySummary(BaseModel):
    id: str
    name: str | None = None
    email: str | None = None
    type: str | None = None
    description: str | None = None
    funding_types: list[str] = []
    investment_range: dict[str, Any] | None = None


class FundingAgencyDetail(FundingAgencySummary):
    details: dict[str, Any] = {}


class FundingAgencyList(BaseModel):
    agencies: list[FundingAgencySummary]
    count: int


class FundingRequestResponse(BaseModel):
    id: str
    startup_id: str
    agency_id: str
    amount: float
    funding_type: str
    message: str
    status: FundingStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None
    agency_name: str | None = None
    startup: dict[str, Any] | None = None


class FundingRequestList(BaseModel):
    requests: list[FundingRequestResponse]
    count: int


def _request_list(requests: list[dict]) -> FundingRequestList:
    return FundingRequestList(
        requests=[FundingRequestResponse(**r) for r in requests],
        count=len(requests),
    )


# =============================================================================
# Agency Directory
# =============================================================================

@router.get("/funding-agencies", response_model=FundingAgencyList)
async def list_funding_agencies(user: AuthUser = Depends(get_current_user)):
    """List funding agencies by name."""
    agencies = FundingService.list_agencies()
    return FundingAgencyList(
        agencies=[FundingAgencySummary(**a) for a in agencies],
        count=len(agencies),
    )


@router.get("/funding-agencies/{agency_id}", response_model=FundingAgencyDetail)
async def get_funding_agency(
    agency_id: Annotated[UUID, Path(description="Funding agency profile UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """
    Get one agency with its full details.

    Raises:
        404: Agency not found
    """
    return FundingAgencyDetail(**FundingService.get_agency(str(agency_id)))


# =============================================================================
# Startup Side
# =============================================================================

@router.post(
    "/startup/fundings/request/{agency_id}",
    response_model=FundingRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_funding(
    agency_id: Annotated[UUID, Path(description="Funding agency profile UUID")],
    request: FundingRequestCreate,
    user: StartupUser,
):
    """
    Ask an agency for funding. The agency is notified.

    Raises:
        404: Agency not found, or the caller has no startup profile
    """
    return FundingRequestResponse(**FundingService.create_request(str(user.id), str(agency_id), request))


@router.get("/startup/fundings", response_model=FundingRequestList)
async def list_my_funding_requests(user: StartupUser):
    """The caller's funding requests with agency names, newest first."""
    return _request_list(FundingService.list_for_startup(str(user.id)))


@router.patch("/startup/fundraising")
async def update_fundraising(request: FundraisingUpdate, user: StartupUser):
    """Set whether the caller's startup is actively fundraising."""
    startup = FundingService.set_fundraising(str(user.id), request.is_actively_fundraising)
    return {
        "startup_id": startup["id"],
        "is_actively_fundraising": startup.get("is_actively_fundraising", request.is_actively_fundraising),
    }


# =============================================================================
# Agency Side
# =============================================================================

@router.get("/funding-agency/requests", response_model=FundingRequestList)
async def list_agency_requests(
    user: AgencyUser,
    status_filter: Annotated[FundingStatus | None, Query(alias="status", description="Filter by status")] = None,
):
    """Requests addressed to the caller's agency, newest first, with startup summaries."""
    return _request_list(FundingService.list_for_agency(str(user.id), status_filter))


@router.post("/funding-agency/requests/{request_id}/{action}", response_model=FundingRequestResponse)
async def act_on_request(
    request_id: Annotated[UUID, Path(description="Funding request UUID")],
    action: Annotated[FundingAction, Path(description="accept, reject or transferred")],
    user: AgencyUser,
):
    """
    Accept or reject a pending request, or mark an accepted one transferred.

    The startup is notified.

    Raises:
        404: Request not found or addressed to another agency
        409: Request isn't in the status the action requires
    """
    return FundingRequestResponse(**FundingService.act(str(user.id), str(request_id), action))
