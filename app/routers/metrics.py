# =============================================================================
# app/routers/metrics.py - Dashboard Metrics Endpoints
# =============================================================================
# Sample dashboard data for startups and funding agencies.
# =============================================================================

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from app.auth import get_current_user, require_role, AuthUser
from core.models.metrics import AgencyMetricsRequest
from core.models.users import Role
from core.services.metrics_service import MetricsService

router = APIRouter()


@router.get("/startup/metrics")
async def get_startup_metrics(
    user: AuthUser = Depends(get_current_user),
    timeframe: Annotated[str | None, Query(description="monthly or yearly")] = None,
    metric: Annotated[str | None, Query(description="roi, customerAcquisition, burnRate, revenue or grossMargin")] = None,
    startup_id: Annotated[str | None, Query(description="Startup profile id")] = None,
) -> dict[str, Any]:
    """
    Dashboard series and stats for a startup.

    An unknown metric returns every series; an unknown startup gets the
    default sample profile.

    Raises:
        400: Invalid timeframe
    """
    return {
        "success": True,
        "data": MetricsService.startup_metrics(timeframe, metric, startup_id),
    }


@router.post("/funding-agency/metrics")
async def get_agency_metrics(
    request: AgencyMetricsRequest,
    user: Annotated[AuthUser, Depends(require_role(Role.FUNDING_AGENCY, Role.ADMIN))],
    timeframe: Annotated[str | None, Query(description="monthly or yearly")] = None,
) -> dict[str, Any]:
    """
    Revenue and investment-vs-ROI comparison for selected startups.

    Raises:
        400: Invalid timeframe
    """
    return {
        "success": True,
        "data": MetricsService.agency_comparison(request.startup_ids, timeframe),
    }
