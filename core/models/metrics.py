# =============================================================================
# core/models/metrics.py - Metrics Request Schemas
# =============================================================================
# Metrics are sample datasets (see core/metrics_data.py); these models only
# validate what the client asks for.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class Timeframe(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class MetricKey(str, Enum):
    ROI = "roi"
    CUSTOMER_ACQUISITION = "customerAcquisition"
    BURN_RATE = "burnRate"
    REVENUE = "revenue"
    GROSS_MARGIN = "grossMargin"


class AgencyMetricsRequest(BaseModel):
    """Startups a funding agency wants to compare."""
    startup_ids: list[str] = Field(..., min_length=1, max_length=50)
