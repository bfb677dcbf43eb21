# =============================================================================
# core/services/metrics_service.py - Dashboard Metrics
# =============================================================================
# Serves the sample datasets in core/metrics_data.py. The only lookup is a
# startup's position in the startup list (oldest first), which selects its
# sample profile and its column in the agency comparison tables.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient
from core.metrics_data import (
    INVESTMENT_VS_ROI,
    LABELS,
    REVENUE_COMPARISON,
    SAMPLE_PROFILE_ORDER,
    STARTUP_METRICS,
    STARTUP_STATS,
)
from core.models.metrics import MetricKey, Timeframe
from core.models.users import PROFILE_TABLES, Role
from app.exceptions import InvalidTimeframeError

logger = logging.getLogger(__name__)

STARTUP_TABLE = PROFILE_TABLES[Role.STARTUP]
DEFAULT_PROFILE = "default"


def parse_timeframe(value: str | None) -> Timeframe:
    """
    Timeframe from a query value; missing means monthly.

    Raises:
        InvalidTimeframeError: For any other value
    """
    if value is None:
        return Timeframe.MONTHLY
    try:
        return Timeframe(value)
    except ValueError:
        raise InvalidTimeframeError(value, [t.value for t in Timeframe])


def parse_metric(value: str | None) -> MetricKey | None:
    """Metric key from a query value; unknown values mean 'all metrics'."""
    try:
        return MetricKey(value) if value else None
    except ValueError:
        return None


def profile_for_position(position: int | None) -> str:
    """Sample profile of the startup at `position` (None -> default)."""
    if position is None or position < 0:
        return DEFAULT_PROFILE
    return SAMPLE_PROFILE_ORDER[position % len(SAMPLE_PROFILE_ORDER)]


class MetricsService:
    """Service for startup and funding agency dashboards."""

    @staticmethod
    def startup_list() -> list[dict[str, Any]]:
        """All startups, oldest first (positions index into the sample data)."""
        return SupabaseClient.fetch_many(STARTUP_TABLE, columns="id, name, created_at")

    @staticmethod
    def startup_position(startup_id: str | None) -> int | None:
        """Position of a startup in startup_list(), or None."""
        if not startup_id:
            return None
        for position, startup in enumerate(MetricsService.startup_list()):
            if str(startup["id"]) == str(startup_id):
                return position
        return None

    @staticmethod
    def resolve_profile(startup_id: str | None) -> str:
        """Sample profile key for a startup id (sample keys are accepted as-is)."""
        if startup_id in STARTUP_METRICS:
            return startup_id
        return profile_for_position(MetricsService.startup_position(startup_id))

    @staticmethod
    def startup_metrics(
        timeframe: str | None = None,
        metric: str | None = None,
        startup_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Dashboard data for one startup.

        With a valid `metric` only that series is returned (plus stats);
        otherwise every series, MoU status, market analysis and revenue streams.

        Raises:
            InvalidTimeframeError: If the timeframe is unknown
        """
        frame = parse_timeframe(timeframe)
        key = parse_metric(metric)
        profile = MetricsService.resolve_profile(startup_id)

        data = STARTUP_METRICS.get(profile, STARTUP_METRICS[DEFAULT_PROFILE])
        stats = STARTUP_STATS.get(profile, STARTUP_STATS[DEFAULT_PROFILE])[frame.value]
        series = data[frame.value]

        logger.debug(f"Metrics for startup {startup_id} use sample profile {profile}")

        if key is not None:
            return {
                "timeframe": frame.value,
                "labels": LABELS[frame.value],
                "metrics": {key.value: series[key.value]},
                "stats": stats,
            }

        return {
            "timeframe": frame.value,
            "labels": LABELS[frame.value],
            "metrics": series,
            "stats": stats,
            "mouStatus": data["mouStatus"],
            "marketAnalysis": data["marketAnalysis"],
            "revenueStreams": data["revenueStreams"],
        }

    @staticmethod
    def agency_comparison(startup_ids: list[str], timeframe: str | None = None) -> dict[str, Any]:
        """
        Revenue and investment-vs-ROI columns for the requested startups.

        Each id maps to its position in the startup list (-1 when unknown).
        Every period lists the values at those positions in request order,
        so `data[k]` belongs to `startupNames[k]`. Unknown ids and positions
        past the sample columns are skipped.

        Raises:
            InvalidTimeframeError: If the timeframe is unknown
        """
        frame = parse_timeframe(timeframe)
        startups = MetricsService.startup_list()
        positions = {str(s["id"]): i for i, s in enumerate(startups)}

        indices = [positions.get(str(startup_id), -1) for startup_id in startup_ids]
        column_count = len(REVENUE_COMPARISON[frame.value][0][1])
        columns = [i for i in indices if 0 <= i < column_count]
        names = [startups[i].get("name") for i in columns]

        period_key = "month" if frame == Timeframe.MONTHLY else "year"
        revenue = [
            {period_key: period, "data": [values[i] for i in columns]}
            for period, values in REVENUE_COMPARISON[frame.value]
        ]
        investment = [
            {
                period_key: period,
                "data": [
                    {"investment": values[i][0], "roi": values[i][1]}
                    for i in columns
                ],
            }
            for period, values in INVESTMENT_VS_ROI[frame.value]
        ]

        return {
            "timeframe": frame.value,
            "startupNames": names,
            "startupIndices": indices,
            "startupsData": revenue,
            "investmentVsROI": investment,
        }
