# =============================================================================
# tests/test_metrics.py - Dashboard Metrics Tests
# =============================================================================
# Tests for timeframe/metric parsing, sample profile selection and the
# agency comparison column picking.
#
# Run with: pytest tests/test_metrics.py -v
# =============================================================================

from unittest.mock import patch

import pytest

from app.exceptions import InvalidTimeframeError
from core.metrics_data import STARTUP_METRICS
from core.models.metrics import MetricKey, Timeframe
from core.services.metrics_service import (
    MetricsService,
    parse_metric,
    parse_timeframe,
    profile_for_position,
)

STARTUPS = [
    {"id": "s0", "name": "SolarRoof"},
    {"id": "s1", "name": "AgriSense"},
    {"id": "s2", "name": "MedLink"},
]


class TestParsing:
    """Tests for query parameter parsing."""

    def test_timeframe_defaults_to_monthly(self):
        assert parse_timeframe(None) == Timeframe.MONTHLY
        assert parse_timeframe("yearly") == Timeframe.YEARLY

    def test_invalid_timeframe(self):
        with pytest.raises(InvalidTimeframeError) as exc_info:
            parse_timeframe("weekly")

        assert exc_info.value.details["allowed"] == ["monthly", "yearly"]

    def test_unknown_metric_means_all(self):
        assert parse_metric("burnRate") == MetricKey.BURN_RATE
        assert parse_metric("happiness") is None
        assert parse_metric(None) is None


class TestProfiles:
    """Tests for mapping startups onto sample profiles."""

    def test_profiles_cycle_by_position(self):
        assert profile_for_position(0) == "startup-1"
        assert profile_for_position(2) == "startup-3"
        assert profile_for_position(3) == "startup-1"

    def test_unknown_position_uses_default(self):
        assert profile_for_position(None) == "default"
        assert profile_for_position(-1) == "default"

    def test_sample_key_accepted_directly(self):
        with patch.object(MetricsService, "startup_list") as mock_list:
            assert MetricsService.resolve_profile("startup-2") == "startup-2"

        mock_list.assert_not_called()

    def test_startup_id_resolved_by_position(self):
        with patch.object(MetricsService, "startup_list", return_value=STARTUPS):
            assert MetricsService.resolve_profile("s1") == "startup-2"
            assert MetricsService.resolve_profile("unknown") == "default"


class TestStartupMetrics:
    """Tests for the startup dashboard payload."""

    def test_full_payload(self):
        data = MetricsService.startup_metrics(startup_id="startup-1")

        assert data["timeframe"] == "monthly"
        assert len(data["labels"]) == 12
        assert set(data["metrics"]) == {"roi", "customerAcquisition", "burnRate", "revenue", "grossMargin"}
        assert data["mouStatus"] == STARTUP_METRICS["startup-1"]["mouStatus"]
        assert "revenueStreams" in data

    def test_single_metric(self):
        """Test that a valid metric returns only that series plus stats."""
        data = MetricsService.startup_metrics("yearly", "revenue", "startup-2")

        assert list(data["metrics"]) == ["revenue"]
        assert data["metrics"]["revenue"] == STARTUP_METRICS["startup-2"]["yearly"]["revenue"]
        assert "mouStatus" not in data
        assert data["stats"]["revenue"]["value"] == 589512

    def test_profile_without_stats_uses_default_stats(self):
        data = MetricsService.startup_metrics(startup_id="startup-3")

        assert data["stats"]["revenue"]["value"] == 73689


class TestAgencyComparison:
    """Tests for picking startup columns out of the comparison tables."""

    def test_columns_follow_request_order(self):
        """Test that data[k] is the column of startupNames[k]."""
        with patch.object(MetricsService, "startup_list", return_value=STARTUPS):
            data = MetricsService.agency_comparison(["s2", "missing", "s0"])

        assert data["startupIndices"] == [2, -1, 0]
        assert data["startupNames"] == ["MedLink", "SolarRoof"]

        january = data["startupsData"][0]
        assert january == {"month": "Jan", "data": [255914, 334294]}

        roi = data["investmentVsROI"][0]
        assert roi["month"] == "Jan"
        assert roi["data"] == [
            {"investment": 200000, "roi": 9},
            {"investment": 100000, "roi": 12},
        ]

    def test_duplicate_ids_keep_alignment(self):
        with patch.object(MetricsService, "startup_list", return_value=STARTUPS):
            data = MetricsService.agency_comparison(["s1", "s1"])

        assert data["startupNames"] == ["AgriSense", "AgriSense"]
        assert data["startupsData"][0]["data"] == [246879, 246879]

    def test_positions_past_sample_columns_skipped(self):
        startups = [{"id": f"s{i}", "name": f"Startup {i}"} for i in range(14)]

        with patch.object(MetricsService, "startup_list", return_value=startups):
            data = MetricsService.agency_comparison(["s13", "s0"])

        assert data["startupIndices"] == [13, 0]
        assert data["startupNames"] == ["Startup 0"]
        assert data["startupsData"][0]["data"] == [334294]

    def test_yearly_uses_year_key(self):
        with patch.object(MetricsService, "startup_list", return_value=STARTUPS):
            data = MetricsService.agency_comparison(["s1"], "yearly")

        assert data["startupsData"][0]["year"] == "2023"
        assert data["startupsData"][0]["data"] == [2715672]

    def test_no_known_startups(self):
        with patch.object(MetricsService, "startup_list", return_value=STARTUPS):
            data = MetricsService.agency_comparison(["nope"])

        assert data["startupNames"] == []
        assert all(period["data"] == [] for period in data["startupsData"])
