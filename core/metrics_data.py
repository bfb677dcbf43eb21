# =============================================================================
# core/metrics_data.py - Sample Metrics Datasets
# =============================================================================
# Dashboards show fixed sample series, not computed analytics. A startup is
# mapped to one of the sample profiles by its position in the startup list;
# agency comparisons pick columns out of the comparison tables by the same
# positions.
# =============================================================================

from typing import Any

LABELS: dict[str, list[str]] = {
    "monthly": ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"],
    "yearly": ["2019", "2020", "2021", "2022", "2023"],
}


def _series(value: list[float], target: list[float]) -> dict[str, list[float]]:
    return {"value": value, "target": target}


def _revenue(value: list[float], expenses: list[float]) -> dict[str, list[float]]:
    return {"value": value, "expenses": expenses}


# =============================================================================
# Startup Profiles
# =============================================================================
# Startups cycle through SAMPLE_PROFILE_ORDER by position; "default" is used
# when a startup can't be located.

SAMPLE_PROFILE_ORDER = ["startup-1", "startup-2", "startup-3"]

STARTUP_METRICS: dict[str, dict[str, Any]] = {
    # High-growth startup
    "startup-1": {
        "monthly": {
            "roi": _series(
                [20.5, 21.8, 22.5, 23.2, 24.8, 25.5, 26.1, 27.4, 28.8, 29.2, 30.5, 31.0],
                [20.0, 21.0, 22.0, 23.0, 24.0, 25.0, 26.0, 27.0, 28.0, 29.0, 30.0, 31.0],
            ),
            "customerAcquisition": _series(
                [120, 135, 150, 165, 180, 195, 210, 225, 240, 255, 270, 285],
                [110, 125, 140, 155, 170, 185, 200, 215, 230, 245, 260, 275],
            ),
            "burnRate": _series(
                [2.5, 2.4, 2.3, 2.2, 2.1, 2.0, 1.9, 1.8, 1.7, 1.6, 1.5, 1.4],
                [2.6, 2.5, 2.4, 2.3, 2.2, 2.1, 2.0, 1.9, 1.8, 1.7, 1.6, 1.5],
            ),
            "revenue": _revenue(
                [200, 220, 240, 260, 280, 300, 320, 340, 360, 380, 400, 420],
                [150, 160, 170, 180, 190, 200, 210, 220, 230, 240, 250, 260],
            ),
            "grossMargin": _series(
                [65, 66, 67, 68, 69, 70, 71, 72, 73, 74, 75, 76],
                [64, 65, 66, 67, 68, 69, 70, 71, 72, 73, 74, 75],
            ),
        },
        "yearly": {
            "roi": _series([15.0, 20.0, 25.0, 28.0, 31.0], [14.0, 19.0, 24.0, 27.0, 30.0]),
            "customerAcquisition": _series([500, 1000, 1500, 2000, 2500], [450, 950, 1450, 1950, 2450]),
            "burnRate": _series([4.0, 3.5, 3.0, 2.5, 2.0], [4.1, 3.6, 3.1, 2.6, 2.1]),
            "revenue": _revenue([1500, 2000, 2500, 3000, 3500], [1000, 1300, 1600, 1900, 2200]),
            "grossMargin": _series([60, 63, 66, 69, 72], [59, 62, 65, 68, 71]),
        },
        "mouStatus": {"signed": 20, "inProgress": 12, "underReview": 8, "completed": 25, "renewed": 15},
        "marketAnalysis": {
            "currentPerformance": {
                "marketShare": 85, "growthRate": 92, "customerSatisfaction": 95,
                "innovationIndex": 90, "brandValue": 80, "competitiveEdge": 93,
            },
            "industryAverage": {
                "marketShare": 70, "growthRate": 75, "customerSatisfaction": 80,
                "innovationIndex": 73, "brandValue": 77, "competitiveEdge": 75,
            },
        },
        "revenueStreams": {"productSales": 40, "services": 30, "subscriptions": 25, "licensing": 15, "partnerships": 10},
    },
    # Early-stage startup
    "startup-2": {
        "monthly": {
            "roi": _series(
                [5.2, 5.8, 6.5, 7.2, 7.8, 8.5, 9.1, 9.4, 9.8, 10.2, 10.5, 11.0],
                [5.0, 6.0, 7.0, 8.0, 9.0, 9.5, 10.0, 10.5, 11.0, 11.5, 12.0, 12.5],
            ),
            "customerAcquisition": _series(
                [50, 55, 60, 65, 70, 75, 80, 85, 90, 95, 100, 105],
                [45, 50, 55, 60, 65, 70, 75, 80, 85, 90, 95, 100],
            ),
            "burnRate": _series(
                [4.5, 4.4, 4.3, 4.2, 4.1, 4.0, 3.9, 3.8, 3.7, 3.6, 3.5, 3.4],
                [4.6, 4.5, 4.4, 4.3, 4.2, 4.1, 4.0, 3.9, 3.8, 3.7, 3.6, 3.5],
            ),
            "revenue": _revenue(
                [80, 85, 90, 95, 100, 105, 110, 115, 120, 125, 130, 135],
                [60, 63, 66, 69, 72, 75, 78, 81, 84, 87, 90, 93],
            ),
            "grossMargin": _series(
                [45, 46, 47, 48, 49, 50, 51, 52, 53, 54, 55, 56],
                [44, 45, 46, 47, 48, 49, 50, 51, 52, 53, 54, 55],
            ),
        },
        "yearly": {
            "roi": _series([3.0, 5.0, 7.0, 9.0, 11.0], [2.5, 4.5, 6.5, 8.5, 10.5]),
            "customerAcquisition": _series([200, 400, 600, 800, 1000], [180, 380, 580, 780, 980]),
            "burnRate": _series([5.0, 4.5, 4.0, 3.5, 3.0], [5.1, 4.6, 4.1, 3.6, 3.1]),
            "revenue": _revenue([500, 750, 1000, 1250, 1500], [400, 600, 800, 1000, 1200]),
            "grossMargin": _series([40, 43, 46, 49, 52], [39, 42, 45, 48, 51]),
        },
        "mouStatus": {"signed": 8, "inProgress": 5, "underReview": 3, "completed": 10, "renewed": 6},
        "marketAnalysis": {
            "currentPerformance": {
                "marketShare": 45, "growthRate": 62, "customerSatisfaction": 75,
                "innovationIndex": 70, "brandValue": 50, "competitiveEdge": 63,
            },
            "industryAverage": {
                "marketShare": 60, "growthRate": 65, "customerSatisfaction": 70,
                "innovationIndex": 63, "brandValue": 67, "competitiveEdge": 65,
            },
        },
        "revenueStreams": {"productSales": 25, "services": 20, "subscriptions": 15, "licensing": 8, "partnerships": 5},
    },
    # Scaling startup
    "startup-3": {
        "monthly": {
            "roi": _series(
                [25.5, 26.8, 28.2, 29.5, 31.0, 32.5, 34.0, 35.5, 37.0, 38.5, 40.0, 41.5],
                [25.0, 26.0, 27.0, 28.0, 29.0, 30.0, 31.0, 32.0, 33.0, 34.0, 35.0, 36.0],
            ),
            "customerAcquisition": _series(
                [200, 220, 240, 260, 280, 300, 320, 340, 360, 380, 400, 420],
                [190, 210, 230, 250, 270, 290, 310, 330, 350, 370, 390, 410],
            ),
            "burnRate": _series(
                [5.0, 4.8, 4.6, 4.4, 4.2, 4.0, 3.8, 3.6, 3.4, 3.2, 3.0, 2.8],
                [5.1, 4.9, 4.7, 4.5, 4.3, 4.1, 3.9, 3.7, 3.5, 3.3, 3.1, 2.9],
            ),
            "revenue": _revenue(
                [300, 330, 360, 390, 420, 450, 480, 510, 540, 570, 600, 630],
                [250, 270, 290, 310, 330, 350, 370, 390, 410, 430, 450, 470],
            ),
            "grossMargin": _series(
                [70, 71, 72, 73, 74, 75, 76, 77, 78, 79, 80, 81],
                [69, 70, 71, 72, 73, 74, 75, 76, 77, 78, 79, 80],
            ),
        },
        "yearly": {
            "roi": _series([20.0, 25.0, 30.0, 35.0, 41.5], [19.0, 24.0, 29.0, 34.0, 39.0]),
            "customerAcquisition": _series([800, 1500, 2500, 3500, 4200], [750, 1400, 2300, 3200, 4000]),
            "burnRate": _series([6.0, 5.0, 4.0, 3.5, 2.8], [6.1, 5.1, 4.1, 3.6, 2.9]),
            "revenue": _revenue([2000, 3000, 4000, 5000, 6000], [1600, 2400, 3200, 4000, 4800]),
            "grossMargin": _series([65, 68, 72, 76, 81], [64, 67, 71, 75, 80]),
        },
        "mouStatus": {"signed": 25, "inProgress": 15, "underReview": 10, "completed": 30, "renewed": 20},
        "marketAnalysis": {
            "currentPerformance": {
                "marketShare": 90, "growthRate": 95, "customerSatisfaction": 92,
                "innovationIndex": 96, "brandValue": 85, "competitiveEdge": 94,
            },
            "industryAverage": {
                "marketShare": 75, "growthRate": 80, "customerSatisfaction": 82,
                "innovationIndex": 78, "brandValue": 80, "competitiveEdge": 82,
            },
        },
        "revenueStreams": {"productSales": 45, "services": 35, "subscriptions": 30, "licensing": 20, "partnerships": 15},
    },
    "default": {
        "monthly": {
            "roi": _series(
                [15.2, 16.8, 17.5, 18.2, 19.8, 21.5, 22.1, 23.4, 24.8, 25.2, 26.5, 28.0],
                [15.0, 16.5, 18.0, 19.5, 21.0, 22.5, 23.0, 24.0, 25.0, 26.0, 27.0, 28.0],
            ),
            "customerAcquisition": _series(
                [85, 92, 88, 95, 105, 115, 125, 135, 142, 148, 155, 165],
                [80, 85, 90, 92, 95, 100, 105, 110, 115, 120, 125, 130],
            ),
            "burnRate": _series(
                [3.0, 2.9, 2.8, 2.7, 2.6, 2.5, 2.4, 2.3, 2.2, 2.1, 2.0, 1.9],
                [3.1, 3.0, 2.9, 2.8, 2.7, 2.6, 2.5, 2.4, 2.3, 2.2, 2.1, 2.0],
            ),
            "revenue": _revenue(
                [150, 170, 190, 220, 240, 260, 280, 300, 320, 350, 380, 400],
                [120, 130, 140, 150, 160, 170, 180, 190, 200, 210, 220, 230],
            ),
            "grossMargin": _series(
                [60, 61, 62, 63, 64, 65, 66, 67, 68, 69, 70, 71],
                [59, 60, 61, 62, 63, 64, 65, 66, 67, 68, 69, 70],
            ),
        },
        "yearly": {
            "roi": _series([12.5, 15.8, 19.2, 23.5, 28.0], [12.0, 15.0, 18.0, 22.0, 27.0]),
            "customerAcquisition": _series([450, 750, 1200, 1800, 2500], [400, 700, 1100, 1600, 2200]),
            "burnRate": _series([4.0, 3.5, 3.0, 2.5, 2.0], [4.1, 3.6, 3.1, 2.6, 2.1]),
            "revenue": _revenue([1200, 1800, 2500, 3200, 4000], [900, 1300, 1800, 2200, 2800]),
            "grossMargin": _series([55, 58, 62, 67, 71], [54, 57, 61, 66, 70]),
        },
        "mouStatus": {"signed": 15, "inProgress": 8, "underReview": 5, "completed": 18, "renewed": 10},
        "marketAnalysis": {
            "currentPerformance": {
                "marketShare": 75, "growthRate": 82, "customerSatisfaction": 90,
                "innovationIndex": 85, "brandValue": 70, "competitiveEdge": 88,
            },
            "industryAverage": {
                "marketShare": 65, "growthRate": 70, "customerSatisfaction": 75,
                "innovationIndex": 68, "brandValue": 72, "competitiveEdge": 70,
            },
        },
        "revenueStreams": {"productSales": 35, "services": 25, "subscriptions": 20, "licensing": 12, "partnerships": 8},
    },
}


def _stat(value: float, change: float) -> dict[str, float]:
    return {"value": value, "change": change}


# Headline stats per profile and timeframe; profiles without an entry use "default"
STARTUP_STATS: dict[str, dict[str, dict[str, dict[str, float]]]] = {
    "startup-1": {
        "monthly": {
            "revenue": _stat(98252, 22.4), "customerGrowth": _stat(625, 18.9),
            "burnRate": _stat(34000, -8.5), "roi": _stat(31.2, 12.3),
            "marketShare": _stat(87, 5.8), "growthRate": _stat(35, 8.9),
        },
        "yearly": {
            "revenue": _stat(1179024, 45.8), "customerGrowth": _stat(7500, 35.6),
            "burnRate": _stat(408000, -15.3), "roi": _stat(41.5, 18.7),
            "marketShare": _stat(90, 12.5), "growthRate": _stat(45, 15.4),
        },
    },
    "startup-2": {
        "monthly": {
            "revenue": _stat(49126, 11.2), "customerGrowth": _stat(312, 9.4),
            "burnRate": _stat(17000, -4.2), "roi": _stat(15.6, 6.1),
            "marketShare": _stat(45, 2.9), "growthRate": _stat(17.5, 4.4),
        },
        "yearly": {
            "revenue": _stat(589512, 22.9), "customerGrowth": _stat(3750, 17.8),
            "burnRate": _stat(204000, -7.6), "roi": _stat(20.7, 9.3),
            "marketShare": _stat(50, 6.2), "growthRate": _stat(22.5, 7.7),
        },
    },
    "default": {
        "monthly": {
            "revenue": _stat(73689, 16.8), "customerGrowth": _stat(468, 14.1),
            "burnRate": _stat(25500, -6.3), "roi": _stat(23.4, 9.2),
            "marketShare": _stat(67, 4.3), "growthRate": _stat(26.2, 6.6),
        },
        "yearly": {
            "revenue": _stat(884268, 34.3), "customerGrowth": _stat(5625, 26.7),
            "burnRate": _stat(306000, -11.4), "roi": _stat(31.1, 14),
            "marketShare": _stat(70, 9.3), "growthRate": _stat(33.7, 11.5),
        },
    },
}


# =============================================================================
# Agency Comparison Tables
# =============================================================================
# One row per period; column i belongs to the startup at position i.

REVENUE_COMPARISON: dict[str, list[tuple[str, list[int]]]] = {
    "monthly": [
        ("Jan", [334294, 246879, 255914] * 4),
        ("Feb", [342343, 333534] * 6),
        ("Mar", [287321, 273241] * 6),
        ("Apr", [358293, 342130] * 6),
        ("May", [376485, 358293] * 6),
        ("Jun", [398743, 375193] * 6),
        ("Jul", [411582, 392138] * 6),
        ("Aug", [432097, 409872] * 6),
        ("Sep", [394237, 366501] * 6),
        ("Oct", [478231, 453763] * 6),
        ("Nov", [510034, 481234] * 6),
        ("Dec", [523145, 498234] * 6),
    ],
    "yearly": [
        ("2023", [3687226, 2715672, 2832594] * 4),
        ("2022", [3765773, 3688884] * 6),
        ("2021", [3160531, 3005651] * 6),
        ("2020", [3941223, 3743433] * 6),
        ("2019", [4119922, 3943431] + [4131334, 3943431] * 5),
    ],
}

# (investment, ROI %) per startup position
INVESTMENT_VS_ROI: dict[str, list[tuple[str, list[tuple[int, int]]]]] = {
    "monthly": [
        ("Jan", [(100000, 12), (150000, 5), (200000, 9), (180000, 7), (210000, 13), (160000, 8),
                 (220000, 10), (250000, 14), (170000, 6), (140000, -3), (190000, 8), (230000, 9)]),
        ("Feb", [(120000, 15), (180000, 10), (170000, 5), (160000, 12), (190000, 8), (200000, -4),
                 (220000, 14), (210000, 13), (240000, 9), (150000, 3), (190000, 10), (230000, 6)]),
        ("Mar", [(110000, 10), (160000, 8), (180000, 7), (170000, 14), (200000, 12), (220000, 3),
                 (250000, 16), (240000, 9), (230000, -1), (190000, 9), (210000, 11), (260000, 8)]),
        ("Apr", [(130000, 12), (170000, 5), (180000, 6), (200000, 14), (190000, 9), (220000, 7),
                 (250000, 13), (240000, 8), (230000, 10), (210000, 6), (220000, 15), (180000, 12)]),
        ("May", [(140000, -14), (180000, 7), (160000, 13), (190000, 11), (200000, 16), (230000, 3),
                 (210000, 8), (250000, 12), (220000, 9), (240000, 6), (260000, 15), (230000, 10)]),
        ("Jun", [(150000, 16), (190000, -2), (200000, 10), (220000, 13), (240000, 8), (210000, 5),
                 (250000, 18), (270000, 9), (230000, 14), (220000, 6), (240000, 12), (260000, 7)]),
        ("Jul", [(160000, 11), (200000, 6), (180000, 9), (230000, 14), (250000, 12), (240000, -4),
                 (220000, 10), (210000, 11), (250000, 15), (260000, 7), (230000, 8), (270000, 6)]),
        ("Aug", [(170000, 10), (210000, -3), (200000, 5), (240000, 12), (250000, 14), (220000, 3),
                 (260000, 9), (230000, 8), (210000, 6), (250000, 7), (240000, 11), (220000, 10)]),
        ("Sep", [(180000, 13), (220000, 8), (210000, 12), (250000, 9), (240000, 14), (230000, -2),
                 (220000, 6), (250000, 10), (230000, 5), (270000, 7), (250000, 8), (230000, 12)]),
        ("Oct", [(190000, 14), (230000, -1), (210000, 10), (240000, 12), (260000, 13), (220000, 6),
                 (230000, 7), (250000, 9), (240000, 5), (220000, 8), (210000, 10), (260000, 11)]),
        ("Nov", [(200000, 15), (240000, 7), (230000, 12), (260000, 9), (250000, 14), (270000, 5),
                 (220000, 10), (240000, 6), (230000, 8), (210000, 9), (250000, 7), (220000, 10)]),
        ("Dec", [(210000, 16), (250000, -4), (230000, 11), (270000, 7), (240000, 10), (250000, 12),
                 (220000, 8), (200000, 5), (230000, 9), (240000, 7), (260000, 10), (250000, 9)]),
    ],
    "yearly": [
        ("2023", [(130000, 12), (180000, 6), (250000, 10), (200000, 7), (450000, 15), (520000, 8),
                  (1200000, -2), (800000, 9), (1500000, 18), (700000, 11), (2200000, -3), (600000, 6)]),
        ("2024", [(110000, 10), (170000, 7), (280000, 9), (240000, 8), (400000, 14), (520000, 6),
                  (1300000, 5), (850000, 12), (1600000, 16), (750000, 10), (2100000, -1), (650000, 5)]),
        ("2025", [(140000, 13), (200000, 9), (320000, 12), (260000, 11), (420000, 15), (530000, 19),
                  (1250000, -3), (900000, 10), (1700000, 17), (770000, 11), (2300000, 2), (680000, 8)]),
    ],
}
