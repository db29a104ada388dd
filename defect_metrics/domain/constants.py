#!/usr/bin/env python3
"""
Dashboard Constants

Immutable configuration for chart domains, color bands, palettes and the
fixed status layout used by the severity breakdown widgets.
"""

from dataclasses import dataclass, field

# Fixed-layout status rows, in render order
STATUS_NAMES: tuple[str, ...] = ("REOPEN", "NEW", "OPEN", "FIXED", "DUPLICATE")

STATUS_COLORS: dict[str, str] = {
    "REOPEN": "#f92309",
    "NEW": "#443eda",
    "OPEN": "#e4c73e",
    "FIXED": "#57dc1e",
    "DUPLICATE": "#676363",
}

SEVERITY_LEVELS: tuple[str, ...] = ("high", "medium", "low")

SEVERITY_COLORS: dict[str, str] = {
    "high": "#dc2626",
    "medium": "#f59e0b",
    "low": "#10b981",
}


@dataclass(frozen=True)
class RiskColors:
    """
    Canonical project card colors.

    Attributes:
        HIGH: Red card, high risk
        MEDIUM: Yellow card, medium risk
        LOW: Green card, low risk
        UNKNOWN: Neutral gray for descriptors that match no canonical color
    """

    HIGH: str = "#ce1111"
    MEDIUM: str = "#eed61c"
    LOW: str = "#06ba0b"
    UNKNOWN: str = "#888888"


@dataclass(frozen=True)
class GaugeConfig:
    """
    Semicircular defect density gauge.

    Zones are [0, 7) green, [7, 13) yellow, [13, 20] red over a 180 degree sweep.
    """

    DOMAIN_MIN: float = 0.0
    DOMAIN_MAX: float = 20.0
    SWEEP_DEGREES: float = 180.0
    ZONE_BOUNDARIES: tuple[float, ...] = (0.0, 7.0, 13.0, 20.0)
    ZONE_COLORS: tuple[str, ...] = ("#10b981", "#f59e0b", "#dc2626")


@dataclass(frozen=True)
class ThermometerConfig:
    """
    Defect severity index thermometer.

    Bands are checked top-down with strict ``>`` comparisons, so a value sitting
    exactly on a threshold belongs to the lower band.
    """

    DOMAIN_MIN: float = 0.0
    DOMAIN_MAX: float = 100.0
    BANDS: tuple[tuple[float, str], ...] = (
        (75.0, "#dc2626"),
        (50.0, "#2563eb"),
        (25.0, "#fbbf24"),
    )
    FLOOR_COLOR: str = "#10b981"


@dataclass(frozen=True)
class ChartPalettes:
    """Slice colors per pie chart; slice ``colorIndex`` cycles through these."""

    DEFECT_TYPE: tuple[str, ...] = ("#3b82f6", "#ef4444", "#10b981", "#f59e0b")
    REOPEN: tuple[str, ...] = ("#3b82f6", "#fbbf24")
    MODULE: tuple[str, ...] = field(
        default=(
            "#4285f4",
            "#34a853",
            "#fbbc04",
            "#ea4335",
            "#ff6d01",
            "#00bcd4",
            "#9c27b0",
            "#795548",
            "#607d8b",
            "#e91e63",
        )
    )


# Upstream messages meaning "the query ran and found nothing"
EMPTY_RESULT_SENTINELS: tuple[str, ...] = ("no data found", "no records found", "not found")

# Field-name precedence for heterogeneous category records (first present wins)
COUNT_FIELDS: tuple[str, ...] = ("value", "defectCount", "count")
MODULE_LABEL_FIELDS: tuple[str, ...] = ("name", "moduleName", "module")
DEFECT_TYPE_LABEL_FIELDS: tuple[str, ...] = ("defectType", "name", "type")
DEFECT_STATUS_FIELDS: tuple[str, ...] = ("defectStatusName", "status")

risk_colors = RiskColors()
gauge_config = GaugeConfig()
thermometer_config = ThermometerConfig()
chart_palettes = ChartPalettes()
