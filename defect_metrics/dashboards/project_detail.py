"""
Project Detail View-Model

Maps a MetricsBundle to one widget dict per metric. Every widget carries the
metric's ``status``; only OK widgets carry render primitives, so a renderer
can tell "loading" from "no data available" from "failed to load".

Usage:
    from defect_metrics.dashboards.project_detail import build_project_detail

    detail = build_project_detail(bundle, risk_signal=state.risk_signals.get(bundle.project_id))
    detail["widgets"]["density"]["needle_angle_deg"]
"""

from collections.abc import Callable, Sequence
from typing import Any

from defect_metrics.analysis.risk_classifier import RiskClassifier
from defect_metrics.analysis.series_builder import ProportionalSeriesBuilder
from defect_metrics.core import get_logger
from defect_metrics.dashboards.components.charts import ChartGeometryEngine
from defect_metrics.domain.charts import GaugeSpec, ProportionalSeries
from defect_metrics.domain.constants import (
    SEVERITY_COLORS,
    SEVERITY_LEVELS,
    STATUS_COLORS,
    chart_palettes,
    gauge_config,
    thermometer_config,
)
from defect_metrics.domain.indicators import DefectTypeDistribution, RemarkRatio
from defect_metrics.domain.metrics import MetricKind, MetricResult, MetricsBundle
from defect_metrics.domain.project import Defect, RiskSignal
from defect_metrics.domain.severity import SeveritySummary

logger = get_logger(__name__)

_SEVERITY_PALETTE = tuple(SEVERITY_COLORS[level] for level in SEVERITY_LEVELS)


def _format_count(count: float) -> str:
    if isinstance(count, float) and count.is_integer():
        return str(int(count))
    return str(count)


def legend_lines(series: ProportionalSeries, decimals: int = 1) -> list[str]:
    """
    Legend text per entry.

    Example:
        ["2 times: 4 (80.0%)", "3 times: 1 (20.0%)"]
    """
    return [
        f"{entry.label}: {_format_count(entry.count)} ({entry.percentage:.{decimals}f}%)" for entry in series.entries
    ]


class ProjectDetailBuilder:
    """
    Renders one bundle into widgets.

    Attributes:
        engine: Chart geometry
        classifier: Risk tier classifier for the project badge
    """

    def __init__(self, engine: ChartGeometryEngine | None = None, classifier: RiskClassifier | None = None):
        self.engine = engine or ChartGeometryEngine()
        self.classifier = classifier or RiskClassifier()
        self._pairs = ProportionalSeriesBuilder()

    def build(self, bundle: MetricsBundle, risk_signal: RiskSignal | None = None) -> dict[str, Any]:
        renderers: dict[MetricKind, Callable[[Any], dict[str, Any]]] = {
            MetricKind.DEFECT_STATISTICS: self.statistics_widget,
            MetricKind.DEFECTS: self.defects_widget,
            MetricKind.SEVERITY_SUMMARY: self.severity_widget,
            MetricKind.SEVERITY_INDEX: self.thermometer_widget,
            MetricKind.DENSITY: self.gauge_widget,
            MetricKind.REMARK_RATIO: self.remark_widget,
            MetricKind.REOPEN_SUMMARY: lambda series: self.pie_widget(series, chart_palettes.REOPEN),
            MetricKind.DEFECT_TYPES: self.defect_type_widget,
            MetricKind.DEFECTS_BY_MODULE: lambda series: self.pie_widget(series, chart_palettes.MODULE, decimals=2),
        }

        widgets = {kind.value: self._widget(bundle.get(kind), renderers[kind]) for kind in MetricKind}

        return {
            "project_id": bundle.project_id,
            "token": bundle.token,
            "timestamp": bundle.timestamp.isoformat(),
            "complete": bundle.is_complete,
            "risk": self.risk_badge(risk_signal, bundle.data(MetricKind.DEFECTS, default=[])),
            "widgets": widgets,
        }

    def _widget(self, result: MetricResult, render: Callable[[Any], dict[str, Any]]) -> dict[str, Any]:
        if not result.is_ok:
            widget: dict[str, Any] = {"status": result.status.value}
            if result.detail:
                widget["detail"] = result.detail
            return widget
        return {"status": result.status.value, **render(result.data)}

    # ==============================
    # Widgets
    # ==============================

    def risk_badge(self, signal: RiskSignal | None, defects: Sequence[Defect]) -> dict[str, Any]:
        tier = self.classifier.classify(signal, defects)
        return {"tier": tier.value, "label": tier.label, "color": tier.color}

    @staticmethod
    def statistics_widget(statistics: dict[str, Any]) -> dict[str, Any]:
        return {"statistics": dict(statistics)}

    @staticmethod
    def defects_widget(defects: list[Defect]) -> dict[str, Any]:
        by_status: dict[str, int] = {}
        for defect in defects:
            by_status[defect.status] = by_status.get(defect.status, 0) + 1
        return {"count": len(defects), "by_status": by_status}

    def severity_widget(self, summary: SeveritySummary) -> dict[str, Any]:
        """
        Per-level totals with fixed REOPEN/NEW/OPEN/FIXED/DUPLICATE rows and any
        other upstream status fields as sent, plus a high/medium/low distribution pie.
        """
        levels = []
        for level in SEVERITY_LEVELS:
            bucket = summary.bucket(level)
            levels.append(
                {
                    "level": level,
                    "total": bucket.total,
                    "color": SEVERITY_COLORS[level],
                    "statuses": [
                        {"status": status, "count": count, "color": STATUS_COLORS[status]}
                        for status, count in bucket.fixed_layout()
                    ],
                    "other_statuses": bucket.extra_statuses,
                }
            )

        distribution = self._pairs.build_from_pairs((level, summary.bucket(level).total) for level in SEVERITY_LEVELS)
        return {
            "total_defects": summary.total_defects,
            "bucket_total": summary.bucket_total,
            "consistent": summary.is_consistent,
            "levels": levels,
            "distribution": self.pie_widget(distribution, _SEVERITY_PALETTE),
        }

    def thermometer_widget(self, severity_index: float) -> dict[str, Any]:
        reading = self.engine.read_thermometer(severity_index)
        return {
            "value": reading.value,
            "ratio": reading.ratio,
            "percent": reading.percent,
            "color": reading.color,
            "domain": [thermometer_config.DOMAIN_MIN, thermometer_config.DOMAIN_MAX],
        }

    def gauge_widget(self, density: float) -> dict[str, Any]:
        spec = GaugeSpec(
            value=density,
            domain_min=gauge_config.DOMAIN_MIN,
            domain_max=gauge_config.DOMAIN_MAX,
            zone_boundaries=gauge_config.ZONE_BOUNDARIES,
        )
        reading = self.engine.read_gauge(spec)
        boundaries = gauge_config.ZONE_BOUNDARIES
        return {
            "value": density,
            "clamped_value": reading.value,
            "needle_angle_deg": reading.needle_angle_deg,
            "zone_index": reading.zone_index,
            "color": reading.color,
            "domain": [gauge_config.DOMAIN_MIN, gauge_config.DOMAIN_MAX],
            "zones": [
                {"from": boundaries[i], "to": boundaries[i + 1], "color": color}
                for i, color in enumerate(gauge_config.ZONE_COLORS)
            ],
        }

    @staticmethod
    def remark_widget(remark: RemarkRatio) -> dict[str, Any]:
        return {
            "ratio": remark.ratio,
            "display": f"{remark.ratio:.2f}%",
            "category": remark.category,
            "color": remark.color,
        }

    def pie_widget(self, series: ProportionalSeries, palette: Sequence[str], decimals: int = 1) -> dict[str, Any]:
        """Slices with resolved colors and legend lines; an empty series has neither."""
        if series.is_empty:
            return {"empty": True, "total": series.total, "slices": [], "legend": []}

        geometry = self.engine.build_slices(series, palette_size=len(palette))
        slices = [
            {
                "label": entry.label,
                "count": entry.count,
                "percentage": entry.percentage,
                "start_angle_deg": piece.start_angle_deg,
                "end_angle_deg": piece.end_angle_deg,
                "color_index": piece.color_index,
                "color": palette[piece.color_index],
            }
            for entry, piece in zip(series.entries, geometry, strict=True)
        ]
        return {"empty": False, "total": series.total, "slices": slices, "legend": legend_lines(series, decimals)}

    def defect_type_widget(self, distribution: DefectTypeDistribution) -> dict[str, Any]:
        return {
            "total_defect_count": distribution.total_defect_count,
            "most_common_type": distribution.most_common_type,
            "most_common_count": distribution.most_common_count,
            **self.pie_widget(distribution.series, chart_palettes.DEFECT_TYPE),
        }


def build_project_detail(
    bundle: MetricsBundle,
    risk_signal: RiskSignal | None = None,
    classifier: RiskClassifier | None = None,
    engine: ChartGeometryEngine | None = None,
) -> dict[str, Any]:
    """
    Build the project detail view-model for one bundle.

    Args:
        bundle: Merged (or in-flight) bundle; PENDING widgets render as loading
        risk_signal: Cached signal for the project, if the overview fetched one
        classifier: Risk classifier (default policy when omitted)
        engine: Chart geometry engine

    Returns:
        {"project_id", "token", "timestamp", "complete", "risk", "widgets": {kind: widget}}
    """
    detail = ProjectDetailBuilder(engine=engine, classifier=classifier).build(bundle, risk_signal)
    logger.debug("Project detail built", extra={"project_id": bundle.project_id, "complete": detail["complete"]})
    return detail
