"""
Domain Models - Type-safe data structures for defect metrics

This package contains dataclasses representing dashboard domain concepts:
    - project: Project, Defect, RiskSignal, RiskTier, ColorTag
    - severity: SeverityBucket, SeveritySummary
    - charts: ProportionalSeries, SliceGeometry, GaugeSpec, GaugeReading, FillReading
    - indicators: RemarkRatio, DefectTypeDistribution
    - metrics: MetricKind, MetricStatus, MetricResult, MetricsBundle, DashboardState

Usage:
    from defect_metrics.domain import RiskTier, SeveritySummary

    summary = SeveritySummary(total_defects=0)
"""

from .charts import FillReading, GaugeReading, GaugeSpec, ProportionalSeries, SeriesEntry, SliceGeometry
from .errors import DefectMetricsError, EmptyResultError, MalformedPayloadError, TransportError
from .indicators import DefectTypeDistribution, RemarkRatio
from .metrics import DashboardState, MetricKind, MetricResult, MetricsBundle, MetricStatus
from .project import ColorTag, Defect, Project, RiskSignal, RiskTier
from .severity import SeverityBucket, SeveritySummary

__all__ = [
    # Projects and risk
    "Project",
    "Defect",
    "RiskSignal",
    "RiskTier",
    "ColorTag",
    # Severity
    "SeverityBucket",
    "SeveritySummary",
    # Charts
    "SeriesEntry",
    "ProportionalSeries",
    "SliceGeometry",
    "GaugeSpec",
    "GaugeReading",
    "FillReading",
    # Indicators
    "RemarkRatio",
    "DefectTypeDistribution",
    # Metric bundles
    "MetricKind",
    "MetricStatus",
    "MetricResult",
    "MetricsBundle",
    "DashboardState",
    # Errors
    "DefectMetricsError",
    "TransportError",
    "EmptyResultError",
    "MalformedPayloadError",
]
