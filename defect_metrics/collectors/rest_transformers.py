"""
Defect Tracker REST Response Transformers

One adapter per upstream endpoint, mapping a raw response envelope into the
fixed internal types. Every "which field name wins" decision lives here.

Each adapter:
    - raises EmptyResultError when upstream explicitly reports no data
      (sentinel message or null ``data``)
    - raises MalformedPayloadError when ``data`` has an unusable shape
    - otherwise returns the adapted value

Usage:
    from defect_metrics.collectors.rest_transformers import DefectPayloadTransformer

    transformer = DefectPayloadTransformer()
    summary = transformer.severity_summary(envelope)
"""

import math
from collections.abc import Callable
from typing import Any

from defect_metrics.analysis.risk_classifier import parse_color_descriptor
from defect_metrics.analysis.series_builder import ProportionalSeriesBuilder, first_present
from defect_metrics.analysis.severity_aggregator import SeverityAggregator
from defect_metrics.collectors.defect_rest_client import is_empty_result_message
from defect_metrics.core import get_logger
from defect_metrics.domain.charts import ProportionalSeries
from defect_metrics.domain.constants import (
    DEFECT_STATUS_FIELDS,
    DEFECT_TYPE_LABEL_FIELDS,
    MODULE_LABEL_FIELDS,
)
from defect_metrics.domain.errors import EmptyResultError, MalformedPayloadError
from defect_metrics.domain.indicators import DefectTypeDistribution, RemarkRatio
from defect_metrics.domain.metrics import MetricKind
from defect_metrics.domain.project import Defect, Project, RiskSignal
from defect_metrics.domain.severity import SeveritySummary

logger = get_logger(__name__)


def unwrap_envelope(envelope: Any, endpoint: str) -> Any:
    """
    Return ``envelope["data"]``.

    Raises:
        MalformedPayloadError: If the envelope is not an object
        EmptyResultError: If ``message`` is an empty-result sentinel or data is null
    """
    if not isinstance(envelope, dict):
        raise MalformedPayloadError(f"{endpoint}: response envelope must be an object, got {type(envelope).__name__}")

    message = envelope.get("message")
    if is_empty_result_message(message):
        raise EmptyResultError(f"{endpoint}: {message}")

    data = envelope.get("data")
    if data is None:
        raise EmptyResultError(f"{endpoint}: no data in response")
    return data


def _require_list(data: Any, endpoint: str) -> list[Any]:
    if not isinstance(data, list):
        raise MalformedPayloadError(f"{endpoint}: expected a list, got {type(data).__name__}")
    return data


def _as_number(value: Any, field: str, endpoint: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise MalformedPayloadError(f"{endpoint}: {field} must be numeric, got {value!r}")
    try:
        number = float(value)
    except OverflowError:
        raise MalformedPayloadError(f"{endpoint}: {field} is out of range") from None
    if not math.isfinite(number):
        raise MalformedPayloadError(f"{endpoint}: {field} must be finite, got {value!r}")
    return number


def _as_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return default
    if isinstance(value, float) and not math.isfinite(value):
        return default
    return int(value)


def parse_percentage(raw: Any) -> float:
    """
    Parse "97.75%", "97.75" or 97.75 into 97.75.

    Raises:
        ValueError: If the value is not a percentage
    """
    if isinstance(raw, bool):
        raise ValueError(f"not a percentage: {raw!r}")
    try:
        if isinstance(raw, int | float):
            value = float(raw)
        elif isinstance(raw, str):
            value = float(raw.strip().rstrip("%").strip())
        else:
            raise ValueError(f"not a percentage: {raw!r}")
    except OverflowError:
        raise ValueError(f"percentage out of range: {raw!r}") from None
    if not math.isfinite(value):
        raise ValueError(f"not a percentage: {raw!r}")
    return value


class DefectPayloadTransformer:
    """
    Adapters from response envelopes to domain types.

    Holds only stateless collaborators; safe to share across fetches.
    """

    def __init__(
        self,
        aggregator: SeverityAggregator | None = None,
        count_fields: tuple[str, ...] | None = None,
    ):
        self.aggregator = aggregator or SeverityAggregator()
        builder_kwargs = {"count_fields": count_fields} if count_fields else {}
        self.module_series = ProportionalSeriesBuilder(label_fields=MODULE_LABEL_FIELDS, **builder_kwargs)
        self.type_series = ProportionalSeriesBuilder(label_fields=DEFECT_TYPE_LABEL_FIELDS, **builder_kwargs)
        self.reopen_series = ProportionalSeriesBuilder(label_fields=("label",), **builder_kwargs)

    def adapter_for(self, kind: MetricKind) -> Callable[[Any], Any]:
        """Adapter for one per-project metric kind."""
        return {
            MetricKind.DEFECT_STATISTICS: self.defect_statistics,
            MetricKind.DEFECTS: self.defects,
            MetricKind.SEVERITY_SUMMARY: self.severity_summary,
            MetricKind.SEVERITY_INDEX: self.severity_index,
            MetricKind.DENSITY: self.density,
            MetricKind.REMARK_RATIO: self.remark_ratio,
            MetricKind.REOPEN_SUMMARY: self.reopen_summary,
            MetricKind.DEFECT_TYPES: self.defect_types,
            MetricKind.DEFECTS_BY_MODULE: self.defects_by_module,
        }[kind]

    # ==============================
    # Portfolio
    # ==============================

    @staticmethod
    def projects(envelope: Any) -> list[Project]:
        """
        REST: {"data": [{"id": 7, "projectName": "Billing Portal"}]}
        Records without an integer id are skipped.
        """
        records = _require_list(unwrap_envelope(envelope, "projects"), "projects")

        projects = []
        for record in records:
            project_id = record.get("id") if isinstance(record, dict) else None
            if isinstance(project_id, bool) or not isinstance(project_id, int):
                logger.warning("Skipping project record without integer id", extra={"record": repr(record)[:200]})
                continue
            name = first_present(record, ("projectName", "name")) or f"Project {project_id}"
            projects.append(Project(id=project_id, name=str(name)))
        return projects

    @staticmethod
    def defects(envelope: Any) -> list[Defect]:
        """
        REST: {"data": [{"projectId": 7, "defectStatusName": "NEW", ...}]}
        Status comes from ``defectStatusName`` then ``status``; records with neither are skipped.
        """
        records = _require_list(unwrap_envelope(envelope, "defects"), "defects")

        defects = []
        for record in records:
            if not isinstance(record, dict):
                continue
            status = first_present(record, DEFECT_STATUS_FIELDS)
            if not isinstance(status, str) or not status.strip():
                continue
            project_id = record.get("projectId")
            defects.append(
                Defect(
                    status=status.strip().upper(),
                    project_id=project_id if isinstance(project_id, int) and not isinstance(project_id, bool) else None,
                    raw=record,
                )
            )
        return defects

    @staticmethod
    def risk_signal(envelope: Any) -> RiskSignal:
        """
        REST: {"data": {"projectCardColor": "..."}} and/or {"data": {"availableRiskLevels": [...]}}
        """
        data = unwrap_envelope(envelope, "project-card-color")
        if not isinstance(data, dict):
            raise MalformedPayloadError(f"project-card-color: expected an object, got {type(data).__name__}")

        levels = data.get("availableRiskLevels")
        if levels is not None and not isinstance(levels, list):
            raise MalformedPayloadError("project-card-color: availableRiskLevels must be a list")

        descriptor = data.get("projectCardColor")
        descriptor = descriptor if isinstance(descriptor, str) else None
        return RiskSignal(
            risk_levels=frozenset(level for level in levels or [] if isinstance(level, str)),
            color=parse_color_descriptor(descriptor),
            descriptor=descriptor,
        )

    # ==============================
    # Per-project metrics
    # ==============================

    @staticmethod
    def defect_statistics(envelope: Any) -> dict[str, Any]:
        data = unwrap_envelope(envelope, "defect-statistics")
        if not isinstance(data, dict):
            raise MalformedPayloadError(f"defect-statistics: expected an object, got {type(data).__name__}")
        return data

    def severity_summary(self, envelope: Any) -> SeveritySummary:
        """
        REST: {"data": {"defectSummary": [...], "totalDefects": 9}} or {"data": [...]}
        An empty list yields an all-zero summary, not an empty result.
        """
        data = unwrap_envelope(envelope, "defect_severity_summary")
        if isinstance(data, list):
            return self.aggregator.aggregate(data)
        if isinstance(data, dict):
            return self.aggregator.aggregate(data.get("defectSummary"), total_defects=data.get("totalDefects", 0))
        raise MalformedPayloadError(f"defect_severity_summary: unexpected {type(data).__name__}")

    @staticmethod
    def severity_index(envelope: Any) -> float:
        """REST: {"data": {"dsiPercentage": 43.6}}; a bare 0 means an index of 0."""
        data = unwrap_envelope(envelope, "dsi")
        if isinstance(data, dict):
            return _as_number(data.get("dsiPercentage"), "dsiPercentage", "dsi")
        return _as_number(data, "data", "dsi")

    @staticmethod
    def density(envelope: Any) -> float:
        """REST: {"data": {"defectDensity": 10.12}}; a bare 0 means a density of 0."""
        data = unwrap_envelope(envelope, "defect-density")
        if isinstance(data, dict):
            return _as_number(data.get("defectDensity"), "defectDensity", "defect-density")
        return _as_number(data, "data", "defect-density")

    @staticmethod
    def remark_ratio(envelope: Any) -> RemarkRatio:
        data = unwrap_envelope(envelope, "defect-remark-ratio")
        if not isinstance(data, dict):
            raise MalformedPayloadError(f"defect-remark-ratio: expected an object, got {type(data).__name__}")
        try:
            ratio = parse_percentage(data.get("ratio"))
        except ValueError as e:
            raise MalformedPayloadError(f"defect-remark-ratio: {e}") from e
        return RemarkRatio(
            ratio=ratio,
            category=str(data.get("category") or ""),
            color=str(data.get("color") or ""),
        )

    def reopen_summary(self, envelope: Any) -> ProportionalSeries:
        """
        REST: {"data": [{"reopenCount": 2, "count": 4, "percentage": 80.0}]}
        Upstream percentages are ignored and recomputed from counts.
        """
        records = _require_list(unwrap_envelope(envelope, "reopen-count-summary"), "reopen-count-summary")
        labelled = [
            {**record, "label": f"{record.get('reopenCount', '?')} times"}
            for record in records
            if isinstance(record, dict)
        ]
        return self.reopen_series.build(labelled)

    def defect_types(self, envelope: Any) -> DefectTypeDistribution:
        data = unwrap_envelope(envelope, "defect-type")
        if not isinstance(data, dict):
            raise MalformedPayloadError(f"defect-type: expected an object, got {type(data).__name__}")

        defect_types = data.get("defectTypes")
        if not isinstance(defect_types, list):
            raise MalformedPayloadError("defect-type: defectTypes is not a list")

        series = self.type_series.build(defect_types)
        most_common = data.get("mostCommonDefectType")
        most_common_count = _as_int(data.get("mostCommonDefectCount"))
        if not isinstance(most_common, str):
            largest = series.largest()
            most_common = largest.label if largest is not None else None
            most_common_count = int(largest.count) if largest is not None else 0

        return DefectTypeDistribution(
            series=series,
            total_defect_count=_as_int(data.get("totalDefectCount"), default=int(series.total)),
            most_common_type=most_common,
            most_common_count=most_common_count,
        )

    def defects_by_module(self, envelope: Any) -> ProportionalSeries:
        """REST: {"data": [{"name"|"moduleName"|"module": ..., "value"|"defectCount"|"count": ...}]}"""
        records = _require_list(unwrap_envelope(envelope, "defects-by-module"), "defects-by-module")
        return self.module_series.build(records)
