"""
Severity Aggregator

Normalizes the defect severity summary into the fixed SeveritySummary shape.

Upstream sends one record per severity level:

    [
        {"severity": "High", "total": 5, "NEW": 2, "REOPEN": {"count": 1}},
        {"severity": "low", "total": 1},
    ]

Each record is routed by its lower-cased ``severity`` tag. ``total`` is copied
(0 when missing or non-numeric) and every other field lands in the bucket's
``statuses`` map verbatim, with falsy values stored as 0. Records with a missing
or unrecognized tag are dropped with a warning.

Usage:
    from defect_metrics.analysis.severity_aggregator import SeverityAggregator

    summary = SeverityAggregator().aggregate(records, total_defects=6)
    summary.high.status_count("NEW")
"""

import math
from collections.abc import Iterable
from typing import Any

from defect_metrics.core import get_logger
from defect_metrics.domain.constants import SEVERITY_LEVELS
from defect_metrics.domain.errors import MalformedPayloadError
from defect_metrics.domain.severity import SeverityBucket, SeveritySummary

logger = get_logger(__name__)

_ROUTING_FIELDS = ("severity", "total")


def _coerce_total(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0
    if isinstance(value, float) and not math.isfinite(value) or value < 0:
        return 0
    return int(value)


class SeverityAggregator:
    """
    Stateless normalizer for severity summaries.

    Every call is independent; the same input always yields an equal summary.
    """

    def aggregate(self, records: Iterable[Any] | None, total_defects: Any = 0) -> SeveritySummary:
        """
        Build a SeveritySummary from upstream severity records.

        Args:
            records: Per-severity records, or None when upstream sent no list
            total_defects: Upstream grand total, passed through unreconciled

        Returns:
            SeveritySummary with all three buckets present

        Raises:
            MalformedPayloadError: If ``records`` is neither None nor a list/tuple
        """
        summary = SeveritySummary(total_defects=_coerce_total(total_defects))

        if records is None:
            logger.debug("No severity records supplied, returning zeroed summary")
            return summary

        if not isinstance(records, list | tuple):
            raise MalformedPayloadError(f"severity records must be a list, got {type(records).__name__}")

        seen: set[str] = set()
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                logger.warning(
                    "Dropping non-object severity record",
                    extra={"index": index, "record_type": type(record).__name__},
                )
                continue

            tag = record.get("severity")
            level = tag.strip().lower() if isinstance(tag, str) else None
            if level not in SEVERITY_LEVELS:
                logger.warning(
                    "Dropping severity record with unrecognized tag",
                    extra={"index": index, "severity": tag},
                )
                continue

            if level in seen:
                logger.warning("Duplicate severity record, later record wins", extra={"severity": level})
            seen.add(level)

            setattr(summary, level, self._build_bucket(record))

        if not summary.is_consistent:
            logger.debug(
                "Severity bucket totals differ from upstream total",
                extra={"bucket_total": summary.bucket_total, "total_defects": summary.total_defects},
            )

        return summary

    @staticmethod
    def _build_bucket(record: dict[str, Any]) -> SeverityBucket:
        statuses = {key: (value or 0) for key, value in record.items() if key not in _ROUTING_FIELDS}
        return SeverityBucket(total=_coerce_total(record.get("total")), statuses=statuses)
