"""
Proportional Series Builder

Turns heterogeneous category records into an ordered ProportionalSeries.

Upstream endpoints disagree on field names; a record's count is the first
present field among an ordered candidate list (``value``, ``defectCount``,
``count`` by default) and its label likewise. Percentages are
``count / total * 100`` and the series keeps input order.

Usage:
    from defect_metrics.analysis.series_builder import ProportionalSeriesBuilder

    builder = ProportionalSeriesBuilder(label_fields=("name", "moduleName", "module"))
    series = builder.build([{"name": "Bench", "value": 56}, {"moduleName": "Dashboard", "count": 17}])
"""

import math
from collections.abc import Iterable
from typing import Any

from defect_metrics.core import get_logger
from defect_metrics.domain.charts import ProportionalSeries, SeriesEntry
from defect_metrics.domain.constants import COUNT_FIELDS
from defect_metrics.domain.errors import MalformedPayloadError
from defect_metrics.utils.error_handling import log_and_return_default

logger = get_logger(__name__)


def first_present(record: dict[str, Any], fields: Iterable[str]) -> Any:
    """
    Value of the first field present (and not None) in ``record``.

    Returns:
        The value, or None when no candidate field is present
    """
    for name in fields:
        value = record.get(name)
        if value is not None:
            return value
    return None


class ProportionalSeriesBuilder:
    """
    Stateless builder for proportional (share-of-whole) series.

    Attributes:
        count_fields: Candidate count field names, highest precedence first
        label_fields: Candidate label field names, highest precedence first
    """

    def __init__(
        self,
        count_fields: tuple[str, ...] = COUNT_FIELDS,
        label_fields: tuple[str, ...] = ("label", "name"),
    ):
        self.count_fields = count_fields
        self.label_fields = label_fields

    def resolve_count(self, record: dict[str, Any]) -> float:
        """
        Count for one record; 0 when absent, non-numeric, non-finite or negative.
        """
        raw = first_present(record, self.count_fields)
        if raw is None:
            return 0

        try:
            if isinstance(raw, bool):
                raise TypeError("boolean is not a count")
            count = float(raw)
        except (TypeError, ValueError, OverflowError) as e:
            return log_and_return_default(
                logger,
                e,
                context={"fields": self.count_fields, "raw": repr(raw)},
                default_value=0,
                error_type="Count parsing",
            )

        if not math.isfinite(count) or count < 0:
            logger.warning("Ignoring unusable count", extra={"raw": repr(raw)})
            return 0

        return int(count) if count.is_integer() else count

    def resolve_label(self, record: dict[str, Any], index: int) -> str:
        label = first_present(record, self.label_fields)
        if label is None or str(label).strip() == "":
            return f"Category {index + 1}"
        return str(label)

    def build(self, records: Iterable[Any] | None) -> ProportionalSeries:
        """
        Build a series from category records.

        Args:
            records: Category records in display order; None yields an empty series

        Returns:
            ProportionalSeries; when the total is 0 every percentage is 0

        Raises:
            MalformedPayloadError: If ``records`` is not iterable
        """
        if records is None:
            return ProportionalSeries()

        if isinstance(records, str | bytes | dict) or not isinstance(records, Iterable):
            raise MalformedPayloadError(f"category records must be a list, got {type(records).__name__}")

        resolved: list[tuple[str, float]] = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                logger.warning("Skipping non-object category record", extra={"index": index})
                continue
            resolved.append((self.resolve_label(record, index), self.resolve_count(record)))

        total = sum(count for _, count in resolved)
        if not math.isfinite(total):
            logger.warning("Category total overflowed, returning empty series", extra={"categories": len(resolved)})
            return ProportionalSeries()

        entries = tuple(
            SeriesEntry(label=label, count=count, percentage=(count / total) * 100 if total > 0 else 0.0)
            for label, count in resolved
        )
        return ProportionalSeries(entries=entries, total=total)

    def build_from_pairs(self, pairs: Iterable[tuple[str, float]]) -> ProportionalSeries:
        """Build a series from ready-made (label, count) pairs."""
        return self.build([{self.label_fields[0]: label, self.count_fields[0]: count} for label, count in pairs])
