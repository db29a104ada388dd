"""
Single-value indicator models

Small adapted payloads that are neither series nor severity buckets.
"""

from dataclasses import dataclass

from .charts import ProportionalSeries


@dataclass(frozen=True)
class RemarkRatio:
    """
    Defect-to-remark ratio.

    Attributes:
        ratio: Percentage value, e.g. 97.75 for "97.75%"
        category: Qualitative band reported upstream (e.g. "Medium")
        color: Badge color reported upstream
    """

    ratio: float
    category: str
    color: str


@dataclass(frozen=True)
class DefectTypeDistribution:
    """
    Defects broken down by type.

    ``total_defect_count`` and the most-common fields are passed through from
    upstream; ``series.total`` is what the pie is drawn from.
    """

    series: ProportionalSeries
    total_defect_count: int
    most_common_type: str | None = None
    most_common_count: int = 0
