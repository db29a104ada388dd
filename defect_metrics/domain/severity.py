"""
Severity domain models - fixed high/medium/low defect breakdown

Upstream severity summaries vary in shape; these models are the stable
structure every consumer reads.
"""

import math
from dataclasses import dataclass, field
from typing import Any

from .constants import STATUS_NAMES


def resolve_status_count(value: Any) -> int:
    """
    Resolve a per-status value to an integer count.

    Upstream sends either a bare number or an object ``{"count": n}``;
    anything else, including NaN and infinity, counts as 0.

    Example:
        >>> resolve_status_count({"count": 3})
        3
        >>> resolve_status_count("n/a")
        0
    """
    if isinstance(value, dict):
        value = value.get("count", 0)
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return 0


@dataclass
class SeverityBucket:
    """
    Defects of one severity level.

    Attributes:
        total: Total defects at this level (>= 0)
        statuses: Every upstream status field, values kept verbatim; unknown
            status keys are preserved but excluded from ``fixed_layout()``
    """

    total: int = 0
    statuses: dict[str, Any] = field(default_factory=dict)

    def status_count(self, status: str) -> int:
        """Count for one status, 0 if absent."""
        return resolve_status_count(self.statuses.get(status, 0))

    def fixed_layout(self) -> list[tuple[str, int]]:
        """(status, count) rows for REOPEN, NEW, OPEN, FIXED, DUPLICATE in that order."""
        return [(name, self.status_count(name)) for name in STATUS_NAMES]

    @property
    def extra_statuses(self) -> dict[str, Any]:
        """Upstream status keys outside the fixed layout."""
        return {key: value for key, value in self.statuses.items() if key not in STATUS_NAMES}


@dataclass
class SeveritySummary:
    """
    Fixed-shape severity summary for a project.

    ``total_defects`` is passed through from upstream and is not reconciled
    against the bucket totals; ``is_consistent`` lets consumers check.

    Example:
        summary = SeveritySummary(high=SeverityBucket(total=5), total_defects=6)
        summary.bucket_total   # 5
        summary.is_consistent  # False
    """

    high: SeverityBucket = field(default_factory=SeverityBucket)
    medium: SeverityBucket = field(default_factory=SeverityBucket)
    low: SeverityBucket = field(default_factory=SeverityBucket)
    total_defects: int = 0

    def bucket(self, level: str) -> SeverityBucket:
        """
        Bucket by level name (case-insensitive).

        Raises:
            KeyError: If level is not high, medium or low
        """
        key = level.lower()
        if key not in ("high", "medium", "low"):
            raise KeyError(level)
        return getattr(self, key)

    @property
    def bucket_total(self) -> int:
        return self.high.total + self.medium.total + self.low.total

    @property
    def is_consistent(self) -> bool:
        return self.bucket_total == self.total_defects
