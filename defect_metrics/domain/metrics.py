"""
Metric bundle domain models

Per-project fetch results and the dashboard state that owns them:
    - MetricKind: the nine per-project metrics, in render order
    - MetricStatus / MetricResult: one metric's outcome (data or marker)
    - MetricsBundle: all nine results for one project fetch cycle
    - DashboardState: the single-owner application state
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .project import Project, RiskSignal


class MetricKind(str, Enum):
    """
    Per-project metrics. Declaration order is the merge and render order.
    """

    DEFECT_STATISTICS = "defect_statistics"
    DEFECTS = "defects"
    SEVERITY_SUMMARY = "severity_summary"
    SEVERITY_INDEX = "severity_index"
    DENSITY = "density"
    REMARK_RATIO = "remark_ratio"
    REOPEN_SUMMARY = "reopen_summary"
    DEFECT_TYPES = "defect_types"
    DEFECTS_BY_MODULE = "defects_by_module"


class MetricStatus(str, Enum):
    """
    Outcome of one metric fetch.

    EMPTY (upstream said "no data") and ERROR (the request failed) are never
    conflated: the first renders as "no data available", the second as a
    failure notice. INVALID marks a payload that arrived but could not be adapted.
    """

    PENDING = "pending"
    OK = "ok"
    EMPTY = "empty"
    ERROR = "error"
    INVALID = "invalid"


@dataclass(frozen=True)
class MetricResult:
    """
    Result of one metric fetch.

    Attributes:
        kind: Which metric this is
        status: Outcome marker
        data: Adapted payload when status is OK, otherwise None
        detail: Upstream message or error description for non-OK results
    """

    kind: MetricKind
    status: MetricStatus
    data: Any = None
    detail: str | None = None

    @classmethod
    def ok(cls, kind: MetricKind, data: Any) -> "MetricResult":
        return cls(kind=kind, status=MetricStatus.OK, data=data)

    @classmethod
    def empty(cls, kind: MetricKind, detail: str | None = None) -> "MetricResult":
        return cls(kind=kind, status=MetricStatus.EMPTY, detail=detail)

    @classmethod
    def error(cls, kind: MetricKind, detail: str) -> "MetricResult":
        return cls(kind=kind, status=MetricStatus.ERROR, detail=detail)

    @classmethod
    def invalid(cls, kind: MetricKind, detail: str) -> "MetricResult":
        return cls(kind=kind, status=MetricStatus.INVALID, detail=detail)

    @classmethod
    def pending(cls, kind: MetricKind) -> "MetricResult":
        return cls(kind=kind, status=MetricStatus.PENDING)

    @property
    def is_ok(self) -> bool:
        return self.status is MetricStatus.OK

    @property
    def is_settled(self) -> bool:
        return self.status is not MetricStatus.PENDING


@dataclass(kw_only=True)
class MetricsBundle:
    """
    All per-project metric results from one fetch cycle.

    Attributes:
        timestamp: When the bundle was merged
        project_id: Project the bundle belongs to
        token: Request token of the fetch that produced it
        results: One result per MetricKind, keyed in MetricKind order
    """

    timestamp: datetime
    project_id: int
    token: int
    results: dict[MetricKind, MetricResult] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.timestamp, datetime):
            raise TypeError(f"timestamp must be datetime, got {type(self.timestamp)}")
        # Missing kinds are still loading; re-key so iteration follows MetricKind order
        self.results = {kind: self.results.get(kind, MetricResult.pending(kind)) for kind in MetricKind}

    def get(self, kind: MetricKind) -> MetricResult:
        return self.results[kind]

    def data(self, kind: MetricKind, default: Any = None) -> Any:
        """Adapted payload for ``kind`` when it is OK, otherwise ``default``."""
        result = self.results[kind]
        return result.data if result.is_ok else default

    @property
    def is_complete(self) -> bool:
        return all(result.is_settled for result in self.results.values())

    def kinds_with_status(self, status: MetricStatus) -> list[MetricKind]:
        return [kind for kind, result in self.results.items() if result.status is status]

    def status_counts(self) -> dict[str, int]:
        counts = {status.value: 0 for status in MetricStatus}
        for result in self.results.values():
            counts[result.status.value] += 1
        return counts


@dataclass
class DashboardState:
    """
    Application state, written only by the fetch orchestrator.

    Attributes:
        projects: Project list from the last overview fetch
        risk_signals: Last known risk signal per project id
        selected_project_id: Project whose bundle is currently wanted
        current_token: Token of the newest project fetch; older tokens are stale
        portfolio_token: Token of the newest portfolio refresh
        bundles: Most recently merged bundle per project id
    """

    projects: list[Project] = field(default_factory=list)
    risk_signals: dict[int, RiskSignal] = field(default_factory=dict)
    selected_project_id: int | None = None
    current_token: int = 0
    portfolio_token: int = 0
    bundles: dict[int, MetricsBundle] = field(default_factory=dict)

    @property
    def selected_bundle(self) -> MetricsBundle | None:
        if self.selected_project_id is None:
            return None
        return self.bundles.get(self.selected_project_id)
