#!/usr/bin/env python3
"""
Metrics Fetch Orchestrator

Issues every per-project metric request concurrently on one event loop,
isolates each request's failure, and merges the settled results into a
MetricsBundle in fixed MetricKind order.

Selection changes are not cancelled; each fetch carries a request token and
only the newest token may write its bundle. A late result for a superseded
selection is discarded.

Usage:
    from defect_metrics.collectors.metrics_orchestrator import MetricsFetchOrchestrator

    async with get_defect_rest_client() as client:
        orchestrator = MetricsFetchOrchestrator(client)
        await orchestrator.refresh_portfolio()
        bundle = await orchestrator.fetch_project(7)
"""

import asyncio
import itertools
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from defect_metrics.collectors.rest_transformers import DefectPayloadTransformer
from defect_metrics.core import get_logger, log_with_context
from defect_metrics.domain.errors import EmptyResultError, MalformedPayloadError, TransportError
from defect_metrics.domain.metrics import DashboardState, MetricKind, MetricResult, MetricsBundle
from defect_metrics.domain.project import Defect, Project, RiskSignal

logger = get_logger(__name__)

# Client coroutine per metric kind; declaration order matches MetricKind
FETCH_PLAN: tuple[tuple[MetricKind, str], ...] = (
    (MetricKind.DEFECT_STATISTICS, "get_defect_statistics"),
    (MetricKind.DEFECTS, "get_defects_by_project"),
    (MetricKind.SEVERITY_SUMMARY, "get_severity_summary"),
    (MetricKind.SEVERITY_INDEX, "get_severity_index"),
    (MetricKind.DENSITY, "get_defect_density"),
    (MetricKind.REMARK_RATIO, "get_remark_ratio"),
    (MetricKind.REOPEN_SUMMARY, "get_reopen_summary"),
    (MetricKind.DEFECT_TYPES, "get_defect_type_distribution"),
    (MetricKind.DEFECTS_BY_MODULE, "get_defects_by_module"),
)


@dataclass
class PortfolioSnapshot:
    """
    Result of one portfolio refresh.

    Attributes:
        projects: All projects, in upstream order
        risk_signals: Signal per project id; projects whose color fetch failed are absent
        defects: Defect status records across all projects
        failures: Human-readable description of each failed request
        token: Refresh token; the snapshot was stored only if it was still the newest
        superseded: True when a newer refresh started before this one settled
    """

    projects: list[Project] = field(default_factory=list)
    risk_signals: dict[int, RiskSignal] = field(default_factory=dict)
    defects: list[Defect] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)
    token: int = 0
    superseded: bool = False

    def defects_for(self, project_id: int) -> list[Defect]:
        return [defect for defect in self.defects if defect.project_id == project_id]


async def settle(
    kind: MetricKind,
    fetch: Callable[[], Awaitable[Any]],
    adapt: Callable[[Any], Any],
    label: str | None = None,
    context: dict[str, Any] | None = None,
) -> MetricResult:
    """
    Run one fetch-and-adapt and turn its outcome into a MetricResult.

    ``label`` names the request in log records (defaults to the metric kind);
    ``context`` is added to every log record.

    Never raises (except on cancellation): an empty-result reply becomes EMPTY,
    an unusable payload INVALID, and any other failure ERROR.
    """
    log_extra = {"metric": label or kind.value, **(context or {})}
    try:
        envelope = await fetch()
        return MetricResult.ok(kind, adapt(envelope))
    except EmptyResultError as e:
        logger.info("Metric has no data", extra={**log_extra, "detail": str(e)})
        return MetricResult.empty(kind, str(e))
    except MalformedPayloadError as e:
        logger.warning("Metric payload malformed", extra={**log_extra, "detail": str(e)})
        return MetricResult.invalid(kind, str(e))
    except TransportError as e:
        logger.warning("Metric fetch failed", extra={**log_extra, "detail": str(e)})
        return MetricResult.error(kind, str(e))
    except Exception as e:
        # Adapter bugs and unexpected client errors stay local to this metric
        logger.error(
            "Unexpected error in metric fetch",
            exc_info=True,
            extra={**log_extra, "exception_class": e.__class__.__name__},
        )
        return MetricResult.error(kind, f"{e.__class__.__name__}: {e}")


class MetricsFetchOrchestrator:
    """
    Sole writer of DashboardState.

    Attributes:
        client: Object exposing the defect tracker client coroutines
        state: Dashboard state this orchestrator owns
        transformer: Envelope adapters
    """

    def __init__(
        self,
        client: Any,
        state: DashboardState | None = None,
        transformer: DefectPayloadTransformer | None = None,
    ):
        self.client = client
        self.state = state if state is not None else DashboardState()
        self.transformer = transformer or DefectPayloadTransformer()
        self._tokens = itertools.count(self.state.current_token + 1)
        self._portfolio_tokens = itertools.count(self.state.portfolio_token + 1)
        self._in_flight: dict[int, dict[MetricKind, MetricResult]] = {}
        self._in_flight_projects: dict[int, int] = {}

    # ==============================
    # Per-project bundle
    # ==============================

    def select_project(self, project_id: int) -> int:
        """
        Make ``project_id`` the selection and issue a new request token.

        Every earlier in-flight fetch becomes stale from this point on.

        Returns:
            The new token
        """
        token = next(self._tokens)
        self.state.selected_project_id = project_id
        self.state.current_token = token
        logger.debug("Project selected", extra={"project_id": project_id, "token": token})
        return token

    def is_current(self, token: int) -> bool:
        return token == self.state.current_token

    async def fetch_project(self, project_id: int) -> MetricsBundle | None:
        """
        Select ``project_id`` and fetch all of its metrics concurrently.

        Returns:
            The merged bundle, or None when a newer selection superseded this
            fetch before it settled (the result is then discarded)
        """
        token = self.select_project(project_id)
        return await self._fetch_for_token(project_id, token)

    async def _fetch_for_token(self, project_id: int, token: int) -> MetricsBundle | None:
        self._in_flight[token] = {}
        self._in_flight_projects[token] = project_id

        async def run(kind: MetricKind, method_name: str) -> MetricResult:
            method = getattr(self.client, method_name)
            result = await settle(
                kind,
                lambda: method(project_id),
                self.transformer.adapter_for(kind),
                context={"project_id": project_id, "token": token},
            )
            if token in self._in_flight:
                self._in_flight[token][kind] = result
            return result

        try:
            results = await asyncio.gather(*(run(kind, method_name) for kind, method_name in FETCH_PLAN))
        finally:
            self._in_flight.pop(token, None)
            self._in_flight_projects.pop(token, None)

        if not self.is_current(token):
            logger.debug(
                "Discarding stale bundle",
                extra={"project_id": project_id, "token": token, "current_token": self.state.current_token},
            )
            return None

        bundle = MetricsBundle(
            timestamp=datetime.now(UTC),
            project_id=project_id,
            token=token,
            results={result.kind: result for result in results},
        )
        self.state.bundles[project_id] = bundle

        log_with_context(
            logger,
            "info",
            "Project metrics merged",
            project_id=project_id,
            token=token,
            **bundle.status_counts(),
        )
        return bundle

    def in_flight_bundle(self) -> MetricsBundle | None:
        """
        Partial view of the current fetch: settled metrics plus PENDING markers.

        Returns:
            None when no fetch for the current token is in flight
        """
        token = self.state.current_token
        settled = self._in_flight.get(token)
        if settled is None:
            return None
        return MetricsBundle(
            timestamp=datetime.now(UTC),
            project_id=self._in_flight_projects[token],
            token=token,
            results=dict(settled),
        )

    # ==============================
    # Portfolio overview
    # ==============================

    async def refresh_portfolio(self) -> PortfolioSnapshot:
        """
        Fetch projects and defect statuses concurrently, then every project's
        card color concurrently. Each request fails independently.

        Returns:
            PortfolioSnapshot; stored in state.projects / state.risk_signals
            unless a newer refresh started meanwhile (then ``superseded``)
        """
        token = next(self._portfolio_tokens)
        self.state.portfolio_token = token
        snapshot = PortfolioSnapshot(token=token)

        projects_result, defects_result = await asyncio.gather(
            settle(MetricKind.DEFECTS, self.client.get_projects, self.transformer.projects, label="projects"),
            settle(
                MetricKind.DEFECTS,
                self.client.get_all_defect_statuses,
                self.transformer.defects,
                label="defect_statuses",
            ),
        )

        if projects_result.is_ok:
            snapshot.projects = projects_result.data
        else:
            snapshot.failures.append(f"projects: {projects_result.status.value} ({projects_result.detail})")

        if defects_result.is_ok:
            snapshot.defects = defects_result.data
        else:
            snapshot.failures.append(f"defect statuses: {defects_result.status.value} ({defects_result.detail})")

        async def fetch_signal(project: Project) -> tuple[Project, MetricResult]:
            result = await settle(
                MetricKind.DEFECTS,
                lambda: self.client.get_project_card_color(project.id),
                self.transformer.risk_signal,
                label=f"card_color:{project.id}",
            )
            return project, result

        signal_results = await asyncio.gather(*(fetch_signal(project) for project in snapshot.projects))
        for project, result in signal_results:
            if result.is_ok:
                snapshot.risk_signals[project.id] = result.data
            else:
                snapshot.failures.append(f"card color {project.id}: {result.status.value}")

        if token != self.state.portfolio_token:
            snapshot.superseded = True
            logger.debug(
                "Discarding stale portfolio refresh",
                extra={"token": token, "current_token": self.state.portfolio_token},
            )
            return snapshot

        self.state.projects = list(snapshot.projects)
        self.state.risk_signals = dict(snapshot.risk_signals)

        log_with_context(
            logger,
            "info",
            "Portfolio refreshed",
            project_count=len(snapshot.projects),
            signal_count=len(snapshot.risk_signals),
            failure_count=len(snapshot.failures),
        )
        return snapshot
