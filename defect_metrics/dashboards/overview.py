"""
Portfolio Risk Overview

Builds the project overview: one risk card per project, the high/medium/low
counts across the portfolio, and the risk filter applied to the card list.

Usage:
    from defect_metrics.dashboards.overview import OverviewCollector, filter_projects

    async with get_defect_rest_client() as client:
        overview = await OverviewCollector(MetricsFetchOrchestrator(client)).collect()
    high_risk = filter_projects(overview["projects"], "high")
"""

from collections.abc import Iterable, Mapping
from typing import Any

from defect_metrics.analysis.risk_classifier import RiskClassifier
from defect_metrics.core import get_logger
from defect_metrics.domain.project import Defect, Project, RiskSignal, RiskTier

logger = get_logger(__name__)

RISK_FILTERS = ("all", "high", "medium", "low")


def _project_card(project: Project, tier: RiskTier, signal: RiskSignal | None) -> dict[str, Any]:
    return {
        "id": project.id,
        "name": project.name,
        "tier": tier.value,
        "risk_label": tier.label,
        "color": tier.color,
        "signal_color": signal.color.hex if signal is not None and signal.color is not None else None,
    }


def build_overview(
    projects: Iterable[Project],
    signals: Mapping[int, RiskSignal],
    defects: Iterable[Defect] = (),
    classifier: RiskClassifier | None = None,
) -> dict[str, Any]:
    """
    Classify every project and count the tiers.

    Args:
        projects: Projects in display order
        signals: Risk signal per project id; a missing entry means "no signal"
        defects: Defect records across all projects, used by the fallback
        classifier: RiskClassifier (default policy when omitted)

    Returns:
        {"counts": {"high": n, "medium": n, "low": n}, "projects": [card, ...]}
    """
    classifier = classifier or RiskClassifier()

    defects_by_project: dict[int, list[Defect]] = {}
    for defect in defects:
        if defect.project_id is not None:
            defects_by_project.setdefault(defect.project_id, []).append(defect)

    counts = {tier.value: 0 for tier in RiskTier}
    cards = []
    for project in projects:
        signal = signals.get(project.id)
        tier = classifier.classify(signal, defects_by_project.get(project.id, ()))
        counts[tier.value] += 1
        cards.append(_project_card(project, tier, signal))

    return {"counts": counts, "projects": cards}


def filter_projects(cards: Iterable[dict[str, Any]], risk_filter: str = "all") -> list[dict[str, Any]]:
    """
    Project cards matching a risk filter, order preserved.

    Raises:
        ValueError: If risk_filter is not one of all, high, medium, low
    """
    key = risk_filter.strip().lower() if isinstance(risk_filter, str) else risk_filter
    if key not in RISK_FILTERS:
        raise ValueError(f"Unknown risk filter {risk_filter!r}; expected one of {', '.join(RISK_FILTERS)}")

    cards = list(cards)
    if key == "all":
        return cards
    return [card for card in cards if card["tier"] == key]


class OverviewCollector:
    """
    Refreshes the portfolio through the orchestrator and builds the overview.

    The orchestrator stays the only writer of dashboard state; this class
    only reads what the refresh returned.
    """

    def __init__(self, orchestrator: Any, classifier: RiskClassifier | None = None):
        self.orchestrator = orchestrator
        self.classifier = classifier or RiskClassifier()

    async def collect(self, risk_filter: str = "all") -> dict[str, Any]:
        snapshot = await self.orchestrator.refresh_portfolio()
        overview = build_overview(snapshot.projects, snapshot.risk_signals, snapshot.defects, self.classifier)
        overview["projects"] = filter_projects(overview["projects"], risk_filter)
        overview["filter"] = risk_filter
        overview["failures"] = list(snapshot.failures)

        logger.info(
            "Overview built",
            extra={"project_count": len(snapshot.projects), "counts": overview["counts"], "filter": risk_filter},
        )
        return overview
