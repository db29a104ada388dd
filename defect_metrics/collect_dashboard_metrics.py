#!/usr/bin/env python3
"""
Collect Dashboard Metrics

Command-line entry point. Without ``--project-id`` it refreshes the portfolio
and prints the risk overview; with it, it fetches that project's metrics
bundle and prints the project detail view-model.

Usage:
    python -m defect_metrics.collect_dashboard_metrics
    python -m defect_metrics.collect_dashboard_metrics --risk-filter high
    python -m defect_metrics.collect_dashboard_metrics --project-id 7 --output .tmp/project_7.json

Exit codes:
    0  view-model written (individual metrics may still be EMPTY or ERROR)
    1  configuration error
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from defect_metrics.analysis.risk_classifier import RiskClassifier
from defect_metrics.collectors.defect_rest_client import DefectTrackerRESTClient
from defect_metrics.collectors.metrics_orchestrator import MetricsFetchOrchestrator
from defect_metrics.core import (
    ConfigurationError,
    DefectTrackerConfig,
    get_config,
    get_logger,
    setup_logging,
    validate_config_on_startup,
)
from defect_metrics.dashboards.overview import RISK_FILTERS, OverviewCollector
from defect_metrics.dashboards.project_detail import build_project_detail
from defect_metrics.utils.error_handling import log_and_raise

logger = get_logger(__name__)


async def collect_overview(tracker_config: DefectTrackerConfig, risk_filter: str = "all") -> dict[str, Any]:
    classifier = RiskClassifier(tracker_config.unknown_color_policy)
    async with _client_for(tracker_config) as client:
        return await OverviewCollector(MetricsFetchOrchestrator(client), classifier).collect(risk_filter)


async def collect_project(tracker_config: DefectTrackerConfig, project_id: int) -> dict[str, Any]:
    """
    Fetch one project's bundle alongside the portfolio signals its risk badge needs.
    """
    classifier = RiskClassifier(tracker_config.unknown_color_policy)
    async with _client_for(tracker_config) as client:
        orchestrator = MetricsFetchOrchestrator(client)
        snapshot, bundle = await asyncio.gather(
            orchestrator.refresh_portfolio(),
            orchestrator.fetch_project(project_id),
        )

    if bundle is None:
        # Only possible if another selection superseded this one
        bundle = orchestrator.state.selected_bundle
        if bundle is None:
            return {"project_id": project_id, "status": "superseded"}

    return build_project_detail(bundle, risk_signal=snapshot.risk_signals.get(project_id), classifier=classifier)


def _client_for(tracker_config: DefectTrackerConfig) -> DefectTrackerRESTClient:
    return DefectTrackerRESTClient(
        base_url=tracker_config.base_url,
        timeout=tracker_config.timeout_seconds,
        max_retries=tracker_config.max_retries,
    )


def write_output(payload: dict[str, Any], output: Path | None) -> None:
    text = json.dumps(payload, indent=2, default=str)
    if output is None:
        sys.stdout.write(text + "\n")
        return

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
    except OSError as e:
        log_and_raise(logger, e, {"path": str(output)}, "Writing dashboard output")
    logger.info("Dashboard metrics written", extra={"path": str(output), "size": len(text)})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Collect defect dashboard metrics as JSON")
    parser.add_argument("--project-id", type=int, help="Collect the detail view for this project")
    parser.add_argument("--risk-filter", choices=RISK_FILTERS, default="all", help="Overview risk filter")
    parser.add_argument("--output", type=Path, help="Write JSON to this file instead of stdout")
    parser.add_argument("--log-level", help="Override DEFECT_TRACKER_LOG_LEVEL")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    setup_logging(level=(args.log_level or "INFO").upper(), json_output=args.json_logs)

    try:
        validate_config_on_startup(["defect_tracker"])
        tracker_config = get_config().get_defect_tracker_config()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    if not args.log_level:
        setup_logging(level=tracker_config.log_level, json_output=args.json_logs)

    if args.project_id is None:
        payload = asyncio.run(collect_overview(tracker_config, args.risk_filter))
    else:
        payload = asyncio.run(collect_project(tracker_config, args.project_id))

    write_output(payload, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
