"""
Defect Metrics - Mobile defect tracking dashboard core

This package fetches, normalizes and classifies per-project defect metrics
and turns them into renderer-agnostic dashboard data.

Package Structure:
    - core: Infrastructure (config, logging)
    - domain: Domain models (Project, SeveritySummary, MetricsBundle)
    - analysis: Severity aggregation, risk classification, proportional series
    - collectors: Defect tracker REST client and fetch orchestration
    - dashboards: Chart geometry and dashboard view-models
"""

__version__ = "1.0.0"
