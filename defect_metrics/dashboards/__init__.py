"""
Dashboard View-Models - Renderer-agnostic dashboard data

This package contains:
    - components: chart geometry (pie slices, gauges, thermometers)
    - overview: portfolio risk cards, counts and risk filter
    - project_detail: per-project widget view-model

Usage:
    from defect_metrics.dashboards.project_detail import build_project_detail

    detail = build_project_detail(bundle)
"""

__all__ = []
