"""
Pure aggregation and classification over adapted payloads.

Usage:
    from defect_metrics.analysis import ProportionalSeriesBuilder, RiskClassifier, SeverityAggregator
"""

from .risk_classifier import RiskClassifier, parse_color_descriptor
from .series_builder import ProportionalSeriesBuilder
from .severity_aggregator import SeverityAggregator

__all__ = [
    "SeverityAggregator",
    "RiskClassifier",
    "parse_color_descriptor",
    "ProportionalSeriesBuilder",
]
