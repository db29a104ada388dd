"""
Data Collectors - Fetch metrics from the defect tracker

This package contains:
    - defect_rest_client: async REST client with retry/backoff
    - rest_transformers: envelope-to-domain adapters
    - metrics_orchestrator: concurrent fan-out, failure isolation, stale-result guard
"""

__all__ = []
