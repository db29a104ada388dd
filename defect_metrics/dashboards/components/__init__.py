"""
Reusable dashboard components.
"""

from .charts import ChartGeometryEngine

__all__ = ["ChartGeometryEngine"]
