"""
Chart geometry for dashboards

Converts normalized series and bounded values into renderer-agnostic
primitives: pie slices, gauge needles and zones, thermometer fills.

Angles are in degrees; pie slices run clockwise from 0.

Usage:
    from defect_metrics.dashboards.components.charts import ChartGeometryEngine

    engine = ChartGeometryEngine()
    slices = engine.build_slices(series, palette_size=4)
    reading = engine.read_gauge(GaugeSpec(value=10.12, domain_min=0, domain_max=20, zone_boundaries=(0, 7, 13, 20)))
"""

import math
from collections.abc import Sequence

from defect_metrics.domain.charts import FillReading, GaugeReading, GaugeSpec, ProportionalSeries, SliceGeometry
from defect_metrics.domain.constants import gauge_config, thermometer_config

FULL_CIRCLE_DEG = 360.0


def _clamp(value: float, low: float, high: float) -> float:
    if isinstance(value, float) and math.isnan(value):
        return low
    return max(low, min(high, value))


def _check_domain(domain_min: float, domain_max: float) -> None:
    if not domain_max > domain_min:
        raise ValueError(f"domain_max must exceed domain_min: [{domain_min}, {domain_max}]")


class ChartGeometryEngine:
    """
    Stateless geometry calculations.

    Attributes:
        sweep_degrees: Angular sweep of gauges (180 for a semicircle)
    """

    def __init__(self, sweep_degrees: float = gauge_config.SWEEP_DEGREES):
        if sweep_degrees <= 0:
            raise ValueError(f"sweep_degrees must be positive, got {sweep_degrees}")
        self.sweep_degrees = sweep_degrees

    # ==============================
    # Pie charts
    # ==============================

    def build_slices(self, series: ProportionalSeries, palette_size: int | None = None) -> list[SliceGeometry]:
        """
        Pie slices covering the full circle once.

        Angles come from the running sum of percentages, so rounding never
        leaves a gap or overlap; the last slice is pinned to exactly 360.

        Args:
            series: Normalized series
            palette_size: If given, ``color_index`` cycles modulo this size

        Returns:
            One slice per entry (zero-count entries get zero sweep), or an
            empty list for an empty series
        """
        if series.is_empty or not series.entries:
            return []

        slices: list[SliceGeometry] = []
        running_pct = 0.0
        start = 0.0
        last = len(series.entries) - 1

        for index, entry in enumerate(series.entries):
            running_pct += entry.percentage
            end = FULL_CIRCLE_DEG if index == last else min(running_pct / 100 * FULL_CIRCLE_DEG, FULL_CIRCLE_DEG)
            end = max(end, start)
            color_index = index % palette_size if palette_size else index
            slices.append(SliceGeometry(start_angle_deg=start, end_angle_deg=end, color_index=color_index))
            start = end

        return slices

    # ==============================
    # Gauges
    # ==============================

    def needle_angle(self, value: float, domain_min: float, domain_max: float) -> float:
        """
        Needle rotation for ``value`` after clamping into the domain.

        Raises:
            ValueError: If the domain is empty or inverted
        """
        _check_domain(domain_min, domain_max)
        clamped = _clamp(value, domain_min, domain_max)
        return (clamped - domain_min) / (domain_max - domain_min) * self.sweep_degrees

    @staticmethod
    def zone_index(value: float, zone_boundaries: Sequence[float]) -> int | None:
        """
        Zone containing ``value``.

        Zones are [b0, b1), [b1, b2), ... with the final zone closed: [bn-1, bn].

        Returns:
            Zone index, or None when value lies outside every zone or fewer
            than two boundaries are given
        """
        if len(zone_boundaries) < 2:
            return None

        last = len(zone_boundaries) - 2
        for index in range(last + 1):
            lower, upper = zone_boundaries[index], zone_boundaries[index + 1]
            if lower <= value < upper or (index == last and value == upper):
                return index
        return None

    def read_gauge(self, spec: GaugeSpec, zone_colors: Sequence[str] = gauge_config.ZONE_COLORS) -> GaugeReading:
        """Needle angle, zone and zone color for a gauge."""
        value = spec.clamped_value
        zone = self.zone_index(value, spec.zone_boundaries)
        color = zone_colors[zone] if zone is not None and zone < len(zone_colors) else None
        return GaugeReading(
            value=value,
            needle_angle_deg=self.needle_angle(value, spec.domain_min, spec.domain_max),
            zone_index=zone,
            color=color,
        )

    # ==============================
    # Thermometers and bars
    # ==============================

    @staticmethod
    def fill_ratio(value: float, domain_min: float = 0.0, domain_max: float = 100.0) -> float:
        """
        Linear fill ratio clamped to [0, 1].

        Example:
            >>> ChartGeometryEngine.fill_ratio(150)
            1.0
            >>> ChartGeometryEngine.fill_ratio(-10)
            0.0
        """
        _check_domain(domain_min, domain_max)
        return (_clamp(value, domain_min, domain_max) - domain_min) / (domain_max - domain_min)

    @staticmethod
    def band_color(
        value: float,
        bands: Sequence[tuple[float, str]] = thermometer_config.BANDS,
        floor_color: str = thermometer_config.FLOOR_COLOR,
    ) -> str:
        """
        Color of the first band whose threshold ``value`` strictly exceeds.

        ``bands`` must be ordered by descending threshold; a value equal to a
        threshold falls to the band below.
        """
        for threshold, color in bands:
            if value > threshold:
                return color
        return floor_color

    def read_thermometer(
        self,
        value: float,
        domain_min: float = thermometer_config.DOMAIN_MIN,
        domain_max: float = thermometer_config.DOMAIN_MAX,
    ) -> FillReading:
        """Fill ratio and band color for a severity-index style thermometer."""
        return FillReading(
            value=value,
            ratio=self.fill_ratio(value, domain_min, domain_max),
            color=self.band_color(value),
        )
