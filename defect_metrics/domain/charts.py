"""
Chart domain models - proportional series and drawable geometry

The renderer-agnostic primitives handed to the view layer:
    - ProportionalSeries: ordered {label, count, percentage} entries
    - SliceGeometry: one pie slice, angles in degrees clockwise from 0
    - GaugeSpec / GaugeReading: bounded value and its needle/zone
    - FillReading: thermometer or bar fill ratio and band color
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SeriesEntry:
    """One category of a proportional series."""

    label: str
    count: float
    percentage: float


@dataclass(frozen=True)
class ProportionalSeries:
    """
    Ordered categories with their share of the whole.

    Entry order is the upstream category order, never re-sorted by size.
    When ``total`` is 0 the series is empty and every percentage is 0.

    Attributes:
        entries: Entries in input order
        total: Sum of all counts
    """

    entries: tuple[SeriesEntry, ...] = ()
    total: float = 0

    @property
    def is_empty(self) -> bool:
        return self.total <= 0

    @property
    def labels(self) -> list[str]:
        return [entry.label for entry in self.entries]

    @property
    def percentage_sum(self) -> float:
        return sum(entry.percentage for entry in self.entries)

    def largest(self) -> SeriesEntry | None:
        """
        Entry with the highest count; the earliest one wins ties.

        Returns:
            The entry, or None for an empty series
        """
        if self.is_empty:
            return None
        return max(self.entries, key=lambda entry: entry.count)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class SliceGeometry:
    """
    One pie slice.

    Attributes:
        start_angle_deg: Cumulative start angle, clockwise from 0
        end_angle_deg: Cumulative end angle; the last slice ends at exactly 360
        color_index: Index into the chart palette
    """

    start_angle_deg: float
    end_angle_deg: float
    color_index: int

    @property
    def sweep_deg(self) -> float:
        return self.end_angle_deg - self.start_angle_deg


@dataclass(frozen=True)
class GaugeSpec:
    """
    A bounded value with colored zones.

    ``zone_boundaries`` is ascending and includes both domain ends, so
    N boundaries describe N - 1 zones.

    Raises:
        ValueError: If the domain is empty or inverted, or boundaries are unsorted
    """

    value: float
    domain_min: float
    domain_max: float
    zone_boundaries: tuple[float, ...] = field(default=())

    def __post_init__(self) -> None:
        if not self.domain_max > self.domain_min:
            raise ValueError(f"domain_max must exceed domain_min: [{self.domain_min}, {self.domain_max}]")
        if list(self.zone_boundaries) != sorted(self.zone_boundaries):
            raise ValueError(f"zone_boundaries must be ascending: {self.zone_boundaries}")

    @property
    def clamped_value(self) -> float:
        if self.value != self.value:  # NaN
            return self.domain_min
        return min(max(self.value, self.domain_min), self.domain_max)


@dataclass(frozen=True)
class GaugeReading:
    """Needle position and active zone for a gauge."""

    value: float
    needle_angle_deg: float
    zone_index: int | None
    color: str | None


@dataclass(frozen=True)
class FillReading:
    """Fill ratio in [0, 1] and band color for a thermometer or bar."""

    value: float
    ratio: float
    color: str

    @property
    def percent(self) -> float:
        return self.ratio * 100
