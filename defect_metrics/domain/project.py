"""
Project domain models - projects, defects and risk signals

Represents the inputs of project risk classification:
    - Project identity as returned by the project list
    - Raw defect records reduced to their status
    - Risk signals (explicit risk levels or a card color)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .constants import risk_colors


class RiskTier(str, Enum):
    """Project-level risk classification."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def label(self) -> str:
        """Badge text, e.g. "High Risk"."""
        return f"{self.value.capitalize()} Risk"

    @property
    def color(self) -> str:
        """Canonical card color for this tier."""
        return {
            RiskTier.HIGH: risk_colors.HIGH,
            RiskTier.MEDIUM: risk_colors.MEDIUM,
            RiskTier.LOW: risk_colors.LOW,
        }[self]


class ColorTag(str, Enum):
    """
    Canonical card color derived from a free-text descriptor.

    UNKNOWN is deliberately distinct from GREEN: a descriptor that matches
    nothing must not read as low risk.
    """

    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    UNKNOWN = "unknown"

    @property
    def hex(self) -> str:
        return {
            ColorTag.RED: risk_colors.HIGH,
            ColorTag.YELLOW: risk_colors.MEDIUM,
            ColorTag.GREEN: risk_colors.LOW,
            ColorTag.UNKNOWN: risk_colors.UNKNOWN,
        }[self]


@dataclass(frozen=True)
class Project:
    """
    A tracked project. Identity is ``id``.

    Example:
        project = Project(id=7, name="Billing Portal")
    """

    id: int
    name: str


@dataclass(frozen=True)
class Defect:
    """
    A raw defect record reduced to what risk classification needs.

    Attributes:
        status: Upper-cased status name (NEW, OPEN, REOPEN, FIXED, ...)
        project_id: Owning project, when the record carries it
        raw: The original upstream record
    """

    status: str
    project_id: int | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @property
    def is_new_or_reopened(self) -> bool:
        return self.status in ("NEW", "REOPEN")

    @property
    def is_open(self) -> bool:
        return self.status == "OPEN"


@dataclass(frozen=True)
class RiskSignal:
    """
    Risk signal for one project.

    Explicit ``risk_levels`` (drawn from "High", "Medium", "Low") outrank the
    card ``color``; when both are absent the classifier falls back to defects.

    Attributes:
        risk_levels: Risk levels reported by the API (may be empty)
        color: Color derived from the card descriptor, if one was provided
        descriptor: The original descriptor string, kept for diagnostics
    """

    risk_levels: frozenset[str] = frozenset()
    color: ColorTag | None = None
    descriptor: str | None = None

    @property
    def is_empty(self) -> bool:
        """True when neither risk levels nor a color are available."""
        return not self.risk_levels and self.color is None
