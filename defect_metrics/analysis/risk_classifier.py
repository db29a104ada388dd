"""
Risk Classifier

Maps a project's risk signal to a RiskTier. First matching rule wins:

1. Explicit risk levels: "High" present -> high, else "Medium" -> medium,
   else "Low" -> low; anything else falls through.
2. Card color: red -> high, yellow -> medium, green -> low. A descriptor that
   matched no canonical color maps to the configured unknown-color tier.
3. No signal: any NEW or REOPEN defect -> high, else any OPEN -> medium,
   else low.

Usage:
    from defect_metrics.analysis.risk_classifier import RiskClassifier, parse_color_descriptor

    classifier = RiskClassifier()
    signal = RiskSignal(color=parse_color_descriptor("bg-gradient-to-r from-red-600 to-red-800"))
    classifier.classify(signal)  # RiskTier.HIGH
"""

from collections.abc import Iterable

from defect_metrics.core import get_logger
from defect_metrics.domain.project import ColorTag, Defect, RiskSignal, RiskTier

logger = get_logger(__name__)

# Checked in order: red wins over yellow, yellow over green
_COLOR_KEYWORDS: tuple[tuple[ColorTag, tuple[str, ...]], ...] = (
    (ColorTag.RED, ("red",)),
    (ColorTag.YELLOW, ("yellow", "amber", "orange")),
    (ColorTag.GREEN, ("green", "emerald")),
)

_LEVEL_PRIORITY: tuple[tuple[str, RiskTier], ...] = (
    ("high", RiskTier.HIGH),
    ("medium", RiskTier.MEDIUM),
    ("low", RiskTier.LOW),
)

_COLOR_TIERS = {
    ColorTag.RED: RiskTier.HIGH,
    ColorTag.YELLOW: RiskTier.MEDIUM,
    ColorTag.GREEN: RiskTier.LOW,
}


def parse_color_descriptor(descriptor: str | None) -> ColorTag | None:
    """
    Derive a canonical color from a free-text descriptor such as a CSS class list.

    Args:
        descriptor: e.g. "bg-gradient-to-r from-emerald-500 to-emerald-700"

    Returns:
        The matched ColorTag, ColorTag.UNKNOWN for a non-empty descriptor that
        matches nothing, or None when there is no descriptor at all

    Example:
        >>> parse_color_descriptor("from-amber-400")
        <ColorTag.YELLOW: 'yellow'>
        >>> parse_color_descriptor("bg-slate-500")
        <ColorTag.UNKNOWN: 'unknown'>
    """
    if not isinstance(descriptor, str) or not descriptor.strip():
        return None

    lowered = descriptor.lower()
    for tag, keywords in _COLOR_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return tag
    return ColorTag.UNKNOWN


class RiskClassifier:
    """
    Stateless risk tier classification.

    Attributes:
        unknown_color_tier: Tier used when the card color is UNKNOWN.
            Defaults to MEDIUM so an unreadable color never understates risk;
            LOW reproduces the legacy gray-means-low behaviour.
    """

    def __init__(self, unknown_color_tier: RiskTier | str = RiskTier.MEDIUM):
        self.unknown_color_tier = RiskTier(unknown_color_tier)

    def classify(self, signal: RiskSignal | None, defects: Iterable[Defect] = ()) -> RiskTier:
        """
        Classify one project.

        Args:
            signal: The project's risk signal, or None when nothing was fetched
            defects: The project's defects, consulted only when no signal decides

        Returns:
            RiskTier
        """
        if signal is None or signal.is_empty:
            return self.classify_from_defects(defects)

        tier = self.tier_for_levels(signal.risk_levels)
        if tier is not None:
            return tier

        if signal.color is not None:
            return self.tier_for_color(signal.color)

        return self.classify_from_defects(defects)

    @staticmethod
    def tier_for_levels(risk_levels: Iterable[str]) -> RiskTier | None:
        """
        Highest tier named in an explicit risk level set.

        Returns:
            RiskTier, or None when the set names no known level
        """
        normalized = {level.strip().lower() for level in risk_levels if isinstance(level, str)}
        for name, tier in _LEVEL_PRIORITY:
            if name in normalized:
                return tier
        return None

    def tier_for_color(self, color: ColorTag) -> RiskTier:
        tier = _COLOR_TIERS.get(color)
        if tier is None:
            logger.debug("Unknown card color, applying fallback tier", extra={"tier": self.unknown_color_tier.value})
            return self.unknown_color_tier
        return tier

    @staticmethod
    def classify_from_defects(defects: Iterable[Defect]) -> RiskTier:
        """Defect-count heuristic used when a project has no risk signal."""
        has_open = False
        for defect in defects:
            if defect.is_new_or_reopened:
                return RiskTier.HIGH
            if defect.is_open:
                has_open = True
        return RiskTier.MEDIUM if has_open else RiskTier.LOW
