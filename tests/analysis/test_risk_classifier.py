"""
Tests for RiskClassifier and color descriptor parsing

Test Coverage:
- Explicit risk levels outrank card color
- Card color mapping, including the unknown-color policy
- Defect-count fallback when no signal decides
"""

import pytest

from defect_metrics.analysis.risk_classifier import RiskClassifier, parse_color_descriptor
from defect_metrics.domain.project import ColorTag, Defect, RiskSignal, RiskTier


@pytest.fixture
def classifier():
    return RiskClassifier()


class TestParseColorDescriptor:
    """Test free-text color derivation"""

    @pytest.mark.parametrize(
        "descriptor,expected",
        [
            ("bg-gradient-to-r from-red-600 to-red-800", ColorTag.RED),
            ("from-amber-400 to-orange-500", ColorTag.YELLOW),
            ("Yellow", ColorTag.YELLOW),
            ("from-emerald-500 to-emerald-700", ColorTag.GREEN),
            ("from-red-500 to-green-500", ColorTag.RED),
            ("bg-slate-500", ColorTag.UNKNOWN),
        ],
    )
    def test_keywords(self, descriptor, expected):
        assert parse_color_descriptor(descriptor) is expected

    @pytest.mark.parametrize("descriptor", [None, "", "   "])
    def test_missing_descriptor_is_none(self, descriptor):
        assert parse_color_descriptor(descriptor) is None


class TestExplicitLevels:
    """Test rule 1: explicit risk levels"""

    def test_high_wins_over_everything(self, classifier):
        signal = RiskSignal(risk_levels=frozenset({"Low", "High"}), color=ColorTag.GREEN)

        assert classifier.classify(signal) is RiskTier.HIGH

    def test_medium_before_low(self, classifier):
        assert classifier.classify(RiskSignal(risk_levels=frozenset({"Low", "Medium"}))) is RiskTier.MEDIUM

    def test_levels_are_case_insensitive(self, classifier):
        assert classifier.classify(RiskSignal(risk_levels=frozenset({"low"}))) is RiskTier.LOW

    def test_unrecognized_levels_fall_through_to_color(self, classifier):
        signal = RiskSignal(risk_levels=frozenset({"Severe"}), color=ColorTag.GREEN)

        assert classifier.classify(signal) is RiskTier.LOW


class TestCardColor:
    """Test rule 2: card color"""

    @pytest.mark.parametrize(
        "color,expected",
        [(ColorTag.RED, RiskTier.HIGH), (ColorTag.YELLOW, RiskTier.MEDIUM), (ColorTag.GREEN, RiskTier.LOW)],
    )
    def test_canonical_colors(self, classifier, color, expected):
        assert classifier.classify(RiskSignal(color=color)) is expected

    def test_unknown_color_defaults_to_medium(self, classifier):
        assert classifier.classify(RiskSignal(color=ColorTag.UNKNOWN)) is RiskTier.MEDIUM

    def test_unknown_color_low_policy(self):
        assert RiskClassifier("low").classify(RiskSignal(color=ColorTag.UNKNOWN)) is RiskTier.LOW

    def test_color_outranks_defects(self, classifier):
        assert classifier.classify(RiskSignal(color=ColorTag.GREEN), [Defect(status="NEW")]) is RiskTier.LOW

    def test_invalid_policy_rejected(self):
        with pytest.raises(ValueError):
            RiskClassifier("severe")


class TestDefectFallback:
    """Test rule 3: no signal"""

    def test_new_or_reopen_is_high(self, classifier):
        assert classifier.classify(None, [Defect(status="FIXED"), Defect(status="REOPEN")]) is RiskTier.HIGH

    def test_open_only_is_medium(self, classifier):
        assert classifier.classify(RiskSignal(), [Defect(status="OPEN"), Defect(status="FIXED")]) is RiskTier.MEDIUM

    def test_no_open_defects_is_low(self, classifier):
        assert classifier.classify(None, [Defect(status="FIXED")]) is RiskTier.LOW

    def test_no_defects_is_low(self, classifier):
        assert classifier.classify(None) is RiskTier.LOW

    def test_empty_signal_uses_defects(self, classifier):
        signal = RiskSignal(descriptor="")

        assert signal.is_empty
        assert classifier.classify(signal, [Defect(status="NEW")]) is RiskTier.HIGH
