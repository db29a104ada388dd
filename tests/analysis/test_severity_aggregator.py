"""
Tests for SeverityAggregator

Test Coverage:
- Routing by case-insensitive severity tag
- Dropping unknown tags and non-object records (with a warning)
- Duplicate levels (later record wins)
- Missing or non-numeric totals
- Pass-through of totalDefects without reconciliation
"""

import json
import logging

import pytest

from defect_metrics.analysis.severity_aggregator import SeverityAggregator
from defect_metrics.domain.errors import MalformedPayloadError


@pytest.fixture
def aggregator():
    return SeverityAggregator()


class TestRouting:
    """Test records land in the right bucket"""

    def test_routes_by_lowercased_tag(self, aggregator):
        summary = aggregator.aggregate(
            [{"severity": "High", "total": 5, "NEW": 2}, {"severity": "low", "total": 1}],
            total_defects=6,
        )

        assert summary.high.total == 5
        assert summary.high.status_count("NEW") == 2
        assert summary.medium.total == 0
        assert summary.low.total == 1
        assert summary.total_defects == 6

    def test_missing_levels_are_zeroed(self, aggregator):
        summary = aggregator.aggregate([{"severity": "Medium", "total": 2}])

        assert summary.high.total == 0
        assert summary.high.statuses == {}
        assert summary.low.total == 0

    def test_unknown_tag_dropped_with_warning(self, aggregator, caplog):
        with caplog.at_level(logging.WARNING):
            summary = aggregator.aggregate([{"severity": "Critical", "total": 9}, {"total": 4}])

        assert summary.bucket_total == 0
        assert "unrecognized tag" in caplog.text

    def test_non_object_record_dropped(self, aggregator):
        summary = aggregator.aggregate(["High", {"severity": "High", "total": 1}])

        assert summary.high.total == 1

    def test_duplicate_level_later_wins(self, aggregator, caplog):
        with caplog.at_level(logging.WARNING):
            summary = aggregator.aggregate([{"severity": "High", "total": 5}, {"severity": "HIGH", "total": 2}])

        assert summary.high.total == 2
        assert "Duplicate severity record" in caplog.text


class TestFieldHandling:
    """Test total coercion and status copying"""

    @pytest.mark.parametrize("total", [None, "five", -3, float("nan"), float("inf"), float("-inf"), True])
    def test_bad_total_becomes_zero(self, aggregator, total):
        summary = aggregator.aggregate([{"severity": "High", "total": total}])

        assert summary.high.total == 0

    def test_status_fields_copied_verbatim_falsy_as_zero(self, aggregator):
        summary = aggregator.aggregate([{"severity": "High", "total": 3, "REOPEN": {"count": 1}, "FIXED": None}])

        assert summary.high.statuses == {"REOPEN": {"count": 1}, "FIXED": 0}
        assert summary.high.status_count("REOPEN") == 1

    def test_total_defects_not_reconciled(self, aggregator):
        summary = aggregator.aggregate([{"severity": "High", "total": 5}], total_defects=6)

        assert summary.bucket_total == 5
        assert summary.total_defects == 6

    def test_overflowing_json_numbers(self, aggregator):
        records = json.loads('[{"severity": "High", "total": 1e999, "NEW": 1e999, "OPEN": 2}]')

        summary = aggregator.aggregate(records, total_defects=float("inf"))

        assert summary.high.total == 0
        assert summary.high.status_count("NEW") == 0
        assert summary.high.status_count("OPEN") == 2
        assert summary.total_defects == 0

    def test_huge_integer_total_kept(self, aggregator):
        summary = aggregator.aggregate([{"severity": "Low", "total": 10**400}])

        assert summary.low.total == 10**400


class TestEdgeCases:
    """Test empty and malformed input"""

    def test_none_yields_zeroed_summary(self, aggregator):
        summary = aggregator.aggregate(None)

        assert summary.bucket_total == 0
        assert summary.total_defects == 0

    def test_empty_list_yields_zeroed_summary(self, aggregator):
        assert aggregator.aggregate([]).bucket_total == 0

    def test_non_list_raises(self, aggregator):
        with pytest.raises(MalformedPayloadError):
            aggregator.aggregate({"severity": "High"})

    def test_same_input_same_output(self, aggregator):
        records = [{"severity": "High", "total": 5, "NEW": 2}]

        assert aggregator.aggregate(records, 5) == aggregator.aggregate(records, 5)
