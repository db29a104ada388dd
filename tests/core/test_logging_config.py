"""
Tests for logging configuration
"""

import json
import logging

from defect_metrics.core.logging_config import ContextFormatter, JSONFormatter, log_with_context, setup_logging


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("defect_metrics.test", logging.WARNING, __file__, 10, "Metric fetch failed", (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test machine-readable output"""

    def test_extra_fields_merged_top_level(self):
        payload = json.loads(JSONFormatter().format(make_record(project_id=7, metric="density")))

        assert payload["message"] == "Metric fetch failed"
        assert payload["level"] == "WARNING"
        assert payload["project_id"] == 7
        assert payload["metric"] == "density"

    def test_log_with_context_fields_flattened(self):
        payload = json.loads(JSONFormatter().format(make_record(extra_fields={"token": 3, "ok": 9})))

        assert payload["token"] == 3
        assert "extra_fields" not in payload


class TestContextFormatter:
    """Test console output"""

    def test_context_appended(self):
        line = ContextFormatter(fmt="%(levelname)s %(message)s").format(make_record(project_id=7))

        assert line.endswith("| project_id=7")
        assert "Metric fetch failed" in line


class TestSetupLogging:
    """Test handler configuration"""

    def test_sets_level_and_quiets_http_loggers(self, restore_root_logger):
        setup_logging(level="DEBUG")

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_json_output_uses_json_formatter(self, restore_root_logger):
        setup_logging(level="INFO", json_output=True)

        assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)

    def test_log_file_written_as_json(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "dashboard.log"
        setup_logging(level="INFO", log_file=log_file)

        log_with_context(logging.getLogger("defect_metrics.test"), "info", "Bundle merged", project_id=7)
        for handler in restore_root_logger.handlers:
            handler.flush()

        payload = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        assert payload["message"] == "Bundle merged"
        assert payload["project_id"] == 7
