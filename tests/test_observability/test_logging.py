"""Tests for log setup."""

import json
import logging

from src.observability.logging import bind_context, setup_logging


def _json_lines(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


class TestSetupLogging:

    def test_stdlib_logger_carries_bound_context(self, capsys):
        setup_logging(level="INFO", json_logs=True)
        bind_context(template_resource_id="tmpl_t")

        logging.getLogger("src.outdated_alerts.service").info(
            "Outdated version alert %s created", "alert-1",
        )

        [line] = _json_lines(capsys.readouterr().out)
        assert line["event"] == "Outdated version alert alert-1 created"
        assert line["template_resource_id"] == "tmpl_t"
        assert line["level"] == "info"
        assert line["logger"] == "src.outdated_alerts.service"

    def test_level_filters_lower_levels(self, capsys):
        setup_logging(level="WARNING", json_logs=True)
        logging.getLogger("src.notifications.dispatcher").info("emitted")
        assert _json_lines(capsys.readouterr().out) == []

    def test_noisy_libraries_quieted(self):
        setup_logging(level="DEBUG", json_logs=False)
        assert logging.getLogger("asyncpg").level == logging.WARNING

    def test_repeated_setup_keeps_one_handler(self):
        setup_logging(level="INFO", json_logs=True)
        setup_logging(level="INFO", json_logs=True)
        assert len(logging.getLogger().handlers) == 1
