"""Tests for the trigger CLI commands."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from src.cli import main
from src.outdated_alerts.errors import AlertValidationError
from src.outdated_alerts.schemas import OutdatedVersionAlert


@pytest.fixture
def runner():
    return CliRunner()


def _make_runtime(**service_methods):
    """Mock AlertRuntime usable as an async context manager."""
    runtime = MagicMock()
    runtime.alert_service = MagicMock(**service_methods)
    runtime.__aenter__ = AsyncMock(return_value=runtime)
    runtime.__aexit__ = AsyncMock(return_value=False)
    return runtime


def _alert(resource_id="svc_a", type="TemplateVersion", **kwargs):
    return OutdatedVersionAlert(
        id=kwargs.pop("id", "alert_001"),
        resource_id=resource_id,
        type=type,
        outdated_version=kwargs.pop("outdated_version", "1.0.0"),
        latest_version=kwargs.pop("latest_version", "1.1.0"),
        created_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
        **kwargs,
    )


class TestTriggerTemplate:

    def test_prints_created_alerts(self, runner):
        runtime = _make_runtime(
            trigger_alerts_for_template_version=AsyncMock(
                return_value=[_alert(), _alert(id="alert_002", resource_id="svc_b")]
            )
        )
        with patch("src.services.alert_runtime.AlertRuntime", return_value=runtime):
            result = runner.invoke(main, [
                "trigger-template", "tmpl_t",
                "--outdated-version", "1.0.0",
                "--latest-version", "1.1.0",
                "--user-id", "user_123",
            ])

        assert result.exit_code == 0, result.output
        assert "Created 2 alert(s)" in result.output
        assert "svc_b" in result.output
        runtime.alert_service.trigger_alerts_for_template_version.assert_awaited_once_with(
            "tmpl_t", "1.0.0", "1.1.0", "user_123",
        )
        runtime.__aexit__.assert_awaited_once()

    def test_validation_error_exits_nonzero(self, runner):
        runtime = _make_runtime(
            trigger_alerts_for_template_version=AsyncMock(
                side_effect=AlertValidationError(
                    "Cannot trigger alerts. Template with id tmpl_x not found"
                )
            )
        )
        with patch("src.services.alert_runtime.AlertRuntime", return_value=runtime):
            result = runner.invoke(main, [
                "trigger-template", "tmpl_x",
                "--latest-version", "1.1.0",
                "--user-id", "user_123",
            ])

        assert result.exit_code == 1
        assert "Template with id tmpl_x not found" in result.output


class TestTriggerPlugin:

    def test_prints_created_alerts(self, runner):
        runtime = _make_runtime(
            trigger_alerts_for_new_plugin_version=AsyncMock(
                return_value=[_alert(type="PluginVersion", block_id="block_a")]
            )
        )
        with patch("src.services.alert_runtime.AlertRuntime", return_value=runtime):
            result = runner.invoke(main, [
                "trigger-plugin", "proj_p", "plugin-aws-s3",
                "--new-version", "1.0.0",
                "--user-id", "user_123",
            ])

        assert result.exit_code == 0, result.output
        assert "Created 1 alert(s)" in result.output
        runtime.alert_service.trigger_alerts_for_new_plugin_version.assert_awaited_once_with(
            "proj_p", "plugin-aws-s3", "1.0.0", "user_123",
        )

    def test_requires_new_version(self, runner):
        result = runner.invoke(main, [
            "trigger-plugin", "proj_p", "plugin-aws-s3", "--user-id", "user_123",
        ])
        assert result.exit_code == 2
