"""Tests for ResourceService."""

from unittest.mock import AsyncMock

import pytest

from src.resources.service import ResourceNotFoundError, ResourceService


@pytest.fixture
def alert_service():
    svc = AsyncMock()
    svc.resolve_for_template_update = AsyncMock(return_value=2)
    return svc


class TestUpdateServiceTemplateVersion:

    @pytest.mark.asyncio
    async def test_resolves_template_alerts(self, alert_service):
        repo = AsyncMock()
        repo.set_service_template_version = AsyncMock(return_value=True)
        service = ResourceService(repo, alert_service)

        resolved = await service.update_service_template_version("svc_a", "1.1.0")

        assert resolved == 2
        repo.set_service_template_version.assert_awaited_once_with("svc_a", "1.1.0")
        alert_service.resolve_for_template_update.assert_awaited_once_with("svc_a")

    @pytest.mark.asyncio
    async def test_missing_service(self, alert_service):
        repo = AsyncMock()
        repo.set_service_template_version = AsyncMock(return_value=False)
        service = ResourceService(repo, alert_service)

        with pytest.raises(ResourceNotFoundError):
            await service.update_service_template_version("svc_x", "1.1.0")
        alert_service.resolve_for_template_update.assert_not_called()


class TestResolveEndToEnd:
    """Resource update resolving in-memory template alerts."""

    @pytest.mark.asyncio
    async def test_only_new_template_alerts_resolved(
        self, alert_store, resource_repo, project_repo, plugin_installation_repo,
    ):
        from src.outdated_alerts.service import OutdatedVersionAlertService

        alerts = OutdatedVersionAlertService(
            alert_store, resource_repo, project_repo, plugin_installation_repo,
        )
        template_alert = await alerts.create("svc_a", "TemplateVersion", "1.0.0", "1.1.0")
        plugin_alert = await alerts.create(
            "svc_a", "PluginVersion", "0.9.0", "1.0.0", block_id="block_a",
        )
        resource_repo.set_service_template_version = AsyncMock(return_value=True)

        service = ResourceService(resource_repo, alerts)
        assert await service.update_service_template_version("svc_a", "1.1.0") == 1

        assert alert_store.alerts[template_alert.id].status == "Resolved"
        assert alert_store.alerts[plugin_alert.id].status == "New"
