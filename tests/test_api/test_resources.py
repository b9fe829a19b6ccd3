"""Tests for resource REST endpoints."""

from src.resources.service import ResourceNotFoundError


class TestServiceTemplateVersion:

    def test_update_resolves_alerts(self, client, mock_resource_service):
        mock_resource_service.update_service_template_version.return_value = 2
        resp = client.put(
            "/resources/svc_a/service-template-version",
            json={"version": "1.1.0"},
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "resource_id": "svc_a",
            "version": "1.1.0",
            "resolved_alerts": 2,
        }
        mock_resource_service.update_service_template_version.assert_awaited_once_with(
            "svc_a", "1.1.0",
        )

    def test_not_found(self, client, mock_resource_service):
        mock_resource_service.update_service_template_version.side_effect = (
            ResourceNotFoundError("Service svc_x not found or not created from a template")
        )
        resp = client.put(
            "/resources/svc_x/service-template-version",
            json={"version": "1.1.0"},
        )
        assert resp.status_code == 404

    def test_empty_version_rejected(self, client):
        resp = client.put("/resources/svc_a/service-template-version", json={"version": ""})
        assert resp.status_code == 422
