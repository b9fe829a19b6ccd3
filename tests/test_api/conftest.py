"""Shared fixtures for API tests."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.api.auth import verify_api_key
from src.api.dependencies import get_alert_service, get_resource_service


@pytest.fixture
def mock_alert_service():
    """Mock OutdatedVersionAlertService."""
    service = AsyncMock()
    service.find_many = AsyncMock(return_value=[])
    service.count = AsyncMock(return_value=0)
    service.find_one = AsyncMock(return_value=None)
    service.update = AsyncMock()
    service.trigger_alerts_for_template_version = AsyncMock(return_value=[])
    service.trigger_alerts_for_new_plugin_version = AsyncMock(return_value=[])
    return service


@pytest.fixture
def mock_resource_service():
    """Mock ResourceService."""
    service = AsyncMock()
    service.update_service_template_version = AsyncMock(return_value=0)
    return service


@pytest.fixture
def client(mock_alert_service, mock_resource_service):
    """FastAPI TestClient with dependency overrides."""
    app = create_app()

    app.dependency_overrides[verify_api_key] = lambda: "test-key"
    app.dependency_overrides[get_alert_service] = lambda: mock_alert_service
    app.dependency_overrides[get_resource_service] = lambda: mock_resource_service

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
