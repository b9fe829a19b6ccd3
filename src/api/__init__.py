"""
FastAPI version alerts service.

Provides REST API for outdated version alerts with:
- GET /outdated-version-alerts - List, count and fetch alerts
- PATCH /outdated-version-alerts/{id} - Update an alert
- POST /outdated-version-alerts/trigger/* - Template and plugin fan-out
- PUT /resources/{id}/service-template-version - Resolve template alerts
- GET /health - Service health check
"""

from src.api.app import create_app

__all__ = ["create_app"]
