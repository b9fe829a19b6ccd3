"""Resource operations that affect outdated version alerts."""

import logging

from src.outdated_alerts.service import OutdatedVersionAlertService
from src.resources.repository import ResourceRepository

logger = logging.getLogger(__name__)


class ResourceNotFoundError(LookupError):
    """No live service with a template reference has this id."""


class ResourceService:
    """Writes to resources, resolving their alerts when they catch up."""

    def __init__(
        self,
        resource_repo: ResourceRepository,
        alert_service: OutdatedVersionAlertService,
    ) -> None:
        self._resource_repo = resource_repo
        self._alert_service = alert_service

    async def update_service_template_version(
        self, resource_id: str, version: str
    ) -> int:
        """Move a service to ``version`` of its template.

        Returns:
            Number of template alerts resolved.

        Raises:
            ResourceNotFoundError: If the service does not exist or has
                no template.
        """
        updated = await self._resource_repo.set_service_template_version(
            resource_id, version
        )
        if not updated:
            raise ResourceNotFoundError(
                f"Service {resource_id} not found or not created from a template"
            )

        logger.info("Service %s moved to template version %s", resource_id, version)
        return await self._alert_service.resolve_for_template_update(resource_id)
