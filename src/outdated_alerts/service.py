"""Lifecycle manager for outdated version alerts.

Creates alerts (superseding open ones of the same scope), resolves
template alerts when a service catches up, and fans alerts out across
every service affected by a new template or plugin version. Each fan-out
iteration writes its alert before scheduling the tech debt event, and an
event failure never stops the remaining iterations.
"""

import logging
import time

from src.config.settings import Settings, get_settings
from src.notifications.dispatcher import NotificationDispatcher
from src.notifications.encryption import encrypt_string
from src.notifications.schemas import TechDebtEvent
from src.observability.metrics import get_metrics
from src.outdated_alerts.errors import AlertNotFoundError, AlertValidationError
from src.outdated_alerts.repository import OutdatedVersionAlertRepository
from src.outdated_alerts.schemas import (
    STATUS_NEW,
    STATUS_RESOLVED,
    TYPE_PLUGIN_VERSION,
    TYPE_TEMPLATE_VERSION,
    AlertFilter,
    AlertUpdate,
    OutdatedVersionAlert,
)
from src.resources.repository import (
    PluginInstallationRepository,
    ProjectRepository,
    ResourceRepository,
)
from src.resources.schemas import Project, Resource

logger = logging.getLogger(__name__)


class OutdatedVersionAlertService:
    """Orchestrator of alert transitions and tech debt notifications.

    Collaborators are passed in explicitly; the service only depends on
    repositories, never on other services, so the object graph is built
    once at startup without forward references.
    """

    def __init__(
        self,
        alert_repo: OutdatedVersionAlertRepository,
        resource_repo: ResourceRepository,
        project_repo: ProjectRepository,
        plugin_installation_repo: PluginInstallationRepository,
        dispatcher: NotificationDispatcher | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._alert_repo = alert_repo
        self._resource_repo = resource_repo
        self._project_repo = project_repo
        self._plugin_installation_repo = plugin_installation_repo
        self._dispatcher = dispatcher
        self._settings = settings or get_settings()

    async def create(
        self,
        resource_id: str,
        type: str,
        outdated_version: str | None,
        latest_version: str | None,
        block_id: str | None = None,
    ) -> OutdatedVersionAlert:
        """Create a New alert, canceling any New alert of the same scope.

        The cancel and the insert happen in one transaction.

        Returns:
            The created alert.
        """
        alert = OutdatedVersionAlert(
            resource_id=resource_id,
            block_id=block_id,
            type=type,
            status=STATUS_NEW,
            outdated_version=outdated_version,
            latest_version=latest_version,
        )
        created, canceled = await self._alert_repo.supersede_and_create(alert)
        get_metrics().record_alert_created(type, superseded=canceled)

        logger.info(
            "Outdated version alert %s created for resource %s (%s %s -> %s, %d superseded)",
            created.id,
            resource_id,
            type,
            outdated_version,
            latest_version,
            canceled,
        )
        return created

    async def resolve_for_template_update(self, resource_id: str) -> int:
        """Resolve the New TemplateVersion alerts of one resource.

        Returns:
            Number of alerts resolved.
        """
        resolved = await self._alert_repo.update_many(
            AlertFilter(
                resource_id=resource_id,
                type=TYPE_TEMPLATE_VERSION,
                status=STATUS_NEW,
            ),
            STATUS_RESOLVED,
        )
        get_metrics().record_alerts_resolved(resolved)
        if resolved:
            logger.info(
                "Resolved %d template alert(s) for resource %s", resolved, resource_id,
            )
        return resolved

    async def count(self, where: AlertFilter | None = None) -> int:
        return await self._alert_repo.count(where)

    async def find_many(
        self,
        where: AlertFilter | None = None,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> list[OutdatedVersionAlert]:
        return await self._alert_repo.find_many(where, limit=limit, offset=offset)

    async def find_one(self, alert_id: str) -> OutdatedVersionAlert | None:
        return await self._alert_repo.find_one(alert_id)

    async def update(
        self, alert_id: str, data: AlertUpdate, user_id: str | None = None
    ) -> OutdatedVersionAlert:
        """Apply a partial update to an alert.

        Status transitions are not validated; any valid status may be set.

        Raises:
            AlertNotFoundError: If no alert has this id.
            AlertConflictError: If reopening would leave two New alerts
                in the alert's scope.
        """
        updated = await self._alert_repo.update(alert_id, data)
        if updated is None:
            raise AlertNotFoundError(alert_id)

        logger.info(
            "Outdated version alert %s updated by %s: %s",
            alert_id,
            user_id or "unknown",
            {k: v for k, v in vars(data).items() if v is not None},
        )
        return updated

    async def trigger_alerts_for_template_version(
        self,
        template_resource_id: str,
        outdated_version: str | None,
        latest_version: str,
        user_id: str,
    ) -> list[OutdatedVersionAlert]:
        """Alert every service of the template's project built from it.

        Args:
            template_resource_id: The service template that got a new version.
            outdated_version: Previous template version. None means there is
                nothing to be outdated against, so no alert is created.
            latest_version: The template's new version.
            user_id: Actor, encrypted into the event's ``externalId``.

        Returns:
            The created alerts, in service order.

        Raises:
            AlertValidationError: If the template is missing or the resource
                is not a service template.
        """
        start = time.perf_counter()
        template = await self._resource_repo.get_by_id(template_resource_id)

        if template is None:
            raise AlertValidationError(
                f"Cannot trigger alerts. Template with id {template_resource_id} not found"
            )

        if not template.is_service_template:
            raise AlertValidationError(
                f"Cannot trigger alerts. Resource with id {template_resource_id} is not a template"
            )

        workspace_id = await self._resource_repo.get_resource_workspace_id(
            template_resource_id
        )
        project = await self._get_project(template.project_id)

        services = await self._resource_repo.find_services_by_template(
            template_resource_id, template.project_id
        )

        if outdated_version is None:
            logger.info(
                "Template %s has no outdated version, skipping %d service(s)",
                template_resource_id,
                len(services),
            )
            return []

        created: list[OutdatedVersionAlert] = []
        for service in services:
            current = await self._resource_repo.get_service_template_settings(
                service.id
            )
            alert = await self.create(
                resource_id=service.id,
                type=TYPE_TEMPLATE_VERSION,
                outdated_version=current.version if current else None,
                latest_version=latest_version,
            )
            created.append(alert)

            self._notify(
                alert,
                resource=service,
                workspace_id=workspace_id or project.workspace_id,
                project=project,
                initiator=template.name,
                user_id=user_id,
                context=f"service {service.id}",
            )

        get_metrics().trigger_latency.labels(trigger="template").observe(
            time.perf_counter() - start
        )
        logger.info(
            "Template %s version %s -> %s: %d alert(s) created",
            template_resource_id,
            outdated_version,
            latest_version,
            len(created),
        )
        return created

    async def trigger_alerts_for_new_plugin_version(
        self,
        project_id: str,
        plugin_id: str,
        new_version: str,
        user_id: str,
    ) -> list[OutdatedVersionAlert]:
        """Alert every installation of ``plugin_id`` in a project.

        Public plugins are released for all projects; callers run this once
        per project.

        Args:
            project_id: Project to scan.
            plugin_id: Plugin identifier, e.g. ``"plugin-aws-s3"``.
            new_version: The plugin's new version, e.g. ``"1.0.0"``.
            user_id: Actor, encrypted into the event's ``externalId``.

        Returns:
            The created alerts, in installation order.

        Raises:
            AlertValidationError: If the project does not exist.
        """
        start = time.perf_counter()
        installations = await self._plugin_installation_repo.find_by_plugin_id(
            plugin_id, project_id
        )
        project = await self._get_project(project_id)

        created: list[OutdatedVersionAlert] = []
        for installation in installations:
            alert = await self.create(
                resource_id=installation.resource_id,
                block_id=installation.id,
                type=TYPE_PLUGIN_VERSION,
                outdated_version=installation.version,
                latest_version=new_version,
            )
            created.append(alert)

            resource = await self._resource_repo.get_by_id(alert.resource_id)
            if resource is None:
                logger.warning(
                    "Resource %s of plugin installation %s not found, "
                    "alert %s created without notification",
                    alert.resource_id,
                    installation.id,
                    alert.id,
                )
                continue

            self._notify(
                alert,
                resource=resource,
                workspace_id=project.workspace_id,
                project=project,
                initiator=installation.display_name or installation.plugin_id,
                user_id=user_id,
                context=f"plugin {installation.id}",
            )

        get_metrics().trigger_latency.labels(trigger="plugin").observe(
            time.perf_counter() - start
        )
        logger.info(
            "Plugin %s version %s in project %s: %d alert(s) created",
            plugin_id,
            new_version,
            project_id,
            len(created),
        )
        return created

    async def _get_project(self, project_id: str) -> Project:
        project = await self._project_repo.get_by_id(project_id)
        if project is None:
            raise AlertValidationError(
                f"Cannot trigger alerts. Project with id {project_id} not found"
            )
        return project

    def _notify(
        self,
        alert: OutdatedVersionAlert,
        *,
        resource: Resource,
        workspace_id: str,
        project: Project,
        initiator: str,
        user_id: str,
        context: str,
    ) -> None:
        """Schedule the tech debt event for a freshly created alert."""
        if self._dispatcher is None:
            return

        try:
            event = TechDebtEvent(
                resource_id=resource.id,
                resource_name=resource.name,
                workspace_id=workspace_id,
                project_id=project.id,
                created_at=int(time.time() * 1000),
                tech_debt_id=alert.id,
                env_base_url=self._settings.client_host,
                external_id=encrypt_string(user_id, self._settings.encryption_secret),
                resource_type=resource.resource_type,
                project_name=project.name,
                alert_type=alert.type,
                alert_initiator=initiator,
            )
        except Exception as e:
            logger.error("Failed to build tech debt for %s: %s", context, e)
            get_metrics().record_notification("failed")
            return

        self._dispatcher.dispatch(event, context=context)
