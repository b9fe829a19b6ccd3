"""
Runtime wiring for the outdated version alert service.

Builds the object graph once, explicitly, at process startup:
Database -> repositories -> TechDebtProducer -> NotificationDispatcher
-> OutdatedVersionAlertService -> ResourceService. Shared by the API
dependencies and the CLI.
"""

import logging

from src.notifications.config import NotificationConfig
from src.notifications.dispatcher import NotificationDispatcher
from src.notifications.producer import TechDebtProducer
from src.outdated_alerts.repository import OutdatedVersionAlertRepository
from src.outdated_alerts.service import OutdatedVersionAlertService
from src.resources.repository import (
    PluginInstallationRepository,
    ProjectRepository,
    ResourceRepository,
    create_resource_tables,
)
from src.resources.service import ResourceService
from src.storage.database import Database

logger = logging.getLogger(__name__)


class AlertRuntime:
    """
    Owns the connections and services of one process.

    Usage:
        runtime = AlertRuntime()
        await runtime.start()
        await runtime.alert_service.trigger_alerts_for_template_version(...)
        await runtime.stop()  # drains pending notifications first
    """

    def __init__(
        self,
        database: Database | None = None,
        producer: TechDebtProducer | None = None,
        notification_config: NotificationConfig | None = None,
    ):
        config = notification_config or NotificationConfig()

        self.database = database or Database()
        self.producer = producer or TechDebtProducer(config=config)
        self.dispatcher = NotificationDispatcher(self.producer, config=config)

        self.alert_repo = OutdatedVersionAlertRepository(self.database)
        self.resource_repo = ResourceRepository(self.database)

        self.alert_service = OutdatedVersionAlertService(
            alert_repo=self.alert_repo,
            resource_repo=self.resource_repo,
            project_repo=ProjectRepository(self.database),
            plugin_installation_repo=PluginInstallationRepository(self.database),
            dispatcher=self.dispatcher,
        )
        self.resource_service = ResourceService(
            resource_repo=self.resource_repo,
            alert_service=self.alert_service,
        )
        self._started = False

    async def start(self) -> None:
        """Connect the database and the event producer."""
        if self._started:
            return
        await self.database.connect()
        await self.producer.connect()
        self._started = True
        logger.info("Alert runtime started")

    async def stop(self) -> None:
        """Drain in-flight notifications, then close connections."""
        if not self._started:
            return
        await self.dispatcher.drain()
        await self.producer.close()
        await self.database.close()
        self._started = False
        logger.info("Alert runtime stopped")

    async def init_schema(self) -> None:
        """Create every table the service uses (idempotent)."""
        await create_resource_tables(self.database)
        await self.alert_repo.create_table()

    async def __aenter__(self) -> "AlertRuntime":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
