"""Database repositories for resources, projects and plugin installations."""

import logging

from src.resources.schemas import (
    PluginInstallation,
    Project,
    Resource,
    ServiceTemplateSettings,
)
from src.storage.database import Database, rows_affected

logger = logging.getLogger(__name__)

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS projects (
    id            TEXT PRIMARY KEY,
    name          TEXT NOT NULL,
    workspace_id  TEXT NOT NULL,
    created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS resources (
    id                        TEXT PRIMARY KEY,
    name                      TEXT NOT NULL,
    resource_type             TEXT NOT NULL,
    project_id                TEXT NOT NULL REFERENCES projects(id),
    service_template_id       TEXT REFERENCES resources(id),
    service_template_version  TEXT,
    archived                  BOOLEAN NOT NULL DEFAULT FALSE,
    deleted_at                TIMESTAMPTZ,
    created_at                TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at                TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_resources_project
    ON resources(project_id);
CREATE INDEX IF NOT EXISTS idx_resources_service_template
    ON resources(service_template_id) WHERE service_template_id IS NOT NULL;

CREATE TABLE IF NOT EXISTS plugin_installations (
    id            TEXT PRIMARY KEY,
    resource_id   TEXT NOT NULL REFERENCES resources(id),
    plugin_id     TEXT NOT NULL,
    version       TEXT NOT NULL,
    display_name  TEXT NOT NULL DEFAULT '',
    enabled       BOOLEAN NOT NULL DEFAULT TRUE,
    created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_plugin_installations_plugin
    ON plugin_installations(plugin_id);
"""


def _record_to_resource(record) -> Resource:
    """Convert an asyncpg Record to a Resource dataclass."""
    return Resource(
        id=record["id"],
        name=record["name"],
        resource_type=record["resource_type"],
        project_id=record["project_id"],
        service_template_id=record.get("service_template_id"),
        service_template_version=record.get("service_template_version"),
        archived=record.get("archived", False),
        deleted_at=record.get("deleted_at"),
        created_at=record.get("created_at"),
        updated_at=record.get("updated_at"),
    )


def _record_to_plugin_installation(record) -> PluginInstallation:
    return PluginInstallation(
        id=record["id"],
        resource_id=record["resource_id"],
        plugin_id=record["plugin_id"],
        version=record["version"],
        display_name=record.get("display_name", ""),
        enabled=record.get("enabled", True),
    )


async def create_resource_tables(database: Database) -> None:
    """Create projects, resources and plugin_installations (idempotent)."""
    await database.execute(_CREATE_TABLES_SQL)
    logger.info("Resource tables ensured")


class ResourceRepository:
    """Lookups over the resources table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def get_by_id(self, resource_id: str) -> Resource | None:
        """Fetch a live (not deleted) resource by id."""
        row = await self._db.fetchrow(
            "SELECT * FROM resources WHERE id = $1 AND deleted_at IS NULL",
            resource_id,
        )
        return _record_to_resource(row) if row else None

    async def find_services_by_template(
        self, template_id: str, project_id: str
    ) -> list[Resource]:
        """Services of ``project_id`` that are generated from ``template_id``."""
        rows = await self._db.fetch(
            """
            SELECT * FROM resources
            WHERE service_template_id = $1
              AND project_id = $2
              AND deleted_at IS NULL
            ORDER BY created_at, id
            """,
            template_id,
            project_id,
        )
        return [_record_to_resource(r) for r in rows]

    async def get_resource_workspace_id(self, resource_id: str) -> str | None:
        """Resolve the workspace owning a resource through its project."""
        return await self._db.fetchval(
            """
            SELECT p.workspace_id
            FROM resources r
            JOIN projects p ON p.id = r.project_id
            WHERE r.id = $1
            """,
            resource_id,
        )

    async def get_service_template_settings(
        self, resource_id: str
    ) -> ServiceTemplateSettings | None:
        """Template reference of a service, or None if it has no template."""
        row = await self._db.fetchrow(
            """
            SELECT service_template_id, service_template_version
            FROM resources
            WHERE id = $1 AND service_template_id IS NOT NULL
            """,
            resource_id,
        )
        if row is None:
            return None
        return ServiceTemplateSettings(
            service_template_id=row["service_template_id"],
            version=row["service_template_version"],
        )

    async def set_service_template_version(
        self, resource_id: str, version: str
    ) -> bool:
        """Point a service at a new template version. Returns True if updated."""
        status = await self._db.execute(
            """
            UPDATE resources
            SET service_template_version = $2, updated_at = NOW()
            WHERE id = $1 AND service_template_id IS NOT NULL AND deleted_at IS NULL
            """,
            resource_id,
            version,
        )
        return rows_affected(status) > 0


class ProjectRepository:
    """Lookups over the projects table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def get_by_id(self, project_id: str) -> Project | None:
        row = await self._db.fetchrow(
            "SELECT id, name, workspace_id FROM projects WHERE id = $1",
            project_id,
        )
        if row is None:
            return None
        return Project(
            id=row["id"], name=row["name"], workspace_id=row["workspace_id"],
        )


class PluginInstallationRepository:
    """Lookups over the plugin_installations table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def find_by_plugin_id(
        self, plugin_id: str, project_id: str
    ) -> list[PluginInstallation]:
        """Installations of ``plugin_id`` on live resources of a project."""
        rows = await self._db.fetch(
            """
            SELECT pi.*
            FROM plugin_installations pi
            JOIN resources r ON r.id = pi.resource_id
            WHERE pi.plugin_id = $1
              AND r.project_id = $2
              AND r.deleted_at IS NULL
            ORDER BY pi.created_at, pi.id
            """,
            plugin_id,
            project_id,
        )
        return [_record_to_plugin_installation(r) for r in rows]
