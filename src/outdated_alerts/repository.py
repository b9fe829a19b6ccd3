"""Repository for outdated version alert persistence.

Follows the asyncpg repository pattern used across the service:
hand-written SQL with positional parameters and a module-level row
converter. ``supersede_and_create`` is the only multi-statement write and
runs inside one transaction.
"""

import logging
from typing import Any

import asyncpg

from src.outdated_alerts.errors import AlertConflictError
from src.outdated_alerts.schemas import (
    STATUS_CANCELED,
    STATUS_NEW,
    AlertFilter,
    AlertUpdate,
    OutdatedVersionAlert,
)
from src.storage.database import Database, rows_affected

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS outdated_version_alerts (
    id                TEXT PRIMARY KEY,
    resource_id       TEXT NOT NULL,
    block_id          TEXT,
    type              TEXT NOT NULL,
    status            TEXT NOT NULL DEFAULT 'New',
    outdated_version  TEXT,
    latest_version    TEXT,
    created_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at        TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_outdated_version_alerts_resource
    ON outdated_version_alerts(resource_id, type, status);

-- At most one New alert per (resource, block, type)
CREATE UNIQUE INDEX IF NOT EXISTS uq_outdated_version_alerts_open_scope
    ON outdated_version_alerts(resource_id, COALESCE(block_id, ''), type)
    WHERE status = 'New';
"""

_INSERT_SQL = """
INSERT INTO outdated_version_alerts (
    id, resource_id, block_id, type, status,
    outdated_version, latest_version, created_at, updated_at
) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
RETURNING *
"""

_CANCEL_SCOPE_SQL = """
UPDATE outdated_version_alerts
SET status = $4, updated_at = NOW()
WHERE resource_id = $1
  AND block_id IS NOT DISTINCT FROM $2
  AND type = $3
  AND status = $5
"""


def _build_where(
    where: AlertFilter | None,
    *,
    alias: str = "",
    start_idx: int = 1,
) -> tuple[list[str], list[Any], int]:
    """Build SQL conditions for an AlertFilter.

    Returns (conditions, params, next_param_idx).
    """
    prefix = f"{alias}." if alias else ""
    conditions: list[str] = []
    params: list[Any] = []
    idx = start_idx

    if where is None:
        return conditions, params, idx

    for column in ("resource_id", "block_id", "type", "status"):
        value = getattr(where, column)
        if value is not None:
            conditions.append(f"{prefix}{column} = ${idx}")
            params.append(value)
            idx += 1

    if where.project_id is not None:
        conditions.append(
            f"{prefix}resource_id IN (SELECT id FROM resources WHERE project_id = ${idx})"
        )
        params.append(where.project_id)
        idx += 1

    return conditions, params, idx


class OutdatedVersionAlertRepository:
    """Store adapter for OutdatedVersionAlert records.

    Reads through ``find_many`` and ``count`` only see alerts whose resource
    is neither soft-deleted nor archived.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the outdated_version_alerts table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Outdated version alerts table ensured")

    async def create(
        self,
        alert: OutdatedVersionAlert,
        conn: asyncpg.Connection | None = None,
    ) -> OutdatedVersionAlert:
        """Insert a new alert.

        Args:
            alert: Alert to persist.
            conn: Open transaction connection, if any.

        Returns:
            The stored alert.
        """
        row = await self._db.fetchrow(
            _INSERT_SQL,
            alert.id,
            alert.resource_id,
            alert.block_id,
            alert.type,
            alert.status,
            alert.outdated_version,
            alert.latest_version,
            alert.created_at,
            alert.updated_at,
            conn=conn,
        )
        return _row_to_alert(row)

    async def supersede_and_create(
        self, alert: OutdatedVersionAlert
    ) -> tuple[OutdatedVersionAlert, int]:
        """Cancel the scope's New alerts and insert ``alert`` as New, atomically.

        A transaction-scoped advisory lock on the alert scope serializes
        concurrent triggers for the same scope, so the cancel and the
        insert are never interleaved with another writer's.

        Returns:
            (created alert, number of alerts canceled)
        """
        alert.status = STATUS_NEW
        async with self._db.transaction() as conn:
            await self._db.advisory_lock(conn, alert.scope_key)
            status = await self._db.execute(
                _CANCEL_SCOPE_SQL,
                alert.resource_id,
                alert.block_id,
                alert.type,
                STATUS_CANCELED,
                STATUS_NEW,
                conn=conn,
            )
            created = await self.create(alert, conn=conn)

        canceled = rows_affected(status)
        if canceled:
            logger.debug(
                "Canceled %d open alert(s) for %s", canceled, alert.scope_key,
            )
        return created, canceled

    async def update(
        self, alert_id: str, data: AlertUpdate
    ) -> OutdatedVersionAlert | None:
        """Apply a partial update to one alert.

        Returns:
            The updated alert, or None if no alert has this id.

        Raises:
            AlertConflictError: If the alert is set to New while its scope
                already has a New alert.
        """
        if data.is_empty():
            return await self.find_one(alert_id)

        assignments: list[str] = []
        params: list[Any] = [alert_id]
        idx = 2

        for column in ("status", "outdated_version", "latest_version"):
            value = getattr(data, column)
            if value is not None:
                assignments.append(f"{column} = ${idx}")
                params.append(value)
                idx += 1

        assignments.append("updated_at = NOW()")
        sql = f"""
            UPDATE outdated_version_alerts
            SET {", ".join(assignments)}
            WHERE id = $1
            RETURNING *
        """
        try:
            row = await self._db.fetchrow(sql, *params)
        except asyncpg.UniqueViolationError as e:
            raise AlertConflictError(alert_id) from e
        return _row_to_alert(row) if row else None

    async def update_many(
        self,
        where: AlertFilter,
        status: str,
        conn: asyncpg.Connection | None = None,
    ) -> int:
        """Set ``status`` on every alert matching ``where``.

        Returns:
            Number of alerts changed.
        """
        conditions, params, idx = _build_where(where, start_idx=2)
        where_clause = " AND ".join(conditions) if conditions else "TRUE"
        sql = f"""
            UPDATE outdated_version_alerts
            SET status = $1, updated_at = NOW()
            WHERE {where_clause}
        """
        result = await self._db.execute(sql, status, *params, conn=conn)
        return rows_affected(result)

    async def count(self, where: AlertFilter | None = None) -> int:
        """Count alerts of live resources matching ``where``."""
        conditions, params, _ = _build_where(where, alias="a")
        conditions.extend(["r.deleted_at IS NULL", "r.archived IS NOT TRUE"])
        sql = f"""
            SELECT COUNT(*)
            FROM outdated_version_alerts a
            JOIN resources r ON r.id = a.resource_id
            WHERE {" AND ".join(conditions)}
        """
        count = await self._db.fetchval(sql, *params)
        return count or 0

    async def find_many(
        self,
        where: AlertFilter | None = None,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> list[OutdatedVersionAlert]:
        """List alerts of live resources, newest first."""
        conditions, params, idx = _build_where(where, alias="a")
        conditions.extend(["r.deleted_at IS NULL", "r.archived IS NOT TRUE"])
        sql = f"""
            SELECT a.*
            FROM outdated_version_alerts a
            JOIN resources r ON r.id = a.resource_id
            WHERE {" AND ".join(conditions)}
            ORDER BY a.created_at DESC, a.id
            LIMIT ${idx} OFFSET ${idx + 1}
        """
        params.extend([limit, offset])
        rows = await self._db.fetch(sql, *params)
        return [_row_to_alert(row) for row in rows]

    async def find_one(self, alert_id: str) -> OutdatedVersionAlert | None:
        """Get an alert by id."""
        row = await self._db.fetchrow(
            "SELECT * FROM outdated_version_alerts WHERE id = $1", alert_id,
        )
        if row is None:
            return None
        return _row_to_alert(row)


def _row_to_alert(row: Any) -> OutdatedVersionAlert:
    """Convert an asyncpg Record to an OutdatedVersionAlert."""
    return OutdatedVersionAlert(
        id=row["id"],
        resource_id=row["resource_id"],
        block_id=row.get("block_id"),
        type=row["type"],
        status=row["status"],
        outdated_version=row.get("outdated_version"),
        latest_version=row.get("latest_version"),
        created_at=row["created_at"],
        updated_at=row.get("updated_at") or row["created_at"],
    )
