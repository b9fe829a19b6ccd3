"""Schema definitions for outdated version alert records.

Maps 1:1 to the ``outdated_version_alerts`` table. An alert records that a
service is behind the latest version of its service template
(``TemplateVersion``) or of one of its installed plugins
(``PluginVersion``). Plugin alerts carry the installation's block id.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

OutdatedVersionAlertType = Literal["TemplateVersion", "PluginVersion"]

VALID_ALERT_TYPES: frozenset[str] = frozenset({
    "TemplateVersion",
    "PluginVersion",
})

OutdatedVersionAlertStatus = Literal["New", "Canceled", "Resolved"]

VALID_ALERT_STATUSES: frozenset[str] = frozenset({
    "New",
    "Canceled",
    "Resolved",
})

STATUS_NEW = "New"
STATUS_CANCELED = "Canceled"
STATUS_RESOLVED = "Resolved"

TYPE_TEMPLATE_VERSION = "TemplateVersion"
TYPE_PLUGIN_VERSION = "PluginVersion"


def _validate_type(value: str) -> None:
    if value not in VALID_ALERT_TYPES:
        raise ValueError(
            f"Invalid alert type {value!r}. "
            f"Must be one of: {sorted(VALID_ALERT_TYPES)}"
        )


def _validate_status(value: str) -> None:
    if value not in VALID_ALERT_STATUSES:
        raise ValueError(
            f"Invalid alert status {value!r}. "
            f"Must be one of: {sorted(VALID_ALERT_STATUSES)}"
        )


@dataclass
class OutdatedVersionAlert:
    """A persisted outdated version alert.

    Attributes:
        resource_id: Service the alert concerns.
        type: TemplateVersion or PluginVersion.
        outdated_version: Version the service currently uses (may be unknown).
        latest_version: Newest available version.
        block_id: Plugin installation block, for PluginVersion alerts.
        status: New, Canceled or Resolved.
        id: UUID4 identifier.
        created_at: When the alert was created.
        updated_at: When the alert last changed.
    """

    resource_id: str
    type: OutdatedVersionAlertType
    outdated_version: str | None
    latest_version: str | None
    block_id: str | None = None
    status: OutdatedVersionAlertStatus = STATUS_NEW
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    updated_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __post_init__(self) -> None:
        _validate_type(self.type)
        _validate_status(self.status)

    @property
    def scope(self) -> tuple[str, str | None, str]:
        """The (resource_id, block_id, type) tuple holding at most one New alert."""
        return (self.resource_id, self.block_id, self.type)

    @property
    def scope_key(self) -> str:
        """Stable string form of ``scope`` for locking."""
        return f"outdated_version_alert:{self.resource_id}:{self.block_id or ''}:{self.type}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "resource_id": self.resource_id,
            "block_id": self.block_id,
            "type": self.type,
            "status": self.status,
            "outdated_version": self.outdated_version,
            "latest_version": self.latest_version,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OutdatedVersionAlert":
        """Create an alert from a dictionary (or asyncpg Record)."""
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        elif created_at is None:
            created_at = datetime.now(timezone.utc)

        updated_at = data.get("updated_at")
        if isinstance(updated_at, str):
            updated_at = datetime.fromisoformat(updated_at)
        elif updated_at is None:
            updated_at = created_at

        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            resource_id=data["resource_id"],
            block_id=data.get("block_id"),
            type=data["type"],
            status=data.get("status", STATUS_NEW),
            outdated_version=data.get("outdated_version"),
            latest_version=data.get("latest_version"),
            created_at=created_at,
            updated_at=updated_at,
        )


@dataclass
class AlertFilter:
    """Where-clause for alert queries. ``None`` fields are not filtered."""

    resource_id: str | None = None
    block_id: str | None = None
    type: OutdatedVersionAlertType | None = None
    status: OutdatedVersionAlertStatus | None = None
    project_id: str | None = None

    def __post_init__(self) -> None:
        if self.type is not None:
            _validate_type(self.type)
        if self.status is not None:
            _validate_status(self.status)


@dataclass
class AlertUpdate:
    """Partial update of an alert. ``None`` fields are left unchanged."""

    status: OutdatedVersionAlertStatus | None = None
    outdated_version: str | None = None
    latest_version: str | None = None

    def __post_init__(self) -> None:
        if self.status is not None:
            _validate_status(self.status)

    def is_empty(self) -> bool:
        return (
            self.status is None
            and self.outdated_version is None
            and self.latest_version is None
        )
