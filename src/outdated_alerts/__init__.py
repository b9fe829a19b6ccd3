"""Outdated version alerts for generated services.

Components:
- OutdatedVersionAlert: Dataclass mapping to the outdated_version_alerts table
- AlertFilter / AlertUpdate: Query and partial-update arguments
- OutdatedVersionAlertRepository: Store adapter (atomic supersede-and-create)
- OutdatedVersionAlertService: Lifecycle manager and fan-out triggers
- OutdatedAlertError and subclasses (validation, not found, conflict): Domain errors
"""

from src.outdated_alerts.errors import (
    AlertConflictError,
    AlertNotFoundError,
    AlertValidationError,
    OutdatedAlertError,
)
from src.outdated_alerts.repository import OutdatedVersionAlertRepository
from src.outdated_alerts.schemas import (
    VALID_ALERT_STATUSES,
    VALID_ALERT_TYPES,
    AlertFilter,
    AlertUpdate,
    OutdatedVersionAlert,
    OutdatedVersionAlertStatus,
    OutdatedVersionAlertType,
)
from src.outdated_alerts.service import OutdatedVersionAlertService

__all__ = [
    "AlertConflictError",
    "AlertFilter",
    "AlertNotFoundError",
    "AlertUpdate",
    "AlertValidationError",
    "OutdatedAlertError",
    "OutdatedVersionAlert",
    "OutdatedVersionAlertRepository",
    "OutdatedVersionAlertService",
    "OutdatedVersionAlertStatus",
    "OutdatedVersionAlertType",
    "VALID_ALERT_STATUSES",
    "VALID_ALERT_TYPES",
]
