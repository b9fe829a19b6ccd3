"""Domain errors raised by the outdated version alert service."""


class OutdatedAlertError(Exception):
    """Base class for alert domain errors."""


class AlertValidationError(OutdatedAlertError):
    """A trigger referenced a missing resource or one of the wrong kind."""


class AlertNotFoundError(OutdatedAlertError):
    """No alert exists with the requested id."""

    def __init__(self, alert_id: str) -> None:
        super().__init__(f"Outdated version alert {alert_id} not found")
        self.alert_id = alert_id


class AlertConflictError(OutdatedAlertError):
    """The change would leave two New alerts in one scope."""

    def __init__(self, alert_id: str) -> None:
        super().__init__(
            f"Outdated version alert {alert_id} cannot be reopened: "
            "its scope already has a New alert"
        )
        self.alert_id = alert_id
