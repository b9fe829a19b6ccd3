"""
Request and response models for the version alerts API.
"""

from pydantic import BaseModel, Field

from src.outdated_alerts.schemas import OutdatedVersionAlert


class ComponentHealth(BaseModel):
    """Health of one infrastructure dependency."""

    status: str = Field(..., description="healthy or unhealthy")
    latency_ms: float | None = Field(default=None, description="Check latency in milliseconds")
    details: dict | None = Field(default=None, description="Error details when unhealthy")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(
        ...,
        description="Overall service status: healthy, degraded, or unhealthy",
    )
    components: dict[str, ComponentHealth] = Field(
        default_factory=dict,
        description="Per-dependency health",
    )
    version: str = Field(..., description="Service version")


class ErrorResponse(BaseModel):
    """Response model for errors."""

    detail: str = Field(
        ...,
        description="Error message",
    )
    error_type: str = Field(
        default="error",
        description="Error type",
    )


# Outdated version alert models


class OutdatedVersionAlertItem(BaseModel):
    """Single outdated version alert."""

    id: str = Field(..., description="Alert identifier")
    resource_id: str = Field(..., description="Service the alert concerns")
    block_id: str | None = Field(default=None, description="Plugin installation block, for plugin alerts")
    type: str = Field(..., description="TemplateVersion or PluginVersion")
    status: str = Field(..., description="New, Canceled or Resolved")
    outdated_version: str | None = Field(default=None, description="Version the service currently uses")
    latest_version: str | None = Field(default=None, description="Newest available version")
    created_at: str = Field(..., description="Creation timestamp (ISO format)")
    updated_at: str = Field(..., description="Last change timestamp (ISO format)")

    @classmethod
    def from_alert(cls, alert: OutdatedVersionAlert) -> "OutdatedVersionAlertItem":
        return cls(**alert.to_dict())


class OutdatedVersionAlertsResponse(BaseModel):
    """Response model for listing alerts."""

    alerts: list[OutdatedVersionAlertItem] = Field(..., description="List of alerts")
    total: int = Field(..., description="Number of alerts returned")
    latency_ms: float = Field(..., description="Processing latency in milliseconds")


class OutdatedVersionAlertCountResponse(BaseModel):
    """Response model for counting alerts."""

    count: int = Field(..., description="Number of matching alerts")


class OutdatedVersionAlertUpdateRequest(BaseModel):
    """Partial update of an alert. Omitted fields are unchanged."""

    status: str | None = Field(default=None, description="New, Canceled or Resolved")
    outdated_version: str | None = Field(default=None, max_length=100)
    latest_version: str | None = Field(default=None, max_length=100)


class TemplateVersionTriggerRequest(BaseModel):
    """Request to alert services built from a service template."""

    template_resource_id: str = Field(..., min_length=1, description="Service template resource id")
    outdated_version: str | None = Field(
        default=None,
        description="Previous template version; null creates no alerts",
    )
    latest_version: str = Field(..., min_length=1, description="New template version")


class PluginVersionTriggerRequest(BaseModel):
    """Request to alert installations of a plugin in a project."""

    project_id: str = Field(..., min_length=1, description="Project to scan")
    plugin_id: str = Field(..., min_length=1, description="Plugin identifier, e.g. plugin-aws-s3")
    new_version: str = Field(..., min_length=1, description="New plugin version")


class TriggerResponse(BaseModel):
    """Response model for fan-out triggers."""

    alerts: list[OutdatedVersionAlertItem] = Field(..., description="Alerts created")
    total: int = Field(..., description="Number of alerts created")
    latency_ms: float = Field(..., description="Processing latency in milliseconds")


# Resource models


class ServiceTemplateVersionRequest(BaseModel):
    """Move a service to a new version of its template."""

    version: str = Field(..., min_length=1, max_length=100)


class ServiceTemplateVersionResponse(BaseModel):
    resource_id: str = Field(..., description="Updated service")
    version: str = Field(..., description="Template version now in use")
    resolved_alerts: int = Field(..., description="Template alerts resolved by the update")
