"""Wire schema for tech debt created events.

Field names are camelCase on the wire; consumers of the stream are not
Python services.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TechDebtEvent(BaseModel):
    """Payload emitted when an outdated version alert is created."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    resource_id: str = Field(..., description="Service the alert concerns")
    resource_name: str = Field(..., description="Display name of the service")
    workspace_id: str = Field(..., description="Workspace owning the project")
    project_id: str = Field(..., description="Project owning the service")
    created_at: int = Field(..., description="Emission time in epoch millis")
    tech_debt_id: str = Field(..., description="Id of the created alert")
    env_base_url: str = Field(..., description="Client host for deep links")
    external_id: str = Field(..., description="Encrypted id of the acting user")
    resource_type: str = Field(..., description="Resource type of the service")
    project_name: str = Field(..., description="Display name of the project")
    alert_type: str = Field(..., description="TemplateVersion or PluginVersion")
    alert_initiator: str = Field(
        ...,
        description="Name of the template or plugin that caused the alert",
    )

    def to_message(self) -> dict[str, str]:
        """Stream message fields: an empty key and the JSON-encoded value."""
        return {
            "key": "{}",
            "value": self.model_dump_json(by_alias=True),
        }
