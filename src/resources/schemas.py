"""Data models for the resources module.

Read-side views of the platform's resources, projects and plugin
installations. The alert service only looks these up; it never writes
them except for the service template version of a service.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

ResourceType = Literal[
    "Service",
    "ServiceTemplate",
    "ProjectConfiguration",
    "MessageBroker",
    "PluginRepository",
]

VALID_RESOURCE_TYPES: frozenset[str] = frozenset({
    "Service",
    "ServiceTemplate",
    "ProjectConfiguration",
    "MessageBroker",
    "PluginRepository",
})


@dataclass
class Resource:
    """A resource within a project (service, service template, ...).

    Services generated from a template carry ``service_template_id`` and
    the template ``service_template_version`` they currently build with.
    """

    id: str
    name: str
    resource_type: ResourceType
    project_id: str
    service_template_id: str | None = None
    service_template_version: str | None = None
    archived: bool = False
    deleted_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.resource_type not in VALID_RESOURCE_TYPES:
            raise ValueError(
                f"Invalid resource_type {self.resource_type!r}. "
                f"Must be one of: {sorted(VALID_RESOURCE_TYPES)}"
            )

    @property
    def is_service_template(self) -> bool:
        return self.resource_type == "ServiceTemplate"


@dataclass
class Project:
    """A project grouping resources inside a workspace."""

    id: str
    name: str
    workspace_id: str


@dataclass
class PluginInstallation:
    """A plugin installed on a resource, versioned independently of it.

    ``id`` is the block id of the installation.
    """

    id: str
    resource_id: str
    plugin_id: str
    version: str
    display_name: str = ""
    enabled: bool = True


@dataclass
class ServiceTemplateSettings:
    """The template reference a service currently builds with."""

    service_template_id: str
    version: str | None = None
