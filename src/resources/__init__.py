"""Resources, projects and plugin installations.

Components:
- Resource / Project / PluginInstallation / ServiceTemplateSettings: Dataclasses
- ResourceRepository / ProjectRepository / PluginInstallationRepository: Lookups
- create_resource_tables: Idempotent DDL
"""

from src.resources.repository import (
    PluginInstallationRepository,
    ProjectRepository,
    ResourceRepository,
    create_resource_tables,
)
from src.resources.schemas import (
    VALID_RESOURCE_TYPES,
    PluginInstallation,
    Project,
    Resource,
    ResourceType,
    ServiceTemplateSettings,
)

__all__ = [
    "PluginInstallation",
    "PluginInstallationRepository",
    "Project",
    "ProjectRepository",
    "Resource",
    "ResourceRepository",
    "ResourceType",
    "ServiceTemplateSettings",
    "VALID_RESOURCE_TYPES",
    "create_resource_tables",
]
