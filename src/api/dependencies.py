"""
Dependency injection for FastAPI endpoints.
"""

from src.outdated_alerts.service import OutdatedVersionAlertService
from src.resources.service import ResourceService
from src.services.alert_runtime import AlertRuntime
from src.storage.database import Database

# Global runtime (initialized on first request)
_runtime: AlertRuntime | None = None


async def get_runtime() -> AlertRuntime:
    """
    Get the process runtime.

    Creates and starts a singleton runtime with database and Redis
    connections on first use.
    """
    global _runtime

    if _runtime is None:
        runtime = AlertRuntime()
        await runtime.start()
        _runtime = runtime

    return _runtime


async def get_database() -> Database:
    """Get the runtime's database."""
    runtime = await get_runtime()
    return runtime.database


async def get_alert_service() -> OutdatedVersionAlertService:
    """Get the outdated version alert service."""
    runtime = await get_runtime()
    return runtime.alert_service


async def get_resource_service() -> ResourceService:
    """Get the resource service."""
    runtime = await get_runtime()
    return runtime.resource_service


async def cleanup_dependencies() -> None:
    """Clean up global dependencies on shutdown."""
    global _runtime

    if _runtime is not None:
        await _runtime.stop()
        _runtime = None
