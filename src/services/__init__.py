"""Process-level wiring of repositories, producer and services."""

from src.services.alert_runtime import AlertRuntime

__all__ = ["AlertRuntime"]
