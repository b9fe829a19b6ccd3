"""Notification configuration.

Controls the outbound tech debt stream. All settings can be overridden
via ``NOTIFICATIONS_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class NotificationConfig(BaseSettings):
    """Configuration for tech debt event emission."""

    model_config = SettingsConfigDict(
        env_prefix="NOTIFICATIONS_",
        case_sensitive=False,
        extra="ignore",
    )

    tech_debt_topic: str = Field(
        default="tech_debt_created",
        min_length=1,
        description="Redis stream receiving tech debt created events",
    )
    max_stream_length: int = Field(
        default=100_000,
        ge=1,
        description="Approximate MAXLEN applied on every XADD",
    )
    enabled: bool = Field(
        default=True,
        description="Disable to create alerts without emitting events",
    )
