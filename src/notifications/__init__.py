"""Outbound tech debt notifications.

Components:
- TechDebtEvent: Wire payload emitted when an alert is created
- NotificationConfig: Pydantic settings for the outbound stream
- TechDebtProducer: Redis Streams producer (the notification sink)
- NotificationDispatcher: Fire-and-forget background dispatch with logging
- encrypt_string / decrypt_string: Actor id encryption for ``externalId``
"""

from src.notifications.config import NotificationConfig
from src.notifications.dispatcher import NotificationDispatcher, NotificationSink
from src.notifications.encryption import decrypt_string, encrypt_string
from src.notifications.producer import TechDebtProducer
from src.notifications.schemas import TechDebtEvent

__all__ = [
    "NotificationConfig",
    "NotificationDispatcher",
    "NotificationSink",
    "TechDebtEvent",
    "TechDebtProducer",
    "decrypt_string",
    "encrypt_string",
]
