"""
Redis Streams producer for tech debt events.

The outbound side only: events are appended with XADD and consumed by
other services. Delivery is best-effort; this producer never retries.
"""

import logging
from types import TracebackType

import redis.asyncio as redis

from src.config.settings import get_settings
from src.notifications.config import NotificationConfig
from src.notifications.schemas import TechDebtEvent

logger = logging.getLogger(__name__)


class TechDebtProducer:
    """
    Emits TechDebtEvents to a Redis stream.

    Usage:
        async with TechDebtProducer() as producer:
            await producer.emit("tech_debt_created", event)
    """

    def __init__(
        self,
        redis_url: str | None = None,
        config: NotificationConfig | None = None,
        redis_client: redis.Redis | None = None,
    ):
        settings = get_settings()

        self._redis_url = redis_url or str(settings.redis_url)
        self._config = config or NotificationConfig()
        self._redis: redis.Redis | None = redis_client

    async def connect(self) -> None:
        """Open the Redis connection."""
        if self._redis is not None:
            return
        self._redis = redis.from_url(
            self._redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        logger.info("Tech debt producer connected to Redis")

    async def close(self) -> None:
        """Close Redis connection."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            logger.info("Tech debt producer connection closed")

    async def __aenter__(self) -> "TechDebtProducer":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def redis(self) -> redis.Redis:
        """Get Redis client, raising if not connected."""
        if self._redis is None:
            raise RuntimeError("Not connected to Redis. Call connect() first.")
        return self._redis

    async def emit(self, topic: str, event: TechDebtEvent) -> str:
        """
        Append an event to ``topic``.

        Args:
            topic: Stream name
            event: Event payload

        Returns:
            Message ID assigned by Redis

        Raises:
            RuntimeError: If not connected to Redis
            redis.RedisError: If the XADD fails
        """
        message_id = await self.redis.xadd(
            name=topic,
            fields=event.to_message(),
            maxlen=self._config.max_stream_length,
            approximate=True,
        )

        logger.debug(
            f"Emitted tech debt {event.tech_debt_id} to {topic}, "
            f"message_id={message_id}"
        )
        return str(message_id)
