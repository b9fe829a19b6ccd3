"""Fire-and-forget dispatch of tech debt events.

Each emission runs as its own asyncio task so a slow or failing sink never
blocks the alert fan-out that scheduled it. Failures are logged with the
context the caller supplied and counted; they are never re-raised and
never retried.
"""

import asyncio
import logging
from typing import Protocol

from src.notifications.config import NotificationConfig
from src.notifications.schemas import TechDebtEvent
from src.observability.metrics import get_metrics

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Outbound event channel. ``emit`` may raise."""

    async def emit(self, topic: str, event: TechDebtEvent) -> str: ...


class NotificationDispatcher:
    """Schedules sink emissions as background tasks.

    Strong references to in-flight tasks are kept until they finish, so
    they are not garbage collected mid-flight. ``drain()`` waits for all of
    them (used on shutdown and by one-shot CLI commands).
    """

    def __init__(
        self,
        sink: NotificationSink,
        config: NotificationConfig | None = None,
    ) -> None:
        self._sink = sink
        self._config = config or NotificationConfig()
        self._pending: set[asyncio.Task] = set()

    @property
    def topic(self) -> str:
        return self._config.tech_debt_topic

    @property
    def pending(self) -> int:
        """Number of emissions still in flight."""
        return len(self._pending)

    def dispatch(
        self,
        event: TechDebtEvent,
        context: str,
        topic: str | None = None,
    ) -> asyncio.Task | None:
        """Schedule emission of ``event`` without waiting for it.

        Must be called from a running event loop.

        Args:
            event: Payload to emit.
            context: Human-readable origin used in failure logs,
                e.g. ``"service svc_1"``.
            topic: Stream name, defaults to the configured tech debt topic.

        Returns:
            The scheduled task, or None if notifications are disabled.
        """
        if not self._config.enabled:
            logger.debug("Notifications disabled, skipping %s", context)
            return None

        task = asyncio.create_task(
            self._emit_safely(topic or self.topic, event, context)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _emit_safely(
        self, topic: str, event: TechDebtEvent, context: str
    ) -> bool:
        try:
            await self._sink.emit(topic, event)
        except Exception as e:
            logger.error(
                "Failed to queue tech debt for %s: %s", context, e, exc_info=True,
            )
            get_metrics().record_notification("failed")
            return False

        get_metrics().record_notification("emitted")
        return True

    async def drain(self) -> None:
        """Wait until every scheduled emission has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
