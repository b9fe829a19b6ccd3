"""Tests for TechDebtProducer with mocked Redis."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.notifications.config import NotificationConfig
from src.notifications.producer import TechDebtProducer


@pytest.fixture
def mock_redis():
    r = AsyncMock()
    r.xadd = AsyncMock(return_value="1700000000000-0")
    return r


@pytest.fixture
def event():
    e = MagicMock()
    e.tech_debt_id = "alert-1"
    e.to_message.return_value = {"key": "{}", "value": '{"techDebtId": "alert-1"}'}
    return e


class TestTechDebtProducer:

    @pytest.mark.asyncio
    async def test_emit_xadds_message(self, mock_redis, event):
        producer = TechDebtProducer(
            config=NotificationConfig(max_stream_length=500),
            redis_client=mock_redis,
        )
        message_id = await producer.emit("tech_debt_created", event)

        assert message_id == "1700000000000-0"
        mock_redis.xadd.assert_awaited_once_with(
            name="tech_debt_created",
            fields={"key": "{}", "value": '{"techDebtId": "alert-1"}'},
            maxlen=500,
            approximate=True,
        )

    @pytest.mark.asyncio
    async def test_emit_propagates_redis_errors(self, mock_redis, event):
        mock_redis.xadd.side_effect = ConnectionError("Redis down")
        producer = TechDebtProducer(redis_client=mock_redis)
        with pytest.raises(ConnectionError):
            await producer.emit("tech_debt_created", event)

    @pytest.mark.asyncio
    async def test_emit_requires_connection(self, event):
        producer = TechDebtProducer()
        with pytest.raises(RuntimeError, match="Not connected"):
            await producer.emit("tech_debt_created", event)

    @pytest.mark.asyncio
    async def test_close_releases_client(self, mock_redis):
        producer = TechDebtProducer(redis_client=mock_redis)
        await producer.close()
        mock_redis.aclose.assert_awaited_once()
        with pytest.raises(RuntimeError):
            producer.redis
