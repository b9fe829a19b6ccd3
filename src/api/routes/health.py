"""
Health check endpoint with infrastructure checks.
"""

import time

import redis.asyncio as aioredis
import structlog
from fastapi import APIRouter, Depends

from src.api.dependencies import get_database
from src.api.models import ComponentHealth, HealthResponse
from src.config.settings import get_settings
from src.storage.database import Database

router = APIRouter()
logger = structlog.get_logger(__name__)

SERVICE_VERSION = "0.1.0"


async def _check_database(db: Database) -> ComponentHealth:
    """Check database connectivity and measure latency."""
    start = time.perf_counter()
    try:
        healthy = await db.health_check()
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="healthy" if healthy else "unhealthy",
            latency_ms=round(latency_ms, 2),
        )
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="unhealthy",
            latency_ms=round(latency_ms, 2),
            details={"error": str(e)},
        )


async def _check_redis(redis_client) -> ComponentHealth:
    """Check Redis connectivity and measure latency."""
    start = time.perf_counter()
    try:
        await redis_client.ping()
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="healthy",
            latency_ms=round(latency_ms, 2),
        )
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="unhealthy",
            latency_ms=round(latency_ms, 2),
            details={"error": str(e)},
        )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Check the health of the service and its dependencies.",
)
async def health_check(db: Database = Depends(get_database)) -> HealthResponse:
    """
    Status logic:
    - unhealthy: database is down
    - degraded: Redis is down (alerts are stored, events are not emitted)
    - healthy: all components operational
    """
    settings = get_settings()
    components: dict[str, ComponentHealth] = {}

    db_health = await _check_database(db)
    components["database"] = db_health

    redis_client = aioredis.from_url(
        str(settings.redis_url),
        encoding="utf-8",
        decode_responses=True,
    )
    try:
        redis_health = await _check_redis(redis_client)
    finally:
        await redis_client.aclose()
    components["redis"] = redis_health

    if db_health.status == "unhealthy":
        overall = "unhealthy"
    elif redis_health.status == "unhealthy":
        overall = "degraded"
    else:
        overall = "healthy"

    return HealthResponse(
        status=overall,
        components=components,
        version=SERVICE_VERSION,
    )
