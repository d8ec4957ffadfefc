"""Liveness and database readiness endpoints."""

import time

import aiosqlite
from fastapi import APIRouter

from src.application.dto.responses import HealthResponse, ProviderHealthResponse
from src.config import get_logger, get_settings

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

_started_at = time.monotonic()


def _uptime() -> float:
    return time.monotonic() - _started_at


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=get_settings().app_version,
        uptime_seconds=_uptime(),
    )


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """Round-trip a query through the connection pool."""
    from src.infrastructure.storage.sqlite import get_pool

    probe_started = time.perf_counter()
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            await conn.execute("SELECT COUNT(*) FROM products")
    except (aiosqlite.Error, OSError) as e:
        logger.warning("database_health_failed", error=str(e))
        database = ProviderHealthResponse(name="sqlite", available=False, error=str(e))
    else:
        database = ProviderHealthResponse(
            name="sqlite",
            available=True,
            latency_ms=(time.perf_counter() - probe_started) * 1000,
        )

    return HealthResponse(
        status="healthy" if database.available else "unhealthy",
        version=get_settings().app_version,
        uptime_seconds=_uptime(),
        database=database,
    )
