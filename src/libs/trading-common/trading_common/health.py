# src/libs/trading-common/trading_common/health.py
import logging
import asyncio
from typing import Callable, Awaitable

from fastapi import APIRouter, status, HTTPException
from sqlalchemy import text

from .db import AsyncSessionLocal

logger = logging.getLogger(__name__)

DependencyCheck = Callable[[], Awaitable[bool]]


async def check_db_health() -> bool:
    """Checks if a valid async connection can be established with the database."""
    try:
        async with AsyncSessionLocal() as session:
            async with session.begin():
                await session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Health Check: Database connection failed: {e}", exc_info=False)
        return False


def create_health_router(*dependencies: str) -> APIRouter:
    """
    Creates a standardized health check router.

    Args:
        *dependencies: Names of the dependencies ('db') the readiness probe checks.

    Returns:
        A FastAPI APIRouter with /live and /ready endpoints.
    """
    router = APIRouter(tags=["Health"])

    dep_map = {
        'db': ('database', check_db_health),
    }

    @router.get("/health/live", status_code=status.HTTP_200_OK)
    async def liveness_probe():
        return {"status": "alive"}

    @router.get("/health/ready", status_code=status.HTTP_200_OK)
    async def readiness_probe():
        known = [dep for dep in dependencies if dep in dep_map]
        results = await asyncio.gather(*[dep_map[dep][1]() for dep in known])

        dep_status = {
            dep_map[dep][0]: "ok" if ok else "unavailable"
            for dep, ok in zip(known, results)
        }

        if all(results):
            return {"status": "ready", "dependencies": dep_status}

        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"status": "not_ready", "dependencies": dep_status},
        )

    return router
