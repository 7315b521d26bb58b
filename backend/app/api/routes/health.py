"""Health check endpoints.

- /health is a liveness probe
- /healthz checks DB, Redis and the upload directory and reports each
"""

import json
import os
from typing import Any

import redis.asyncio as redis
from fastapi import APIRouter, Response
from sqlalchemy import text

from backend.app.config import Settings, get_settings
from backend.app.db.engine import get_async_engine

router = APIRouter()


async def check_db(settings: Settings) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    if settings.repository_backend == "memory":
        return (True, "memory")

    try:
        async with get_async_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


async def check_redis(settings: Settings) -> tuple[bool, str]:
    """Check Redis connectivity.

    Returns:
        (is_ok, status_message)
    """
    if not settings.redis_url:
        return (True, "not_configured")

    client = redis.from_url(settings.redis_url, decode_responses=True)
    try:
        await client.ping()
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")
    finally:
        await client.aclose()


async def check_storage(settings: Settings) -> tuple[bool, str]:
    """Uploads need a writable directory; a missing one is created on first save."""
    path = settings.storage_dir
    if not os.path.exists(path):
        return (True, "not_created")
    if not os.access(path, os.W_OK):
        return (False, "error: not_writable")
    return (True, "ok")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | Response:
    """Health check endpoint.

    Returns:
        200 with component status if core systems ok
        503 if critical components fail
    """
    settings = get_settings()

    db_ok, db_status = await check_db(settings)
    redis_ok, redis_status = await check_redis(settings)
    storage_ok, storage_status = await check_storage(settings)

    # Redis only backs page-cache invalidation; it is reported but not critical
    core_ok = db_ok and storage_ok

    response_body = {
        "status": "ok" if core_ok and redis_ok else "degraded",
        "components": {
            "db": db_status,
            "redis": redis_status,
            "storage": storage_status,
        },
    }

    if not core_ok:
        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
