"""Collaborator wiring for request handlers."""

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.cache.pages import NullPageCache, RedisPageCache
from backend.app.config import Settings, get_settings
from backend.app.db.engine import create_session_factory, get_async_engine
from backend.app.db.inmemory import build_inmemory_collaborators
from backend.app.db.repositories import Collaborators, PageCache
from backend.app.db.sql_repositories import (
    SqlDocumentRepository,
    SqlNoteRepository,
    SqlProjectRepository,
)
from backend.app.search.engine import SqlSearchIndex
from backend.app.storage.files import LocalFileStorage


@lru_cache
def get_redis(url: str) -> redis.Redis:
    """Shared async Redis client per URL."""
    return redis.from_url(url, decode_responses=True)


@lru_cache
def get_memory_collaborators() -> Collaborators:
    """Process-wide in-memory collaborators (repository_backend=memory)."""
    return build_inmemory_collaborators()


def build_page_cache(settings: Settings) -> PageCache:
    if not settings.redis_url:
        return NullPageCache()
    return RedisPageCache(get_redis(settings.redis_url), prefix=settings.page_cache_prefix)


def build_sql_collaborators(session: AsyncSession, settings: Settings) -> Collaborators:
    """Wire every collaborator to one request-scoped session."""
    return Collaborators(
        documents=SqlDocumentRepository(session),
        notes=SqlNoteRepository(session),
        projects=SqlProjectRepository(session),
        search=SqlSearchIndex(session),
        cache=build_page_cache(settings),
        storage=LocalFileStorage(settings.storage_dir),
    )


async def get_collaborators(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncGenerator[Collaborators, None]:
    """FastAPI dependency yielding the configured collaborators.

    Yields:
        Collaborators bound to a fresh session (sql) or the shared store (memory)
    """
    if settings.repository_backend == "memory":
        yield get_memory_collaborators()
        return

    async with create_session_factory(get_async_engine())() as session:
        yield build_sql_collaborators(session, settings)
