"""Page cache invalidation for cacheable canonical documents."""

import redis.asyncio as redis

from backend.app.utils.logging import get_logger

logger = get_logger(__name__)


class RedisPageCache:
    """Redis-backed page cache; rendered pages live under ``<prefix><path>``."""

    def __init__(self, client: redis.Redis, prefix: str = "page-cache:") -> None:
        """Initialize page cache.

        Args:
            client: Async Redis client
            prefix: Key prefix shared with the page-serving tier
        """
        self._redis = client
        self._prefix = prefix

    async def invalidate(self, path: str) -> None:
        """Delete the cached page for ``path``."""
        removed = await self._redis.delete(f"{self._prefix}{path}")
        logger.info(
            "Page cache invalidated",
            extra={"structured": {"path": path, "removed": bool(removed)}},
        )


class NullPageCache:
    """Page cache used when no Redis is configured; nothing is ever cached."""

    async def invalidate(self, path: str) -> None:
        logger.debug("No page cache configured, skipping %s", path)
