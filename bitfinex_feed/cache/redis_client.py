"""Shared async Redis pool for the stream publisher.

One pool serves the whole ingestion process. It is sized from
``RedisConfig.max_connections`` and built lazily by the first ``get_redis``
call; later calls ignore their config argument.
"""

from __future__ import annotations

import redis.asyncio as aioredis
import structlog

from bitfinex_feed.config import RedisConfig

logger = structlog.get_logger(__name__)

_pool: aioredis.ConnectionPool | None = None


async def get_redis(config: RedisConfig | None = None) -> aioredis.Redis:
    global _pool
    if _pool is None:
        config = config or RedisConfig()
        _pool = aioredis.ConnectionPool.from_url(
            config.url,
            max_connections=config.max_connections,
            decode_responses=True,
        )
        logger.info(
            "redis_pool_created",
            host=config.host,
            port=config.port,
            db=config.db,
            max_connections=config.max_connections,
        )
    return aioredis.Redis(connection_pool=_pool)


async def close_redis() -> None:
    """Release the pool; the next ``get_redis`` builds a fresh one."""
    global _pool
    if _pool is None:
        return
    pool, _pool = _pool, None
    await pool.aclose()
    logger.info("redis_pool_closed")
