"""
Shared Redis connection for the token revocation list.
"""

import redis.asyncio as redis
from backend.app.core.config import settings


redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def get_redis():
    """Route dependency; tests swap in ``MockRedis``."""
    return redis_client


async def ping_redis(client) -> bool:
    """Report whether the revocation store answers, for ``/health``."""
    try:
        return bool(await client.ping())
    except Exception:
        return False
