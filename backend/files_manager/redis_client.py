"""Async redis client used as the session store.

The client is created lazily by redis-py; no connection is opened until the
first command, so importing this module never blocks.
"""
import redis.asyncio as redis

from files_manager.config import settings

redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)


def get_redis():
    """FastAPI dependency returning the shared redis client."""
    return redis_client
