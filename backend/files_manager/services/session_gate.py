"""Session store and gate.

Sessions live in redis as ``auth_<token> -> user_id`` with a TTL. The gate is
the only place a token is turned into a user id; every authenticated route
depends on ``current_user_id`` and the public-read route on
``optional_user_id``.
"""
import uuid
from typing import Optional

from fastapi import Depends, Header

from files_manager.config import settings
from files_manager.exceptions import Unauthenticated
from files_manager.redis_client import get_redis

_KEY_PREFIX = "auth_"


class SessionStore:
    """Token -> user id mapping with expiry."""

    def __init__(self, redis, ttl_seconds: int = settings.SESSION_TTL_SECONDS):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    async def get(self, token: str) -> Optional[str]:
        return await self.redis.get(f"{_KEY_PREFIX}{token}")

    async def create(self, user_id: str) -> str:
        token = str(uuid.uuid4())
        await self.redis.set(f"{_KEY_PREFIX}{token}", user_id, ex=self.ttl_seconds)
        return token

    async def delete(self, token: str) -> None:
        await self.redis.delete(f"{_KEY_PREFIX}{token}")


class SessionGate:
    def __init__(self, store: SessionStore):
        self.store = store

    async def resolve(self, token: Optional[str]) -> str:
        """Return the user id behind token or raise Unauthenticated."""
        if not token:
            raise Unauthenticated()
        user_id = await self.store.get(token)
        if not user_id:
            raise Unauthenticated()
        return user_id

    async def resolve_optional(self, token: Optional[str]) -> Optional[str]:
        """Like resolve(), but an anonymous caller yields None instead of an error."""
        try:
            return await self.resolve(token)
        except Unauthenticated:
            return None


def get_session_store(redis=Depends(get_redis)) -> SessionStore:
    return SessionStore(redis)


def get_session_gate(store: SessionStore = Depends(get_session_store)) -> SessionGate:
    return SessionGate(store)


async def current_user_id(
    x_token: Optional[str] = Header(None),
    gate: SessionGate = Depends(get_session_gate),
) -> str:
    """FastAPI dependency: resolved user id, or 401."""
    return await gate.resolve(x_token)


async def optional_user_id(
    x_token: Optional[str] = Header(None),
    gate: SessionGate = Depends(get_session_gate),
) -> Optional[str]:
    """FastAPI dependency: resolved user id, or None for anonymous callers."""
    return await gate.resolve_optional(x_token)
