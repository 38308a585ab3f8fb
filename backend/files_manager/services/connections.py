"""Connection lifecycle for the database and the session store.

One Connections object is built per process and handed to whatever needs to
know whether the backing services are reachable. Entry points await
wait_until_ready() once before serving or consuming jobs.
"""
import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from files_manager.exceptions import ConnectionTimeout

logger = logging.getLogger(__name__)


class Connections:
    def __init__(self, engine: AsyncEngine, redis):
        self.engine = engine
        self.redis = redis
        self.db_alive = False
        self.redis_alive = False

    def ready(self) -> bool:
        return self.db_alive and self.redis_alive

    async def check(self) -> bool:
        """Ping both services and update the liveness flags."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            self.db_alive = True
        except Exception as e:
            logger.warning(f"Database not reachable: {e}")
            self.db_alive = False

        try:
            self.redis_alive = bool(await self.redis.ping())
        except Exception as e:
            logger.warning(f"Redis not reachable: {e}")
            self.redis_alive = False

        return self.ready()

    async def wait_until_ready(self, retries: int, delay: float) -> None:
        """Bounded wait for both services; raises ConnectionTimeout when exhausted."""
        for attempt in range(1, retries + 1):
            if await self.check():
                logger.info(f"Connected to database and redis (attempt {attempt}/{retries})")
                return
            logger.info(
                f"Waiting for connections (attempt {attempt}/{retries}, "
                f"db={self.db_alive}, redis={self.redis_alive})"
            )
            if attempt < retries:
                await asyncio.sleep(delay)
        raise ConnectionTimeout(
            f"Services not ready after {retries} attempts "
            f"(db={self.db_alive}, redis={self.redis_alive})"
        )

    def status(self) -> dict:
        return {"redis": self.redis_alive, "db": self.db_alive}

    async def close(self) -> None:
        await self.redis.aclose()
        await self.engine.dispose()
