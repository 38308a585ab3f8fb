"""Standalone derivative worker process.

    python -m files_manager.worker

Run as many as needed; they share the jobs table.
"""
import asyncio
import logging

from files_manager.config import settings
from files_manager.database import engine, async_session
from files_manager.logging_config import configure_logging
from files_manager.redis_client import redis_client
from files_manager.services.connections import Connections
from files_manager.services.file_storage import file_storage
from files_manager.services.job_queue import JobQueue
from files_manager.services.job_worker import worker_loop

logger = logging.getLogger(__name__)


async def main() -> None:
    connections = Connections(engine, redis_client)
    await connections.wait_until_ready(settings.CONNECT_RETRIES, settings.CONNECT_RETRY_DELAY)
    try:
        await worker_loop(JobQueue(async_session), async_session, file_storage)
    finally:
        await connections.close()


if __name__ == "__main__":
    configure_logging()
    asyncio.run(main())
