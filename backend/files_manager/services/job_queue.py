"""Durable job queue on the jobs table.

Producers call enqueue(); workers loop on claim_next() and report back with
complete() or fail(). The queue owns retries: a failed job is requeued with a
growing delay until max_attempts, and jobs left 'running' by a dead worker
are requeued by recover_stale_jobs(). Delivery is therefore at-least-once and
handlers must be idempotent.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from sqlalchemy import select, update, and_
from sqlalchemy.ext.asyncio import async_sessionmaker

from files_manager.config import settings
from files_manager.database import get_session_factory
from files_manager.models.job import Job

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobQueue:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        max_attempts: int = settings.JOB_MAX_ATTEMPTS,
        retry_backoff: float = settings.JOB_RETRY_BACKOFF,
    ):
        self.session_factory = session_factory
        self.max_attempts = max_attempts
        self.retry_backoff = retry_backoff

    async def enqueue(self, job_type: str, params: dict) -> uuid.UUID:
        async with self.session_factory() as db:
            job = Job(job_type=job_type, params=params, max_attempts=self.max_attempts)
            db.add(job)
            await db.commit()
            logger.info(f"Enqueued {job_type} job {job.id}")
            return job.id

    async def claim_next(self) -> Optional[Job]:
        """Move the oldest available queued job to 'running' and return it.

        The conditional UPDATE only matches while the row is still queued, so
        two workers racing for the same job cannot both claim it.
        """
        now = _utcnow()
        async with self.session_factory() as db:
            result = await db.execute(
                select(Job.id)
                .where(Job.status == "queued", Job.available_at <= now)
                .order_by(Job.created_at)
                .limit(1)
            )
            job_id = result.scalar_one_or_none()
            if job_id is None:
                return None

            claimed = await db.execute(
                update(Job)
                .where(Job.id == job_id, Job.status == "queued")
                .values(status="running", attempts=Job.attempts + 1, started_at=now)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
            if claimed.rowcount != 1:
                return None
            return await db.get(Job, job_id)

    async def complete(self, job_id) -> None:
        async with self.session_factory() as db:
            job = await db.get(Job, job_id)
            if job is None:
                return
            job.status = "completed"
            job.error_message = None
            job.completed_at = _utcnow()
            await db.commit()

    async def fail(self, job_id, error: str) -> str:
        """Record a failed attempt. Returns the job's new status."""
        async with self.session_factory() as db:
            job = await db.get(Job, job_id)
            if job is None:
                return "missing"
            job.error_message = error[:2000]
            if job.attempts >= job.max_attempts:
                job.status = "failed"
                job.completed_at = _utcnow()
            else:
                job.status = "queued"
                job.available_at = _utcnow() + timedelta(seconds=self.retry_backoff * job.attempts)
            await db.commit()
            return job.status

    async def get(self, job_id) -> Optional[Job]:
        async with self.session_factory() as db:
            return await db.get(Job, job_id)

    async def recover_stale_jobs(self, stale_minutes: int = settings.JOB_STALE_MINUTES) -> int:
        """Requeue jobs stuck in 'running' for longer than stale_minutes.

        Call on worker startup to recover from crashes that left jobs stranded.
        Jobs already out of attempts are marked failed instead.
        """
        cutoff = _utcnow() - timedelta(minutes=stale_minutes)
        async with self.session_factory() as db:
            result = await db.execute(
                select(Job).where(
                    and_(
                        Job.status == "running",
                        Job.started_at < cutoff,
                    )
                )
            )
            stale_jobs = result.scalars().all()
            for job in stale_jobs:
                job.error_message = f"Recovered: job was running for >{stale_minutes} minutes"
                if job.attempts >= job.max_attempts:
                    job.status = "failed"
                    job.completed_at = _utcnow()
                else:
                    job.status = "queued"
                    job.available_at = _utcnow()
                logger.warning(f"Recovered stale job {job.id} (started at {job.started_at}) -> {job.status}")
            if stale_jobs:
                await db.commit()
                logger.info(f"Recovered {len(stale_jobs)} stale job(s)")
            return len(stale_jobs)


def get_job_queue(session_factory: async_sessionmaker = Depends(get_session_factory)) -> JobQueue:
    """FastAPI dependency returning a queue bound to the app's session factory."""
    return JobQueue(session_factory)
