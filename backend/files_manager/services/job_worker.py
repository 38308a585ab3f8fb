"""Background job worker.

Claims jobs from the jobs table and dispatches them by job_type. Runs as an
asyncio task inside the API process (RUN_WORKER_IN_PROCESS) or on its own via
``python -m files_manager.worker``; any number of workers may share the queue.

The worker does not retry. A handler failure is reported to the queue, which
requeues or fails the job.
"""
import asyncio
import logging
import traceback

from sqlalchemy.ext.asyncio import async_sessionmaker

from files_manager.config import settings
from files_manager.services.file_storage import FileStorageService
from files_manager.services.job_queue import JobQueue
from files_manager.services.thumbnails import THUMBNAIL_JOB_TYPE, generate_thumbnails

logger = logging.getLogger(__name__)


def safe_error_message(e: Exception, fallback: str = "Job interrupted") -> str:
    """Extract a meaningful error message from an exception.

    Some exceptions produce an empty str(e); fall back to the class name.
    """
    msg = str(e).strip()
    if not msg:
        msg = f"{type(e).__name__}: {fallback}"
    return msg


# Job handler registry - add new job types here
JOB_HANDLERS = {}


def register_job_handler(job_type: str):
    """Decorator to register a job handler function."""
    def decorator(func):
        JOB_HANDLERS[job_type] = func
        return func
    return decorator


async def process_job(job_type: str, params: dict, session_factory, storage) -> dict:
    """Dispatch job to the appropriate handler."""
    handler = JOB_HANDLERS.get(job_type)
    if not handler:
        raise ValueError(f"Unknown job type: {job_type}")
    return await handler(params, session_factory=session_factory, storage=storage)


async def _report_failure(queue: JobQueue, job_id, error: str) -> None:
    # Retry the bookkeeping write so a transient DB error does not leave
    # the job stuck in "running" until stale recovery picks it up.
    for attempt in range(3):
        try:
            status = await queue.fail(job_id, error)
            logger.info(f"Job {job_id} marked {status}")
            return
        except Exception as db_err:
            logger.error(
                f"Failed to record failure of job {job_id} "
                f"(attempt {attempt + 1}/3): {db_err}"
            )
            if attempt < 2:
                await asyncio.sleep(1)


async def run_next_job(
    queue: JobQueue,
    session_factory: async_sessionmaker,
    storage: FileStorageService,
) -> bool:
    """Claim and process at most one job. Returns False when the queue is empty."""
    job = await queue.claim_next()
    if job is None:
        return False

    logger.info(f"Processing job {job.id} (type={job.job_type}, attempt {job.attempts}/{job.max_attempts})")
    try:
        await process_job(job.job_type, job.params or {}, session_factory, storage)
    except Exception as e:
        logger.error(f"Job {job.id} failed: {e}")
        logger.error(traceback.format_exc())
        await _report_failure(queue, job.id, safe_error_message(e))
        return True

    await queue.complete(job.id)
    logger.info(f"Job {job.id} completed")
    return True


async def worker_loop(
    queue: JobQueue,
    session_factory: async_sessionmaker,
    storage: FileStorageService,
    poll_interval: float = settings.WORKER_POLL_INTERVAL,
):
    """Main worker loop. Drains available jobs, then sleeps poll_interval."""
    logger.info("Job worker started")
    await queue.recover_stale_jobs()
    while True:
        try:
            while await run_next_job(queue, session_factory, storage):
                pass
        except Exception as e:
            logger.error(f"Worker loop error: {e}")

        await asyncio.sleep(poll_interval)


# ── Job Handlers ─────────────────────────────────────────────────

@register_job_handler(THUMBNAIL_JOB_TYPE)
async def handle_thumbnail(params: dict, *, session_factory, storage) -> dict:
    """Generate the fixed-width thumbnails of an uploaded image."""
    return await generate_thumbnails(params, session_factory, storage)
