"""FastAPI application entry point."""
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from files_manager.config import settings
from files_manager.database import engine, async_session
from files_manager.exceptions import FilesManagerError
from files_manager.logging_config import configure_logging
from files_manager.models import Base
from files_manager.redis_client import redis_client
from files_manager.services.connections import Connections

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wait for backing services, create tables, start the in-process worker."""
    configure_logging()
    connections: Connections = app.state.connections
    await connections.wait_until_ready(settings.CONNECT_RETRIES, settings.CONNECT_RETRY_DELAY)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    worker_task = None
    if settings.RUN_WORKER_IN_PROCESS:
        from files_manager.services.file_storage import file_storage
        from files_manager.services.job_queue import JobQueue
        from files_manager.services.job_worker import worker_loop
        worker_task = asyncio.create_task(
            worker_loop(JobQueue(async_session), async_session, file_storage)
        )

    yield

    # Cleanup
    if worker_task is not None:
        worker_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await worker_task
    await connections.close()


app = FastAPI(
    title="Files Manager API",
    version="1.0.0",
    description="Multi-tenant file storage with image thumbnails.",
    lifespan=lifespan,
)
app.state.connections = Connections(engine, redis_client)

# CORS
origins = [o.strip() for o in settings.CORS_ORIGINS.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FilesManagerError)
async def files_manager_error_handler(request: Request, exc: FilesManagerError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# Register routers
from files_manager.routes.status import router as status_router
from files_manager.routes.users import router as users_router
from files_manager.routes.files import router as files_router
app.include_router(status_router)
app.include_router(users_router)
app.include_router(files_router)
