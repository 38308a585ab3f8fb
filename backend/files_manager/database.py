"""Async SQLAlchemy engine and session factory.

Route handlers get a session through the get_db dependency; the job queue
and worker open their own short sessions from async_session.

PostgreSQL (asyncpg) in deployment. A ``sqlite+aiosqlite://`` DATABASE_URL
also works for local runs, without the connection pool settings.
"""
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from files_manager.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"echo": False}
    return {
        "echo": False,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
    }


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    """FastAPI dependency that yields an async DB session."""
    async with async_session() as session:
        yield session


def get_session_factory() -> async_sessionmaker:
    """FastAPI dependency for code that opens its own sessions (job queue)."""
    return async_session
