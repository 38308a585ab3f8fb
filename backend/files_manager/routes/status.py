"""Service status and counters."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from files_manager.database import get_db
from files_manager.schemas.common import StatusResponse, StatsResponse
from files_manager.services.connections import Connections
from files_manager.services.metadata_repository import MetadataRepository
from files_manager.services.users import count_users

router = APIRouter(tags=["status"])


def get_connections(request: Request) -> Connections:
    return request.app.state.connections


@router.get("/status", response_model=StatusResponse)
async def get_status(connections: Connections = Depends(get_connections)):
    """Liveness of the database and the session store."""
    await connections.check()
    return connections.status()


@router.get("/stats", response_model=StatsResponse)
async def get_stats(db: AsyncSession = Depends(get_db)):
    """Number of users and of file records."""
    return {
        "users": await count_users(db),
        "files": await MetadataRepository(db).count_files(),
    }
