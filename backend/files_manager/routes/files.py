"""Files API routes."""
from typing import Optional
from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import Response

from files_manager.models.file_record import ROOT_PARENT_ID
from files_manager.schemas.file import FileCreate, FileResponse
from files_manager.services.file_storage import FileStorageService, get_file_storage
from files_manager.services.job_queue import JobQueue, get_job_queue
from files_manager.services.metadata_repository import MetadataRepository, get_repository
from files_manager.services.retrieval import retrieve_file
from files_manager.services.session_gate import current_user_id, optional_user_id
from files_manager.services.uploads import upload_file
from files_manager.services.visibility import set_visibility

router = APIRouter(prefix="/files", tags=["files"])


def _parse_page(page: Optional[str]) -> int:
    """Zero-based page index; anything non-numeric or negative means 0."""
    try:
        value = int(page)
    except (TypeError, ValueError):
        return 0
    return max(value, 0)


@router.post("", response_model=FileResponse, status_code=201)
async def create_file(
    body: Optional[FileCreate] = Body(None),
    user_id: str = Depends(current_user_id),
    repo: MetadataRepository = Depends(get_repository),
    storage: FileStorageService = Depends(get_file_storage),
    queue: JobQueue = Depends(get_job_queue),
):
    """Create a folder, or upload a base64-encoded file or image."""
    return await upload_file(body if body is not None else FileCreate(), user_id, repo, storage, queue)


@router.get("", response_model=list[FileResponse])
async def list_files(
    parent_id: str = Query(ROOT_PARENT_ID, alias="parentId"),
    page: Optional[str] = Query(None),
    user_id: str = Depends(current_user_id),
    repo: MetadataRepository = Depends(get_repository),
):
    """List the caller's records under parentId, 20 per page."""
    return await repo.list_children(user_id, parent_id, _parse_page(page))


@router.get("/{file_id}", response_model=FileResponse)
async def get_file(
    file_id: str,
    user_id: str = Depends(current_user_id),
    repo: MetadataRepository = Depends(get_repository),
):
    """Get metadata of a record the caller owns."""
    return await repo.get_owned(file_id, user_id)


@router.put("/{file_id}/publish", response_model=FileResponse)
async def publish_file(
    file_id: str,
    user_id: str = Depends(current_user_id),
    repo: MetadataRepository = Depends(get_repository),
):
    """Make a record readable by anyone."""
    return await set_visibility(repo, file_id, user_id, True)


@router.put("/{file_id}/unpublish", response_model=FileResponse)
async def unpublish_file(
    file_id: str,
    user_id: str = Depends(current_user_id),
    repo: MetadataRepository = Depends(get_repository),
):
    """Make a record readable by its owner only."""
    return await set_visibility(repo, file_id, user_id, False)


@router.get("/{file_id}/data")
async def get_file_data(
    file_id: str,
    size: Optional[str] = Query(None),
    user_id: Optional[str] = Depends(optional_user_id),
    repo: MetadataRepository = Depends(get_repository),
    storage: FileStorageService = Depends(get_file_storage),
):
    """Download file bytes, or a thumbnail when size is 500, 250 or 100."""
    content = await retrieve_file(file_id, user_id, size, repo, storage)
    return Response(content=content.data, media_type=content.media_type)
