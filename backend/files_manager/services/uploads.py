"""Upload path - create folders, files and images.

Side effects run in a fixed order, each only after the previous succeeded:

    blob write -> metadata insert -> thumbnail job enqueue

Nothing is rolled back when a later step fails. A crash between the blob
write and the insert leaves an unreferenced blob behind.
"""
import base64
import binascii
import logging

from files_manager.exceptions import (
    MissingName, MissingOrInvalidKind, MissingPayload, StorageWriteFailure,
)
from files_manager.models.file_record import FileRecord, FileType
from files_manager.schemas.file import FileCreate
from files_manager.services.file_storage import FileStorageService
from files_manager.services.job_queue import JobQueue
from files_manager.services.metadata_repository import MetadataRepository
from files_manager.services.thumbnails import THUMBNAIL_JOB_TYPE

logger = logging.getLogger(__name__)

_VALID_TYPES = {t.value for t in FileType}


def _decode_payload(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise MissingPayload()


async def upload_file(
    body: FileCreate,
    user_id: str,
    repo: MetadataRepository,
    storage: FileStorageService,
    queue: JobQueue,
) -> FileRecord:
    """Validate, store and record a new folder/file/image for user_id."""
    # Validation: first failure wins, no side effects yet
    if not isinstance(body.name, str) or not body.name:
        raise MissingName()
    if not isinstance(body.type, str) or body.type not in _VALID_TYPES:
        raise MissingOrInvalidKind()
    is_folder = body.type == FileType.FOLDER.value
    if not is_folder and (not isinstance(body.data, str) or not body.data):
        raise MissingPayload()
    payload = None if is_folder else _decode_payload(body.data)
    parent_id = await repo.validate_parent(body.parent_id)

    record = FileRecord(
        user_id=str(user_id),
        name=body.name,
        type=body.type,
        parent_id=parent_id,
        is_public=bool(body.is_public),
    )

    if is_folder:
        await repo.create(record)
        return record

    storage_path = storage.new_address()
    try:
        await storage.write(storage_path, payload)
    except OSError as e:
        logger.error("Failed to write upload for user %s to %s: %s", user_id, storage_path, e)
        raise StorageWriteFailure()

    record.storage_path = storage_path
    await repo.create(record)

    if body.type == FileType.IMAGE.value:
        await enqueue_thumbnail_job(queue, user_id, record.id)
    return record


async def enqueue_thumbnail_job(queue: JobQueue, user_id: str, file_id) -> bool:
    """Best-effort enqueue. Failure is logged and reported as False, never raised.

    The upload has already succeeded at this point; a lost job only means the
    image gets no thumbnails.
    """
    try:
        await queue.enqueue(THUMBNAIL_JOB_TYPE, {"userId": str(user_id), "fileId": str(file_id)})
    except Exception as e:
        logger.warning("Failed to enqueue thumbnail job for file %s: %s", file_id, e)
        return False
    return True
