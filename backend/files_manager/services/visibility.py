"""Publish/unpublish - flip is_public on a record the caller owns."""
from files_manager.models.file_record import FileRecord
from files_manager.services.metadata_repository import MetadataRepository


async def set_visibility(repo: MetadataRepository, file_id: str, user_id: str, is_public: bool) -> FileRecord:
    """Set is_public and return the record. Setting the current value again is a no-op success."""
    record = await repo.get_owned(file_id, user_id)
    await repo.set_public(record.id, is_public)
    record.is_public = is_public
    return record
