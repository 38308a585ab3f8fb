"""Retrieval path - serve the bytes of a file or one of its thumbnails.

Anonymous callers are allowed. A private record is served only to its owner;
everyone else gets the same NotFound as for a record that does not exist.
"""
import mimetypes
from typing import NamedTuple, Optional

from files_manager.exceptions import NotFound, NotRetrievable, InvalidSize
from files_manager.models.file_record import FileType
from files_manager.services.file_storage import FileStorageService
from files_manager.services.metadata_repository import MetadataRepository
from files_manager.services.thumbnails import THUMBNAIL_WIDTHS, derivative_address

DEFAULT_MEDIA_TYPE = "application/octet-stream"


class FileContent(NamedTuple):
    data: bytes
    media_type: str


def media_type_for(name: str) -> str:
    return mimetypes.guess_type(name)[0] or DEFAULT_MEDIA_TYPE


def _address_for_size(storage_path: str, size: Optional[str]) -> str:
    if not size:
        return storage_path
    if size not in {str(w) for w in THUMBNAIL_WIDTHS}:
        raise InvalidSize()
    return derivative_address(storage_path, int(size))


async def retrieve_file(
    file_id: str,
    user_id: Optional[str],
    size: Optional[str],
    repo: MetadataRepository,
    storage: FileStorageService,
) -> FileContent:
    """Bytes and media type of file_id (or its `size` thumbnail) for user_id.

    A thumbnail not generated yet is reported as NotFound, same as a missing file.
    """
    record = await repo.get(file_id)
    if record.type == FileType.FOLDER.value:
        raise NotRetrievable()
    if not record.is_public and (user_id is None or str(user_id) != record.user_id):
        raise NotFound()

    address = _address_for_size(record.storage_path, size)
    if not await storage.exists(address):
        raise NotFound()
    data = await storage.read(address)
    if data is None:
        raise NotFound()
    return FileContent(data=data, media_type=media_type_for(record.name))
