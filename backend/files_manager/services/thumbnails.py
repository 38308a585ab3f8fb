"""Thumbnail derivatives for image uploads.

Each image gets one derivative per width in THUMBNAIL_WIDTHS, stored at
``<storage_path>_<width>``. Retrieval relies on that exact suffix. Writes are
plain overwrites of a pure function of the original bytes, so running the
same job twice (or concurrently) converges on the same files.
"""
import asyncio
import io
import logging

from PIL import Image
from sqlalchemy.ext.asyncio import async_sessionmaker

from files_manager.exceptions import JobFailure, NotFound
from files_manager.services.file_storage import FileStorageService
from files_manager.services.metadata_repository import MetadataRepository

logger = logging.getLogger(__name__)

THUMBNAIL_JOB_TYPE = "thumbnail"
THUMBNAIL_WIDTHS = (500, 250, 100)


def derivative_address(storage_path: str, width: int) -> str:
    return f"{storage_path}_{width}"


def _resize_sync(data: bytes, width: int) -> bytes:
    with Image.open(io.BytesIO(data)) as img:
        fmt = img.format or "PNG"
        height = max(1, round(img.height * width / img.width))
        resized = img.resize((width, height), Image.Resampling.LANCZOS)
        if fmt == "JPEG" and resized.mode not in ("RGB", "L"):
            resized = resized.convert("RGB")
        out = io.BytesIO()
        resized.save(out, format=fmt)
        return out.getvalue()


async def resize(data: bytes, width: int) -> bytes:
    """Scale image bytes to width keeping aspect ratio and source format.

    Pillow is synchronous and CPU bound; run it off the event loop.
    """
    return await asyncio.to_thread(_resize_sync, data, width)


async def generate_thumbnails(
    params: dict,
    session_factory: async_sessionmaker,
    storage: FileStorageService,
) -> dict:
    """Write every thumbnail width for the job's image.

    Raises JobFailure on a malformed job, an unknown or foreign file, or the
    first width that fails; widths written before the failure stay on disk.
    """
    user_id = params.get("userId")
    file_id = params.get("fileId")
    if not file_id:
        raise JobFailure("Missing fileId")
    if not user_id:
        raise JobFailure("Missing userId")

    async with session_factory() as db:
        try:
            record = await MetadataRepository(db).get_owned(file_id, user_id)
        except NotFound:
            raise JobFailure("File not found")

    if not record.storage_path:
        raise JobFailure("File has no content")
    original = await storage.read(record.storage_path)
    if original is None:
        raise JobFailure("Original bytes missing")

    written = []
    for width in THUMBNAIL_WIDTHS:
        try:
            thumbnail = await resize(original, width)
            await storage.write(derivative_address(record.storage_path, width), thumbnail)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise JobFailure(f"Error generating thumbnail width {width}: {e}") from e
        written.append(width)
        logger.debug("Wrote %dpx thumbnail for file %s", width, file_id)

    return {"fileId": str(file_id), "widths": written}
