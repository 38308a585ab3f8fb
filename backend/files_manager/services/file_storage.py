"""Blob store on the local filesystem.

Addresses are absolute paths under FOLDER_PATH named by a random uuid4, so
two uploads never collide without any locking. Thumbnails sit beside their
original at ``<address>_<width>`` (see services.thumbnails).
"""
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os

from files_manager.config import settings


class FileStorageService:
    """Handles byte read/write for originals and derivatives."""

    def __init__(self, base_path: str | Path | None = None):
        self.base_path = Path(base_path or settings.FOLDER_PATH)

    def new_address(self) -> str:
        """Fresh, high-entropy address. Nothing is written yet."""
        return str(self.base_path / str(uuid.uuid4()))

    async def write(self, address: str, file_bytes: bytes) -> None:
        """Write (or overwrite) bytes at address, creating the directory if needed."""
        await aiofiles.os.makedirs(Path(address).parent, exist_ok=True)
        async with aiofiles.open(address, "wb") as f:
            await f.write(file_bytes)

    async def read(self, address: str) -> bytes | None:
        """Read bytes at address, or None when nothing is stored there."""
        try:
            async with aiofiles.open(address, "rb") as f:
                return await f.read()
        except FileNotFoundError:
            return None

    async def exists(self, address: str) -> bool:
        return await aiofiles.os.path.isfile(address)


file_storage = FileStorageService()


def get_file_storage() -> FileStorageService:
    """FastAPI dependency returning the shared blob store."""
    return file_storage
