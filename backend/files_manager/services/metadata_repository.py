"""Metadata repository - the only code that queries the files table.

Owner-scoped lookups (get_owned, list_children) always conjoin
``user_id == caller``; a record owned by someone else is reported exactly
like a record that does not exist.
"""
import uuid
from typing import Optional

from fastapi import Depends
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from files_manager.database import get_db
from files_manager.exceptions import NotFound, InvalidParent
from files_manager.models.file_record import FileRecord, FileType, ROOT_PARENT_ID

PAGE_SIZE = 20


def parse_uuid(value) -> Optional[uuid.UUID]:
    """Parse a client-supplied id; None when it cannot be one of ours."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def canonical_parent_id(value) -> str:
    """Stored form of a parent id: the root sentinel or a lowercase dashed uuid.

    Anything else is returned as given and matches no record.
    """
    if value is None or str(value) == ROOT_PARENT_ID:
        return ROOT_PARENT_ID
    parsed = parse_uuid(value)
    return str(parsed) if parsed is not None else str(value)


class MetadataRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, record: FileRecord) -> uuid.UUID:
        """Insert record in a single commit and return its new id."""
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        return record.id

    async def get(self, file_id) -> FileRecord:
        record_id = parse_uuid(file_id)
        if record_id is None:
            raise NotFound()
        record = await self.db.get(FileRecord, record_id)
        if record is None:
            raise NotFound()
        return record

    async def get_owned(self, file_id, user_id: str) -> FileRecord:
        """Record with this id owned by user_id. Absent and foreign both raise NotFound."""
        record_id = parse_uuid(file_id)
        if record_id is None:
            raise NotFound()
        result = await self.db.execute(
            select(FileRecord).where(
                FileRecord.id == record_id,
                FileRecord.user_id == str(user_id),
            )
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise NotFound()
        return record

    async def list_children(self, user_id: str, parent_id: str = ROOT_PARENT_ID, page: int = 0) -> list[FileRecord]:
        """One page of user_id's records under parent_id.

        Offset paging in insertion order: a client paging while siblings are
        being inserted can see an entry twice or miss one.
        """
        result = await self.db.execute(
            select(FileRecord)
            .where(
                FileRecord.user_id == str(user_id),
                FileRecord.parent_id == canonical_parent_id(parent_id),
            )
            .order_by(FileRecord.created_at, FileRecord.id)
            .offset(page * PAGE_SIZE)
            .limit(PAGE_SIZE)
        )
        return list(result.scalars().all())

    async def set_public(self, file_id: uuid.UUID, value: bool) -> None:
        """Atomic single-field update. Callers refresh their own copy."""
        await self.db.execute(
            update(FileRecord)
            .where(FileRecord.id == file_id)
            .values(is_public=value)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

    async def validate_parent(self, parent_id: str) -> str:
        """Canonical id of parent_id. Raise InvalidParent unless it is root or an existing folder."""
        if canonical_parent_id(parent_id) == ROOT_PARENT_ID:
            return ROOT_PARENT_ID
        try:
            parent = await self.get(parent_id)
        except NotFound:
            raise InvalidParent("Parent not found")
        if parent.type != FileType.FOLDER.value:
            raise InvalidParent("Parent is not a folder")
        return str(parent.id)

    async def count_files(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(FileRecord))
        return result.scalar_one()


def get_repository(db: AsyncSession = Depends(get_db)) -> MetadataRepository:
    """FastAPI dependency returning a repository on the request's session."""
    return MetadataRepository(db)
