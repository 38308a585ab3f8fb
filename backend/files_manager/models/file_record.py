"""FileRecord model - file/folder metadata (actual bytes on the blob store)."""
import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from files_manager.models.base import Base, TimestampMixin, OwnerMixin

# parent_id value for records at the top of a user's tree
ROOT_PARENT_ID = "0"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FileType(str, enum.Enum):
    FOLDER = "folder"
    FILE = "file"
    IMAGE = "image"


class FileRecord(Base, TimestampMixin, OwnerMixin):
    __tablename__ = "files"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    parent_id: Mapped[str] = mapped_column(String(36), nullable=False, default=ROOT_PARENT_ID)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Never set for folders
    storage_path: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    # Listing order. Set client-side with microseconds; server now() is
    # per-transaction (postgres) or per-second (sqlite).
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        Index("idx_files_user_parent", "user_id", "parent_id", "created_at"),
    )
