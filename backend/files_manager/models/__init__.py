"""Import all models so SQLAlchemy metadata knows about them."""
from files_manager.models.base import Base
from files_manager.models.file_record import FileRecord, FileType, ROOT_PARENT_ID
from files_manager.models.user import User
from files_manager.models.job import Job

__all__ = [
    "Base",
    "FileRecord", "FileType", "ROOT_PARENT_ID",
    "User", "Job",
]
