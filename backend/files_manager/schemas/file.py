"""File request/response schemas."""
import uuid
from typing import Any
from pydantic import field_validator
from files_manager.models.file_record import ROOT_PARENT_ID
from files_manager.schemas.base import CamelModel, CamelORMModel


class FileCreate(CamelModel):
    """Upload body. Fields are untyped here so that wrong values reach
    services.uploads, which reports the first bad field as a 400."""
    name: Any = None
    type: Any = None
    parent_id: str = ROOT_PARENT_ID
    is_public: Any = False
    data: Any = None

    @field_validator("parent_id", mode="before")
    @classmethod
    def parent_id_to_str(cls, v):
        if v is None or v == 0:
            return ROOT_PARENT_ID
        return str(v)


class FileResponse(CamelORMModel):
    id: uuid.UUID
    user_id: str
    name: str
    type: str
    is_public: bool
    parent_id: str
