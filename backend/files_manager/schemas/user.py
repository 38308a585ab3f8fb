"""User and auth request/response schemas."""
import uuid
from typing import Optional
from files_manager.schemas.base import CamelModel, CamelORMModel


class UserCreate(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(CamelORMModel):
    id: uuid.UUID
    email: str


class TokenResponse(CamelModel):
    token: str
