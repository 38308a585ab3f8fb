"""User accounts and credential checks."""
import base64
import binascii
from typing import Optional

import bcrypt
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from files_manager.exceptions import MissingEmail, MissingPassword, AlreadyExists
from files_manager.models.user import User
from files_manager.services.metadata_repository import parse_uuid


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


async def create_user(db: AsyncSession, email: Optional[str], password: Optional[str]) -> User:
    if not email:
        raise MissingEmail()
    if not password:
        raise MissingPassword()

    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise AlreadyExists()

    user = User(email=email, password=hash_password(password))
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def parse_basic_auth(header: Optional[str]) -> Optional[tuple[str, str]]:
    """(email, password) from an ``Authorization: Basic ...`` header, or None."""
    if not header or not header.startswith("Basic "):
        return None
    try:
        decoded = base64.b64decode(header[len("Basic "):], validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    email, sep, password = decoded.partition(":")
    if not sep:
        return None
    return email, password


async def authenticate(db: AsyncSession, email: str, password: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is None or not check_password(password, user.password):
        return None
    return user


async def get_user(db: AsyncSession, user_id: str) -> Optional[User]:
    uid = parse_uuid(user_id)
    if uid is None:
        return None
    return await db.get(User, uid)


async def count_users(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(User))
    return result.scalar_one()
