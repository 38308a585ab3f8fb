"""Users and session API routes."""
from typing import Optional
from fastapi import APIRouter, Depends, Header
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from files_manager.database import get_db
from files_manager.exceptions import Unauthenticated
from files_manager.schemas.user import UserCreate, UserResponse, TokenResponse
from files_manager.services.session_gate import SessionStore, current_user_id, get_session_store
from files_manager.services.users import authenticate, create_user, get_user, parse_basic_auth

router = APIRouter(tags=["users"])


@router.post("/users", response_model=UserResponse, status_code=201)
async def create_account(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
):
    """Register a new user."""
    return await create_user(db, body.email, body.password)


@router.get("/users/me", response_model=UserResponse)
async def get_me(
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """The user behind the X-Token session."""
    user = await get_user(db, user_id)
    if user is None:
        raise Unauthenticated()
    return user


@router.get("/connect", response_model=TokenResponse)
async def connect(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
):
    """Exchange Basic credentials for a session token."""
    credentials = parse_basic_auth(authorization)
    if credentials is None:
        raise Unauthenticated()
    user = await authenticate(db, *credentials)
    if user is None:
        raise Unauthenticated()
    token = await sessions.create(str(user.id))
    return {"token": token}


@router.get("/disconnect", status_code=204)
async def disconnect(
    x_token: Optional[str] = Header(None),
    user_id: str = Depends(current_user_id),
    sessions: SessionStore = Depends(get_session_store),
):
    """End the X-Token session."""
    await sessions.delete(x_token)
    return Response(status_code=204)
