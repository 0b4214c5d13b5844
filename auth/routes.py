"""
Auth API routes — login, register, current user.

Mounted at the application root.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session, get_current_user_id
from auth.jwt import create_token
from auth.password import hash_password, verify_password
from auth.schemas import (
    LoginRequest,
    MeResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)
from database.helpers import (
    UsernameTakenError,
    create_user,
    get_user_by_id,
    get_user_by_username,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

_ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    status.HTTP_401_UNAUTHORIZED: {"model": MessageResponse},
    422: {"model": MessageResponse},
}


@router.post("/login", response_model=TokenResponse, responses=_ERROR_RESPONSES)
async def login(
    req: LoginRequest,
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    """Exchange username + password for a session token."""
    user = await get_user_by_username(session, req.username)
    stored_hash = user.password_hash if user is not None else None

    if not verify_password(req.password, stored_hash) or user is None:
        logger.info("Failed login for %r", req.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    token = create_token(str(user.user_id))
    logger.info("Login: %s (%s)", user.username, user.user_id)
    return {"token": token}


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_ERROR_RESPONSES, status.HTTP_409_CONFLICT: {"model": MessageResponse}},
)
async def register(
    req: RegisterRequest,
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    """Register a new user. Does not issue a token."""
    try:
        user = await create_user(
            session,
            username=req.username,
            password_hash=hash_password(req.password),
            email=req.email,
            display_name=req.display_name,
        )
    except UsernameTakenError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already taken",
        )

    logger.info("Registered user %s (%s)", user.username, user.user_id)
    return {"message": "Registration successful", "user": user.to_public()}


@router.get("/user/me", response_model=MeResponse, responses=_ERROR_RESPONSES)
async def me(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    """Return the profile of the token's owner."""
    user = await get_user_by_id(session, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {"user": user.to_public()}
