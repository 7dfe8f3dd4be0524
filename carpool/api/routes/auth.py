"""
Auth endpoints
==============

POST /api/auth/register -- create an account, returns a bearer token
POST /api/auth/login    -- exchange credentials for a bearer token
GET  /api/auth/me       -- the caller's profile
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from carpool.api.dependencies import get_current_user, get_db, get_settings
from carpool.api.middleware import auth_limit, limiter
from carpool.api.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from carpool.api.security import create_access_token, hash_password, verify_password
from carpool.config import Settings
from carpool.infrastructure.models import UserModel
from carpool.infrastructure.repositories import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _issue(user: UserModel, settings: Settings) -> AuthResponse:
    token = create_access_token(
        user.id,
        settings.jwt_secret,
        settings.jwt_algorithm,
        settings.jwt_expire_minutes,
    )
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    summary="Register a new user",
)
@limiter.limit(auth_limit)
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    repo = UserRepository(db)
    if await repo.get_by_email(body.email):
        raise HTTPException(status_code=400, detail="User already exists")

    user = await repo.create(
        UserModel(
            name=body.name,
            email=body.email,
            password_hash=hash_password(body.password),
            gender=body.gender,
            phone=body.phone,
        )
    )
    logger.info("Registered user %s", user.id)
    return _issue(user, settings)


@router.post("/login", response_model=AuthResponse, summary="Log in")
@limiter.limit(auth_limit)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = await UserRepository(db).get_by_email(body.email)
    if user is None or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _issue(user, settings)


@router.get("/me", response_model=UserResponse, summary="Current user")
async def me(user: UserModel = Depends(get_current_user)):
    return user
