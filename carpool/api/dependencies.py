"""FastAPI dependency injection helpers."""

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from carpool.api.security import decode_access_token
from carpool.config import Settings
from carpool.infrastructure.models import UserModel
from carpool.infrastructure.repositories import UserRepository

_bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_db(request: Request) -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with request.app.state.database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
) -> UserModel:
    """Resolve the bearer token to a live user or stop the request with 401."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="No token, authorization denied")

    user_id = decode_access_token(
        credentials.credentials, settings.jwt_secret, settings.jwt_algorithm
    )
    user = await UserRepository(db).get_by_id(user_id) if user_id else None
    if user is None:
        raise HTTPException(status_code=401, detail="Token is not valid")
    return user
