"""
User endpoints
==============

GET /api/users/{user_id} -- public profile with created / joined ride ids
PUT /api/users/profile   -- update the caller's own profile
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from carpool.api.dependencies import get_current_user, get_db
from carpool.api.middleware import default_limit, limiter
from carpool.api.schemas import ProfileUpdateRequest, UserProfileResponse, UserResponse
from carpool.infrastructure.models import UserModel
from carpool.infrastructure.repositories import RideRepository, UserRepository

router = APIRouter(prefix="/users", tags=["users"])


@router.put("/profile", response_model=UserResponse, summary="Update own profile")
@limiter.limit(default_limit)
async def update_profile(
    request: Request,
    body: ProfileUpdateRequest,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    for field, value in body.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(user, field, value)
    await db.flush()
    return user


@router.get(
    "/{user_id}",
    response_model=UserProfileResponse,
    summary="Get a user's profile",
)
@limiter.limit(default_limit)
async def get_user(
    request: Request,
    user_id: int,
    db: AsyncSession = Depends(get_db),
):
    user = await UserRepository(db).get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    rides = RideRepository(db)
    profile = UserProfileResponse.model_validate(user)
    profile.created_rides = await rides.created_ride_ids(user.id)
    profile.joined_rides = await rides.joined_ride_ids(user.id)
    return profile
