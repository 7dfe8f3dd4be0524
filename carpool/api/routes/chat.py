"""
Chat endpoints
==============

GET  /api/chat/{ride_id} -- messages of a ride, oldest first
POST /api/chat/{ride_id} -- post a message

Both are limited to the ride's driver and passengers.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from carpool.api.dependencies import get_current_user, get_db
from carpool.api.middleware import default_limit, limiter
from carpool.api.schemas import MessageCreateRequest, MessageResponse
from carpool.domain.rules import is_participant
from carpool.infrastructure.models import MessageModel, RideModel, UserModel
from carpool.infrastructure.repositories import MessageRepository, RideRepository

router = APIRouter(prefix="/chat", tags=["chat"])


async def _participant_ride(
    db: AsyncSession, ride_id: int, user: UserModel, action: str
) -> RideModel:
    ride = await RideRepository(db).get_by_id(ride_id)
    if not ride:
        raise HTTPException(status_code=404, detail="Ride not found")
    if not is_participant(ride, user.id):
        raise HTTPException(
            status_code=403,
            detail=f"Not authorized to {action} messages for this ride",
        )
    return ride


@router.get(
    "/{ride_id}",
    response_model=list[MessageResponse],
    summary="List messages for a ride",
)
@limiter.limit(default_limit)
async def list_messages(
    request: Request,
    ride_id: int,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _participant_ride(db, ride_id, user, "view")
    return await MessageRepository(db).list_for_ride(ride_id)


@router.post(
    "/{ride_id}",
    status_code=201,
    response_model=MessageResponse,
    summary="Send a message to a ride chat",
)
@limiter.limit(default_limit)
async def send_message(
    request: Request,
    ride_id: int,
    body: MessageCreateRequest,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _participant_ride(db, ride_id, user, "send")
    return await MessageRepository(db).create(
        MessageModel(ride_id=ride_id, sender_id=user.id, message=body.message)
    )
