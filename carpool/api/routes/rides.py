"""
Ride endpoints
==============

POST   /api/rides               -- create a ride (caller becomes the driver)
GET    /api/rides               -- search active rides, paginated
GET    /api/rides/user/created  -- rides the caller drives
GET    /api/rides/user/joined   -- rides the caller has joined
GET    /api/rides/{ride_id}     -- one ride with driver and passengers
PUT    /api/rides/{ride_id}     -- update (driver only)
DELETE /api/rides/{ride_id}     -- delete (driver only)
POST   /api/rides/{ride_id}/join
DELETE /api/rides/{ride_id}/leave
"""

import datetime as dt
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from carpool.api.dependencies import get_current_user, get_db
from carpool.api.middleware import default_limit, limiter
from carpool.api.schemas import (
    MessageOut,
    RideCreateRequest,
    RideListResponse,
    RideResponse,
    RideUpdateRequest,
)
from carpool.domain.enums import GenderPreference, RideStatus
from carpool.domain.rules import (
    InvalidSeatCount,
    InvalidStateTransition,
    JoinRejected,
    check_join,
    check_transition,
    seats_after_resize,
)
from carpool.domain.search import RideSearch, total_pages
from carpool.infrastructure.models import RideModel, UserModel
from carpool.infrastructure.repositories import RideRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rides", tags=["rides"])

# columns a driver may clear by sending an explicit null
_NULLABLE = {"description", "vehicle_info"}


async def _get_or_404(
    repo: RideRepository, ride_id: int, *, for_update: bool = False
) -> RideModel:
    ride = await repo.get_by_id(ride_id, for_update=for_update)
    if not ride:
        raise HTTPException(status_code=404, detail="Ride not found")
    return ride


@router.post(
    "",
    status_code=201,
    response_model=RideResponse,
    summary="Create a ride",
)
@limiter.limit(default_limit)
async def create_ride(
    request: Request,
    body: RideCreateRequest,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    ride = await RideRepository(db).create(
        RideModel(
            driver_id=user.id,
            destination=body.destination,
            start_location=body.start_location,
            date=body.date,
            time=body.time,
            total_seats=body.total_seats,
            available_seats=body.total_seats,
            cost_per_person=body.cost_per_person,
            gender_preference=body.gender_preference,
            status=RideStatus.ACTIVE,
            description=body.description,
            vehicle_info=body.vehicle_info.model_dump() if body.vehicle_info else None,
        )
    )
    logger.info("User %s created ride %s", user.id, ride.id)
    return ride


@router.get(
    "",
    response_model=RideListResponse,
    summary="Search active rides",
)
@limiter.limit(default_limit)
async def list_rides(
    request: Request,
    destination: Optional[str] = None,
    date: Optional[dt.date] = None,
    gender_preference: Optional[GenderPreference] = None,
    max_cost: Optional[float] = Query(None, ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    criteria = RideSearch(
        destination=destination.strip() if destination else None,
        day=date,
        gender_preference=gender_preference,
        max_cost=max_cost,
        page=page,
        limit=limit,
    )
    rides, total = await RideRepository(db).search(criteria)
    return RideListResponse(
        rides=[RideResponse.model_validate(r) for r in rides],
        total=total,
        total_pages=total_pages(total, limit),
        current_page=page,
    )


@router.get(
    "/user/created",
    response_model=list[RideResponse],
    summary="Rides created by the caller",
)
@limiter.limit(default_limit)
async def created_rides(
    request: Request,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await RideRepository(db).list_created_by(user.id)


@router.get(
    "/user/joined",
    response_model=list[RideResponse],
    summary="Rides joined by the caller",
)
@limiter.limit(default_limit)
async def joined_rides(
    request: Request,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await RideRepository(db).list_joined_by(user.id)


@router.get(
    "/{ride_id}",
    response_model=RideResponse,
    summary="Get a ride",
)
@limiter.limit(default_limit)
async def get_ride(
    request: Request,
    ride_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await _get_or_404(RideRepository(db), ride_id)


@router.post(
    "/{ride_id}/join",
    response_model=RideResponse,
    summary="Join a ride",
    description=(
        "Takes one seat.  The seat is claimed with a conditional update, so "
        "concurrent requests for the last seat cannot both succeed."
    ),
)
@limiter.limit(default_limit)
async def join_ride(
    request: Request,
    ride_id: int,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    repo = RideRepository(db)
    ride = await _get_or_404(repo, ride_id)

    try:
        check_join(ride, user.id, user.gender)
    except JoinRejected as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    # Lost a race since the read above
    if not await repo.claim_seat(ride.id):
        raise HTTPException(status_code=400, detail="No available seats")

    await repo.add_passenger(ride.id, user.id)
    logger.info("User %s joined ride %s", user.id, ride.id)
    return await repo.get_by_id(ride.id, fresh=True)


@router.delete(
    "/{ride_id}/leave",
    response_model=RideResponse,
    summary="Leave a ride",
)
@limiter.limit(default_limit)
async def leave_ride(
    request: Request,
    ride_id: int,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    repo = RideRepository(db)
    ride = await _get_or_404(repo, ride_id)

    if await repo.remove_passenger(ride.id, user.id):
        logger.info("User %s left ride %s", user.id, ride.id)
    return await repo.get_by_id(ride.id, fresh=True)


@router.put(
    "/{ride_id}",
    response_model=RideResponse,
    summary="Update a ride (driver only)",
)
@limiter.limit(default_limit)
async def update_ride(
    request: Request,
    ride_id: int,
    body: RideUpdateRequest,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    repo = RideRepository(db)
    ride = await _get_or_404(repo, ride_id, for_update=True)
    if ride.driver_id != user.id:
        raise HTTPException(status_code=403, detail="Not authorized to update this ride")

    changes = body.model_dump(exclude_unset=True)
    changes = {
        k: v for k, v in changes.items() if v is not None or k in _NULLABLE
    }
    total_seats = changes.pop("total_seats", None)

    try:
        if "status" in changes:
            check_transition(ride.status, changes["status"])
        if total_seats is not None:
            seats_after_resize(total_seats, len(ride.passengers))
    except InvalidStateTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except InvalidSeatCount as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    for field, value in changes.items():
        setattr(ride, field, value)
    await db.flush()

    # Seats are recounted by the store; a join may have landed since the read
    if total_seats is not None and not await repo.resize_seats(ride.id, total_seats):
        raise HTTPException(
            status_code=400,
            detail="Total seats cannot be less than the passengers already joined",
        )
    return await repo.get_by_id(ride.id, fresh=True)


@router.delete(
    "/{ride_id}",
    response_model=MessageOut,
    summary="Delete a ride (driver only)",
)
@limiter.limit(default_limit)
async def delete_ride(
    request: Request,
    ride_id: int,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    repo = RideRepository(db)
    ride = await _get_or_404(repo, ride_id)
    if ride.driver_id != user.id:
        raise HTTPException(status_code=403, detail="Not authorized to delete this ride")

    await repo.delete(ride)
    logger.info("User %s deleted ride %s", user.id, ride_id)
    return MessageOut(message="Ride deleted successfully")
