"""
Repository Pattern -- abstracts DB access so route handlers stay DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  Repositories flush but never commit; the
request dependency owns the transaction.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import MessageModel, RideModel, RidePassengerModel, UserModel
from carpool.domain.enums import GenderPreference, RideStatus
from carpool.domain.search import RideSearch, like_pattern


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: UserModel) -> UserModel:
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: int) -> Optional[UserModel]:
        return await self.session.get(UserModel, user_id)

    async def get_by_email(self, email: str) -> Optional[UserModel]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email)
        )
        return result.scalar_one_or_none()

    async def count(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(UserModel)
        )
        return result.scalar() or 0


class RideRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, ride: RideModel) -> RideModel:
        self.session.add(ride)
        await self.session.flush()
        # reload so driver / passengers are eagerly populated
        return await self.get_by_id(ride.id, fresh=True)

    async def get_by_id(
        self, ride_id: int, *, fresh: bool = False, for_update: bool = False
    ) -> Optional[RideModel]:
        """Fetch a ride; ``fresh`` re-reads columns and relationships that a
        bulk UPDATE/DELETE in this session may have made stale.

        ``for_update`` takes the row lock (SELECT ... FOR UPDATE) so a
        concurrent seat claim waits until this transaction ends.
        """
        query = select(RideModel).where(RideModel.id == ride_id)
        if for_update:
            query = query.with_for_update()
        if fresh or for_update:
            query = query.execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def search(self, criteria: RideSearch) -> tuple[list[RideModel], int]:
        """Active rides matching *criteria*, one page of them plus the total."""
        conditions = [RideModel.status == RideStatus.ACTIVE]
        if criteria.destination:
            conditions.append(
                RideModel.destination.ilike(
                    like_pattern(criteria.destination), escape="\\"
                )
            )
        if criteria.day is not None:
            conditions.append(RideModel.date == criteria.day)
        if criteria.narrows_gender:
            conditions.append(
                or_(
                    RideModel.gender_preference == GenderPreference.ANY,
                    RideModel.gender_preference == criteria.gender_preference,
                )
            )
        if criteria.max_cost is not None:
            conditions.append(RideModel.cost_per_person <= criteria.max_cost)

        total = (
            await self.session.execute(
                select(func.count()).select_from(RideModel).where(*conditions)
            )
        ).scalar() or 0

        result = await self.session.execute(
            select(RideModel)
            .where(*conditions)
            .order_by(RideModel.date, RideModel.time, RideModel.id)
            .offset(criteria.offset)
            .limit(criteria.limit)
        )
        return list(result.scalars().all()), total

    async def list_created_by(self, user_id: int) -> list[RideModel]:
        result = await self.session.execute(
            select(RideModel)
            .where(RideModel.driver_id == user_id)
            .order_by(RideModel.created_at.desc(), RideModel.id.desc())
        )
        return list(result.scalars().all())

    async def list_joined_by(self, user_id: int) -> list[RideModel]:
        result = await self.session.execute(
            select(RideModel)
            .join(RidePassengerModel, RidePassengerModel.ride_id == RideModel.id)
            .where(RidePassengerModel.user_id == user_id)
            .order_by(RideModel.created_at.desc(), RideModel.id.desc())
        )
        return list(result.scalars().all())

    async def created_ride_ids(self, user_id: int) -> list[int]:
        result = await self.session.execute(
            select(RideModel.id)
            .where(RideModel.driver_id == user_id)
            .order_by(RideModel.id)
        )
        return list(result.scalars().all())

    async def joined_ride_ids(self, user_id: int) -> list[int]:
        result = await self.session.execute(
            select(RidePassengerModel.ride_id)
            .where(RidePassengerModel.user_id == user_id)
            .order_by(RidePassengerModel.ride_id)
        )
        return list(result.scalars().all())

    async def count_active(self) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(RideModel)
            .where(RideModel.status == RideStatus.ACTIVE)
        )
        return result.scalar() or 0

    # ── Membership ────────────────────────────────────────────────

    async def claim_seat(self, ride_id: int) -> bool:
        """Atomically take one seat on an active ride.

        A single conditional UPDATE: the row lock serialises concurrent
        claims, and the loser re-evaluates ``available_seats > 0`` against
        the committed value, so the last seat is handed out once.
        """
        result = await self.session.execute(
            update(RideModel)
            .where(
                RideModel.id == ride_id,
                RideModel.status == RideStatus.ACTIVE,
                RideModel.available_seats > 0,
            )
            .values(available_seats=RideModel.available_seats - 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def resize_seats(self, ride_id: int, total_seats: int) -> bool:
        """Set ``total_seats`` and recount ``available_seats`` in the store.

        The passenger count is taken by the UPDATE itself, so a join that
        committed after the ride was read is not lost.  Returns False when
        the ride already holds more passengers than *total_seats*.
        """
        passenger_count = (
            select(func.count(RidePassengerModel.id))
            .where(RidePassengerModel.ride_id == RideModel.id)
            .scalar_subquery()
        )
        result = await self.session.execute(
            update(RideModel)
            .where(RideModel.id == ride_id, passenger_count <= total_seats)
            .values(
                total_seats=total_seats,
                available_seats=total_seats - passenger_count,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def add_passenger(self, ride_id: int, user_id: int) -> None:
        """Insert the membership row; the unique constraint rejects a
        duplicate that raced past the membership check."""
        passenger = RidePassengerModel(ride_id=ride_id, user_id=user_id)
        self.session.add(passenger)
        await self.session.flush()
        # the ride reload builds its own passenger rows
        self.session.expunge(passenger)

    async def remove_passenger(self, ride_id: int, user_id: int) -> bool:
        """Drop the membership row if present and hand its seat back."""
        result = await self.session.execute(
            delete(RidePassengerModel)
            .where(
                RidePassengerModel.ride_id == ride_id,
                RidePassengerModel.user_id == user_id,
            )
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:
            return False
        await self.session.execute(
            update(RideModel)
            .where(RideModel.id == ride_id)
            .values(available_seats=RideModel.available_seats + 1)
            .execution_options(synchronize_session=False)
        )
        return True

    async def delete(self, ride: RideModel) -> None:
        """Hard delete; passenger rows and the ride's chat go with it."""
        await self.session.execute(
            delete(MessageModel)
            .where(MessageModel.ride_id == ride.id)
            .execution_options(synchronize_session=False)
        )
        await self.session.delete(ride)
        await self.session.flush()


class MessageRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, message: MessageModel) -> MessageModel:
        self.session.add(message)
        await self.session.flush()
        result = await self.session.execute(
            select(MessageModel)
            .where(MessageModel.id == message.id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def list_for_ride(self, ride_id: int) -> list[MessageModel]:
        result = await self.session.execute(
            select(MessageModel)
            .where(MessageModel.ride_id == ride_id)
            .order_by(MessageModel.created_at, MessageModel.id)
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(MessageModel)
        )
        return result.scalar() or 0
