"""
SQLAlchemy ORM models  (maps to PostgreSQL; SQLite in tests).

Tables
------
* ``users``           -- registered members (drivers and passengers alike)
* ``rides``           -- carpool postings owned by a driver
* ``ride_passengers`` -- ride membership; the single source of truth for
  both "who is on this ride" and "which rides has this user joined"
* ``messages``        -- ride-scoped chat

Constraints
-----------
* ``available_seats >= 0`` and ``total_seats BETWEEN 1 AND 8`` back up the
  conditional seat claim in ``RideRepository.claim_seat``.
* ``(ride_id, user_id)`` is unique in ``ride_passengers`` so a duplicate
  join cannot slip through concurrently.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base
from carpool.domain.enums import Gender, GenderPreference, RideStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum(enum_cls, name: str) -> Enum:
    """Store enum *values* ("active"), not member names."""
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
    )


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    gender = Column(_enum(Gender, "gender"), nullable=False)
    phone = Column(String(40), nullable=False)
    profile_picture = Column(String(500), default="", nullable=False)
    rating = Column(Float, default=5.0, nullable=False)
    total_rides = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_users_rating"),
    )


class RideModel(Base):
    __tablename__ = "rides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    driver_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    destination = Column(String(255), nullable=False)
    start_location = Column(String(255), nullable=False)
    date = Column(Date, nullable=False)
    time = Column(String(20), nullable=False)
    total_seats = Column(Integer, nullable=False)
    available_seats = Column(Integer, nullable=False)
    cost_per_person = Column(Float, nullable=False)
    gender_preference = Column(
        _enum(GenderPreference, "gender_preference"),
        default=GenderPreference.ANY,
        nullable=False,
    )
    status = Column(
        _enum(RideStatus, "ride_status"), default=RideStatus.ACTIVE, nullable=False
    )
    description = Column(Text, nullable=True)
    vehicle_info = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    driver = relationship("UserModel", lazy="selectin")
    passengers = relationship(
        "RidePassengerModel",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="RidePassengerModel.id",
    )

    @property
    def joined_members(self) -> int:
        return len(self.passengers)

    __table_args__ = (
        CheckConstraint(
            "total_seats >= 1 AND total_seats <= 8", name="ck_rides_total_seats"
        ),
        CheckConstraint("available_seats >= 0", name="ck_rides_available_seats"),
        CheckConstraint("cost_per_person >= 0", name="ck_rides_cost"),
        Index("idx_rides_status_date", "status", "date"),
        Index("idx_rides_driver", "driver_id"),
    )


class RidePassengerModel(Base):
    __tablename__ = "ride_passengers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ride_id = Column(
        Integer, ForeignKey("rides.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    joined_at = Column(DateTime(timezone=True), default=_utcnow)

    user = relationship("UserModel", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("ride_id", "user_id", name="uq_ride_passengers_member"),
        Index("idx_ride_passengers_user", "user_id"),
    )


class MessageModel(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ride_id = Column(
        Integer, ForeignKey("rides.id", ondelete="CASCADE"), nullable=False
    )
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    message = Column(String(500), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    sender = relationship("UserModel", lazy="selectin")

    __table_args__ = (Index("idx_messages_ride_created", "ride_id", "created_at"),)
