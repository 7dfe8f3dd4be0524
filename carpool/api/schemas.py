"""Pydantic request / response schemas for the REST API and the relay."""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from carpool.domain.enums import (
    MAX_MESSAGE_LENGTH,
    MAX_SEATS,
    MIN_SEATS,
    Gender,
    GenderPreference,
    RideStatus,
)


def _day(value: Any) -> Any:
    """Accept a full ISO datetime for a date field and keep only its day."""
    if isinstance(value, str) and len(value) > 10:
        return dt.datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    if isinstance(value, dt.datetime):
        return value.date()
    return value


# ── Requests ──────────────────────────────────────────────────────────


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(..., min_length=6)
    gender: Gender
    phone: str = Field(..., min_length=1, max_length=40)

    model_config = {"str_strip_whitespace": True}

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    phone: Optional[str] = Field(None, min_length=1, max_length=40)
    profile_picture: Optional[str] = Field(None, max_length=500)
    gender: Optional[Gender] = None

    model_config = {"str_strip_whitespace": True, "extra": "ignore"}


class VehicleInfo(BaseModel):
    make: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    license_plate: Optional[str] = None


class RideCreateRequest(BaseModel):
    destination: str = Field(..., min_length=1, max_length=255)
    start_location: str = Field(..., min_length=1, max_length=255)
    date: dt.date
    time: str = Field(..., min_length=1, max_length=20)
    total_seats: int = Field(..., ge=MIN_SEATS, le=MAX_SEATS)
    cost_per_person: float = Field(..., ge=0)
    gender_preference: GenderPreference = GenderPreference.ANY
    description: Optional[str] = None
    vehicle_info: Optional[VehicleInfo] = None

    model_config = {"str_strip_whitespace": True}

    @field_validator("date", mode="before")
    @classmethod
    def truncate_to_day(cls, value: Any) -> Any:
        return _day(value)


class RideUpdateRequest(BaseModel):
    """Partial update.  Ownership and membership fields are not declared,
    so ``driver``/``passengers``/``available_seats`` in a payload are dropped."""

    destination: Optional[str] = Field(None, min_length=1, max_length=255)
    start_location: Optional[str] = Field(None, min_length=1, max_length=255)
    date: Optional[dt.date] = None
    time: Optional[str] = Field(None, min_length=1, max_length=20)
    total_seats: Optional[int] = Field(None, ge=MIN_SEATS, le=MAX_SEATS)
    cost_per_person: Optional[float] = Field(None, ge=0)
    gender_preference: Optional[GenderPreference] = None
    status: Optional[RideStatus] = None
    description: Optional[str] = None
    vehicle_info: Optional[VehicleInfo] = None

    model_config = {"str_strip_whitespace": True, "extra": "ignore"}

    @field_validator("date", mode="before")
    @classmethod
    def truncate_to_day(cls, value: Any) -> Any:
        return _day(value)


class MessageCreateRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)

    model_config = {"str_strip_whitespace": True}


# ── Responses ─────────────────────────────────────────────────────────


class UserSummary(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    rating: float

    model_config = {"from_attributes": True}


class SenderSummary(BaseModel):
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    gender: Gender
    phone: str
    profile_picture: str = ""
    rating: float
    total_rides: int
    created_at: Optional[dt.datetime] = None

    model_config = {"from_attributes": True}


class UserProfileResponse(UserResponse):
    created_rides: list[int] = []
    joined_rides: list[int] = []


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


class PassengerResponse(BaseModel):
    user: UserSummary
    joined_at: Optional[dt.datetime] = None

    model_config = {"from_attributes": True}


class RideResponse(BaseModel):
    id: int
    driver: UserSummary
    destination: str
    start_location: str
    date: dt.date
    time: str
    total_seats: int
    available_seats: int
    cost_per_person: float
    gender_preference: GenderPreference
    passengers: list[PassengerResponse] = []
    joined_members: int = 0
    status: RideStatus
    description: Optional[str] = None
    vehicle_info: Optional[VehicleInfo] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    model_config = {"from_attributes": True}


class RideListResponse(BaseModel):
    rides: list[RideResponse]
    total: int
    total_pages: int
    current_page: int


class MessageResponse(BaseModel):
    id: int
    ride_id: int
    sender: SenderSummary
    message: str
    created_at: Optional[dt.datetime] = None

    model_config = {"from_attributes": True}


class MessageOut(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"


class StatsResponse(BaseModel):
    users: int
    active_rides: int
    messages: int


# ── Relay frames ──────────────────────────────────────────────────────


class RelayFrame(BaseModel):
    event: str
    data: Any = None
