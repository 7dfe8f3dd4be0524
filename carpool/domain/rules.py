"""
Ride membership rules.

The functions here operate on anything shaped like a ride (``driver_id``,
``status``, ``gender_preference``, ``total_seats``, ``available_seats`` and
a ``passengers`` list whose items expose ``user_id``).  The API passes ORM
rows; unit tests pass plain objects.

Each check raises a ``RideRuleViolation`` subclass whose message is safe to
return to the client verbatim.
"""

from __future__ import annotations

from .enums import RIDE_TRANSITIONS, GenderPreference, RideStatus


class RideRuleViolation(Exception):
    """Base class for rule failures; ``str(exc)`` is the client message."""


class JoinRejected(RideRuleViolation):
    """The caller may not join this ride."""


class InvalidSeatCount(RideRuleViolation):
    """A seat total would drop below the number of joined passengers."""


class InvalidStateTransition(RideRuleViolation):
    """Raised when a ride status change violates the state machine."""


def _value(enum_or_str) -> str:
    return enum_or_str.value if hasattr(enum_or_str, "value") else enum_or_str


def is_passenger(ride, user_id: int) -> bool:
    return any(p.user_id == user_id for p in ride.passengers)


def is_participant(ride, user_id: int) -> bool:
    """Driver or passenger -- the gate for reading and posting chat."""
    return ride.driver_id == user_id or is_passenger(ride, user_id)


def gender_allowed(preference, gender) -> bool:
    preference = _value(preference)
    return preference == GenderPreference.ANY.value or preference == _value(gender)


def check_join(ride, user_id: int, gender) -> None:
    """Raise ``JoinRejected`` unless *user_id* may take a seat on *ride*.

    The checks run in a fixed order so the client always sees the first
    failing reason.  Passing this check does not reserve a seat; the
    repository claims it with a conditional update.
    """
    if ride.driver_id == user_id:
        raise JoinRejected("Cannot join your own ride")
    if _value(ride.status) != RideStatus.ACTIVE.value:
        raise JoinRejected("Ride is not active")
    if ride.available_seats <= 0:
        raise JoinRejected("No available seats")
    if is_passenger(ride, user_id):
        raise JoinRejected("Already joined this ride")
    if not gender_allowed(ride.gender_preference, gender):
        raise JoinRejected("Gender preference does not match")


def seats_after_resize(total_seats: int, passenger_count: int) -> int:
    """Available seats once the ride offers *total_seats* in total."""
    if total_seats < passenger_count:
        raise InvalidSeatCount(
            f"Total seats cannot be less than the {passenger_count} "
            "passengers already joined"
        )
    return total_seats - passenger_count


def check_transition(current, new) -> None:
    current, new = RideStatus(_value(current)), RideStatus(_value(new))
    if current == new:
        return
    if new not in RIDE_TRANSITIONS.get(current, set()):
        raise InvalidStateTransition(
            f"Cannot change ride status from {current.value} to {new.value}"
        )
