"""Unit tests for ride membership rules and status transitions."""

from types import SimpleNamespace

import pytest

from carpool.domain.enums import Gender, GenderPreference, RideStatus
from carpool.domain.rules import (
    InvalidSeatCount,
    InvalidStateTransition,
    JoinRejected,
    check_join,
    check_transition,
    gender_allowed,
    is_participant,
    is_passenger,
    seats_after_resize,
)


def _ride(**overrides):
    values = dict(
        driver_id=1,
        status=RideStatus.ACTIVE,
        gender_preference=GenderPreference.ANY,
        total_seats=3,
        available_seats=3,
        passengers=[],
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def _passenger(user_id):
    return SimpleNamespace(user_id=user_id)


class TestCheckJoin:
    def test_eligible_user_passes(self):
        check_join(_ride(), user_id=2, gender=Gender.MALE)

    def test_driver_cannot_join(self):
        with pytest.raises(JoinRejected, match="own ride"):
            check_join(_ride(), user_id=1, gender=Gender.MALE)

    @pytest.mark.parametrize("status", [RideStatus.COMPLETED, RideStatus.CANCELLED])
    def test_inactive_ride_rejected(self, status):
        with pytest.raises(JoinRejected, match="not active"):
            check_join(_ride(status=status), user_id=2, gender=Gender.MALE)

    def test_full_ride_rejected(self):
        ride = _ride(total_seats=1, available_seats=0, passengers=[_passenger(3)])
        with pytest.raises(JoinRejected, match="No available seats"):
            check_join(ride, user_id=2, gender=Gender.MALE)

    def test_existing_passenger_rejected(self):
        ride = _ride(available_seats=2, passengers=[_passenger(2)])
        with pytest.raises(JoinRejected, match="Already joined"):
            check_join(ride, user_id=2, gender=Gender.MALE)

    def test_gender_mismatch_rejected(self):
        ride = _ride(gender_preference=GenderPreference.FEMALE)
        with pytest.raises(JoinRejected, match="Gender preference"):
            check_join(ride, user_id=2, gender=Gender.MALE)

    def test_plain_string_values_accepted(self):
        ride = _ride(status="active", gender_preference="female")
        check_join(ride, user_id=2, gender="female")

    def test_driver_check_runs_first(self):
        ride = _ride(status=RideStatus.CANCELLED, available_seats=0)
        with pytest.raises(JoinRejected, match="own ride"):
            check_join(ride, user_id=1, gender=Gender.MALE)


class TestMembership:
    def test_is_passenger(self):
        ride = _ride(passengers=[_passenger(5)])
        assert is_passenger(ride, 5)
        assert not is_passenger(ride, 6)

    def test_participant_includes_driver(self):
        ride = _ride(passengers=[_passenger(5)])
        assert is_participant(ride, 1)
        assert is_participant(ride, 5)
        assert not is_participant(ride, 9)

    def test_gender_allowed(self):
        assert gender_allowed(GenderPreference.ANY, Gender.OTHER)
        assert gender_allowed(GenderPreference.MALE, Gender.MALE)
        assert not gender_allowed(GenderPreference.MALE, Gender.OTHER)


class TestSeatsAfterResize:
    def test_recomputes_available(self):
        assert seats_after_resize(5, 2) == 3

    def test_exactly_full(self):
        assert seats_after_resize(2, 2) == 0

    def test_below_passenger_count_fails(self):
        with pytest.raises(InvalidSeatCount):
            seats_after_resize(1, 2)


class TestRideStateMachine:
    def test_active_to_completed(self):
        check_transition(RideStatus.ACTIVE, RideStatus.COMPLETED)

    def test_active_to_cancelled(self):
        check_transition(RideStatus.ACTIVE, RideStatus.CANCELLED)

    def test_same_status_is_noop(self):
        check_transition(RideStatus.COMPLETED, RideStatus.COMPLETED)

    def test_completed_is_terminal(self):
        with pytest.raises(InvalidStateTransition):
            check_transition(RideStatus.COMPLETED, RideStatus.ACTIVE)

    def test_cancelled_is_terminal(self):
        with pytest.raises(InvalidStateTransition):
            check_transition("cancelled", "completed")
