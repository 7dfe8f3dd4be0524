"""Unit tests for search criteria and pagination arithmetic."""

from carpool.domain.enums import GenderPreference
from carpool.domain.search import RideSearch, like_pattern, total_pages


class TestTotalPages:
    def test_exact_division(self):
        assert total_pages(20, 10) == 2

    def test_partial_last_page(self):
        assert total_pages(21, 10) == 3

    def test_empty(self):
        assert total_pages(0, 10) == 0


class TestRideSearch:
    def test_offset(self):
        assert RideSearch(page=3, limit=5).offset == 10

    def test_any_preference_does_not_narrow(self):
        assert not RideSearch(gender_preference=GenderPreference.ANY).narrows_gender
        assert not RideSearch().narrows_gender
        assert RideSearch(gender_preference=GenderPreference.FEMALE).narrows_gender


class TestLikePattern:
    def test_wraps_term(self):
        assert like_pattern("air") == "%air%"

    def test_wildcards_escaped(self):
        assert like_pattern("50%_off") == "%50\\%\\_off%"
