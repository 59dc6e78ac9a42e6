"""Unit tests for class capacity rules."""

from types import SimpleNamespace

import pytest

from salle2sport.services.capacity import available_spots, has_capacity, is_fully_booked


def _session(capacity):
    return SimpleNamespace(capacity=capacity)


class TestHasCapacity:
    @pytest.mark.parametrize(
        "capacity,confirmed,expected",
        [
            (10, 0, True),
            (10, 9, True),
            (10, 10, False),
            (10, 11, False),
            (1, 0, True),
        ],
    )
    def test_strictly_below_capacity(self, capacity, confirmed, expected):
        assert has_capacity(_session(capacity), confirmed) is expected

    @pytest.mark.parametrize("capacity", [0, -3, None])
    def test_non_positive_capacity_never_has_room(self, capacity):
        assert has_capacity(_session(capacity), 0) is False


def test_available_spots_never_negative():
    assert available_spots(_session(5), 2) == 3
    assert available_spots(_session(5), 5) == 0
    assert available_spots(_session(5), 7) == 0


def test_is_fully_booked_mirrors_has_capacity():
    assert is_fully_booked(_session(2), 2) is True
    assert is_fully_booked(_session(2), 1) is False
