# backend/salle2sport/services/capacity.py
"""
Capacity rules for a class.

Only CONFIRMED bookings occupy a slot; callers pass that count in.
"""

from typing import Any


def has_capacity(session: Any, confirmed_count: int) -> bool:
    """True when the class can take one more confirmed booking."""
    capacity = int(session.capacity or 0)
    if capacity <= 0:
        return False
    return confirmed_count < capacity


def available_spots(session: Any, confirmed_count: int) -> int:
    return max(int(session.capacity or 0) - confirmed_count, 0)


def is_fully_booked(session: Any, confirmed_count: int) -> bool:
    return not has_capacity(session, confirmed_count)
