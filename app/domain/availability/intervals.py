"""Date interval rules for calendar conflicts

Stays and blackout periods are half-open [start, end): the departure day of
one booking can be the arrival day of the next.
"""

from datetime import date
from typing import Iterable, Optional, TypeVar

from ...exceptions import ValidationError

T = TypeVar("T")


def intervals_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Two half-open intervals conflict unless one ends before the other starts"""
    return not (b_end <= a_start or b_start >= a_end)


def find_first_overlap(items: Iterable[T], start: date, end: date) -> Optional[T]:
    """First item (with start_date/end_date attributes) overlapping [start, end)"""
    for item in items:
        if intervals_overlap(start, end, item.start_date, item.end_date):
            return item
    return None


def validate_stay_dates(start: date, end: date, current_date: date) -> None:
    """
    Raises:
        ValidationError: start before today, or end not strictly after start
    """
    if start < current_date:
        raise ValidationError("Start date cannot be in the past")
    if end <= start:
        raise ValidationError("End date must be after start date")
