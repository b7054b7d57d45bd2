"""
Conflict rules shared by single-shift mutations and the copy engine.
Pure functions over in-memory collections; callers load the snapshot.
"""

from datetime import date
from typing import Iterable, Optional

from .types import Shift, TimeOffRequest, TimeOffStatus


def overlaps(a_start: float, a_end: float, b_start: float, b_end: float) -> bool:
    """Half-open [start, end) overlap. Touching endpoints do not overlap."""
    return a_start < b_end and b_start < a_end


def find_time_off(
    employee_id: int,
    on_date: date,
    time_off_requests: Iterable[TimeOffRequest],
) -> Optional[TimeOffRequest]:
    for req in time_off_requests:
        if req.employee_id != employee_id or req.status != TimeOffStatus.APPROVED:
            continue
        if req.covers(on_date):
            return req
    return None


def has_approved_time_off(
    employee_id: int,
    on_date: date,
    time_off_requests: Iterable[TimeOffRequest],
) -> bool:
    return find_time_off(employee_id, on_date, time_off_requests) is not None


def find_blocked_entry(employee_id: int, on_date: date, shifts: Iterable[Shift]) -> Optional[Shift]:
    for shift in shifts:
        if shift.is_blocked and shift.employee_id == employee_id and shift.shift_date == on_date:
            return shift
    return None


def has_blocked_entry(employee_id: int, on_date: date, shifts: Iterable[Shift]) -> bool:
    return find_blocked_entry(employee_id, on_date, shifts) is not None


def _same_day_shifts(
    employee_id: int,
    on_date: date,
    shifts: Iterable[Shift],
    exclude_shift_id: Optional[int],
) -> list[Shift]:
    return [
        s for s in shifts
        if not s.is_blocked
        and s.employee_id == employee_id
        and s.shift_date == on_date
        and (exclude_shift_id is None or s.id != exclude_shift_id)
    ]


def find_overlapping_shifts(
    employee_id: int,
    on_date: date,
    start_hour: float,
    end_hour: float,
    shifts: Iterable[Shift],
    exclude_shift_id: Optional[int] = None,
) -> list[Shift]:
    """Non-blocked shifts of the same employee/date that intersect [start_hour, end_hour)."""
    return [
        s for s in _same_day_shifts(employee_id, on_date, shifts, exclude_shift_id)
        if overlaps(start_hour, end_hour, s.start_hour, s.end_hour)
    ]


def find_duplicate_shift(
    employee_id: int,
    on_date: date,
    start_hour: float,
    end_hour: float,
    shifts: Iterable[Shift],
) -> Optional[Shift]:
    """A non-blocked shift occupying exactly the same employee/date/time range."""
    for s in _same_day_shifts(employee_id, on_date, shifts, None):
        if s.start_hour == start_hour and s.end_hour == end_hour:
            return s
    return None
