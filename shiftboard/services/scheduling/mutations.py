"""
Single-shift create / update / delete.

Checks run in a fixed order: permission, input, approved time off, blackout,
overlap. Time off and blackout can be accepted with an explicit override flag;
double booking cannot.
"""

import logging
import math
from dataclasses import replace
from datetime import date
from typing import Any, Optional

from sqlalchemy.orm import Session

from shiftboard.db.models.shifts import Shifts, ScheduleState as DBScheduleState

from .conflicts import find_blocked_entry, find_overlapping_shifts, find_time_off
from .data_loader import (
    load_approved_time_off,
    load_employee,
    load_shifts,
    lock_schedule,
    require_manager,
    shift_write_transaction,
    to_shift,
)
from .errors import (
    BlockedDateConflict,
    NotFound,
    OverlapConflict,
    TimeOffConflict,
    ValidationFailed,
)
from .time_model import format_range, hour_to_clock, normalize_hour
from .types import (
    JOB_CATALOG,
    Employee,
    ScheduleState,
    Shift,
    ShiftOverrides,
    TimeOffRequest,
)


logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "employee_id",
    "shift_date",
    "start_hour",
    "end_hour",
    "job",
    "location_id",
    "notes",
    "schedule_state",
}


def validate_time_range(start_hour: float, end_hour: float) -> tuple[float, float]:
    """Snap both ends to whole minutes and enforce 0 <= start < end <= 24."""
    for label, value in (("start_hour", start_hour), ("end_hour", end_hour)):
        if value is None or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise ValidationFailed(f"{label} is required", field=label)
        if value < 0 or value > 24:
            raise ValidationFailed(f"{label} must be between 0 and 24", field=label)
    start, end = normalize_hour(start_hour), normalize_hour(end_hour)
    if start >= end:
        raise ValidationFailed("start_hour must be before end_hour", field="start_hour")
    return start, end


def validate_job(job: Optional[str]) -> Optional[str]:
    if job is None or not str(job).strip():
        return None
    job = str(job).strip()
    if job not in JOB_CATALOG:
        raise ValidationFailed(f"Unknown job: {job}", field="job")
    return job


def _require_active_employee(db: Session, organization_id: int, employee_id: int) -> Employee:
    employee = load_employee(db, organization_id, employee_id)
    if employee is None or not employee.is_active:
        raise ValidationFailed(
            "Employee is not an active member of this organization", field="employee_id"
        )
    return employee


def check_placement(
    candidate: Shift,
    existing_shifts: list[Shift],
    time_off_requests: list[TimeOffRequest],
    overrides: ShiftOverrides,
    exclude_shift_id: Optional[int] = None,
) -> None:
    """Raise the first conflict that applies to placing `candidate` next to `existing_shifts`."""
    time_off = find_time_off(candidate.employee_id, candidate.shift_date, time_off_requests)
    if time_off is not None and not overrides.allow_time_off_override:
        raise TimeOffConflict(
            "Employee has approved time off on this date",
            time_off_request_id=time_off.id,
        )

    blocked = find_blocked_entry(candidate.employee_id, candidate.shift_date, existing_shifts)
    if blocked is not None and not overrides.allow_blocked_override:
        reason = blocked.blackout_reason
        message = "This employee is blocked out on that date"
        if reason:
            message = f"{message}: {reason}"
        raise BlockedDateConflict(message, blocked_shift_id=blocked.id)

    overlapping = find_overlapping_shifts(
        candidate.employee_id,
        candidate.shift_date,
        candidate.start_hour,
        candidate.end_hour,
        existing_shifts,
        exclude_shift_id=exclude_shift_id,
    )
    if overlapping:
        raise OverlapConflict(
            "Shift overlaps with existing shift",
            conflicting_shift_ids=[s.id for s in overlapping if s.id is not None],
        )


def _load_day_snapshot(
    db: Session, organization_id: int, employee_id: int, on_date: date
) -> tuple[list[Shift], list[TimeOffRequest]]:
    lock_schedule(db, organization_id, employee_id, on_date)
    shifts = load_shifts(db, organization_id, on_date, on_date, employee_id=employee_id)
    time_off = load_approved_time_off(db, organization_id, on_date, on_date, employee_ids=[employee_id])
    return shifts, time_off


def create_shift(
    db: Session,
    caller_id: int,
    organization_id: int,
    employee_id: int,
    shift_date: date,
    start_hour: float,
    end_hour: float,
    job: Optional[str] = None,
    location_id: Optional[int] = None,
    notes: Optional[str] = None,
    schedule_state: ScheduleState = ScheduleState.DRAFT,
    overrides: Optional[ShiftOverrides] = None,
) -> Shift:
    overrides = overrides or ShiftOverrides()
    with shift_write_transaction(db):
        require_manager(db, caller_id, organization_id)
        employee = _require_active_employee(db, organization_id, employee_id)
        start, end = validate_time_range(start_hour, end_hour)
        job = validate_job(job)

        candidate = Shift(
            organization_id=organization_id,
            employee_id=employee_id,
            shift_date=shift_date,
            start_hour=start,
            end_hour=end,
            job=job,
            location_id=location_id,
            notes=notes,
            schedule_state=ScheduleState(schedule_state),
        )
        existing, time_off = _load_day_snapshot(db, organization_id, employee_id, shift_date)
        try:
            check_placement(candidate, existing, time_off, overrides)
        except (TimeOffConflict, BlockedDateConflict, OverlapConflict) as exc:
            logger.warning(
                "Rejected shift for employee %s on %s (%s): %s",
                employee_id, shift_date, format_range(start, end), exc.code,
            )
            raise

        pay_rate, pay_source = employee.pay_rate_for(job)
        row = Shifts(
            organization_id=organization_id,
            user_id=employee_id,
            shift_date=shift_date,
            start_time=hour_to_clock(start),
            end_time=hour_to_clock(end),
            notes=notes,
            is_blocked=False,
            job=job,
            schedule_state=DBScheduleState(candidate.schedule_state.value),
            location_id=location_id,
            pay_rate=pay_rate,
            pay_source=pay_source.value if pay_source else None,
            created_by_user_id=caller_id,
        )
        db.add(row)
        db.flush()

    db.refresh(row)
    logger.info(
        "Created %s shift %s for employee %s on %s (%s)",
        row.schedule_state.value, row.id, employee_id, shift_date, format_range(start, end),
    )
    return to_shift(row)


def update_shift(
    db: Session,
    caller_id: int,
    shift_id: int,
    changes: dict[str, Any],
    overrides: Optional[ShiftOverrides] = None,
) -> Shift:
    """Apply a partial update. `changes` holds only the fields the caller set."""
    overrides = overrides or ShiftOverrides()
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationFailed(f"Cannot update field(s): {', '.join(sorted(unknown))}")

    with shift_write_transaction(db):
        row = db.get(Shifts, shift_id)
        if row is None:
            raise NotFound("Shift not found")
        require_manager(db, caller_id, row.organization_id)
        if row.is_blocked:
            raise ValidationFailed("Blocked entries are managed through their blackout period")

        current = to_shift(row)
        if changes.get("schedule_state") is not None:
            changes = {**changes, "schedule_state": ScheduleState(changes["schedule_state"])}
        for required in ("employee_id", "shift_date", "start_hour", "end_hour", "schedule_state"):
            if required in changes and changes[required] is None:
                raise ValidationFailed(f"{required} cannot be cleared", field=required)

        merged = replace(current, **changes)
        if current.schedule_state == ScheduleState.PUBLISHED and merged.schedule_state == ScheduleState.DRAFT:
            raise ValidationFailed("Published shifts cannot be moved back to draft", field="schedule_state")

        employee = _require_active_employee(db, row.organization_id, merged.employee_id)
        start, end = validate_time_range(merged.start_hour, merged.end_hour)
        merged = replace(merged, start_hour=start, end_hour=end, job=validate_job(merged.job))

        existing, time_off = _load_day_snapshot(db, row.organization_id, merged.employee_id, merged.shift_date)
        try:
            check_placement(merged, existing, time_off, overrides, exclude_shift_id=row.id)
        except (TimeOffConflict, BlockedDateConflict, OverlapConflict) as exc:
            logger.warning("Rejected update of shift %s: %s", shift_id, exc.code)
            raise

        if merged.job != current.job or merged.employee_id != current.employee_id:
            pay_rate, pay_source = employee.pay_rate_for(merged.job)
            row.pay_rate = pay_rate
            row.pay_source = pay_source.value if pay_source else None

        row.user_id = merged.employee_id
        row.shift_date = merged.shift_date
        row.start_time = hour_to_clock(start)
        row.end_time = hour_to_clock(end)
        row.job = merged.job
        row.location_id = merged.location_id
        row.notes = merged.notes
        row.schedule_state = DBScheduleState(merged.schedule_state.value)

    db.refresh(row)
    logger.info("Updated shift %s", shift_id)
    return to_shift(row)


def delete_shift(db: Session, caller_id: int, shift_id: int) -> None:
    with shift_write_transaction(db):
        row = db.get(Shifts, shift_id)
        if row is None:
            raise NotFound("Shift not found")
        require_manager(db, caller_id, row.organization_id)
        if row.is_blocked:
            raise ValidationFailed("Blocked entries are removed with their blackout period")
        db.delete(row)
    logger.info("Deleted shift %s", shift_id)
