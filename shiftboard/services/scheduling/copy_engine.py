"""
Copy-schedule engine.

Replays every shift of a source window onto one or more target weeks (or a
single target day), re-checking each placement against the same conflict rules
used for single shifts. Per-placement conflicts never abort the batch; they are
counted and itemized in the returned CopySummary.

`dateRange` copies day-of-week to day-of-week: a source shift lands on the same
weekday inside each resolved target week, whatever weekday the source window
starts on. The other modes shift every source date by a fixed number of days.

Approved time off is never overridden during a bulk copy: there is no
per-placement confirmation step, so an employee's approved absence always wins.
Blackouts can be bypassed with `allow_override_blocked`.
"""

import logging
from collections import defaultdict
from dataclasses import replace
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from shiftboard.core.config import settings
from shiftboard.db.models.organizations import Organizations, WeekStartDay
from shiftboard.db.models.shifts import Shifts, ScheduleState as DBScheduleState

from .conflicts import (
    find_blocked_entry,
    find_duplicate_shift,
    find_overlapping_shifts,
    has_approved_time_off,
)
from .data_loader import (
    load_active_employees,
    load_approved_time_off,
    load_shifts,
    lock_schedule,
    require_manager,
    shift_write_transaction,
)
from .errors import NotFound, ValidationFailed
from .time_model import format_range, hour_to_clock
from .types import (
    CopyMode,
    CopyRequest,
    CopySummary,
    Employee,
    ScheduleState,
    Shift,
    SkippedPlacement,
    SkipReason,
    TimeOffRequest,
)


logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


def week_start_for(day: date, week_start_day: WeekStartDay = WeekStartDay.SUNDAY) -> date:
    """First day of the week containing `day` (Sunday- or Monday-based)."""
    starts_on = 0 if week_start_day == WeekStartDay.MONDAY else 6  # date.weekday(): Monday=0
    diff = (day.weekday() - starts_on) % DAYS_PER_WEEK
    return day - timedelta(days=diff)


def validate_copy_request(request: CopyRequest, max_weeks_ahead: Optional[int] = None) -> None:
    max_weeks_ahead = max_weeks_ahead or settings.MAX_WEEKS_AHEAD

    if request.source_start is None or request.source_end is None:
        field = "source_day" if request.mode in (CopyMode.NEXT_DAY, CopyMode.DAY_TO_DATE) else "source_week_start"
        raise ValidationFailed("Source window is required", field=field)
    if request.source_start > request.source_end:
        raise ValidationFailed("Source window end must not be before its start", field="source_week_end")
    if request.mode in (CopyMode.NEXT_DAY, CopyMode.DAY_TO_DATE) and request.source_start != request.source_end:
        raise ValidationFailed(f"{request.mode.value} copies a single source day", field="source_day")
    if request.mode == CopyMode.DAY_TO_DATE:
        if request.target_date is None:
            raise ValidationFailed("target_date is required", field="target_date")
        if request.target_date == request.source_start:
            raise ValidationFailed("target_date must differ from the source day", field="target_date")

    if request.mode == CopyMode.WEEKS_AHEAD:
        if request.weeks_ahead is None or not 1 <= request.weeks_ahead <= max_weeks_ahead:
            raise ValidationFailed(
                f"weeks_ahead must be between 1 and {max_weeks_ahead}", field="weeks_ahead"
            )
    if request.mode == CopyMode.DATE_RANGE:
        if request.target_start is None or request.target_end is None:
            raise ValidationFailed("target_start_week and target_end_week are required", field="target_start_week")
        if request.target_start > request.target_end:
            raise ValidationFailed("target_end_week must be after target_start_week", field="target_end_week")

    for label, state in (
        ("source_schedule_state", request.source_schedule_state),
        ("target_schedule_state", request.target_schedule_state),
    ):
        if state not in (ScheduleState.DRAFT, ScheduleState.PUBLISHED):
            raise ValidationFailed(f"{label} must be draft or published", field=label)


def resolve_target_starts(
    request: CopyRequest,
    week_start_day: WeekStartDay = WeekStartDay.SUNDAY,
) -> list[date]:
    """Anchor dates that each receive the source window's day offsets."""
    if request.mode == CopyMode.NEXT_DAY:
        return [request.source_start + timedelta(days=1)]
    if request.mode == CopyMode.DAY_TO_DATE:
        return [request.target_date]
    if request.mode == CopyMode.NEXT_WEEK:
        return [request.source_start + timedelta(days=DAYS_PER_WEEK)]
    if request.mode == CopyMode.WEEKS_AHEAD:
        return [request.source_start + timedelta(days=DAYS_PER_WEEK * request.weeks_ahead)]
    if request.mode == CopyMode.DATE_RANGE:
        cursor = week_start_for(request.target_start, week_start_day)
        last = week_start_for(request.target_end, week_start_day)
        starts = []
        while cursor <= last:
            starts.append(cursor)
            cursor += timedelta(days=DAYS_PER_WEEK)
        return starts
    raise ValidationFailed(f"Invalid mode: {request.mode}", field="mode")


def placement_date(
    request: CopyRequest,
    source_date: date,
    anchor: date,
    week_start_day: WeekStartDay = WeekStartDay.SUNDAY,
) -> date:
    """Where a source shift lands for one target anchor."""
    if request.mode == CopyMode.DATE_RANGE:
        # anchors are aligned week starts, so measure from the aligned source week
        source_week = week_start_for(request.source_start, week_start_day)
        return anchor + timedelta(days=(source_date - source_week).days % DAYS_PER_WEEK)
    return anchor + (source_date - request.source_start)


def target_window(request: CopyRequest, target_starts: list[date]) -> tuple[date, date]:
    """Inclusive date range every placement of the request falls into."""
    if request.mode == CopyMode.DATE_RANGE:
        span = DAYS_PER_WEEK - 1
    else:
        span = (request.source_end - request.source_start).days
    return min(target_starts), max(target_starts) + timedelta(days=span)


def _skip(
    summary: CopySummary,
    candidate: Shift,
    reason: SkipReason,
    message: str,
    preview_limit: int,
) -> None:
    summary.record_skip(
        SkippedPlacement(
            employee_id=candidate.employee_id,
            shift_date=candidate.shift_date,
            start_time=hour_to_clock(candidate.start_hour),
            end_time=hour_to_clock(candidate.end_hour),
            job=candidate.job,
            reason=reason,
            message=message,
        ),
        preview_limit,
    )


def plan_copy(
    request: CopyRequest,
    target_starts: list[date],
    source_shifts: list[Shift],
    existing_shifts: list[Shift],
    time_off_requests: list[TimeOffRequest],
    employees: dict[int, Employee],
    preview_limit: Optional[int] = None,
    week_start_day: WeekStartDay = WeekStartDay.SUNDAY,
) -> tuple[list[Shift], CopySummary]:
    """
    Decide every placement without touching the database.

    `existing_shifts` is the snapshot of the target range in every state,
    blocked entries included. Placements accepted earlier in the same run are
    added to the snapshot so a copy can never double-book against itself.
    """
    if preview_limit is None:
        preview_limit = settings.COPY_SKIP_PREVIEW_LIMIT

    source = sorted(
        (s for s in source_shifts if not s.is_blocked),
        key=lambda s: (s.shift_date, s.start_hour, s.employee_id),
    )
    summary = CopySummary(source_count=len(source), target_week_starts=list(target_starts))

    by_day: dict[tuple[int, date], list[Shift]] = defaultdict(list)
    for shift in existing_shifts:
        by_day[(shift.employee_id, shift.shift_date)].append(shift)

    placements: list[Shift] = []
    for src in source:
        employee = employees.get(src.employee_id)

        for anchor in target_starts:
            target_date = placement_date(request, src.shift_date, anchor, week_start_day)
            candidate = replace(
                src,
                id=None,
                shift_date=target_date,
                schedule_state=request.target_schedule_state,
                pay_rate=None,
                pay_source=None,
            )
            day_shifts = by_day[(src.employee_id, target_date)]
            when = f"{target_date.isoformat()} {format_range(src.start_hour, src.end_hour)}"

            if employee is None or not employee.is_active:
                _skip(summary, candidate, SkipReason.INACTIVE,
                      f"Employee is no longer active ({when})", preview_limit)
                continue

            if find_duplicate_shift(src.employee_id, target_date, src.start_hour, src.end_hour, day_shifts):
                _skip(summary, candidate, SkipReason.DUPLICATE,
                      f"Shift already exists ({when})", preview_limit)
                continue

            if find_overlapping_shifts(src.employee_id, target_date, src.start_hour, src.end_hour, day_shifts):
                _skip(summary, candidate, SkipReason.OVERLAP,
                      f"Overlaps an existing shift ({when})", preview_limit)
                continue

            if not request.allow_override_blocked:
                blocked = find_blocked_entry(src.employee_id, target_date, day_shifts)
                if blocked is not None:
                    reason = blocked.blackout_reason
                    message = f"Blocked out on {target_date.isoformat()}"
                    if reason:
                        message = f"{message}: {reason}"
                    _skip(summary, candidate, SkipReason.BLOCKED, message, preview_limit)
                    continue

            if has_approved_time_off(src.employee_id, target_date, time_off_requests):
                _skip(summary, candidate, SkipReason.TIME_OFF,
                      f"Approved time off on {target_date.isoformat()}", preview_limit)
                continue

            pay_rate, pay_source = employee.pay_rate_for(candidate.job)
            candidate = replace(candidate, pay_rate=pay_rate, pay_source=pay_source)
            placements.append(candidate)
            day_shifts.append(candidate)
            summary.created_count += 1

    return placements, summary


def copy_schedule(
    db: Session,
    caller_id: int,
    organization_id: int,
    request: CopyRequest,
) -> CopySummary:
    with shift_write_transaction(db):
        require_manager(db, caller_id, organization_id)
        validate_copy_request(request)
        org = db.get(Organizations, organization_id)
        if org is None:
            raise NotFound("Organization not found")

        target_starts = resolve_target_starts(request, org.week_start_day)
        lock_schedule(db, organization_id)

        source_shifts = load_shifts(
            db,
            organization_id,
            request.source_start,
            request.source_end,
            schedule_state=request.source_schedule_state,
            include_blocked=False,
        )
        if not source_shifts:
            logger.info("Copy for organization %s found no source shifts", organization_id)
            return CopySummary(target_week_starts=target_starts)

        range_start, range_end = target_window(request, target_starts)

        existing = load_shifts(db, organization_id, range_start, range_end)
        time_off = load_approved_time_off(db, organization_id, range_start, range_end)
        employees = {e.id: e for e in load_active_employees(db, organization_id)}

        placements, summary = plan_copy(
            request, target_starts, source_shifts, existing, time_off, employees,
            week_start_day=org.week_start_day,
        )

        db.add_all([
            Shifts(
                organization_id=organization_id,
                user_id=p.employee_id,
                shift_date=p.shift_date,
                start_time=hour_to_clock(p.start_hour),
                end_time=hour_to_clock(p.end_hour),
                notes=p.notes,
                is_blocked=False,
                job=p.job,
                schedule_state=DBScheduleState(p.schedule_state.value),
                location_id=p.location_id,
                pay_rate=p.pay_rate,
                pay_source=p.pay_source.value if p.pay_source else None,
                created_by_user_id=caller_id,
            )
            for p in placements
        ])

    logger.info(
        "Copied schedule for organization %s (%s): created=%d overlap=%d blocked=%d duplicate=%d time_off=%d inactive=%d",
        organization_id,
        request.mode.value,
        summary.created_count,
        summary.skipped_overlap_count,
        summary.skipped_blocked_count,
        summary.skipped_duplicate_count,
        summary.skipped_time_off_count,
        summary.skipped_inactive_count,
    )
    return summary


def copy_day(
    db: Session,
    caller_id: int,
    organization_id: int,
    source_date: date,
    target_date: date,
    source_schedule_state: ScheduleState = ScheduleState.PUBLISHED,
    target_schedule_state: ScheduleState = ScheduleState.DRAFT,
    allow_override_blocked: bool = False,
) -> CopySummary:
    """Copy one day's shifts onto an arbitrary other date."""
    request = CopyRequest(
        mode=CopyMode.DAY_TO_DATE,
        source_start=source_date,
        source_end=source_date,
        target_date=target_date,
        allow_override_blocked=allow_override_blocked,
        source_schedule_state=source_schedule_state,
        target_schedule_state=target_schedule_state,
    )
    return copy_schedule(db, caller_id, organization_id, request)
