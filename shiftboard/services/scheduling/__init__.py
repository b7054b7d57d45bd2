"""
Scheduling service package.

Usage:
    from datetime import date
    from shiftboard.services.scheduling import CopyMode, CopyRequest, create_shift, copy_schedule, publish_range

    shift = create_shift(db, caller_id=7, organization_id=1, employee_id=3,
                         shift_date=date(2024, 6, 3), start_hour=9, end_hour=17, job="Server")

    summary = copy_schedule(db, caller_id=7, organization_id=1, request=CopyRequest(
        mode=CopyMode.NEXT_WEEK, source_start=date(2024, 6, 3), source_end=date(2024, 6, 9),
    ))

    publish_range(db, caller_id=7, organization_id=1,
                  start_date=date(2024, 6, 10), end_date=date(2024, 6, 16))
"""

from .types import (
    JOB_CATALOG,
    Employee,
    Shift,
    TimeOffRequest,
    ScheduleState,
    TimeOffStatus,
    ShiftOverrides,
    CopyMode,
    CopyRequest,
    CopySummary,
    SkippedPlacement,
    SkipReason,
    PublishResult,
)
from .conflicts import overlaps, has_approved_time_off, has_blocked_entry
from .errors import (
    SchedulingError,
    PermissionDenied,
    ValidationFailed,
    NotFound,
    TimeOffConflict,
    BlockedDateConflict,
    OverlapConflict,
)
from .mutations import create_shift, update_shift, delete_shift
from .copy_engine import copy_schedule, copy_day, plan_copy
from .publishing import publish_range, list_manager_shifts, list_employee_shifts
from .time_off import submit_time_off, review_time_off, cancel_time_off, list_time_off
from .blackouts import (
    create_blackout_period,
    request_blackout,
    review_blackout_request,
    cancel_blackout_request,
    update_blackout_period,
    delete_blackout_period,
    list_blackout_periods,
)

__all__ = [
    # Types
    "JOB_CATALOG",
    "Employee",
    "Shift",
    "TimeOffRequest",
    "ScheduleState",
    "TimeOffStatus",
    "ShiftOverrides",
    "CopyMode",
    "CopyRequest",
    "CopySummary",
    "SkippedPlacement",
    "SkipReason",
    "PublishResult",
    # Conflict rules
    "overlaps",
    "has_approved_time_off",
    "has_blocked_entry",
    # Errors
    "SchedulingError",
    "PermissionDenied",
    "ValidationFailed",
    "NotFound",
    "TimeOffConflict",
    "BlockedDateConflict",
    "OverlapConflict",
    # Operations
    "create_shift",
    "update_shift",
    "delete_shift",
    "copy_schedule",
    "copy_day",
    "plan_copy",
    "publish_range",
    "list_manager_shifts",
    "list_employee_shifts",
    "submit_time_off",
    "review_time_off",
    "cancel_time_off",
    "list_time_off",
    "create_blackout_period",
    "request_blackout",
    "review_blackout_request",
    "cancel_blackout_request",
    "update_blackout_period",
    "delete_blackout_period",
    "list_blackout_periods",
]
