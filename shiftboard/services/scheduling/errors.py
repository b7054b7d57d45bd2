"""
Scheduling error taxonomy.

Every rejection carries a stable `code` so the client can tell overridable
conflicts (time off, blackout) from hard ones and offer "assign anyway" only
where a matching override flag exists.
"""

from typing import Any, Optional


class SchedulingError(Exception):
    code = "scheduling_error"
    status_code = 400
    overridable = False
    override_flag: Optional[str] = None

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {
            "code": self.code,
            "message": self.message,
            "overridable": self.overridable,
        }
        if self.override_flag:
            body["override_flag"] = self.override_flag
        body.update(self.details)
        return body


class PermissionDenied(SchedulingError):
    code = "permission_denied"
    status_code = 403


class ValidationFailed(SchedulingError):
    code = "validation_failed"
    status_code = 422


class NotFound(SchedulingError):
    code = "not_found"
    status_code = 404


class TimeOffConflict(SchedulingError):
    code = "time_off_conflict"
    status_code = 409
    overridable = True
    override_flag = "allow_time_off_override"


class BlockedDateConflict(SchedulingError):
    code = "blocked_date_conflict"
    status_code = 409
    overridable = True
    override_flag = "allow_blocked_override"


class OverlapConflict(SchedulingError):
    code = "overlap_conflict"
    status_code = 409

    def __init__(self, message: str, conflicting_shift_ids: Optional[list[int]] = None):
        super().__init__(message, conflicting_shift_ids=list(conflicting_shift_ids or []))
        self.conflicting_shift_ids = list(conflicting_shift_ids or [])
