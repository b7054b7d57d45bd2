"""
Internal data types for scheduling logic.
decoupled from SQLAlchemy models for cleaner logic.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from .time_model import hour_to_clock


JOB_CATALOG = (
    "Admin",
    "Bartender",
    "Bartender Training",
    "BOH Train",
    "Busser",
    "Cook",
    "Dishwasher",
    "FOH Train",
    "Food Run",
    "Food Runner",
    "Ghost Bar1",
    "Ghost Bar 2",
    "Host",
    "Manager",
    "Server",
    "Server Training",
)

BLOCKED_MARKER = "[BLOCKED]"
BLOCKED_START_HOUR = 0.0
BLOCKED_END_HOUR = 23.99  # stored as 23:59:00


class ScheduleState(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class TimeOffStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DENIED = "DENIED"
    CANCELLED = "CANCELLED"


class PaySource(str, Enum):
    JOB = "job"
    HOURLY = "hourly"


class CopyMode(str, Enum):
    NEXT_DAY = "nextDay"
    NEXT_WEEK = "nextWeek"
    WEEKS_AHEAD = "weeksAhead"
    DATE_RANGE = "dateRange"
    DAY_TO_DATE = "dayToDate"


class SkipReason(str, Enum):
    DUPLICATE = "duplicate"
    OVERLAP = "overlap"
    BLOCKED = "blocked"
    TIME_OFF = "time_off"
    INACTIVE = "inactive"


@dataclass
class Employee:
    id: int
    organization_id: int
    is_active: bool = True
    jobs: list[str] = field(default_factory=list)
    hourly_pay: Optional[float] = None
    job_pay: dict[str, float] = field(default_factory=dict)

    def pay_rate_for(self, job: Optional[str]) -> tuple[Optional[float], Optional[PaySource]]:
        """Rate snapshot for a shift: per-job rate first, then the base hourly rate."""
        if job and self.job_pay.get(job) is not None:
            return float(self.job_pay[job]), PaySource.JOB
        if self.hourly_pay is not None:
            return float(self.hourly_pay), PaySource.HOURLY
        return None, None


@dataclass
class Shift:
    """A shift placement, persisted or proposed. Times are decimal hours."""
    organization_id: int
    employee_id: int
    shift_date: date
    start_hour: float
    end_hour: float
    id: Optional[int] = None
    job: Optional[str] = None
    location_id: Optional[int] = None
    notes: Optional[str] = None
    is_blocked: bool = False
    schedule_state: ScheduleState = ScheduleState.DRAFT
    pay_rate: Optional[float] = None
    pay_source: Optional[PaySource] = None
    blackout_period_id: Optional[int] = None

    @property
    def start_time(self) -> str:
        return hour_to_clock(self.start_hour)

    @property
    def end_time(self) -> str:
        return hour_to_clock(self.end_hour)

    @property
    def duration_hours(self) -> float:
        return self.end_hour - self.start_hour

    @property
    def blackout_reason(self) -> Optional[str]:
        if not self.is_blocked:
            return None
        note = (self.notes or "").strip()
        if note.startswith(BLOCKED_MARKER):
            note = note[len(BLOCKED_MARKER):].strip()
        return note or None


@dataclass
class TimeOffRequest:
    id: int
    organization_id: int
    employee_id: int
    start_date: date
    end_date: date  # inclusive
    status: TimeOffStatus
    reason: str = ""

    def covers(self, on_date: date) -> bool:
        return self.start_date <= on_date <= self.end_date


@dataclass
class ShiftOverrides:
    """Explicit confirmations for conflicts that policy allows a manager to accept."""
    allow_time_off_override: bool = False
    allow_blocked_override: bool = False


@dataclass
class CopyRequest:
    mode: CopyMode
    source_start: Optional[date] = None
    source_end: Optional[date] = None
    weeks_ahead: Optional[int] = None
    target_start: Optional[date] = None
    target_end: Optional[date] = None
    target_date: Optional[date] = None
    allow_override_blocked: bool = False
    source_schedule_state: ScheduleState = ScheduleState.PUBLISHED
    target_schedule_state: ScheduleState = ScheduleState.DRAFT


@dataclass
class SkippedPlacement:
    employee_id: int
    shift_date: date
    start_time: str
    end_time: str
    job: Optional[str]
    reason: SkipReason
    message: str


@dataclass
class CopySummary:
    """Outcome of a copy operation. Counts are complete; `skipped` is a capped preview."""
    source_count: int = 0
    created_count: int = 0
    skipped_overlap_count: int = 0
    skipped_blocked_count: int = 0
    skipped_duplicate_count: int = 0
    skipped_time_off_count: int = 0
    skipped_inactive_count: int = 0
    skipped: list[SkippedPlacement] = field(default_factory=list)
    skipped_truncated: bool = False
    target_week_starts: list[date] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return (
            self.skipped_overlap_count
            + self.skipped_blocked_count
            + self.skipped_duplicate_count
            + self.skipped_time_off_count
            + self.skipped_inactive_count
        )

    def record_skip(self, item: SkippedPlacement, preview_limit: int) -> None:
        counter = f"skipped_{item.reason.value}_count"
        setattr(self, counter, getattr(self, counter) + 1)
        if len(self.skipped) < preview_limit:
            self.skipped.append(item)
        else:
            self.skipped_truncated = True


@dataclass
class PublishResult:
    published_count: int
    start_date: date
    end_date: date
