from pydantic import BaseModel, Field
from datetime import date
from typing import List, Optional
from shiftboard.services.scheduling.types import CopyMode, CopyRequest, ScheduleState, SkipReason


class CopyScheduleRequest(BaseModel):
    mode: CopyMode
    source_week_start: Optional[date] = None
    source_week_end: Optional[date] = None
    source_day: Optional[date] = None
    weeks_ahead: Optional[int] = None
    target_start_week: Optional[date] = None
    target_end_week: Optional[date] = None
    target_date: Optional[date] = None
    allow_override_blocked: bool = False
    source_schedule_state: ScheduleState = ScheduleState.PUBLISHED
    target_schedule_state: ScheduleState = ScheduleState.DRAFT

    def to_copy_request(self) -> CopyRequest:
        if self.mode in (CopyMode.NEXT_DAY, CopyMode.DAY_TO_DATE):
            source_start = source_end = self.source_day
        else:
            source_start, source_end = self.source_week_start, self.source_week_end
        return CopyRequest(
            mode=self.mode,
            source_start=source_start,
            source_end=source_end,
            weeks_ahead=self.weeks_ahead,
            target_start=self.target_start_week,
            target_end=self.target_end_week,
            target_date=self.target_date,
            allow_override_blocked=self.allow_override_blocked,
            source_schedule_state=self.source_schedule_state,
            target_schedule_state=self.target_schedule_state,
        )


class CopyDayRequest(BaseModel):
    source_date: date
    target_date: date
    allow_override_blocked: bool = False
    source_schedule_state: ScheduleState = ScheduleState.PUBLISHED
    target_schedule_state: ScheduleState = ScheduleState.DRAFT


class SkippedPlacementResponse(BaseModel):
    employee_id: int
    shift_date: date
    start_time: str
    end_time: str
    job: Optional[str] = None
    reason: SkipReason
    message: str

    class Config:
        from_attributes = True


class CopySummaryResponse(BaseModel):
    source_count: int
    created_count: int
    skipped_overlap_count: int
    skipped_blocked_count: int
    skipped_duplicate_count: int
    skipped_time_off_count: int
    skipped_inactive_count: int
    skipped: List[SkippedPlacementResponse] = Field(default_factory=list)
    skipped_truncated: bool = False
    target_week_starts: List[date] = Field(default_factory=list)

    class Config:
        from_attributes = True


class PublishRangeRequest(BaseModel):
    start_date: date
    end_date: date


class PublishRangeResponse(BaseModel):
    published_count: int
    start_date: date
    end_date: date

    class Config:
        from_attributes = True
