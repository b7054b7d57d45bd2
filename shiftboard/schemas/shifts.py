from pydantic import BaseModel, Field
from datetime import date
from typing import Optional
from shiftboard.services.scheduling.types import ScheduleState, PaySource, ShiftOverrides


class ShiftOverrideFlags(BaseModel):
    allow_time_off_override: bool = False
    allow_blocked_override: bool = False

    def to_overrides(self) -> ShiftOverrides:
        return ShiftOverrides(
            allow_time_off_override=self.allow_time_off_override,
            allow_blocked_override=self.allow_blocked_override,
        )


class ShiftBase(BaseModel):
    employee_id: int
    shift_date: date
    start_hour: float = Field(ge=0, le=24)
    end_hour: float = Field(ge=0, le=24)
    job: Optional[str] = None
    location_id: Optional[int] = None
    notes: Optional[str] = None


class ShiftCreate(ShiftBase, ShiftOverrideFlags):
    schedule_state: ScheduleState = ScheduleState.DRAFT


class ShiftUpdate(ShiftOverrideFlags):
    employee_id: Optional[int] = None
    shift_date: Optional[date] = None
    start_hour: Optional[float] = Field(default=None, ge=0, le=24)
    end_hour: Optional[float] = Field(default=None, ge=0, le=24)
    job: Optional[str] = None
    location_id: Optional[int] = None
    notes: Optional[str] = None
    schedule_state: Optional[ScheduleState] = None

    def changes(self) -> dict:
        return self.model_dump(
            exclude_unset=True,
            exclude={"allow_time_off_override", "allow_blocked_override"},
        )


class ShiftResponse(ShiftBase):
    id: int
    organization_id: int
    start_time: str
    end_time: str
    is_blocked: bool
    schedule_state: ScheduleState
    pay_rate: Optional[float] = None
    pay_source: Optional[PaySource] = None

    class Config:
        from_attributes = True
