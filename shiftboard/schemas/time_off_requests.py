from pydantic import BaseModel
from datetime import date, datetime
from typing import Optional
from shiftboard.db.models.time_off_requests import TimeOffStatus


class TimeOffRequestBase(BaseModel):
    employee_id: int
    start_date: date
    end_date: date
    reason: str


class TimeOffRequestCreate(TimeOffRequestBase):
    pass


class TimeOffReview(BaseModel):
    status: TimeOffStatus
    manager_note: Optional[str] = None


class TimeOffRequestResponse(TimeOffRequestBase):
    id: int
    organization_id: int
    status: TimeOffStatus
    requester_user_id: Optional[int]
    reviewed_by: Optional[int]
    reviewed_at: Optional[datetime]
    manager_note: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
