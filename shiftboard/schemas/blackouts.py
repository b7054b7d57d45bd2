from pydantic import BaseModel
from datetime import date, datetime
from typing import Any, Optional
from shiftboard.db.models.blackout_periods import BlackoutScope, BlackoutStatus


class BlackoutCreate(BaseModel):
    employee_id: Optional[int] = None
    scope: BlackoutScope = BlackoutScope.EMPLOYEE
    start_date: date
    end_date: date
    reason: str


class BlackoutRequestCreate(BaseModel):
    start_date: date
    end_date: date
    reason: str


class BlackoutReview(BaseModel):
    status: BlackoutStatus
    manager_note: Optional[str] = None


class BlackoutUpdate(BaseModel):
    employee_id: Optional[int] = None
    scope: Optional[BlackoutScope] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = None
    manager_note: Optional[str] = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class BlackoutResponse(BaseModel):
    id: int
    organization_id: int
    employee_id: Optional[int]
    scope: BlackoutScope
    status: BlackoutStatus
    start_date: date
    end_date: date
    reason: str
    requested_by_user_id: Optional[int]
    created_by_user_id: Optional[int]
    reviewed_by: Optional[int]
    reviewed_at: Optional[datetime]
    manager_note: Optional[str]
    created_at: datetime
    blocked_entries: int = 0

    class Config:
        from_attributes = True


class BlackoutDeleteResponse(BaseModel):
    id: int
    removed_days: int
