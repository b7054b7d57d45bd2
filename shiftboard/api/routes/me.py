# shiftboard/api/routes/me.py

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from datetime import date

from shiftboard.api.deps import get_db, get_current_employee
from shiftboard.db.models.employees import Employees
from shiftboard.schemas.shifts import ShiftResponse
from shiftboard.services.scheduling import list_employee_shifts

router = APIRouter(prefix="/me", tags=["me"])


@router.get("/shifts", response_model=List[ShiftResponse])
def get_my_shifts(
    start_date: date,
    end_date: date,
    db: Session = Depends(get_db),
    employee: Employees = Depends(get_current_employee),
):
    """Get current user's published shifts"""
    shifts = list_employee_shifts(
        db,
        organization_id=employee.organization_id,
        employee_id=employee.id,
        start_date=start_date,
        end_date=end_date,
    )
    return [ShiftResponse.model_validate(s) for s in shifts]
