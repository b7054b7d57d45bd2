from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from datetime import date

from shiftboard.api.deps import get_db, get_current_user
from shiftboard.db.models.users import Users
from shiftboard.schemas.shifts import ShiftCreate, ShiftUpdate, ShiftResponse
from shiftboard.services.scheduling import (
    ScheduleState,
    create_shift as create_shift_service,
    delete_shift as delete_shift_service,
    list_manager_shifts,
    update_shift as update_shift_service,
)

router = APIRouter(tags=["shifts"])


@router.post(
    "/organizations/{organization_id}/shifts",
    response_model=ShiftResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_shift(
    organization_id: int,
    payload: ShiftCreate,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    shift = create_shift_service(
        db,
        caller_id=current_user.id,
        organization_id=organization_id,
        employee_id=payload.employee_id,
        shift_date=payload.shift_date,
        start_hour=payload.start_hour,
        end_hour=payload.end_hour,
        job=payload.job,
        location_id=payload.location_id,
        notes=payload.notes,
        schedule_state=payload.schedule_state,
        overrides=payload.to_overrides(),
    )
    return ShiftResponse.model_validate(shift)


@router.get("/organizations/{organization_id}/shifts", response_model=List[ShiftResponse])
def list_shifts(
    organization_id: int,
    start_date: date,
    end_date: date,
    employee_id: Optional[int] = None,
    schedule_state: Optional[ScheduleState] = None,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    """Manager calendar view: drafts and published shifts together"""
    shifts = list_manager_shifts(
        db,
        caller_id=current_user.id,
        organization_id=organization_id,
        start_date=start_date,
        end_date=end_date,
        employee_id=employee_id,
        schedule_state=schedule_state,
    )
    return [ShiftResponse.model_validate(s) for s in shifts]


@router.put("/shifts/{shift_id}", response_model=ShiftResponse)
def update_shift(
    shift_id: int,
    payload: ShiftUpdate,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    shift = update_shift_service(
        db,
        caller_id=current_user.id,
        shift_id=shift_id,
        changes=payload.changes(),
        overrides=payload.to_overrides(),
    )
    return ShiftResponse.model_validate(shift)


@router.delete("/shifts/{shift_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_shift(
    shift_id: int,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    delete_shift_service(db, caller_id=current_user.id, shift_id=shift_id)
    return None
