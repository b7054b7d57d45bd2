from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shiftboard.api.deps import get_db, get_current_user
from shiftboard.db.models.time_off_requests import TimeOffStatus
from shiftboard.db.models.users import Users
from shiftboard.schemas.time_off_requests import (
    TimeOffRequestCreate,
    TimeOffRequestResponse,
    TimeOffReview,
)
from shiftboard.services.scheduling import (
    cancel_time_off,
    list_time_off,
    review_time_off,
    submit_time_off,
)

router = APIRouter(tags=["time-off-requests"])


@router.post(
    "/organizations/{organization_id}/time-off-requests",
    response_model=TimeOffRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_time_off_request(
    organization_id: int,
    payload: TimeOffRequestCreate,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    """Create time off request - employees can create for themselves, managers/admins can create for anyone"""
    return submit_time_off(
        db,
        caller_id=current_user.id,
        organization_id=organization_id,
        employee_id=payload.employee_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
    )


@router.get(
    "/organizations/{organization_id}/time-off-requests",
    response_model=List[TimeOffRequestResponse],
)
def list_time_off_requests(
    organization_id: int,
    request_status: Optional[TimeOffStatus] = None,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    """List time off requests - managers/admins see all, employees see only their own"""
    return list_time_off(db, current_user.id, organization_id, status=request_status)


@router.post("/time-off-requests/{request_id}/review", response_model=TimeOffRequestResponse)
def review_time_off_request(
    request_id: int,
    payload: TimeOffReview,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    return review_time_off(
        db,
        caller_id=current_user.id,
        request_id=request_id,
        status=payload.status,
        manager_note=payload.manager_note,
    )


@router.post("/time-off-requests/{request_id}/cancel", response_model=TimeOffRequestResponse)
def cancel_time_off_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    return cancel_time_off(db, caller_id=current_user.id, request_id=request_id)
