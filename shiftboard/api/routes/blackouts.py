from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shiftboard.api.deps import get_db, get_current_user
from shiftboard.db.models.blackout_periods import BlackoutPeriods, BlackoutStatus
from shiftboard.db.models.users import Users
from shiftboard.schemas.blackouts import (
    BlackoutCreate,
    BlackoutDeleteResponse,
    BlackoutRequestCreate,
    BlackoutResponse,
    BlackoutReview,
    BlackoutUpdate,
)
from shiftboard.services.scheduling import (
    cancel_blackout_request,
    create_blackout_period,
    delete_blackout_period,
    list_blackout_periods,
    request_blackout,
    review_blackout_request,
    update_blackout_period,
)

router = APIRouter(tags=["blackouts"])


def _respond(period: BlackoutPeriods, entries: int = 0) -> BlackoutResponse:
    return BlackoutResponse.model_validate(period).model_copy(update={"blocked_entries": entries})


@router.post(
    "/organizations/{organization_id}/blackouts",
    response_model=BlackoutResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_blackout(
    organization_id: int,
    payload: BlackoutCreate,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    """Block days for one employee or, with scope ORG_BLACKOUT, for the whole roster (managers/admins only)"""
    period, entries = create_blackout_period(
        db,
        caller_id=current_user.id,
        organization_id=organization_id,
        employee_id=payload.employee_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
        scope=payload.scope,
    )
    return _respond(period, entries)


@router.get("/organizations/{organization_id}/blackouts", response_model=List[BlackoutResponse])
def list_blackouts(
    organization_id: int,
    request_status: Optional[BlackoutStatus] = None,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    """Managers/admins see all periods, employees see their own and org-wide ones"""
    periods = list_blackout_periods(db, current_user.id, organization_id, status=request_status)
    return [_respond(p) for p in periods]


@router.post(
    "/organizations/{organization_id}/blackouts/requests",
    response_model=BlackoutResponse,
    status_code=status.HTTP_201_CREATED,
)
def request_blocked_days(
    organization_id: int,
    payload: BlackoutRequestCreate,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    period = request_blackout(
        db,
        caller_id=current_user.id,
        organization_id=organization_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
    )
    return _respond(period)


@router.post("/blackouts/{blackout_id}/review", response_model=BlackoutResponse)
def review_blocked_days(
    blackout_id: int,
    payload: BlackoutReview,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    period, entries = review_blackout_request(
        db,
        caller_id=current_user.id,
        period_id=blackout_id,
        status=payload.status,
        manager_note=payload.manager_note,
    )
    return _respond(period, entries)


@router.post("/blackouts/{blackout_id}/cancel", response_model=BlackoutResponse)
def cancel_blocked_days(
    blackout_id: int,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    return _respond(cancel_blackout_request(db, caller_id=current_user.id, period_id=blackout_id))


@router.put("/blackouts/{blackout_id}", response_model=BlackoutResponse)
def update_blackout(
    blackout_id: int,
    payload: BlackoutUpdate,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    period, entries = update_blackout_period(
        db, caller_id=current_user.id, period_id=blackout_id, changes=payload.changes()
    )
    return _respond(period, entries)


@router.delete("/blackouts/{blackout_id}", response_model=BlackoutDeleteResponse)
def delete_blackout(
    blackout_id: int,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    removed = delete_blackout_period(db, caller_id=current_user.id, period_id=blackout_id)
    return BlackoutDeleteResponse(id=blackout_id, removed_days=removed)
