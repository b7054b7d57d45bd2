from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shiftboard.api.deps import get_db, get_current_user
from shiftboard.db.models.users import Users
from shiftboard.schemas.schedule import (
    CopyDayRequest,
    CopyScheduleRequest,
    CopySummaryResponse,
    PublishRangeRequest,
    PublishRangeResponse,
)
from shiftboard.services.scheduling import copy_day as copy_day_service, copy_schedule as copy_schedule_service, publish_range

router = APIRouter(prefix="/organizations/{organization_id}/schedule", tags=["schedule"])


@router.post("/copy", response_model=CopySummaryResponse)
def copy_schedule(
    organization_id: int,
    payload: CopyScheduleRequest,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    """
    Copy a day or week of shifts forward. Conflicting placements are skipped
    and reported; the rest are created in one transaction.
    """
    summary = copy_schedule_service(
        db,
        caller_id=current_user.id,
        organization_id=organization_id,
        request=payload.to_copy_request(),
    )
    return CopySummaryResponse.model_validate(summary)


@router.post("/copy-day", response_model=CopySummaryResponse)
def copy_day(
    organization_id: int,
    payload: CopyDayRequest,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    summary = copy_day_service(
        db,
        caller_id=current_user.id,
        organization_id=organization_id,
        source_date=payload.source_date,
        target_date=payload.target_date,
        source_schedule_state=payload.source_schedule_state,
        target_schedule_state=payload.target_schedule_state,
        allow_override_blocked=payload.allow_override_blocked,
    )
    return CopySummaryResponse.model_validate(summary)


@router.post("/publish", response_model=PublishRangeResponse)
def publish_schedule(
    organization_id: int,
    payload: PublishRangeRequest,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    result = publish_range(
        db,
        caller_id=current_user.id,
        organization_id=organization_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    return PublishRangeResponse.model_validate(result)
