"""
Draft/publish lifecycle and the two read paths that depend on it.

A shift only ever moves draft -> published. Publishing a range is one UPDATE
statement inside one transaction, so readers see either none or all of the
range's drafts as published.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import and_, update
from sqlalchemy.orm import Session

from shiftboard.db.models.shifts import Shifts, ScheduleState as DBScheduleState

from .data_loader import load_shifts, require_manager
from .errors import ValidationFailed
from .types import PublishResult, ScheduleState, Shift


logger = logging.getLogger(__name__)


def publish_range(
    db: Session,
    caller_id: int,
    organization_id: int,
    start_date: date,
    end_date: date,
) -> PublishResult:
    try:
        require_manager(db, caller_id, organization_id)
        if start_date > end_date:
            raise ValidationFailed("end_date must not be before start_date", field="end_date")
        stmt = (
            update(Shifts)
            .where(
                and_(
                    Shifts.organization_id == organization_id,
                    Shifts.schedule_state == DBScheduleState.DRAFT,
                    Shifts.shift_date >= start_date,
                    Shifts.shift_date <= end_date,
                )
            )
            .values(schedule_state=DBScheduleState.PUBLISHED)
            .execution_options(synchronize_session=False)
        )
        result = db.execute(stmt)
        published = result.rowcount or 0
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Published %d draft shift(s) for organization %s between %s and %s",
        published, organization_id, start_date, end_date,
    )
    return PublishResult(published_count=published, start_date=start_date, end_date=end_date)


def list_manager_shifts(
    db: Session,
    caller_id: int,
    organization_id: int,
    start_date: date,
    end_date: date,
    employee_id: Optional[int] = None,
    schedule_state: Optional[ScheduleState] = None,
) -> list[Shift]:
    """Manager calendar: drafts and published shifts, each carrying its state."""
    require_manager(db, caller_id, organization_id)
    if start_date > end_date:
        raise ValidationFailed("end_date must not be before start_date", field="end_date")
    return load_shifts(
        db,
        organization_id,
        start_date,
        end_date,
        employee_id=employee_id,
        schedule_state=schedule_state,
    )


def list_employee_shifts(
    db: Session,
    organization_id: int,
    employee_id: int,
    start_date: date,
    end_date: date,
) -> list[Shift]:
    """What an employee is allowed to see of their own schedule: published rows only."""
    if start_date > end_date:
        raise ValidationFailed("end_date must not be before start_date", field="end_date")
    return load_shifts(
        db,
        organization_id,
        start_date,
        end_date,
        employee_id=employee_id,
        schedule_state=ScheduleState.PUBLISHED,
    )
