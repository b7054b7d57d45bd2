"""
Time-off request lifecycle: submit, review, cancel.
Only APPROVED requests constrain shift placement.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from shiftboard.db.models.employees import Employees
from shiftboard.db.models.time_off_requests import TimeOffRequests, TimeOffStatus

from .data_loader import is_manager, require_manager
from .errors import NotFound, PermissionDenied, ValidationFailed


logger = logging.getLogger(__name__)

REVIEW_OUTCOMES = (TimeOffStatus.APPROVED, TimeOffStatus.DENIED)


def _owns_employee(db: Session, caller_id: int, employee_id: int) -> bool:
    employee = db.get(Employees, employee_id)
    return employee is not None and employee.user_id == caller_id


def submit_time_off(
    db: Session,
    caller_id: int,
    organization_id: int,
    employee_id: int,
    start_date: date,
    end_date: date,
    reason: str,
) -> TimeOffRequests:
    """Employees submit for themselves; managers may submit on an employee's behalf."""
    employee = db.get(Employees, employee_id)
    if employee is None or employee.organization_id != organization_id:
        raise NotFound("Employee not found")
    if employee.user_id != caller_id and not is_manager(db, caller_id, organization_id):
        raise PermissionDenied("Can only create time off requests for yourself")
    if not reason or not reason.strip():
        raise ValidationFailed("Reason is required for this request", field="reason")
    if start_date > end_date:
        raise ValidationFailed("end_date must not be before start_date", field="end_date")

    request = TimeOffRequests(
        organization_id=organization_id,
        user_id=employee_id,
        requester_user_id=caller_id,
        start_date=start_date,
        end_date=end_date,
        reason=reason.strip(),
        status=TimeOffStatus.PENDING,
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info("Time off request %s submitted for employee %s", request.id, employee_id)
    return request


def review_time_off(
    db: Session,
    caller_id: int,
    request_id: int,
    status: TimeOffStatus,
    manager_note: Optional[str] = None,
) -> TimeOffRequests:
    request = db.get(TimeOffRequests, request_id)
    if request is None:
        raise NotFound("Time off request not found")
    require_manager(db, caller_id, request.organization_id)

    status = TimeOffStatus(status)
    if status not in REVIEW_OUTCOMES:
        raise ValidationFailed("Review status must be APPROVED or DENIED", field="status")
    if request.status != TimeOffStatus.PENDING:
        raise ValidationFailed(f"Request is already {request.status.value}", field="status")

    request.status = status
    request.reviewed_by = caller_id
    request.reviewed_at = datetime.now(timezone.utc)
    request.manager_note = manager_note
    db.commit()
    db.refresh(request)
    logger.info("Time off request %s reviewed: %s", request.id, status.value)
    return request


def cancel_time_off(db: Session, caller_id: int, request_id: int) -> TimeOffRequests:
    request = db.get(TimeOffRequests, request_id)
    if request is None:
        raise NotFound("Time off request not found")
    if not _owns_employee(db, caller_id, request.user_id):
        raise PermissionDenied("Only the requesting employee can cancel this request")
    if request.status != TimeOffStatus.PENDING:
        raise ValidationFailed("Can only cancel pending requests", field="status")

    request.status = TimeOffStatus.CANCELLED
    db.commit()
    db.refresh(request)
    logger.info("Time off request %s cancelled", request.id)
    return request


def list_time_off(
    db: Session,
    caller_id: int,
    organization_id: int,
    status: Optional[TimeOffStatus] = None,
) -> list[TimeOffRequests]:
    """Managers see the whole organization, employees only their own requests."""
    stmt = select(TimeOffRequests).where(TimeOffRequests.organization_id == organization_id)

    if not is_manager(db, caller_id, organization_id):
        own_ids = db.execute(
            select(Employees.id).where(
                Employees.organization_id == organization_id,
                Employees.user_id == caller_id,
            )
        ).scalars().all()
        if not own_ids:
            return []
        stmt = stmt.where(TimeOffRequests.user_id.in_(own_ids))

    if status:
        stmt = stmt.where(TimeOffRequests.status == status)

    return list(db.execute(stmt.order_by(TimeOffRequests.start_date.desc())).scalars().all())
