"""
Blackout periods (blocked days).

A period covers one employee (EMPLOYEE scope) or everyone on the roster
(ORG_BLACKOUT scope). Managers create periods directly, already APPROVED;
employees request blocked days for themselves, which stay PENDING until a
manager reviews them.

Only an APPROVED period owns blocked entries: one full-day blocked shift per
covered date per affected employee. For an org-wide blackout that is every
active employee at the time the entries are written. The entries are
rewritten whenever an approved period is edited and deleted with it; they are
never edited on their own.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.orm import Session

from shiftboard.db.models.blackout_periods import BlackoutPeriods, BlackoutScope, BlackoutStatus
from shiftboard.db.models.employees import Employees
from shiftboard.db.models.organization_memberships import OrganizationMemberships, Role
from shiftboard.db.models.shifts import Shifts, ScheduleState as DBScheduleState

from .data_loader import is_manager, load_active_employees, lock_schedule, require_manager
from .errors import NotFound, PermissionDenied, ValidationFailed
from .time_model import hour_to_clock
from .types import BLOCKED_END_HOUR, BLOCKED_MARKER, BLOCKED_START_HOUR


logger = logging.getLogger(__name__)

MAX_BLACKOUT_DAYS = 366
REVIEW_OUTCOMES = (BlackoutStatus.APPROVED, BlackoutStatus.DENIED)
EDITABLE_STATUSES = (BlackoutStatus.PENDING, BlackoutStatus.APPROVED)
UPDATABLE_FIELDS = {"start_date", "end_date", "reason", "scope", "employee_id", "manager_note"}


def _validate_window(start_date: date, end_date: date, reason: Optional[str]) -> str:
    if not reason or not reason.strip():
        raise ValidationFailed("Reason is required for blocked days.", field="reason")
    if start_date > end_date:
        raise ValidationFailed("end_date must not be before start_date", field="end_date")
    if (end_date - start_date).days + 1 > MAX_BLACKOUT_DAYS:
        raise ValidationFailed(f"A blackout can cover at most {MAX_BLACKOUT_DAYS} days", field="end_date")
    return reason.strip()


def _role_in(db: Session, user_id: Optional[int], organization_id: int) -> Optional[Role]:
    if user_id is None:
        return None
    return db.execute(
        select(OrganizationMemberships.role).where(
            and_(
                OrganizationMemberships.user_id == user_id,
                OrganizationMemberships.organization_id == organization_id,
            )
        )
    ).scalar_one_or_none()


def _resolve_target(
    db: Session,
    caller_id: int,
    organization_id: int,
    scope: BlackoutScope,
    employee_id: Optional[int],
) -> Optional[int]:
    """Employee id the period applies to (None for org-wide). Managers cannot block out admins."""
    if scope == BlackoutScope.ORG_BLACKOUT:
        return None
    if employee_id is None:
        raise ValidationFailed("employee_id is required for an employee blackout", field="employee_id")

    employee = db.get(Employees, employee_id)
    if employee is None or employee.organization_id != organization_id:
        raise NotFound("Employee not found")
    if (
        _role_in(db, employee.user_id, organization_id) == Role.ADMIN
        and _role_in(db, caller_id, organization_id) != Role.ADMIN
    ):
        raise PermissionDenied("Managers cannot block out admins")
    return employee_id


def _write_blocked_entries(db: Session, period: BlackoutPeriods, caller_id: int) -> int:
    if period.scope == BlackoutScope.ORG_BLACKOUT:
        employee_ids = [e.id for e in load_active_employees(db, period.organization_id)]
    else:
        employee_ids = [period.user_id]

    days = (period.end_date - period.start_date).days + 1
    lock_schedule(db, period.organization_id)
    entries = [
        Shifts(
            organization_id=period.organization_id,
            user_id=employee_id,
            shift_date=period.start_date + timedelta(days=offset),
            start_time=hour_to_clock(BLOCKED_START_HOUR),
            end_time=hour_to_clock(BLOCKED_END_HOUR),
            notes=f"{BLOCKED_MARKER} {period.reason}",
            is_blocked=True,
            schedule_state=DBScheduleState.PUBLISHED,
            blackout_period_id=period.id,
            created_by_user_id=caller_id,
        )
        for employee_id in employee_ids
        for offset in range(days)
    ]
    db.add_all(entries)
    return len(entries)


def _clear_blocked_entries(db: Session, period_id: int) -> int:
    result = db.execute(
        delete(Shifts)
        .where(Shifts.blackout_period_id == period_id, Shifts.is_blocked == True)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount or 0


def _get_period(db: Session, period_id: int) -> BlackoutPeriods:
    period = db.get(BlackoutPeriods, period_id)
    if period is None:
        raise NotFound("Blocked entry not found.")
    return period


def create_blackout_period(
    db: Session,
    caller_id: int,
    organization_id: int,
    employee_id: Optional[int],
    start_date: date,
    end_date: date,
    reason: str,
    scope: BlackoutScope = BlackoutScope.EMPLOYEE,
) -> tuple[BlackoutPeriods, int]:
    """Manager-created, approved immediately. Returns the period and the number of blocked entries written."""
    require_manager(db, caller_id, organization_id)
    scope = BlackoutScope(scope)
    reason = _validate_window(start_date, end_date, reason)
    target = _resolve_target(db, caller_id, organization_id, scope, employee_id)

    try:
        period = BlackoutPeriods(
            organization_id=organization_id,
            user_id=target,
            scope=scope,
            status=BlackoutStatus.APPROVED,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            requested_by_user_id=caller_id,
            created_by_user_id=caller_id,
            reviewed_by=caller_id,
            reviewed_at=datetime.now(timezone.utc),
        )
        db.add(period)
        db.flush()
        entries = _write_blocked_entries(db, period, caller_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(period)
    logger.info(
        "Blackout %s (%s) from %s to %s: %d blocked entr(ies)",
        period.id, scope.value, start_date, end_date, entries,
    )
    return period, entries


def request_blackout(
    db: Session,
    caller_id: int,
    organization_id: int,
    start_date: date,
    end_date: date,
    reason: str,
) -> BlackoutPeriods:
    """An employee asks for blocked days of their own. Nothing is blocked until a manager approves."""
    employee_id = db.execute(
        select(Employees.id).where(
            Employees.organization_id == organization_id,
            Employees.user_id == caller_id,
        )
    ).scalars().first()
    if employee_id is None:
        raise NotFound("Employee not found")
    reason = _validate_window(start_date, end_date, reason)

    period = BlackoutPeriods(
        organization_id=organization_id,
        user_id=employee_id,
        scope=BlackoutScope.EMPLOYEE,
        status=BlackoutStatus.PENDING,
        start_date=start_date,
        end_date=end_date,
        reason=reason,
        requested_by_user_id=caller_id,
        created_by_user_id=caller_id,
    )
    db.add(period)
    db.commit()
    db.refresh(period)
    logger.info("Blocked days %s requested by employee %s", period.id, employee_id)
    return period


def review_blackout_request(
    db: Session,
    caller_id: int,
    period_id: int,
    status: BlackoutStatus,
    manager_note: Optional[str] = None,
) -> tuple[BlackoutPeriods, int]:
    period = _get_period(db, period_id)
    require_manager(db, caller_id, period.organization_id)

    status = BlackoutStatus(status)
    if status not in REVIEW_OUTCOMES:
        raise ValidationFailed("Review status must be APPROVED or DENIED", field="status")
    if period.status != BlackoutStatus.PENDING:
        raise ValidationFailed(f"Request is already {period.status.value}", field="status")
    _resolve_target(db, caller_id, period.organization_id, period.scope, period.user_id)

    entries = 0
    try:
        period.status = status
        period.reviewed_by = caller_id
        period.reviewed_at = datetime.now(timezone.utc)
        period.manager_note = manager_note
        if status == BlackoutStatus.APPROVED:
            entries = _write_blocked_entries(db, period, caller_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(period)
    logger.info("Blocked days %s reviewed: %s", period.id, status.value)
    return period, entries


def cancel_blackout_request(db: Session, caller_id: int, period_id: int) -> BlackoutPeriods:
    period = _get_period(db, period_id)
    if period.requested_by_user_id != caller_id:
        raise PermissionDenied("Only the requester can cancel this request")
    if period.status != BlackoutStatus.PENDING:
        raise ValidationFailed("Can only cancel pending requests", field="status")

    period.status = BlackoutStatus.CANCELLED
    db.commit()
    db.refresh(period)
    logger.info("Blocked days %s cancelled", period.id)
    return period


def update_blackout_period(
    db: Session,
    caller_id: int,
    period_id: int,
    changes: dict[str, Any],
) -> tuple[BlackoutPeriods, int]:
    """
    Edit dates, reason, scope or employee. For an approved period the blocked
    entries are replaced to match. Returns the period and the entries now written.
    """
    period = _get_period(db, period_id)
    require_manager(db, caller_id, period.organization_id)
    if period.status not in EDITABLE_STATUSES:
        raise ValidationFailed(f"Cannot edit a {period.status.value} blackout", field="status")

    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationFailed(f"Cannot update: {', '.join(sorted(unknown))}", field=sorted(unknown)[0])

    scope = BlackoutScope(changes.get("scope", period.scope))
    start_date = changes.get("start_date", period.start_date)
    end_date = changes.get("end_date", period.end_date)
    reason = _validate_window(start_date, end_date, changes.get("reason", period.reason))
    target = _resolve_target(
        db, caller_id, period.organization_id, scope, changes.get("employee_id", period.user_id)
    )

    entries = 0
    try:
        period.scope = scope
        period.user_id = target
        period.start_date = start_date
        period.end_date = end_date
        period.reason = reason
        if "manager_note" in changes:
            period.manager_note = changes["manager_note"]
        if period.status == BlackoutStatus.APPROVED:
            _clear_blocked_entries(db, period.id)
            entries = _write_blocked_entries(db, period, caller_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(period)
    logger.info("Blackout %s updated (%s, %s to %s)", period.id, scope.value, start_date, end_date)
    return period, entries


def delete_blackout_period(db: Session, caller_id: int, period_id: int) -> int:
    """Delete the period together with its blocked entries. Returns the number of entries removed."""
    period = _get_period(db, period_id)
    require_manager(db, caller_id, period.organization_id)

    try:
        removed = _clear_blocked_entries(db, period_id)
        db.delete(period)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Removed blackout period %s (%d blocked day(s))", period_id, removed)
    return removed


def list_blackout_periods(
    db: Session,
    caller_id: int,
    organization_id: int,
    status: Optional[BlackoutStatus] = None,
) -> list[BlackoutPeriods]:
    """Managers see every period; employees see their own and the org-wide ones."""
    stmt = select(BlackoutPeriods).where(BlackoutPeriods.organization_id == organization_id)

    if not is_manager(db, caller_id, organization_id):
        own_ids = db.execute(
            select(Employees.id).where(
                Employees.organization_id == organization_id,
                Employees.user_id == caller_id,
            )
        ).scalars().all()
        if not own_ids:
            return []
        stmt = stmt.where(
            or_(
                BlackoutPeriods.user_id.in_(own_ids),
                BlackoutPeriods.scope == BlackoutScope.ORG_BLACKOUT,
            )
        )

    if status:
        stmt = stmt.where(BlackoutPeriods.status == status)

    return list(db.execute(stmt.order_by(BlackoutPeriods.start_date.desc())).scalars().all())
