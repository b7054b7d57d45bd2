"""
Data loader for scheduling service.
Fetches the rows a scheduling decision needs and converts them to internal types,
and owns the transaction boundary for shift writes.
"""

import zlib
from contextlib import contextmanager
from datetime import date
from typing import Iterator, Optional

from sqlalchemy import select, and_, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shiftboard.core.config import settings
from shiftboard.db.models.employees import Employees
from shiftboard.db.models.organization_memberships import OrganizationMemberships, MANAGER_ROLES
from shiftboard.db.models.shifts import Shifts, ScheduleState as DBScheduleState
from shiftboard.db.models.time_off_requests import TimeOffRequests, TimeOffStatus as DBTimeOffStatus

from .errors import OverlapConflict, PermissionDenied
from .time_model import clock_to_hour
from .types import (
    Employee,
    PaySource,
    ScheduleState,
    Shift,
    TimeOffRequest,
    TimeOffStatus,
)


def is_manager(db: Session, user_id: int, organization_id: int) -> bool:
    stmt = select(OrganizationMemberships.id).where(
        and_(
            OrganizationMemberships.user_id == user_id,
            OrganizationMemberships.organization_id == organization_id,
            OrganizationMemberships.role.in_(MANAGER_ROLES),
        )
    )
    return db.execute(stmt).first() is not None


def require_manager(db: Session, user_id: int, organization_id: int) -> None:
    if not is_manager(db, user_id, organization_id):
        raise PermissionDenied("Manager or admin access required for this organization")


def to_employee(row: Employees) -> Employee:
    return Employee(
        id=row.id,
        organization_id=row.organization_id,
        is_active=bool(row.is_active),
        jobs=list(row.jobs or []),
        hourly_pay=row.hourly_pay,
        job_pay={str(k): float(v) for k, v in (row.job_pay or {}).items() if v is not None},
    )


def to_shift(row: Shifts) -> Shift:
    return Shift(
        id=row.id,
        organization_id=row.organization_id,
        employee_id=row.user_id,
        shift_date=row.shift_date,
        start_hour=clock_to_hour(row.start_time),
        end_hour=clock_to_hour(row.end_time),
        job=row.job,
        location_id=row.location_id,
        notes=row.notes,
        is_blocked=bool(row.is_blocked),
        schedule_state=ScheduleState(row.schedule_state.value),
        pay_rate=row.pay_rate,
        pay_source=PaySource(row.pay_source) if row.pay_source else None,
        blackout_period_id=row.blackout_period_id,
    )


def to_time_off(row: TimeOffRequests) -> TimeOffRequest:
    return TimeOffRequest(
        id=row.id,
        organization_id=row.organization_id,
        employee_id=row.user_id,
        start_date=row.start_date,
        end_date=row.end_date,
        status=TimeOffStatus(row.status.value),
        reason=row.reason or "",
    )


def load_employee(db: Session, organization_id: int, employee_id: int) -> Optional[Employee]:
    """Roster lookup scoped to the organization; other organizations' employees are invisible."""
    row = db.execute(
        select(Employees).where(
            and_(Employees.id == employee_id, Employees.organization_id == organization_id)
        )
    ).scalar_one_or_none()
    return to_employee(row) if row else None


def load_active_employees(db: Session, organization_id: int) -> list[Employee]:
    stmt = select(Employees).where(
        and_(
            Employees.organization_id == organization_id,
            Employees.is_active == True,
        )
    )
    return [to_employee(r) for r in db.execute(stmt).scalars().all()]


def load_approved_time_off(
    db: Session,
    organization_id: int,
    start_date: date,
    end_date: date,
    employee_ids: Optional[list[int]] = None,
) -> list[TimeOffRequest]:
    """Approved requests that intersect the inclusive [start_date, end_date] window."""
    conditions = [
        TimeOffRequests.organization_id == organization_id,
        TimeOffRequests.status == DBTimeOffStatus.APPROVED,
        TimeOffRequests.start_date <= end_date,
        TimeOffRequests.end_date >= start_date,
    ]
    if employee_ids is not None:
        if not employee_ids:
            return []
        conditions.append(TimeOffRequests.user_id.in_(employee_ids))

    rows = db.execute(select(TimeOffRequests).where(and_(*conditions))).scalars().all()
    return [to_time_off(r) for r in rows]


def load_shifts(
    db: Session,
    organization_id: int,
    start_date: date,
    end_date: date,
    employee_id: Optional[int] = None,
    schedule_state: Optional[ScheduleState] = None,
    include_blocked: bool = True,
) -> list[Shift]:
    """Shifts (both states unless filtered) dated inside the inclusive window."""
    conditions = [
        Shifts.organization_id == organization_id,
        Shifts.shift_date >= start_date,
        Shifts.shift_date <= end_date,
    ]
    if employee_id is not None:
        conditions.append(Shifts.user_id == employee_id)
    if schedule_state is not None:
        conditions.append(Shifts.schedule_state == DBScheduleState(schedule_state.value))
    if not include_blocked:
        conditions.append(Shifts.is_blocked == False)

    stmt = select(Shifts).where(and_(*conditions)).order_by(
        Shifts.shift_date, Shifts.start_time, Shifts.user_id
    )
    return [to_shift(r) for r in db.execute(stmt).scalars().all()]


def _slot_key(employee_id: int, on_date: date) -> int:
    # advisory lock keys are int4; collisions only cost extra serialization
    return (zlib.crc32(f"{employee_id}:{on_date.isoformat()}".encode()) & 0x7FFFFFFF) or 1


def lock_schedule(
    db: Session,
    organization_id: int,
    employee_id: Optional[int] = None,
    on_date: Optional[date] = None,
) -> None:
    """
    Serialize conflict-check-then-write for the current transaction.

    On PostgreSQL, without an employee/date the whole organization schedule is
    locked (bulk copy); with one, only that employee's day is locked and the
    organization lock is held shared so single edits wait for a running copy.

    SQLite has a single database-wide writer, so every call takes it up front
    with a no-op UPDATE. Later writers block (up to the driver's busy timeout)
    until this transaction ends, and their reads then see its rows.
    """
    if not settings.SERIALIZE_SHIFT_WRITES:
        return
    dialect = db.get_bind().dialect.name
    if dialect == "sqlite":
        db.execute(
            text("UPDATE organizations SET name = name WHERE id = :org"),
            {"org": organization_id},
        )
        return
    if dialect != "postgresql":
        return
    if employee_id is None or on_date is None:
        db.execute(text("SELECT pg_advisory_xact_lock(:org, 0)"), {"org": organization_id})
        return
    db.execute(text("SELECT pg_advisory_xact_lock_shared(:org, 0)"), {"org": organization_id})
    db.execute(
        text("SELECT pg_advisory_xact_lock(:org, :slot)"),
        {"org": organization_id, "slot": _slot_key(employee_id, on_date)},
    )


def _is_slot_collision(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return "ux_shifts_employee_slot" in message or "UNIQUE constraint failed: shifts." in message


@contextmanager
def shift_write_transaction(db: Session) -> Iterator[None]:
    """Commit on success, roll back on any failure. A slot collision surfaces as an overlap."""
    try:
        yield
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if _is_slot_collision(exc):
            raise OverlapConflict("Shift overlaps with existing shift") from exc
        raise
    except Exception:
        db.rollback()
        raise
