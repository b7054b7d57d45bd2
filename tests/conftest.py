import pytest
from datetime import date
from types import SimpleNamespace

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shiftboard.db.database import Base
from shiftboard.db.models import (
    Employees,
    OrganizationMemberships,
    Organizations,
    Role,
    ScheduleState,
    Shifts,
    TimeOffRequests,
    TimeOffStatus,
    Users,
    WeekStartDay,
)
from shiftboard.services.scheduling.time_model import hour_to_clock


@pytest.fixture
def engine():
    # one shared in-memory database per test
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    yield session
    session.close()


@pytest.fixture
def org(db):
    """
    Organization 1 with a manager (user 10) and three roster rows:
    Ali (employee 1, user 20), Bea (employee 2, user 21) and an inactive
    employee 3. Organization 2 has its own manager (user 30) and employee 4.
    """
    db.add_all([
        Organizations(id=1, name="Harbor Grill", week_start_day=WeekStartDay.SUNDAY),
        Organizations(id=2, name="Dockside Diner", week_start_day=WeekStartDay.MONDAY),
        Users(id=10, email="manager@harbor.test", name="Morgan"),
        Users(id=20, email="ali@harbor.test", name="Ali"),
        Users(id=21, email="bea@harbor.test", name="Bea"),
        Users(id=30, email="manager@dockside.test", name="Quinn"),
    ])
    db.flush()
    db.add_all([
        OrganizationMemberships(user_id=10, organization_id=1, role=Role.MANAGER),
        OrganizationMemberships(user_id=20, organization_id=1, role=Role.EMPLOYEE),
        OrganizationMemberships(user_id=21, organization_id=1, role=Role.EMPLOYEE),
        OrganizationMemberships(user_id=30, organization_id=2, role=Role.ADMIN),
        Employees(id=1, organization_id=1, user_id=20, name="Ali", jobs=["Server", "Host"],
                  hourly_pay=15.0, job_pay={"Server": 12.5}),
        Employees(id=2, organization_id=1, user_id=21, name="Bea", jobs=["Cook"],
                  hourly_pay=18.0, job_pay={}),
        Employees(id=3, organization_id=1, user_id=None, name="Cal", is_active=False,
                  hourly_pay=14.0, job_pay={}),
        Employees(id=4, organization_id=2, user_id=None, name="Dee", hourly_pay=16.0, job_pay={}),
    ])
    db.commit()
    return SimpleNamespace(
        id=1,
        manager_id=10,
        ali=1,
        ali_user=20,
        bea=2,
        bea_user=21,
        inactive=3,
        other_org_id=2,
        other_manager_id=30,
        other_employee=4,
    )


@pytest.fixture
def add_shift(db):
    """Insert a shift row directly, bypassing the conflict checks."""
    def _add(
        employee_id: int,
        shift_date: date,
        start_hour: float,
        end_hour: float,
        schedule_state: ScheduleState = ScheduleState.PUBLISHED,
        job=None,
        organization_id: int = 1,
    ) -> Shifts:
        row = Shifts(
            organization_id=organization_id,
            user_id=employee_id,
            shift_date=shift_date,
            start_time=hour_to_clock(start_hour),
            end_time=hour_to_clock(end_hour),
            job=job,
            is_blocked=False,
            schedule_state=ScheduleState(getattr(schedule_state, "value", schedule_state)),
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _add


@pytest.fixture
def add_time_off(db):
    def _add(
        employee_id: int,
        start_date: date,
        end_date: date,
        status: TimeOffStatus = TimeOffStatus.APPROVED,
        organization_id: int = 1,
    ) -> TimeOffRequests:
        row = TimeOffRequests(
            organization_id=organization_id,
            user_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            reason="Away",
            status=status,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _add
