import pytest
from datetime import date

from shiftboard.services.scheduling.types import (
    BLOCKED_END_HOUR,
    BLOCKED_MARKER,
    BLOCKED_START_HOUR,
    Employee,
    ScheduleState,
    Shift,
    TimeOffRequest,
    TimeOffStatus,
)


MONDAY = date(2024, 6, 3)


@pytest.fixture
def server() -> Employee:
    return Employee(id=1, organization_id=1, jobs=["Server"], hourly_pay=15.0, job_pay={"Server": 12.5})


@pytest.fixture
def split_day() -> list[Shift]:
    # employee 1 works [9,17) and [17,20) on Monday
    return [
        Shift(id=11, organization_id=1, employee_id=1, shift_date=MONDAY,
              start_hour=9, end_hour=17, job="Server", schedule_state=ScheduleState.PUBLISHED),
        Shift(id=12, organization_id=1, employee_id=1, shift_date=MONDAY,
              start_hour=17, end_hour=20, job="Server", schedule_state=ScheduleState.PUBLISHED),
    ]


@pytest.fixture
def blocked_wednesday() -> Shift:
    return Shift(
        id=50, organization_id=1, employee_id=1, shift_date=date(2024, 6, 5),
        start_hour=BLOCKED_START_HOUR, end_hour=BLOCKED_END_HOUR,
        notes=f"{BLOCKED_MARKER} Wine training", is_blocked=True,
        schedule_state=ScheduleState.PUBLISHED,
    )


@pytest.fixture
def approved_time_off() -> TimeOffRequest:
    # employee 2, Tuesday through Thursday
    return TimeOffRequest(
        id=7, organization_id=1, employee_id=2,
        start_date=date(2024, 6, 4), end_date=date(2024, 6, 6),
        status=TimeOffStatus.APPROVED, reason="Wedding",
    )
