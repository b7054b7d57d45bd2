"""
Seed script for a Shiftboard development database.
Run with: python -m scripts.seed_demo
"""

import sys
from datetime import date, timedelta
from sqlalchemy import delete
from shiftboard.db.database import Base, SessionLocal, engine
from shiftboard.core.security import create_access_token
from shiftboard.db.models import (
    BlackoutPeriods,
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
from shiftboard.services.scheduling import create_blackout_period


ORG_ID = 1
MANAGER_USER_ID = 100001


def clear_tables(db):
    """Delete every row in child-to-parent order."""
    print("Clearing tables...")
    for model in (
        Shifts,
        BlackoutPeriods,
        TimeOffRequests,
        Employees,
        OrganizationMemberships,
        Organizations,
        Users,
    ):
        db.execute(delete(model))
    db.commit()
    print("All tables cleared.")


def get_current_week_sunday():
    today = date.today()
    return today - timedelta(days=(today.weekday() + 1) % 7)


def seed_organization(db):
    print("Seeding organization and users...")
    db.add(Organizations(id=ORG_ID, name="Harbor Grill", week_start_day=WeekStartDay.SUNDAY))
    users = [
        Users(id=MANAGER_USER_ID, email="manager@harborgrill.test", name="Morgan Manager"),
        Users(id=100002, email="sam@harborgrill.test", name="Sam Server"),
        Users(id=100003, email="casey@harborgrill.test", name="Casey Cook"),
        Users(id=100004, email="bailey@harborgrill.test", name="Bailey Bartender"),
    ]
    db.add_all(users)
    db.flush()
    db.add_all([
        OrganizationMemberships(user_id=MANAGER_USER_ID, organization_id=ORG_ID, role=Role.MANAGER),
        OrganizationMemberships(user_id=100002, organization_id=ORG_ID, role=Role.EMPLOYEE),
        OrganizationMemberships(user_id=100003, organization_id=ORG_ID, role=Role.EMPLOYEE),
        OrganizationMemberships(user_id=100004, organization_id=ORG_ID, role=Role.EMPLOYEE),
    ])
    db.commit()
    print(f"Seeded {len(users)} users.")


def seed_employees(db):
    print("Seeding employees...")
    employees = [
        Employees(id=1, organization_id=ORG_ID, user_id=100002, name="Sam Server",
                  jobs=["Server", "Host"], hourly_pay=15.0, job_pay={"Server": 12.5}),
        Employees(id=2, organization_id=ORG_ID, user_id=100003, name="Casey Cook",
                  jobs=["Cook", "Dishwasher"], hourly_pay=19.0, job_pay={}),
        Employees(id=3, organization_id=ORG_ID, user_id=100004, name="Bailey Bartender",
                  jobs=["Bartender"], hourly_pay=14.0, job_pay={"Bartender": 16.0}),
    ]
    db.add_all(employees)
    db.commit()
    print(f"Seeded {len(employees)} employees.")


def seed_shifts(db, week_start):
    """Published shifts for the current week, ready to be copied forward."""
    print("Seeding shifts...")
    pattern = [
        (1, "Server", "10:00:00", "16:00:00", 12.5, "job"),
        (2, "Cook", "09:00:00", "17:00:00", 19.0, "hourly"),
        (3, "Bartender", "17:00:00", "23:00:00", 16.0, "job"),
    ]
    shifts = []
    for offset in range(1, 6):
        for employee_id, job, start, end, rate, source in pattern:
            shifts.append(Shifts(
                organization_id=ORG_ID,
                user_id=employee_id,
                shift_date=week_start + timedelta(days=offset),
                start_time=start,
                end_time=end,
                job=job,
                schedule_state=ScheduleState.PUBLISHED,
                pay_rate=rate,
                pay_source=source,
                created_by_user_id=MANAGER_USER_ID,
            ))
    db.add_all(shifts)
    db.commit()
    print(f"Seeded {len(shifts)} shifts.")


def seed_time_off(db, week_start):
    print("Seeding time off requests...")
    next_week = week_start + timedelta(days=7)
    requests = [
        TimeOffRequests(
            organization_id=ORG_ID, user_id=1, requester_user_id=100002,
            start_date=next_week + timedelta(days=2), end_date=next_week + timedelta(days=3),
            reason="Family visit", status=TimeOffStatus.APPROVED,
            reviewed_by=MANAGER_USER_ID,
        ),
        TimeOffRequests(
            organization_id=ORG_ID, user_id=2, requester_user_id=100003,
            start_date=next_week + timedelta(days=5), end_date=next_week + timedelta(days=5),
            reason="Appointment", status=TimeOffStatus.PENDING,
        ),
    ]
    db.add_all(requests)
    db.commit()
    print(f"Seeded {len(requests)} time off requests.")


def seed_blackouts(db, week_start):
    print("Seeding blackout periods...")
    next_week = week_start + timedelta(days=7)
    _, entries = create_blackout_period(
        db,
        caller_id=MANAGER_USER_ID,
        organization_id=ORG_ID,
        employee_id=3,
        start_date=next_week + timedelta(days=4),
        end_date=next_week + timedelta(days=4),
        reason="Bar training offsite",
    )
    print(f"Seeded 1 blackout period ({entries} blocked entry).")


def main():
    """Main seed function."""
    print("\n" + "="*50)
    print("Shiftboard Database Seeder")
    print("="*50 + "\n")

    response = input("This will DELETE ALL EXISTING DATA. Continue? (yes/no): ")
    if response.lower() != "yes":
        print("Aborted.")
        sys.exit(0)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        clear_tables(db)

        week_start = get_current_week_sunday()
        seed_organization(db)
        seed_employees(db)
        seed_shifts(db, week_start)
        seed_time_off(db, week_start)
        seed_blackouts(db, week_start)

        print("\n" + "="*50)
        print("Seeding complete!")
        print("="*50)
        print("\nBearer tokens:")
        print(f"  Manager:  {create_access_token(MANAGER_USER_ID, organization_id=ORG_ID)}")
        print(f"  Employee: {create_access_token(100002, organization_id=ORG_ID)}")
        print("="*50 + "\n")

    except Exception as e:
        db.rollback()
        print(f"\nError during seeding: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
