from shiftboard.db.database import Base

# Import models
from shiftboard.db.models.users import Users
from shiftboard.db.models.organizations import Organizations, WeekStartDay
from shiftboard.db.models.organization_memberships import OrganizationMemberships, Role, MANAGER_ROLES
from shiftboard.db.models.employees import Employees
from shiftboard.db.models.blackout_periods import BlackoutPeriods, BlackoutScope, BlackoutStatus
from shiftboard.db.models.shifts import Shifts, ScheduleState
from shiftboard.db.models.time_off_requests import TimeOffRequests, TimeOffStatus

__all__ = [
    "Base",
    # Models
    "Users",
    "Organizations",
    "OrganizationMemberships",
    "Employees",
    "BlackoutPeriods",
    "Shifts",
    "TimeOffRequests",
    # Enums
    "Role",
    "MANAGER_ROLES",
    "WeekStartDay",
    "ScheduleState",
    "TimeOffStatus",
    "BlackoutScope",
    "BlackoutStatus",
]
