from typing import Optional
from enum import Enum
from datetime import date, datetime
from sqlalchemy import Date, DateTime, Enum as SQLEnum, ForeignKey, Integer, String, func, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from shiftboard.db.database import Base


class BlackoutScope(str, Enum):
    EMPLOYEE = "EMPLOYEE"
    ORG_BLACKOUT = "ORG_BLACKOUT"


class BlackoutStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DENIED = "DENIED"
    CANCELLED = "CANCELLED"


class BlackoutPeriods(Base):
    """Blocked days for one employee or the whole organization; owns its blocked shift rows once approved."""
    __tablename__ = "blackout_periods"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    organization_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("employees.id"), nullable=True, index=True)
    scope: Mapped[BlackoutScope] = mapped_column(
        SQLEnum(BlackoutScope, name="blackout_scope_enum"), nullable=False, default=BlackoutScope.EMPLOYEE
    )
    status: Mapped[BlackoutStatus] = mapped_column(
        SQLEnum(BlackoutStatus, name="blackout_status_enum"), nullable=False, default=BlackoutStatus.APPROVED
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    reason: Mapped[str] = mapped_column(String, nullable=False)
    requested_by_user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    created_by_user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_by: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    manager_note: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="ck_blackout_date_order"),
        CheckConstraint("scope = 'ORG_BLACKOUT' OR user_id IS NOT NULL", name="ck_blackout_employee_scope"),
    )

    @property
    def employee_id(self) -> Optional[int]:
        return self.user_id
