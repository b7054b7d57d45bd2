from sqlalchemy import Integer, String, Float, Boolean, Date, DateTime, ForeignKey, Enum as SQLEnum, Index, func, text
from datetime import date, datetime
from sqlalchemy.orm import Mapped, mapped_column
from enum import Enum
from typing import Optional
from shiftboard.db.database import Base


class ScheduleState(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class Shifts(Base):
    __tablename__ = "shifts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    organization_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("employees.id"), nullable=False)
    shift_date: Mapped[date] = mapped_column(Date, nullable=False)
    # HH:MM:SS, converted to decimal hours only inside the scheduling service
    start_time: Mapped[str] = mapped_column(String(8), nullable=False)
    end_time: Mapped[str] = mapped_column(String(8), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    is_blocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    job: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    schedule_state: Mapped[ScheduleState] = mapped_column(
        SQLEnum(ScheduleState, name="schedule_state_enum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ScheduleState.DRAFT,
    )
    location_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    pay_rate: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    pay_source: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    blackout_period_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("blackout_periods.id", ondelete="CASCADE"), nullable=True
    )
    created_by_user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_shifts_org_date", "organization_id", "shift_date"),
        Index("ix_shifts_employee_date", "user_id", "shift_date"),
        Index(
            "ux_shifts_employee_slot",
            "organization_id", "user_id", "shift_date", "start_time", "end_time",
            unique=True,
            postgresql_where=text("is_blocked = false"),
            sqlite_where=text("is_blocked = 0"),
        ),
    )
