from sqlalchemy import String, Integer, DateTime, func, Enum as SQLEnum
from datetime import datetime
from enum import Enum
from sqlalchemy.orm import Mapped, mapped_column
from shiftboard.db.database import Base


class WeekStartDay(str, Enum):
    SUNDAY = "sunday"
    MONDAY = "monday"


class Organizations(Base):
    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    week_start_day: Mapped[WeekStartDay] = mapped_column(
        SQLEnum(WeekStartDay, name="week_start_day_enum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=WeekStartDay.SUNDAY,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
