from sqlalchemy import Integer, DateTime, func, UniqueConstraint, ForeignKey, Enum as SQLEnum
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from enum import Enum
from shiftboard.db.database import Base

class Role(str, Enum):
    EMPLOYEE = "EMPLOYEE"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


MANAGER_ROLES = (Role.MANAGER, Role.ADMIN)


class OrganizationMemberships(Base):
    __tablename__ = "organization_memberships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    organization_id: Mapped[int] = mapped_column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    role: Mapped[Role] = mapped_column(SQLEnum(Role, name="role_enum", native_enum=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'organization_id'),
    )
