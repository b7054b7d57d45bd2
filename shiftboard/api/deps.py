from typing import Generator, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from shiftboard.db.database import SessionLocal
from shiftboard.core.security import TokenData, decode_access_token
from shiftboard.db.models.users import Users
from shiftboard.db.models.employees import Employees

security = HTTPBearer()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_token_data(credentials: HTTPAuthorizationCredentials = Depends(security)) -> TokenData:
    token_data = decode_access_token(credentials.credentials)
    if token_data is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return token_data


def get_current_user(
    token_data: TokenData = Depends(get_token_data),
    db: Session = Depends(get_db),
) -> Users:
    """Caller identity; every organization permission is checked in the scheduling services"""
    user = db.get(Users, token_data.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")
    return user


def get_employee_for_user(
    db: Session, user: Users, organization_id: Optional[int] = None
) -> Optional[Employees]:
    """Roster row linked to a user, optionally within one organization"""
    query = db.query(Employees).filter(Employees.user_id == user.id)
    if organization_id is not None:
        query = query.filter(Employees.organization_id == organization_id)
    return query.order_by(Employees.id).first()


def get_current_employee(
    organization_id: Optional[int] = None,
    db: Session = Depends(get_db),
    token_data: TokenData = Depends(get_token_data),
    current_user: Users = Depends(get_current_user),
) -> Employees:
    """Roster row for the caller: the organization query param wins over the token's `org` claim"""
    if organization_id is None:
        organization_id = token_data.organization_id
    employee = get_employee_for_user(db, current_user, organization_id)
    if not employee:
        raise HTTPException(status_code=404, detail="No employee record found for current user")
    return employee
