from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from pydantic import BaseModel
from shiftboard.core.config import settings

ALGORITHM = "HS256"


class TokenData(BaseModel):
    user_id: int
    # organization the token was issued for; picks the roster row on /me routes
    organization_id: Optional[int] = None


def create_access_token(
    user_id: int,
    organization_id: Optional[int] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    claims = {"sub": str(user_id), "exp": expire}
    if organization_id is not None:
        claims["org"] = organization_id
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[TokenData]:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        return None
    organization_id = payload.get("org")
    return TokenData(
        user_id=int(subject),
        organization_id=int(organization_id) if organization_id is not None else None,
    )
