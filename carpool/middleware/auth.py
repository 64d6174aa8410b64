from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from carpool.config import get_settings
from carpool.database import get_db
from carpool.models.user import User, UserRole

settings = get_settings()
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    """Sign a JWT with the configured secret. `sub` must be the user id."""
    payload = {k: (str(v) if k == "sub" else v) for k, v in data.items()}
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    payload.setdefault("exp", datetime.now(timezone.utc) + timedelta(minutes=minutes))
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    """Decode and validate the JWT Bearer token."""
    if credentials is None:
        raise _unauthorized("Missing Bearer token")
    try:
        return jwt.decode(
            credentials.credentials,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise _unauthorized("Invalid or expired token")


async def get_current_user(
    token_data: dict = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the token subject to a stored user."""
    try:
        user_id = int(token_data.get("sub"))
    except (TypeError, ValueError):
        raise _unauthorized("Invalid token payload")

    user = await db.get(User, user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user


async def require_driver(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.driver:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Only drivers can perform this action.",
        )
    return user
