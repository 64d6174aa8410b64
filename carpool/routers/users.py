"""
Users router: POST /api/users (onboarding), GET /api/auth/me
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from carpool.database import get_db
from carpool.exceptions import DuplicateError
from carpool.middleware.auth import get_current_user
from carpool.models.user import User
from carpool.schemas.schemas import UserCreateRequest, UserResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Users"])


@router.post("/users", status_code=status.HTTP_201_CREATED, response_model=UserResponse)
async def create_user(
    payload: UserCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Register a driver or rider. Credentials are issued elsewhere."""
    user = User(name=payload.name.strip(), email=payload.email.strip().lower(), role=payload.role)
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateError("User with this email already exists")
    await db.refresh(user)
    logger.info("User %s registered as %s", user.id, user.role.value)
    return UserResponse.model_validate(user)


@router.get("/auth/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    return UserResponse.model_validate(user)
