import enum
from datetime import datetime
from sqlalchemy import Enum, Integer, String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column
from carpool.database import Base


class UserRole(str, enum.Enum):
    driver = "driver"
    rider = "rider"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=20), nullable=False, default=UserRole.rider
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
