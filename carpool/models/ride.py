import enum
from datetime import date, datetime, time
from sqlalchemy import CheckConstraint, Date, DateTime, Enum, ForeignKey, Integer, String, Text, Time, func
from sqlalchemy.orm import Mapped, mapped_column
from carpool.database import Base


class RideStatus(str, enum.Enum):
    active = "active"
    cancelled = "cancelled"


class Ride(Base):
    __tablename__ = "rides"
    __table_args__ = (
        CheckConstraint("seats_available >= 1", name="ck_rides_seats_available_positive"),
        CheckConstraint(
            "seats_booked >= 0 AND seats_booked <= seats_available",
            name="ck_rides_seats_booked_within_capacity",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    driver_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    vehicle_name: Mapped[str] = mapped_column(String(255), nullable=False)
    vehicle_number: Mapped[str] = mapped_column(String(50), nullable=False)
    from_location: Mapped[str] = mapped_column(String(255), nullable=False)
    to_location: Mapped[str] = mapped_column(String(255), nullable=False)
    ride_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    ride_time: Mapped[time] = mapped_column(Time, nullable=False)

    seats_available: Mapped[int] = mapped_column(Integer, nullable=False)
    seats_booked: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # active | cancelled ("completed" is derived from the date, never stored)
    status: Mapped[RideStatus] = mapped_column(
        Enum(RideStatus, native_enum=False, length=20), nullable=False, default=RideStatus.active, index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @property
    def remaining_seats(self) -> int:
        return self.seats_available - self.seats_booked

    @property
    def is_active(self) -> bool:
        return self.status == RideStatus.active
