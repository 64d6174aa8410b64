import enum
from datetime import datetime
from typing import NamedTuple
from sqlalchemy import DateTime, Enum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from carpool.database import Base


class RequestStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class Decision(NamedTuple):
    outcome: RequestStatus
    at: datetime


class RideRequest(Base):
    __tablename__ = "ride_requests"
    __table_args__ = (
        # One request per rider per ride, whatever its status
        UniqueConstraint("ride_id", "rider_id", name="uq_ride_requests_ride_rider"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ride_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("rides.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rider_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status: Mapped[RequestStatus] = mapped_column(
        Enum(RequestStatus, native_enum=False, length=20),
        nullable=False,
        default=RequestStatus.pending,
        index=True,
    )
    requested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    # Set on approve/reject; meaning follows status
    decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def decision(self) -> Decision | None:
        if self.status == RequestStatus.pending or self.decided_at is None:
            return None
        return Decision(self.status, self.decided_at)

    @property
    def approved_at(self) -> datetime | None:
        return self.decided_at if self.status == RequestStatus.approved else None

    @property
    def rejected_at(self) -> datetime | None:
        return self.decided_at if self.status == RequestStatus.rejected else None
