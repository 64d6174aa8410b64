"""
RideRequest lifecycle.

    pending  -> approved | rejected
    approved -> rejected
    rejected -> (nothing)

Transitions are conditional updates keyed on the status the caller last
saw, so a request can only leave a state once. Seat accounting is not
done here; see carpool.services.booking.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from carpool.exceptions import DuplicateError, NotFoundError
from carpool.models.ride_request import RequestStatus, RideRequest

logger = logging.getLogger(__name__)

VALID_TRANSITIONS: dict[RequestStatus, set[RequestStatus]] = {
    RequestStatus.pending: {RequestStatus.approved, RequestStatus.rejected},
    RequestStatus.approved: {RequestStatus.rejected},
    RequestStatus.rejected: set(),
}


def is_valid_transition(current: RequestStatus, next_state: RequestStatus) -> bool:
    return next_state in VALID_TRANSITIONS.get(current, set())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def get_request(db: AsyncSession, request_id: int) -> RideRequest:
    request = await db.get(RideRequest, request_id)
    if request is None:
        raise NotFoundError("Ride request not found")
    return request


async def find_request(db: AsyncSession, ride_id: int, rider_id: int) -> RideRequest | None:
    result = await db.execute(
        select(RideRequest).where(RideRequest.ride_id == ride_id, RideRequest.rider_id == rider_id)
    )
    return result.scalar_one_or_none()


async def create_request(db: AsyncSession, ride_id: int, rider_id: int) -> RideRequest:
    """
    Insert a pending request and commit. The unique (ride_id, rider_id)
    constraint is the backstop for two inserts racing past find_request.
    """
    request = RideRequest(
        ride_id=ride_id,
        rider_id=rider_id,
        status=RequestStatus.pending,
        requested_at=utcnow(),
    )
    db.add(request)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        if await find_request(db, ride_id, rider_id) is None:
            logger.error("Request insert ride=%s rider=%s failed", ride_id, rider_id)
            raise
        logger.warning("Duplicate request ride=%s rider=%s rejected by store", ride_id, rider_id)
        raise DuplicateError("You have already requested a seat for this ride.")
    await db.refresh(request)
    return request


async def transition(
    db: AsyncSession,
    request_id: int,
    current: RequestStatus,
    next_state: RequestStatus,
    at: datetime | None = None,
) -> bool:
    """
    Move a request from `current` to `next_state`, stamping decided_at.
    Returns False if the stored status was no longer `current`. Does not commit.
    """
    if not is_valid_transition(current, next_state):
        raise ValueError(f"Illegal request transition {current.value} -> {next_state.value}")

    result = await db.execute(
        update(RideRequest)
        .where(RideRequest.id == request_id, RideRequest.status == current)
        .values(status=next_state, decided_at=at or utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def approve(db: AsyncSession, request_id: int, at: datetime | None = None) -> bool:
    return await transition(db, request_id, RequestStatus.pending, RequestStatus.approved, at)


async def reject(
    db: AsyncSession, request_id: int, current: RequestStatus, at: datetime | None = None
) -> bool:
    return await transition(db, request_id, current, RequestStatus.rejected, at)
