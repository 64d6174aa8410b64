"""
Booking engine.

Flow for the driver decisions:
  1. Load request + ride, check ownership and status (fast, readable errors)
  2. Conditional UPDATE on the request status
  3. Conditional UPDATE on rides.seats_booked (+1 on approve, -1 when
     rejecting an approved request)
  4. Commit both together; if either UPDATE matched no row, roll back
     and report the state the loser actually ran into

Capacity follows status transitions only. Nothing here recounts requests.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from carpool.exceptions import (
    BookingError,
    CapacityError,
    DuplicateError,
    ForbiddenError,
    InvalidStateError,
)
from carpool.models.ride import Ride
from carpool.models.ride_request import RequestStatus, RideRequest
from carpool.services import requests as ride_requests
from carpool.services.rides import get_ride, release_seat, reserve_seat

logger = logging.getLogger(__name__)


async def request_seat(db: AsyncSession, rider_id: int, ride_id: int) -> RideRequest:
    """A rider asks for a seat. The request starts pending; capacity is untouched."""
    ride = await get_ride(db, ride_id)

    if not ride.is_active:
        raise InvalidStateError("You can only request seats on active rides.")
    if ride.driver_id == rider_id:
        raise ForbiddenError("You cannot request a seat on your own ride.")
    if ride.remaining_seats <= 0:
        raise CapacityError("No seats available for this ride.")
    if await ride_requests.find_request(db, ride_id, rider_id) is not None:
        raise DuplicateError("You have already requested a seat for this ride.")

    request = await ride_requests.create_request(db, ride_id, rider_id)
    logger.info("Seat requested ride=%s rider=%s request=%s", ride_id, rider_id, request.id)
    return request


async def _load_for_driver(
    db: AsyncSession, driver_id: int, request_id: int, action: str
) -> tuple[RideRequest, Ride]:
    request = await ride_requests.get_request(db, request_id)
    ride = await get_ride(db, request.ride_id)
    if ride.driver_id != driver_id:
        raise ForbiddenError(f"You can only {action} requests for your own rides")
    return request, ride


async def _commit_and_reload(
    db: AsyncSession, request: RideRequest, ride: Ride
) -> tuple[RideRequest, Ride]:
    await db.commit()
    await db.refresh(request)
    await db.refresh(ride)
    return request, ride


async def approve_request(
    db: AsyncSession, driver_id: int, request_id: int
) -> tuple[RideRequest, Ride]:
    request, ride = await _load_for_driver(db, driver_id, request_id, "approve")
    ride_id = ride.id

    if request.status != RequestStatus.pending:
        raise InvalidStateError(f"Request is already {request.status.value}")
    if not ride.is_active:
        raise InvalidStateError("Cannot approve requests on a cancelled ride")
    if ride.remaining_seats <= 0:
        raise CapacityError("No seats available for this ride")

    try:
        if not await ride_requests.approve(db, request_id):
            raise InvalidStateError("Request is no longer pending")
        if not await reserve_seat(db, ride_id):
            raise CapacityError("No seats available for this ride")
    except BookingError as exc:
        await db.rollback()
        logger.warning("Approve lost race request=%s ride=%s: %s", request_id, ride_id, exc.message)
        raise

    request, ride = await _commit_and_reload(db, request, ride)
    logger.info(
        "Request %s approved by driver=%s; ride=%s seats %s/%s",
        request.id, driver_id, ride.id, ride.seats_booked, ride.seats_available,
    )
    return request, ride


async def reject_request(
    db: AsyncSession, driver_id: int, request_id: int
) -> tuple[RideRequest, Ride]:
    request, ride = await _load_for_driver(db, driver_id, request_id, "reject")
    ride_id = ride.id

    if request.status == RequestStatus.rejected:
        raise InvalidStateError("Request is already rejected")

    prior = request.status
    try:
        if not await ride_requests.reject(db, request_id, prior):
            raise InvalidStateError("Request changed while being rejected, please retry")
        # Only an approved request holds a seat
        if prior == RequestStatus.approved and not await release_seat(db, ride_id):
            logger.warning("Ride %s had no booked seat to release for request=%s", ride_id, request_id)
    except BookingError as exc:
        await db.rollback()
        logger.warning("Reject lost race request=%s ride=%s: %s", request_id, ride_id, exc.message)
        raise

    request, ride = await _commit_and_reload(db, request, ride)
    logger.info(
        "Request %s rejected by driver=%s (was %s); ride=%s seats %s/%s",
        request.id, driver_id, prior.value, ride.id, ride.seats_booked, ride.seats_available,
    )
    return request, ride
