"""
Riders router: GET /api/riders/rides/search, POST /api/riders/rides/{id}/requests,
               GET /api/riders/bookings
"""
import logging
from datetime import date, time
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from carpool.database import get_db
from carpool.middleware.auth import get_current_user
from carpool.middleware.idempotency import check_idempotency, store_idempotency_result
from carpool.models.user import User
from carpool.schemas.schemas import (
    AvailableRide, BookingRow, BookingsResponse, PageMeta, RideRequestEnvelope,
    RideRequestResponse, RideResponse, RideSearchResponse,
)
from carpool.services import booking, search

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/riders", tags=["Riders"])


def _page_meta(result: search.Page) -> PageMeta:
    return PageMeta(page=result.page, limit=result.limit, total=result.total, total_pages=result.total_pages)


@router.get("/rides/search", response_model=RideSearchResponse)
async def search_rides(
    from_location: Optional[str] = None,
    to_location: Optional[str] = None,
    ride_date: Optional[date] = None,
    ride_time: Optional[time] = None,
    page: int = 1,
    limit: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Active rides with free seats, soonest first. Rides the caller has
    already requested (in any status) are left out.
    """
    result = await search.search_available_rides(
        db,
        from_location=from_location,
        to_location=to_location,
        ride_date=ride_date,
        ride_time=ride_time,
        rider_id=user.id,
        page=page,
        limit=limit,
    )
    data = [
        AvailableRide(
            **RideResponse.model_validate(ride).model_dump(),
            driver_name=driver_name,
            seats_left=ride.remaining_seats,
        )
        for ride, driver_name in result.rows
    ]
    return RideSearchResponse(data=data, meta=_page_meta(result))


@router.post("/rides/{ride_id}/requests", status_code=status.HTTP_201_CREATED, response_model=RideRequestEnvelope)
async def request_seat(
    ride_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
):
    if idempotency_key:
        cached = await check_idempotency(request, user.id)
        if cached:
            return cached

    ride_request = await booking.request_seat(db, user.id, ride_id)
    response = RideRequestEnvelope(
        message="Seat requested successfully",
        data=RideRequestResponse.model_validate(ride_request),
    )

    if idempotency_key:
        await store_idempotency_result(user.id, idempotency_key, status.HTTP_201_CREATED, response)
    return response


@router.get("/bookings", response_model=BookingsResponse)
async def list_bookings(
    booking_status: Optional[str] = Query(default=None, alias="status"),
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    page: int = 1,
    limit: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await search.search_rider_bookings(
        db,
        user.id,
        status=booking_status,
        from_date=from_date,
        to_date=to_date,
        page=page,
        limit=limit,
    )
    data = [
        BookingRow(
            **RideRequestResponse.model_validate(req).model_dump(),
            from_location=ride.from_location,
            to_location=ride.to_location,
            ride_date=ride.ride_date,
            ride_time=ride.ride_time,
            vehicle_name=ride.vehicle_name,
            vehicle_number=ride.vehicle_number,
            driver_id=ride.driver_id,
            driver_name=driver_name,
        )
        for req, ride, driver_name in result.rows
    ]
    return BookingsResponse(data=data, meta=_page_meta(result))
