"""
Drivers router: POST/GET /api/drivers/rides, PATCH /api/drivers/rides/{id},
                GET /api/drivers/requests,
                PATCH /api/drivers/requests/{id}/approve, PATCH /api/drivers/requests/{id}/reject
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from carpool.database import get_db
from carpool.exceptions import ValidationError
from carpool.middleware.auth import require_driver
from carpool.middleware.idempotency import check_idempotency, store_idempotency_result
from carpool.models.user import User
from carpool.schemas.schemas import (
    DecisionData, DecisionResponse, DriverRidesMeta, DriverRidesResponse,
    IncomingRequestRow, IncomingRequestsResponse, PageMeta, RideCounts,
    RideCreateRequest, RideEnvelope, RideRequestResponse,
    RideResponse, RideUpdateRequest,
)
from carpool.services import booking, rides, search

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/drivers", tags=["Drivers"])


@router.post("/rides", status_code=status.HTTP_201_CREATED, response_model=RideEnvelope)
async def create_ride(
    payload: RideCreateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    driver: User = Depends(require_driver),
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
):
    if idempotency_key:
        cached = await check_idempotency(request, driver.id)
        if cached:
            return cached

    ride = await rides.create_ride(db, driver.id, payload.model_dump())
    response = RideEnvelope(message="Ride created successfully", data=RideResponse.model_validate(ride))

    if idempotency_key:
        await store_idempotency_result(driver.id, idempotency_key, status.HTTP_201_CREATED, response)
    return response


@router.get("/rides", response_model=DriverRidesResponse)
async def list_rides(
    filter: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    driver: User = Depends(require_driver),
):
    """Rides posted by the driver, bucketed into all / upcoming / completed."""
    buckets = search.bucket_rides(await rides.list_driver_rides(db, driver.id))
    selected = filter if filter in search.RIDE_FILTERS else "all"
    return DriverRidesResponse(
        data=[RideResponse.model_validate(r) for r in search.select_bucket(buckets, selected)],
        meta=DriverRidesMeta(filter=selected, counts=RideCounts(**buckets.counts())),
    )


@router.patch("/rides/{ride_id}", response_model=RideEnvelope)
async def update_ride(
    ride_id: int,
    payload: RideUpdateRequest,
    db: AsyncSession = Depends(get_db),
    driver: User = Depends(require_driver),
):
    ride = await rides.update_ride(db, driver.id, ride_id, payload.model_dump(exclude_unset=True))
    if ride is None:
        raise ValidationError("No updatable fields supplied")
    return RideEnvelope(message="Ride updated successfully", data=RideResponse.model_validate(ride))


@router.get("/requests", response_model=IncomingRequestsResponse)
async def list_requests(
    ride_id: Optional[int] = None,
    request_status: Optional[str] = Query(default=None, alias="status"),
    page: int = 1,
    limit: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    driver: User = Depends(require_driver),
):
    """Requests across all of the driver's rides, newest first."""
    result = await search.driver_requests_view(
        db, driver.id, ride_id=ride_id, status=request_status, page=page, limit=limit
    )
    data = [
        IncomingRequestRow(
            **RideRequestResponse.model_validate(req).model_dump(),
            from_location=ride.from_location,
            to_location=ride.to_location,
            ride_date=ride.ride_date,
            ride_time=ride.ride_time,
            vehicle_name=ride.vehicle_name,
            vehicle_number=ride.vehicle_number,
            seats_available=ride.seats_available,
            seats_booked=ride.seats_booked,
            rider_name=rider.name,
            rider_email=rider.email,
        )
        for req, ride, rider in result.rows
    ]
    return IncomingRequestsResponse(
        data=data,
        meta=PageMeta(page=result.page, limit=result.limit, total=result.total, total_pages=result.total_pages),
    )


@router.patch("/requests/{request_id}/approve", response_model=DecisionResponse)
async def approve_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    driver: User = Depends(require_driver),
):
    ride_request, ride = await booking.approve_request(db, driver.id, request_id)
    return DecisionResponse(
        message="Ride request approved successfully",
        data=DecisionData(
            request=RideRequestResponse.model_validate(ride_request),
            ride=RideResponse.model_validate(ride),
        ),
    )


@router.patch("/requests/{request_id}/reject", response_model=DecisionResponse)
async def reject_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    driver: User = Depends(require_driver),
):
    ride_request, ride = await booking.reject_request(db, driver.id, request_id)
    return DecisionResponse(
        message="Ride request rejected successfully",
        data=DecisionData(
            request=RideRequestResponse.model_validate(ride_request),
            ride=RideResponse.model_validate(ride),
        ),
    )
