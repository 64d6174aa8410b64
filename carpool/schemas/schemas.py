from datetime import date, datetime, time
from typing import Optional
from pydantic import BaseModel, Field, StrictInt, field_serializer

from carpool.models.ride import RideStatus
from carpool.models.ride_request import RequestStatus
from carpool.models.user import UserRole


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------

class PageMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class RideFields(BaseModel):
    """Ride columns as shown to clients: dates YYYY-MM-DD, times HH:MM."""
    from_location: str
    to_location: str
    ride_date: date
    ride_time: time
    vehicle_name: str
    vehicle_number: str

    @field_serializer("ride_time", when_used="json")
    def serialize_ride_time(self, value: time) -> str:
        return value.strftime("%H:%M")


# ---------------------------------------------------------------------------
# User schemas
# ---------------------------------------------------------------------------

class UserCreateRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: str = Field(..., max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    role: UserRole


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    created_at: datetime

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Ride schemas
# ---------------------------------------------------------------------------

class RideCreateRequest(BaseModel):
    # Presence and seat-count checks: carpool.services.rides.validate_new_ride
    vehicle_name: Optional[str] = None
    vehicle_number: Optional[str] = None
    from_location: Optional[str] = None
    to_location: Optional[str] = None
    ride_date: Optional[date] = None
    ride_time: Optional[time] = None
    seats_available: Optional[StrictInt] = None
    notes: Optional[str] = None


class RideUpdateRequest(BaseModel):
    vehicle_name: Optional[str] = None
    vehicle_number: Optional[str] = None
    from_location: Optional[str] = None
    to_location: Optional[str] = None
    ride_date: Optional[date] = None
    ride_time: Optional[time] = None
    seats_available: Optional[StrictInt] = None
    notes: Optional[str] = None
    status: Optional[RideStatus] = None


class RideResponse(RideFields):
    id: int
    driver_id: int
    seats_available: int
    seats_booked: int
    notes: Optional[str] = None
    status: RideStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AvailableRide(RideResponse):
    driver_name: str
    seats_left: int


class RideEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: RideResponse


class RideCounts(BaseModel):
    all: int
    upcoming: int
    completed: int


class DriverRidesMeta(BaseModel):
    filter: str
    counts: RideCounts


class DriverRidesResponse(BaseModel):
    success: bool = True
    data: list[RideResponse]
    meta: DriverRidesMeta


class RideSearchResponse(BaseModel):
    success: bool = True
    data: list[AvailableRide]
    meta: PageMeta


# ---------------------------------------------------------------------------
# Ride request schemas
# ---------------------------------------------------------------------------

class RideRequestResponse(BaseModel):
    id: int
    ride_id: int
    rider_id: int
    status: RequestStatus
    requested_at: datetime
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RideRequestEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: RideRequestResponse


class BookingRow(RideRequestResponse, RideFields):
    driver_id: int
    driver_name: str


class BookingsResponse(BaseModel):
    success: bool = True
    data: list[BookingRow]
    meta: PageMeta


class IncomingRequestRow(RideRequestResponse, RideFields):
    seats_available: int
    seats_booked: int
    rider_name: str
    rider_email: str


class IncomingRequestsResponse(BaseModel):
    success: bool = True
    data: list[IncomingRequestRow]
    meta: PageMeta


class DecisionData(BaseModel):
    request: RideRequestResponse
    ride: RideResponse


class DecisionResponse(BaseModel):
    success: bool = True
    message: str
    data: DecisionData
