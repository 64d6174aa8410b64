"""
Read-side queries: rider search, rider bookings, driver inbox, and the
all/upcoming/completed buckets of a driver's rides.

None of these touch seats_booked.
"""
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any

from sqlalchemy import Select, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from carpool.config import get_settings
from carpool.models.ride import Ride, RideStatus
from carpool.models.ride_request import RequestStatus, RideRequest
from carpool.models.user import User

settings = get_settings()

STATUS_SYNONYMS = {"accepted": RequestStatus.approved}
RIDE_FILTERS = ("all", "upcoming", "completed")


@dataclass
class Page:
    rows: list[Any]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass
class RideBuckets:
    all: list[Ride] = field(default_factory=list)
    upcoming: list[Ride] = field(default_factory=list)
    completed: list[Ride] = field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {"all": len(self.all), "upcoming": len(self.upcoming), "completed": len(self.completed)}


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def normalize_page(page: int | None, limit: int | None) -> tuple[int, int]:
    """Clamp page to >= 1 and limit to [1, max_page_size]. Never rejects."""
    page = max(1, page or 1)
    if limit is None:
        limit = settings.default_page_size
    limit = min(settings.max_page_size, max(1, limit))
    return page, limit


def normalize_request_status(value: str | None) -> RequestStatus | None:
    """'accepted' means approved; anything unrecognised means no filter."""
    if not isinstance(value, str):
        return None
    value = value.strip().lower()
    if value in STATUS_SYNONYMS:
        return STATUS_SYNONYMS[value]
    try:
        return RequestStatus(value)
    except ValueError:
        return None


def _minute(t: time) -> time:
    return t.replace(second=0, microsecond=0, tzinfo=None)


def classify_ride(status: RideStatus, ride_date: date, ride_time: time, now: datetime) -> str | None:
    """
    'upcoming', 'completed' or None (cancelled, or earlier today).
    Derived at read time from (status, date, time, now); never stored.
    """
    if status == RideStatus.cancelled:
        return None
    today = now.date()
    if ride_date > today:
        return "upcoming"
    if ride_date < today:
        return "completed"
    if _minute(ride_time) >= _minute(now.time()):
        return "upcoming"
    return None


def bucket_rides(rides: list[Ride], now: datetime | None = None) -> RideBuckets:
    now = now or datetime.now()
    buckets = RideBuckets(all=list(rides))
    for ride in rides:
        bucket = classify_ride(ride.status, ride.ride_date, ride.ride_time, now)
        if bucket == "upcoming":
            buckets.upcoming.append(ride)
        elif bucket == "completed":
            buckets.completed.append(ride)

    buckets.upcoming.sort(key=lambda r: (r.ride_date, r.ride_time))
    buckets.completed.sort(key=lambda r: (r.ride_date, r.ride_time), reverse=True)
    return buckets


def select_bucket(buckets: RideBuckets, filter_name: str | None) -> list[Ride]:
    if filter_name not in RIDE_FILTERS:
        filter_name = "all"
    return getattr(buckets, filter_name)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def _contains(column, text: str):
    """Case-insensitive substring match with LIKE wildcards in text taken literally."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{escaped}%", escape="\\")


async def _paginate(
    db: AsyncSession, query: Select, count_query: Select, page: int | None, limit: int | None
) -> Page:
    page, limit = normalize_page(page, limit)
    total = (await db.execute(count_query)).scalar_one()
    result = await db.execute(query.limit(limit).offset((page - 1) * limit))
    return Page(rows=list(result.all()), total=total, page=page, limit=limit)


async def search_available_rides(
    db: AsyncSession,
    *,
    from_location: str | None = None,
    to_location: str | None = None,
    ride_date: date | None = None,
    ride_time: time | None = None,
    rider_id: int | None = None,
    page: int | None = 1,
    limit: int | None = None,
) -> Page:
    """
    Active rides with a free seat, soonest first. Rows are (Ride, driver_name).
    With rider_id, rides that rider has any request on are left out.
    """
    conditions = [Ride.status == RideStatus.active, Ride.seats_available > Ride.seats_booked]
    if from_location and from_location.strip():
        conditions.append(_contains(Ride.from_location, from_location.strip()))
    if to_location and to_location.strip():
        conditions.append(_contains(Ride.to_location, to_location.strip()))
    if ride_date is not None:
        conditions.append(Ride.ride_date == ride_date)
    if ride_time is not None:
        conditions.append(Ride.ride_time == _minute(ride_time))
    if rider_id is not None:
        conditions.append(
            ~exists().where(RideRequest.ride_id == Ride.id, RideRequest.rider_id == rider_id)
        )

    query = (
        select(Ride, User.name.label("driver_name"))
        .join(User, User.id == Ride.driver_id)
        .where(*conditions)
        .order_by(Ride.ride_date.asc(), Ride.ride_time.asc(), Ride.id.asc())
    )
    count_query = select(func.count()).select_from(Ride).where(*conditions)
    return await _paginate(db, query, count_query, page, limit)


async def search_rider_bookings(
    db: AsyncSession,
    rider_id: int,
    *,
    status: str | RequestStatus | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
    page: int | None = 1,
    limit: int | None = None,
) -> Page:
    """A rider's requests, newest first. Rows are (RideRequest, Ride, driver_name)."""
    status_filter = status if isinstance(status, RequestStatus) else normalize_request_status(status)

    conditions = [RideRequest.rider_id == rider_id]
    if status_filter is not None:
        conditions.append(RideRequest.status == status_filter)
    if from_date is not None:
        conditions.append(Ride.ride_date >= from_date)
    if to_date is not None:
        conditions.append(Ride.ride_date <= to_date)

    query = (
        select(RideRequest, Ride, User.name.label("driver_name"))
        .join(Ride, Ride.id == RideRequest.ride_id)
        .join(User, User.id == Ride.driver_id)
        .where(*conditions)
        .order_by(RideRequest.requested_at.desc(), RideRequest.id.desc())
    )
    count_query = (
        select(func.count())
        .select_from(RideRequest)
        .join(Ride, Ride.id == RideRequest.ride_id)
        .where(*conditions)
    )
    return await _paginate(db, query, count_query, page, limit)


async def driver_requests_view(
    db: AsyncSession,
    driver_id: int,
    *,
    ride_id: int | None = None,
    status: str | RequestStatus | None = None,
    page: int | None = 1,
    limit: int | None = None,
) -> Page:
    """Requests across the driver's rides, newest first. Rows are (RideRequest, Ride, rider User)."""
    status_filter = status if isinstance(status, RequestStatus) else normalize_request_status(status)

    conditions = [Ride.driver_id == driver_id]
    if ride_id is not None:
        conditions.append(RideRequest.ride_id == ride_id)
    if status_filter is not None:
        conditions.append(RideRequest.status == status_filter)

    query = (
        select(RideRequest, Ride, User)
        .join(Ride, Ride.id == RideRequest.ride_id)
        .join(User, User.id == RideRequest.rider_id)
        .where(*conditions)
        .order_by(RideRequest.requested_at.desc(), RideRequest.id.desc())
    )
    count_query = (
        select(func.count())
        .select_from(RideRequest)
        .join(Ride, Ride.id == RideRequest.ride_id)
        .where(*conditions)
    )
    return await _paginate(db, query, count_query, page, limit)
