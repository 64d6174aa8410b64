"""
Ride capacity model.

Rides are created and edited by their driver. seats_booked only moves
through reserve_seat / release_seat, each a single conditional UPDATE,
so the counter can never leave [0, seats_available] even when two
approvals race on the last seat.
"""
import logging
from datetime import date, time
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from carpool.exceptions import ForbiddenError, NotFoundError, ValidationError
from carpool.models.ride import Ride, RideStatus
from carpool.models.ride_request import RideRequest

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "vehicle_name",
    "vehicle_number",
    "from_location",
    "to_location",
    "ride_date",
    "ride_time",
    "seats_available",
)
TEXT_FIELDS = ("vehicle_name", "vehicle_number", "from_location", "to_location")

UPDATABLE_FIELDS = (
    "vehicle_name",
    "vehicle_number",
    "from_location",
    "to_location",
    "ride_date",
    "ride_time",
    "seats_available",
    "seats_booked",
    "notes",
    "status",
)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_seat_count(value: Any) -> bool:
    # bool is an int subclass; True is not a seat count
    return isinstance(value, int) and not isinstance(value, bool)


def _to_minute(value: time) -> time:
    return value.replace(second=0, microsecond=0)


def _require_text(fields: dict[str, Any], names) -> None:
    for name in names:
        if name in fields and fields[name] is not None and not isinstance(fields[name], str):
            raise ValidationError(f"{name} must be text")


def _clean_notes(notes: str | None) -> str | None:
    if notes is None:
        return None
    notes = notes.strip()
    return notes or None


def validate_new_ride(fields: dict[str, Any]) -> dict[str, Any]:
    """Check a create payload and return the cleaned column values."""
    missing = [name for name in REQUIRED_FIELDS if _is_blank(fields.get(name))]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    _require_text(fields, TEXT_FIELDS + ("notes",))

    seats = fields["seats_available"]
    if not _is_seat_count(seats) or seats < 1:
        raise ValidationError("seats_available must be a number greater than 0")
    if not isinstance(fields["ride_date"], date):
        raise ValidationError("ride_date must be a calendar date")
    if not isinstance(fields["ride_time"], time):
        raise ValidationError("ride_time must be a time of day")

    cleaned = {name: fields[name].strip() for name in TEXT_FIELDS}
    cleaned.update(
        ride_date=fields["ride_date"],
        ride_time=_to_minute(fields["ride_time"]),
        seats_available=seats,
        notes=_clean_notes(fields.get("notes")),
    )
    return cleaned


def validate_ride_changes(ride: Ride, fields: dict[str, Any]) -> dict[str, Any]:
    """
    Keep only allow-listed fields and check them against the current ride.
    Returns an empty dict when nothing updatable was supplied.
    """
    changes = {name: fields[name] for name in UPDATABLE_FIELDS if name in fields}
    _require_text(changes, TEXT_FIELDS + ("notes",))

    for name in TEXT_FIELDS:
        if name in changes:
            if _is_blank(changes[name]):
                raise ValidationError(f"{name} cannot be empty")
            changes[name] = changes[name].strip()
    for name in ("ride_date", "ride_time"):
        if name in changes and changes[name] is None:
            raise ValidationError(f"{name} cannot be empty")
    if "ride_date" in changes and not isinstance(changes["ride_date"], date):
        raise ValidationError("ride_date must be a calendar date")
    if "ride_time" in changes:
        if not isinstance(changes["ride_time"], time):
            raise ValidationError("ride_time must be a time of day")
        changes["ride_time"] = _to_minute(changes["ride_time"])
    if "notes" in changes:
        changes["notes"] = _clean_notes(changes["notes"])

    if "status" in changes:
        try:
            changes["status"] = RideStatus(changes["status"])
        except ValueError:
            raise ValidationError(f"status must be one of {[s.value for s in RideStatus]}")

    seats_available = changes.get("seats_available", ride.seats_available)
    seats_booked = changes.get("seats_booked", ride.seats_booked)
    if not _is_seat_count(seats_available) or seats_available < 1:
        raise ValidationError("seats_available must be a number greater than 0")
    if not _is_seat_count(seats_booked) or seats_booked < 0:
        raise ValidationError("seats_booked must be a non-negative number")
    if seats_booked > seats_available:
        raise ValidationError(
            f"seats_available cannot be lower than the {seats_booked} seats already booked"
        )
    return changes


async def get_ride(db: AsyncSession, ride_id: int) -> Ride:
    ride = await db.get(Ride, ride_id)
    if ride is None:
        raise NotFoundError("Ride not found")
    return ride


async def get_owned_ride(db: AsyncSession, ride_id: int, driver_id: int) -> Ride:
    ride = await get_ride(db, ride_id)
    if ride.driver_id != driver_id:
        raise ForbiddenError("You can only manage your own rides")
    return ride


async def create_ride(db: AsyncSession, driver_id: int, fields: dict[str, Any]) -> Ride:
    """Post a new ride: active, with no seats booked."""
    values = validate_new_ride(fields)
    ride = Ride(driver_id=driver_id, seats_booked=0, status=RideStatus.active, **values)
    db.add(ride)
    await db.commit()
    await db.refresh(ride)
    logger.info("Ride %s created by driver=%s (%s seats)", ride.id, driver_id, ride.seats_available)
    return ride


async def update_ride(
    db: AsyncSession, driver_id: int, ride_id: int, fields: dict[str, Any]
) -> Ride | None:
    ride = await get_owned_ride(db, ride_id, driver_id)
    changes = validate_ride_changes(ride, fields)
    if not changes:
        return None

    for name, value in changes.items():
        setattr(ride, name, value)
    await db.commit()
    await db.refresh(ride)
    logger.info("Ride %s updated by driver=%s: %s", ride.id, driver_id, sorted(changes))
    return ride


async def remove_ride(db: AsyncSession, driver_id: int, ride_id: int) -> int:
    """Administrative hard delete of a ride and every request against it."""
    ride = await get_owned_ride(db, ride_id, driver_id)
    await db.execute(delete(RideRequest).where(RideRequest.ride_id == ride.id))
    await db.delete(ride)
    await db.commit()
    logger.warning("Ride %s deleted by driver=%s", ride_id, driver_id)
    return ride_id


async def list_driver_rides(db: AsyncSession, driver_id: int) -> list[Ride]:
    result = await db.execute(
        select(Ride).where(Ride.driver_id == driver_id).order_by(Ride.ride_date, Ride.ride_time)
    )
    return list(result.scalars().all())


async def reserve_seat(db: AsyncSession, ride_id: int) -> bool:
    """
    Take one seat if the ride is active and not full.
    Returns False when no row matched. Does not commit.
    """
    result = await db.execute(
        update(Ride)
        .where(
            Ride.id == ride_id,
            Ride.status == RideStatus.active,
            Ride.seats_booked < Ride.seats_available,
        )
        .values(seats_booked=Ride.seats_booked + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def release_seat(db: AsyncSession, ride_id: int) -> bool:
    """Give one seat back. Returns False when nothing was booked. Does not commit."""
    result = await db.execute(
        update(Ride)
        .where(Ride.id == ride_id, Ride.seats_booked > 0)
        .values(seats_booked=Ride.seats_booked - 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
