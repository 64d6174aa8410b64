from carpool.models.user import User, UserRole
from carpool.models.ride import Ride, RideStatus
from carpool.models.ride_request import Decision, RideRequest, RequestStatus

__all__ = ["User", "UserRole", "Ride", "RideStatus", "RideRequest", "RequestStatus", "Decision"]
