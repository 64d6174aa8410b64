"""
Unit tests for the upcoming / completed classification of driver rides.
"""
from datetime import date, datetime, time

from carpool.models.ride import Ride, RideStatus
from carpool.services.search import bucket_rides, classify_ride, select_bucket

NOW = datetime(2025, 2, 15, 14, 30, 45)
TODAY = NOW.date()


def _ride(ride_id, ride_date, ride_time, status=RideStatus.active):
    return Ride(
        id=ride_id, driver_id=1, vehicle_name="Swift", vehicle_number="KA01",
        from_location="A", to_location="B", ride_date=ride_date, ride_time=ride_time,
        seats_available=2, seats_booked=0, status=status,
    )


class TestClassifyRide:
    def test_future_date_is_upcoming(self):
        assert classify_ride(RideStatus.active, date(2025, 2, 16), time(0, 0), NOW) == "upcoming"

    def test_past_date_is_completed(self):
        assert classify_ride(RideStatus.active, date(2025, 2, 14), time(23, 59), NOW) == "completed"

    def test_today_later_is_upcoming(self):
        assert classify_ride(RideStatus.active, TODAY, time(18, 0), NOW) == "upcoming"

    def test_today_same_minute_is_upcoming(self):
        # 14:30:00 vs now 14:30:45, compared at minute precision
        assert classify_ride(RideStatus.active, TODAY, time(14, 30), NOW) == "upcoming"

    def test_today_earlier_is_neither(self):
        assert classify_ride(RideStatus.active, TODAY, time(14, 29), NOW) is None

    def test_cancelled_is_never_bucketed(self):
        assert classify_ride(RideStatus.cancelled, date(2025, 3, 1), time(9, 0), NOW) is None
        assert classify_ride(RideStatus.cancelled, date(2025, 1, 1), time(9, 0), NOW) is None


class TestBucketRides:
    def test_counts_and_ordering(self):
        rides = [
            _ride(1, date(2025, 2, 10), time(9, 0)),
            _ride(2, date(2025, 2, 12), time(9, 0)),
            _ride(3, date(2025, 2, 20), time(8, 0)),
            _ride(4, date(2025, 2, 16), time(7, 0)),
            _ride(5, date(2025, 2, 20), time(7, 0), status=RideStatus.cancelled),
        ]
        buckets = bucket_rides(rides, now=NOW)

        assert buckets.counts() == {"all": 5, "upcoming": 2, "completed": 2}
        assert [r.id for r in buckets.upcoming] == [4, 3]
        assert [r.id for r in buckets.completed] == [2, 1]
        assert [r.id for r in buckets.all] == [1, 2, 3, 4, 5]

    def test_cancelled_only_in_all(self):
        buckets = bucket_rides([_ride(1, date(2025, 2, 20), time(7, 0), RideStatus.cancelled)], now=NOW)
        assert buckets.counts() == {"all": 1, "upcoming": 0, "completed": 0}

    def test_unknown_filter_falls_back_to_all(self):
        buckets = bucket_rides([_ride(1, date(2025, 2, 10), time(9, 0))], now=NOW)
        assert select_bucket(buckets, "bogus") == buckets.all
        assert select_bucket(buckets, None) == buckets.all
        assert select_bucket(buckets, "completed") == buckets.completed
