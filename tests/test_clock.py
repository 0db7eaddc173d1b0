import pytest

from evnet.clock import (
    AnimationClock,
    active_trips,
    schedule_time,
    trip_position,
    wrap_timestamp,
)
from evnet.models import Trip, TripWaypoint


def _trip(times, coords=None, trip_id="ev-0"):
    coords = coords or [(5.0 + 0.1 * i, 52.0) for i in range(len(times))]
    return Trip(
        id=trip_id,
        waypoints=tuple(TripWaypoint(c, t) for c, t in zip(coords, times)),
        vehicle_type="sedan",
        color=(0, 255, 136),
        vehicle_brand="Tesla Model 3",
        from_station_name="A",
        to_station_name="B",
        trip_type="commuter",
        battery_start=80.0,
        battery_end=70.0,
        distance_km=12.0,
    )


def test_advance_scales_by_rate():
    clock = AnimationClock(1800.0)
    assert clock.advance(100.0) == pytest.approx(10.0)
    clock.set_rate(2.0)
    assert clock.advance(100.0) == pytest.approx(30.0)


def test_advance_resets_past_loop_end():
    clock = AnimationClock(1800.0)
    clock.seek(1795.0)
    assert clock.advance(100.0) == 0.0


def test_seek_clamps():
    clock = AnimationClock(1800.0)
    clock.seek(-5)
    assert clock.current_time == 0.0
    clock.seek(5000)
    assert clock.current_time == 1800.0


def test_invalid_arguments():
    with pytest.raises(ValueError):
        AnimationClock(0)
    with pytest.raises(ValueError):
        AnimationClock(10).set_rate(-1)


def test_progress_label():
    clock = AnimationClock(1800.0)
    clock.seek(900.0)
    assert clock.progress_label() == "15:00 (50%)"
    clock.seek(0.0)
    assert clock.progress_label() == "0:00 (0%)"
    clock.seek(1.5)
    assert clock.progress_label() == "0:01 (0%)"


def test_wrap_timestamp():
    assert wrap_timestamp(1900.0, 1800.0) == pytest.approx(100.0)
    assert wrap_timestamp(100.0, 1800.0) == 100.0


def test_trip_position_interpolates():
    trip = _trip([100.0, 200.0, 300.0])
    assert trip_position(trip, 50.0) is None
    assert trip_position(trip, 350.0) is None
    assert trip_position(trip, 100.0) == (5.0, 52.0)
    lng, lat = trip_position(trip, 150.0)
    assert lng == pytest.approx(5.05)
    assert lat == pytest.approx(52.0)
    assert trip_position(trip, 300.0) == pytest.approx((5.2, 52.0))


def test_active_trips_handles_wrap():
    inside = _trip([100.0, 200.0], trip_id="inside")
    wrapping = _trip([1750.0, 1900.0], trip_id="wrapping")
    assert [t.id for t in active_trips([inside, wrapping], 150.0, 1800.0)] == ["inside"]
    assert [t.id for t in active_trips([inside, wrapping], 50.0, 1800.0)] == ["wrapping"]
    assert [t.id for t in active_trips([inside, wrapping], 1760.0, 1800.0)] == ["wrapping"]
    assert schedule_time(wrapping, 50.0, 1800.0) == pytest.approx(1850.0)
    assert schedule_time(inside, 1000.0, 1800.0) is None
