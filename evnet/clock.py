"""
Animation clock and sampling helpers for trip schedules.

The clock is driven from outside (once per displayed frame); trips are only
sampled against it.
"""

from bisect import bisect_right
from math import floor

from evnet.models import Coord, Trip


class AnimationClock:
    """
    Time cursor in trip timestamp units. `advance` moves it by
    `delta_ms * units_per_ms * rate` and resets it to 0 once it passes the
    loop length.
    """

    def __init__(
        self,
        loop_length: float,
        rate: float = 1.0,
        units_per_ms: float = 0.1,
    ):
        if loop_length <= 0:
            raise ValueError("loop_length must be positive")
        self.loop_length = float(loop_length)
        self.rate = float(rate)
        self.units_per_ms = float(units_per_ms)
        self.current_time = 0.0

    def advance(self, delta_ms: float) -> float:
        t = self.current_time + delta_ms * self.units_per_ms * self.rate
        self.current_time = 0.0 if t > self.loop_length else t
        return self.current_time

    def seek(self, t: float) -> None:
        self.current_time = min(max(0.0, float(t)), self.loop_length)

    def set_rate(self, rate: float) -> None:
        if rate < 0:
            raise ValueError("rate must be non-negative")
        self.rate = float(rate)

    def progress_label(self, day_minutes: int = 30) -> str:
        """
        Format the cursor as `m:ss (p%)`, with the loop representing
        `day_minutes` minutes.
        """
        share = self.current_time / self.loop_length
        minutes = floor(share * day_minutes)
        seconds = floor((share * day_minutes * 60) % 60)
        return f"{minutes}:{seconds:02d} ({share * 100:.0f}%)"


def wrap_timestamp(t: float, loop_length: float) -> float:
    return t % loop_length


def trip_position(trip: Trip, t: float) -> Coord | None:
    """
    Position of a trip at cursor `t`, linearly interpolated between
    waypoints, or None when the trip is not on the road at `t`.
    """
    if not trip.waypoints:
        return None
    times = [w.timestamp for w in trip.waypoints]
    if t < times[0] or t > times[-1]:
        return None
    idx = bisect_right(times, t)
    if idx >= len(times):
        return trip.waypoints[-1].coordinates
    a = trip.waypoints[idx - 1]
    b = trip.waypoints[idx]
    span = b.timestamp - a.timestamp
    if span <= 0:
        return b.coordinates
    f = (t - a.timestamp) / span
    return (
        a.coordinates[0] + f * (b.coordinates[0] - a.coordinates[0]),
        a.coordinates[1] + f * (b.coordinates[1] - a.coordinates[1]),
    )


def active_trips(trips: list[Trip], t: float, loop_length: float) -> list[Trip]:
    """
    Trips on the road at cursor `t`. A trip whose schedule runs past the end
    of the loop is also active at the wrapped-around part of its schedule.
    """
    return [trip for trip in trips if schedule_time(trip, t, loop_length) is not None]


def schedule_time(trip: Trip, t: float, loop_length: float) -> float | None:
    """
    Map cursor `t` in [0, loop_length) onto the trip's unwrapped schedule,
    or None when the trip is not on the road at `t`.
    """
    if not trip.waypoints:
        return None
    candidate = t
    while candidate <= trip.end_time:
        if candidate >= trip.start_time:
            return candidate
        candidate += loop_length
    return None
