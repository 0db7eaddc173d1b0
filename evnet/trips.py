"""
Expansion of demand edges into scheduled, time-stamped vehicle trips.

Real driving durations are compressed into the animation loop and every trip
carries a simple battery simulation that drives its colour.
"""

from itertools import count
from typing import Any, Iterator
import numpy as np

from evnet.models import (
    Color,
    DemandEdge,
    RouteGeometry,
    Trip,
    TripType,
    TripWaypoint,
    VehicleProfile,
)
from evnet.network import route_key
from evnet.prng import SeededRandom


DEFAULT_LOOP_LENGTH = 1800.0
START_JITTER = 50.0
RETURN_JITTER = 200.0
RETURN_PROBABILITY_THRESHOLD = 0.3
TIME_SCALE = 20.0  # animation units per real minute of driving
MIN_BATTERY = 5.0

DELIVERY_COLOR: Color = (255, 160, 0)
HIGH_BATTERY_COLOR: Color = (0, 255, 136)
MEDIUM_BATTERY_COLOR: Color = (255, 200, 0)
LOW_BATTERY_COLOR: Color = (255, 80, 80)
COMMUTER_LIGHTEN = 80


def load_vehicle_profiles(vehicles_cfg: list[dict[str, Any]]) -> list[VehicleProfile]:
    """
    Build the vehicle catalog from the YAML extracted vehicles config.
    """
    return [
        VehicleProfile(
            category=str(v["category"]),
            brand=str(v["brand"]),
            color=tuple(int(c) for c in v["color"]),
            speed_multiplier=float(v["speed_multiplier"]),
            range_km=float(v["range_km"]),
        )
        for v in vehicles_cfg
    ]


def eligible_profiles(
    profiles: list[VehicleProfile],
    trip_type: TripType,
) -> list[VehicleProfile]:
    """
    Vans serve delivery edges; every other edge gets the non-van profiles.
    """
    if trip_type == "delivery":
        return [p for p in profiles if p.category == "van"]
    return [p for p in profiles if p.category != "van"]


def battery_color(battery_percent: float) -> Color:
    if battery_percent > 60:
        return HIGH_BATTERY_COLOR
    if battery_percent > 30:
        return MEDIUM_BATTERY_COLOR
    return LOW_BATTERY_COLOR


def trip_color(trip_type: TripType, avg_battery: float) -> Color:
    """
    Display colour of a trip: fixed amber for deliveries, the battery band
    for road trips, and the battery band lightened toward white for commuters.
    """
    if trip_type == "delivery":
        return DELIVERY_COLOR
    band = battery_color(avg_battery)
    if trip_type == "roadtrip":
        return band
    return tuple(min(255, c + COMMUTER_LIGHTEN) for c in band)


def build_trip(
    geometry: RouteGeometry,
    start_time: float,
    profile: VehicleProfile,
    trip_id: int,
    edge: DemandEdge,
    rng: SeededRandom,
) -> Trip:
    """
    Build one trip along `geometry` leaving at `start_time`. Timestamps are
    spread linearly over the scaled duration
    `(duration / 60) * 20 / speed_multiplier`. The battery starts uniformly in
    [30, 90)% and drops by the share of the vehicle range driven, never below
    5%.
    """
    scaled_duration = (geometry.duration / 60.0) * TIME_SCALE / profile.speed_multiplier
    timestamps = np.linspace(
        start_time, start_time + scaled_duration, num=len(geometry.coordinates)
    )

    distance_km = geometry.distance / 1000.0
    battery_start = 30.0 + rng.next() * 60.0
    battery_used = (distance_km / profile.range_km) * 100.0
    battery_end = max(MIN_BATTERY, battery_start - battery_used)

    from_name = edge.from_station.name
    to_name = edge.to_station.name
    return Trip(
        id=f"ev-{trip_id}-{from_name[:10]}-{to_name[:10]}",
        waypoints=tuple(
            TripWaypoint(coordinates=coords, timestamp=float(ts))
            for coords, ts in zip(geometry.coordinates, timestamps)
        ),
        vehicle_type=profile.category,
        color=trip_color(edge.trip_type, (battery_start + battery_end) / 2.0),
        vehicle_brand=profile.brand,
        from_station_name=from_name,
        to_station_name=to_name,
        trip_type=edge.trip_type,
        battery_start=battery_start,
        battery_end=battery_end,
        distance_km=distance_km,
    )


def expand_edge(
    edge: DemandEdge,
    route_table: dict[str, RouteGeometry],
    profiles: list[VehicleProfile],
    rng: SeededRandom,
    trip_ids: Iterator[int],
    loop_length: float = DEFAULT_LOOP_LENGTH,
) -> list[Trip]:
    """
    Expand one demand edge into `weight` forward trips spread evenly across
    the loop, each with a 70% chance of a return trip half a loop later. A
    direction without a geometry in `route_table` produces no trips. Raises
    `ValueError` only when a trip has to be built and no vehicle profile can
    serve the edge.
    """
    forward = route_table.get(route_key(edge.from_station.id, edge.to_station.id))
    reverse = route_table.get(route_key(edge.to_station.id, edge.from_station.id))
    eligible = eligible_profiles(profiles, edge.trip_type)
    if not eligible:
        if _has_geometry(forward) or _has_geometry(reverse):
            raise ValueError(f"No vehicle profile can serve {edge.trip_type} trips")
        return []

    return_edge = DemandEdge(
        from_station=edge.to_station,
        to_station=edge.from_station,
        trip_type=edge.trip_type,
        weight=edge.weight,
    )
    trips: list[Trip] = []
    for i in range(edge.weight):
        start_time = (i * (loop_length / edge.weight) + rng.next() * START_JITTER) % loop_length
        profile = rng.choice(eligible)

        if _has_geometry(forward):
            trips.append(build_trip(forward, start_time, profile, next(trip_ids), edge, rng))

        if rng.next() > RETURN_PROBABILITY_THRESHOLD and _has_geometry(reverse):
            return_start = (start_time + loop_length / 2 + rng.next() * RETURN_JITTER) % loop_length
            return_profile = rng.choice(eligible)
            trips.append(
                build_trip(reverse, return_start, return_profile, next(trip_ids), return_edge, rng)
            )
    return trips


def generate_trips(
    edges: list[DemandEdge],
    route_table: dict[str, RouteGeometry],
    profiles: list[VehicleProfile],
    rng: SeededRandom,
    loop_length: float = DEFAULT_LOOP_LENGTH,
) -> list[Trip]:
    """
    Expand every demand edge, in order, sharing one generator and one
    trip-id sequence.
    """
    trip_ids = count()
    trips: list[Trip] = []
    for edge in edges:
        trips.extend(expand_edge(edge, route_table, profiles, rng, trip_ids, loop_length))
    return trips


def _has_geometry(geometry: RouteGeometry | None) -> bool:
    return geometry is not None and len(geometry.coordinates) > 0
