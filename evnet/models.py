"""
Data models for the network entities.
"""

from dataclasses import dataclass
from typing import Literal


# Tuple of (longitude, latitude) in degrees.
Coord = tuple[float, float]
# RGB colour, each channel in [0, 255].
Color = tuple[int, int, int]

StationType = Literal["standard", "fast", "superfast"]
TripType = Literal["commuter", "roadtrip", "delivery"]


@dataclass(frozen=True)
class CityHub:
    """
    A city centre around which `density` charging stations are scattered.
    """
    name: str
    coords: Coord
    density: int


@dataclass(frozen=True)
class HighwayPoint:
    """
    A service area along a motorway corridor. Gets exactly one station.
    """
    name: str
    coords: Coord


@dataclass(frozen=True)
class ChargingStation:
    """
    A charging station with its capacity, operator and current availability.
    The id is namespaced by origin: `station-N` for city stations and
    `highway-N` for corridor stations. `utilization_history` holds one
    utilization percentage per hour of the day.
    """
    id: str
    name: str
    coordinates: Coord
    chargers: int
    type: StationType
    operator: str
    available: int
    price_per_kwh: float | None = None
    utilization_history: tuple[int, ...] = ()


@dataclass(frozen=True)
class DemandEdge:
    """
    A directed intent to generate `weight` trips from one station to another.
    The reverse direction is not implied.
    """
    from_station: ChargingStation
    to_station: ChargingStation
    trip_type: TripType
    weight: int


@dataclass(frozen=True)
class RouteGeometry:
    """
    A resolved road path between two coordinates, with its driving duration
    in seconds and its length in meters.
    """
    coordinates: tuple[Coord, ...]
    duration: float
    distance: float


@dataclass(frozen=True)
class VehicleProfile:
    """
    Static catalog entry for an EV model.
    """
    category: str
    brand: str
    color: Color
    speed_multiplier: float
    range_km: float


@dataclass(frozen=True)
class TripWaypoint:
    coordinates: Coord
    timestamp: float


@dataclass(frozen=True)
class Trip:
    """
    A concrete vehicle traversal of a route geometry. Waypoint timestamps are
    in animation time units and non-decreasing; they are not wrapped to the
    loop length. `color` is a display encoding only, the category lives in
    `trip_type`.
    """
    id: str
    waypoints: tuple[TripWaypoint, ...]
    vehicle_type: str
    color: Color
    vehicle_brand: str | None = None
    from_station_name: str | None = None
    to_station_name: str | None = None
    trip_type: TripType | None = None
    battery_start: float | None = None
    battery_end: float | None = None
    distance_km: float | None = None

    @property
    def start_time(self) -> float:
        return self.waypoints[0].timestamp if self.waypoints else 0.0

    @property
    def end_time(self) -> float:
        return self.waypoints[-1].timestamp if self.waypoints else 0.0
