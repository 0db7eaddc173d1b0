from typing import Callable

import pytest

from evnet.config import load_scenario
from evnet.errors import RoutingError
from evnet.models import ChargingStation, Coord, RouteGeometry

KM_PER_DEG_LAT = 111.19492664455873


class DummyClient:
    """Directions client replaying a script of results, then a default."""

    def __init__(self, script: list[object] | None = None, default: Callable | None = None):
        self.script = list(script or [])
        self.default = default or straight_route
        self.calls: list[tuple[Coord, Coord]] = []

    def fetch(self, start: Coord, end: Coord) -> RouteGeometry:
        self.calls.append((start, end))
        if self.script:
            outcome = self.script.pop(0)
            if isinstance(outcome, RoutingError):
                raise outcome
            return outcome
        return self.default(start, end)


def straight_route(start: Coord, end: Coord, n_points: int = 5) -> RouteGeometry:
    coords = tuple(
        (
            start[0] + (end[0] - start[0]) * i / (n_points - 1),
            start[1] + (end[1] - start[1]) * i / (n_points - 1),
        )
        for i in range(n_points)
    )
    return RouteGeometry(coordinates=coords, duration=900.0, distance=12_500.0)


@pytest.fixture
def scenario_cfg() -> dict:
    return load_scenario("netherlands")


@pytest.fixture
def make_station() -> Callable[..., ChargingStation]:
    def _make(
        idx: int,
        km_north: float = 0.0,
        station_type: str = "standard",
        highway: bool = False,
        origin: Coord = (5.0, 52.0),
    ) -> ChargingStation:
        prefix = "highway-" if highway else "station-"
        return ChargingStation(
            id=f"{prefix}{idx}",
            name=f"Test {station_type.title()} {idx}",
            coordinates=(origin[0], origin[1] + km_north / KM_PER_DEG_LAT),
            chargers=6,
            type=station_type,
            operator="Fastned",
            available=3,
        )

    return _make


@pytest.fixture
def dummy_client_factory() -> Callable[..., DummyClient]:
    return DummyClient


@pytest.fixture
def no_sleep() -> list[float]:
    """List collecting requested sleeps; pass `no_sleep.append` as sleep."""
    return []


@pytest.fixture
def route_factory() -> Callable[..., RouteGeometry]:
    return straight_route
