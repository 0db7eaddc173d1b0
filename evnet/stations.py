"""
Functions to generate the charging-station set for a scenario.

City stations are scattered around each city hub at randomized polar offsets;
highway stations sit on the motorway service areas with a small jitter. All
randomness comes from the injected `SeededRandom`, and the order of draws is
fixed, so the same seed always yields the same stations.
"""

from math import cos, floor, pi, sin
from pathlib import Path
from typing import Any

from evnet.export import to_record
from evnet.io import ensure_dir, write_json, write_manifest
from evnet.models import ChargingStation, CityHub, Coord, HighwayPoint, StationType
from evnet.prng import SeededRandom


CITY_PREFIX = "station-"
HIGHWAY_PREFIX = "highway-"
DISTRICTS = ["Noord", "Zuid", "Oost", "West", "Centrum", "Station", "Park", "Mall"]

MIN_RADIUS_DEG = 0.02
RADIUS_SPAN_DEG = 0.06
LAT_COMPRESSION = 0.7
HIGHWAY_JITTER_DEG = 0.01
MAX_PLACEMENT_ATTEMPTS = 10


def build_city_hubs(hubs_cfg: list[dict[str, Any]]) -> list[CityHub]:
    """
    Normalize the YAML extracted city hubs config.
    """
    return [
        CityHub(
            name=str(h["name"]),
            coords=(float(h["coords"][0]), float(h["coords"][1])),
            density=int(h["density"]),
        )
        for h in hubs_cfg
    ]


def build_highway_points(points_cfg: list[dict[str, Any]]) -> list[HighwayPoint]:
    """
    Normalize the YAML extracted highway points config.
    """
    return [
        HighwayPoint(
            name=str(p["name"]),
            coords=(float(p["coords"][0]), float(p["coords"][1])),
        )
        for p in points_cfg
    ]


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves going up, unlike `round`, which
    sends them to the even neighbour.
    """
    return floor(value + 0.5)


def is_highway(station: ChargingStation) -> bool:
    """
    Check if a station was generated on a highway corridor.
    """
    return station.id.startswith(HIGHWAY_PREFIX)


def generate_stations_for_scenario(
    scenario_cfg: dict,
    data_dir: str | Path,
) -> list[ChargingStation]:
    """
    Generate the stations of a scenario with its station seed and write them,
    together with a manifest, to the data directory.

    data/
        network/
            <scenario_name>/
                stations.json
                manifest.json
    """
    stations = generate_stations_from_config(scenario_cfg)
    scenario_name = scenario_cfg.get("name", "scenario")
    out_dir = ensure_dir(Path(data_dir) / "network" / scenario_name)
    write_json(out_dir / "stations.json", [to_record(s) for s in stations])
    write_manifest(
        out_dir / "manifest.json",
        {
            "scenario": scenario_name,
            "seed": int(scenario_cfg["seeds"]["stations"]),
            "counts": {
                "n_stations": len(stations),
                "n_highway": sum(1 for s in stations if is_highway(s)),
            },
        },
    )
    return stations


def generate_stations_from_config(scenario_cfg: dict) -> list[ChargingStation]:
    """
    Generate the stations of a scenario with a fresh generator seeded by
    `seeds.stations`.
    """
    return generate_stations(
        build_city_hubs(scenario_cfg["city_hubs"]),
        build_highway_points(scenario_cfg["highway_points"]),
        [str(o) for o in scenario_cfg["operators"]],
        SeededRandom(int(scenario_cfg["seeds"]["stations"])),
        coastal_boundaries={
            str(city): float(b["min_lng"])
            for city, b in (scenario_cfg.get("coastal_boundaries") or {}).items()
        },
    )


def generate_stations(
    city_hubs: list[CityHub],
    highway_points: list[HighwayPoint],
    operators: list[str],
    rng: SeededRandom,
    coastal_boundaries: dict[str, float] | None = None,
) -> list[ChargingStation]:
    """
    Generate all city stations, hub by hub, then one station per highway
    point. `coastal_boundaries` maps a city name to the minimum longitude a
    station of that city may take.
    """
    boundaries = coastal_boundaries or {}
    stations: list[ChargingStation] = []
    station_id = 0
    for hub in city_hubs:
        stations.extend(
            _generate_city_stations(
                hub, station_id, operators, rng, boundaries.get(hub.name)
            )
        )
        station_id += hub.density
    for idx, point in enumerate(highway_points):
        stations.append(_generate_highway_station(point, idx, operators, rng))
    return stations


def _generate_city_stations(
    hub: CityHub,
    start_id: int,
    operators: list[str],
    rng: SeededRandom,
    min_lng: float | None,
) -> list[ChargingStation]:
    stations = []
    for i in range(hub.density):
        lng, lat = _sample_city_point(hub.coords, rng, min_lng)

        if rng.next() < 0.2:
            station_type: StationType = "superfast"
        elif rng.next() < 0.5:
            station_type = "fast"
        else:
            station_type = "standard"

        if station_type == "superfast":
            chargers = 8 + floor(rng.next() * 8)
            price = 0.45 + rng.next() * 0.20
        elif station_type == "fast":
            chargers = 4 + floor(rng.next() * 6)
            price = 0.35 + rng.next() * 0.15
        else:
            chargers = 2 + floor(rng.next() * 4)
            price = 0.25 + rng.next() * 0.10

        utilization = tuple(_city_utilization(hour, rng) for hour in range(24))
        district = DISTRICTS[floor(rng.next() * len(DISTRICTS))]

        stations.append(
            ChargingStation(
                id=f"{CITY_PREFIX}{start_id + i}",
                name=f"{hub.name} {district} {i + 1}",
                coordinates=(lng, lat),
                chargers=chargers,
                type=station_type,
                operator=rng.choice(operators),
                available=floor(rng.next() * (chargers + 1)),
                price_per_kwh=round_half_up(price * 100) / 100,
                utilization_history=utilization,
            )
        )
    return stations


def _generate_highway_station(
    point: HighwayPoint,
    idx: int,
    operators: list[str],
    rng: SeededRandom,
) -> ChargingStation:
    station_type: StationType = "superfast" if rng.next() < 0.4 else "fast"
    if station_type == "superfast":
        chargers = 12 + floor(rng.next() * 12)
    else:
        chargers = 6 + floor(rng.next() * 8)

    lng = point.coords[0] + (rng.next() - 0.5) * HIGHWAY_JITTER_DEG
    lat = point.coords[1] + (rng.next() - 0.5) * HIGHWAY_JITTER_DEG

    if station_type == "superfast":
        price = 0.50 + rng.next() * 0.20
    else:
        price = 0.40 + rng.next() * 0.15

    # Flatter profile than the city stations, busy through the whole day.
    utilization = tuple(
        round_half_up(100 * (0.5 + rng.next() * 0.35 if 6 <= hour <= 22 else 0.2 + rng.next() * 0.2))
        for hour in range(24)
    )

    return ChargingStation(
        id=f"{HIGHWAY_PREFIX}{idx}",
        name=f"{point.name} Charging Plaza",
        coordinates=(lng, lat),
        chargers=chargers,
        type=station_type,
        operator=rng.choice(operators),
        available=floor(rng.next() * (chargers + 1)),
        price_per_kwh=round_half_up(price * 100) / 100,
        utilization_history=utilization,
    )


def _sample_city_point(
    center: Coord,
    rng: SeededRandom,
    min_lng: float | None,
) -> Coord:
    """
    Sample a point around a city center. When the city has a coastal
    boundary, re-sample a bounded number of times and clamp to just inside
    the boundary as a fallback.
    """
    for _ in range(MAX_PLACEMENT_ATTEMPTS):
        angle = rng.next() * pi * 2
        radius = MIN_RADIUS_DEG + rng.next() * RADIUS_SPAN_DEG
        lng = center[0] + cos(angle) * radius
        lat = center[1] + sin(angle) * radius * LAT_COMPRESSION
        if min_lng is None or lng >= min_lng:
            return lng, lat

    lng = min_lng + rng.next() * 0.01
    return lng, lat


def _city_utilization(hour: int, rng: SeededRandom) -> int:
    """
    Hourly utilization percentage with morning and evening commute peaks.
    """
    if 7 <= hour <= 9:
        base = 0.7 + rng.next() * 0.25
    elif 17 <= hour <= 19:
        base = 0.75 + rng.next() * 0.20
    elif 10 <= hour <= 16:
        base = 0.4 + rng.next() * 0.3
    elif 20 <= hour <= 23:
        base = 0.3 + rng.next() * 0.25
    else:
        base = 0.1 + rng.next() * 0.15
    return round_half_up(base * 100)
