import pytest

from evnet.models import CityHub, HighwayPoint
from evnet.prng import SeededRandom
from evnet.stations import (
    build_city_hubs,
    build_highway_points,
    generate_stations,
    generate_stations_for_scenario,
    generate_stations_from_config,
    is_highway,
    round_half_up,
)
from evnet.io import read_json


def test_generation_is_deterministic(scenario_cfg):
    first = generate_stations_from_config(scenario_cfg)
    second = generate_stations_from_config(scenario_cfg)
    assert first == second
    assert [s.id for s in first] == [s.id for s in second]


def test_different_seed_changes_placement(scenario_cfg):
    other = dict(scenario_cfg, seeds={**scenario_cfg["seeds"], "stations": 124})
    a = generate_stations_from_config(scenario_cfg)
    b = generate_stations_from_config(other)
    assert [s.id for s in a] == [s.id for s in b]
    assert [s.coordinates for s in a] != [s.coordinates for s in b]


def test_counts_and_unique_ids(scenario_cfg):
    stations = generate_stations_from_config(scenario_cfg)
    n_city = sum(h["density"] for h in scenario_cfg["city_hubs"])
    n_highway = len(scenario_cfg["highway_points"])
    assert len(stations) == n_city + n_highway
    assert len({s.id for s in stations}) == len(stations)
    assert sum(1 for s in stations if is_highway(s)) == n_highway
    assert [s.id for s in stations if not is_highway(s)] == [
        f"station-{i}" for i in range(n_city)
    ]


def test_station_bounds(scenario_cfg):
    for s in generate_stations_from_config(scenario_cfg):
        assert s.chargers > 0
        assert 0 <= s.available <= s.chargers
        assert s.type in {"standard", "fast", "superfast"}
        assert len(s.utilization_history) == 24
        assert all(0 <= u <= 100 for u in s.utilization_history)
        assert s.operator in scenario_cfg["operators"]
        assert s.price_per_kwh is not None and 0.25 <= s.price_per_kwh <= 0.70


def test_charger_bands_follow_type(scenario_cfg):
    for s in generate_stations_from_config(scenario_cfg):
        if is_highway(s):
            assert s.type in {"fast", "superfast"}
            low, high = (12, 23) if s.type == "superfast" else (6, 13)
        else:
            low, high = {"superfast": (8, 15), "fast": (4, 9), "standard": (2, 5)}[s.type]
        assert low <= s.chargers <= high


def test_city_stations_stay_within_radius(scenario_cfg):
    stations = generate_stations_from_config(scenario_cfg)
    hubs = build_city_hubs(scenario_cfg["city_hubs"])
    idx = 0
    for hub in hubs:
        for s in stations[idx:idx + hub.density]:
            assert s.name.startswith(hub.name)
            d_lng = s.coordinates[0] - hub.coords[0]
            d_lat = (s.coordinates[1] - hub.coords[1]) / 0.7
            radius = (d_lng ** 2 + d_lat ** 2) ** 0.5
            if hub.name != "The Hague":
                assert 0.02 - 1e-9 <= radius <= 0.08 + 1e-9
        idx += hub.density


def test_coastal_boundary_respected(scenario_cfg):
    stations = generate_stations_from_config(scenario_cfg)
    hague = [s for s in stations if s.name.startswith("The Hague")]
    assert len(hague) == 18
    assert all(s.coordinates[0] >= 4.30 for s in hague)


def test_highway_jitter_is_small(scenario_cfg):
    stations = [s for s in generate_stations_from_config(scenario_cfg) if is_highway(s)]
    points = build_highway_points(scenario_cfg["highway_points"])
    for s, p in zip(stations, points):
        assert s.name == f"{p.name} Charging Plaza"
        assert abs(s.coordinates[0] - p.coords[0]) <= 0.005 + 1e-9
        assert abs(s.coordinates[1] - p.coords[1]) <= 0.005 + 1e-9


def test_unreachable_boundary_falls_back_to_clamp():
    hub = CityHub(name="Seaside", coords=(4.0, 52.0), density=5)
    stations = generate_stations(
        [hub],
        [HighwayPoint(name="A0 Test", coords=(5.0, 52.0))],
        ["Allego"],
        SeededRandom(42),
        coastal_boundaries={"Seaside": 5.0},
    )
    city = [s for s in stations if not is_highway(s)]
    assert len(city) == 5
    assert all(5.0 <= s.coordinates[0] <= 5.01 for s in city)
    assert stations[-1].id == "highway-0"


def test_generate_for_scenario_writes_stations(scenario_cfg, tmp_path):
    stations = generate_stations_for_scenario(scenario_cfg, tmp_path)
    out_dir = tmp_path / "network" / "netherlands"
    records = read_json(out_dir / "stations.json")
    assert len(records) == len(stations)
    assert records[0]["kind"] == "station"
    assert records[0]["id"] == "station-0"
    manifest = read_json(out_dir / "manifest.json")
    assert manifest["seed"] == 123
    assert manifest["counts"]["n_stations"] == len(stations)
    assert "created_at_utc" in manifest


@pytest.mark.parametrize("seed", [0, 1, 2 ** 31 - 1])
def test_extreme_seeds_produce_valid_stations(scenario_cfg, seed):
    cfg = dict(scenario_cfg, seeds={**scenario_cfg["seeds"], "stations": seed})
    stations = generate_stations_from_config(cfg)
    assert all(0 <= s.available <= s.chargers for s in stations)


def test_round_half_up_sends_halves_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(12.5) == 13
    assert round_half_up(0.5) == 1
    assert round_half_up(2.49) == 2
    assert round_half_up(87.0) == 87


def test_prices_have_whole_cents(scenario_cfg):
    for station in generate_stations_from_config(scenario_cfg):
        cents = station.price_per_kwh * 100
        assert cents == pytest.approx(round(cents))
        assert all(isinstance(u, int) for u in station.utilization_history)
