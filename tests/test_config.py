import copy
import os

import pytest
import yaml

from evnet import config as config_mod
from evnet.config import (
    get_routing_token,
    load_routing,
    load_scenario,
    resolve_config_path,
)
from evnet.errors import ConfigurationError
from evnet.io import read_yaml


def test_scenario_loads_by_bare_name(scenario_cfg):
    assert scenario_cfg["name"] == "netherlands"
    assert sum(h["density"] for h in scenario_cfg["city_hubs"]) == 150
    assert resolve_config_path("netherlands") == resolve_config_path("netherlands.yaml")


def test_routing_loads():
    cfg = load_routing()
    assert cfg["max_retries"] == 3
    assert cfg["retry_delay_sec"] == 2.0
    assert cfg["output"]["route_table"].endswith("precomputed_routes.json")


def test_missing_config():
    with pytest.raises(FileNotFoundError):
        resolve_config_path("does-not-exist.yaml")


def _write(tmp_path, cfg):
    path = tmp_path / "scenario.yaml"
    path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "mutate",
    [
        lambda c: c.pop("vehicles"),
        lambda c: c["seeds"].update(trips="42"),
        lambda c: c.update(loop_length=0),
        lambda c: c.update(city_hubs=[]),
        lambda c: c["city_hubs"][0].update(density=0),
        lambda c: c["highway_points"][0].update(coords=[5.0]),
        lambda c: c["vehicles"][0].update(range_km=0),
        lambda c: c.update(vehicles=[v for v in c["vehicles"] if v["category"] != "van"]),
        lambda c: c.update(vehicles=[v for v in c["vehicles"] if v["category"] == "van"]),
        lambda c: c.update(coastal_boundaries={"The Hague": {}}),
    ],
)
def test_invalid_scenario_rejected(tmp_path, mutate):
    cfg = copy.deepcopy(read_yaml(resolve_config_path("netherlands")))
    mutate(cfg)
    with pytest.raises(ValueError):
        load_scenario(_write(tmp_path, cfg))


@pytest.mark.parametrize(
    "key, value",
    [("max_retries", -1), ("timeout_sec", 0), ("batch_size", 0), ("output", {})],
)
def test_invalid_routing_rejected(tmp_path, key, value):
    cfg = read_yaml(resolve_config_path("routing"))
    cfg[key] = value
    path = tmp_path / "routing.yaml"
    path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    with pytest.raises(ValueError):
        load_routing(path)


def test_token_from_environment(monkeypatch, tmp_path):
    monkeypatch.delenv("EVNET_A", raising=False)
    monkeypatch.setenv("EVNET_B", "  tok-b ")
    cfg = {"token_env": ["EVNET_A", "EVNET_B"]}
    assert get_routing_token(cfg, env_file=tmp_path / "missing.env") == "tok-b"


def test_token_from_env_file(monkeypatch, tmp_path):
    monkeypatch.delenv("EVNET_C", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("EVNET_C=from-file\n", encoding="utf-8")
    assert get_routing_token({"token_env": ["EVNET_C"]}, env_file=env_file) == "from-file"
    os.environ.pop("EVNET_C", None)


def test_environment_wins_over_env_file(monkeypatch, tmp_path):
    monkeypatch.setenv("EVNET_D", "from-env")
    env_file = tmp_path / ".env"
    env_file.write_text("EVNET_D=from-file\n", encoding="utf-8")
    assert get_routing_token({"token_env": ["EVNET_D"]}, env_file=env_file) == "from-env"


def test_missing_token_raises(monkeypatch, tmp_path):
    monkeypatch.delenv("EVNET_E", raising=False)
    with pytest.raises(ConfigurationError):
        get_routing_token({"token_env": ["EVNET_E"]}, env_file=tmp_path / "missing.env")


def test_default_token_names():
    assert config_mod.DEFAULT_TOKEN_ENV == ["MAPBOX_TOKEN", "VITE_MAPBOX_TOKEN"]
