"""
Scenario and routing configuration loading and validation utilities.
"""

import os
from pathlib import Path
from typing import Any
from dotenv import load_dotenv

from evnet.errors import ConfigurationError
from evnet.io import read_yaml


PROJECT_ROOT = Path(__file__).resolve().parents[1]  # Project root directory.
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "configs"       # Default configuration directory.
DEFAULT_TOKEN_ENV = ["MAPBOX_TOKEN", "VITE_MAPBOX_TOKEN"]


def resolve_config_path(name_or_path: str | Path) -> Path:
    """
    Resolve a YAML config file path.
    """
    p = Path(name_or_path)
    if p.exists():
        return p
    if not p.suffix:
        candidate = DEFAULT_CONFIG_DIR / f"{p.name}.yaml"
        if candidate.exists():
            return candidate
    candidate = DEFAULT_CONFIG_DIR / p.name
    if candidate.exists():
        return candidate
    raise FileNotFoundError(f"Config not found: {name_or_path}")


def load_yaml_config(name_or_path: str | Path) -> dict:
    """
    Load a YAML config file content.
    """
    path = resolve_config_path(name_or_path)
    cfg = read_yaml(path)
    if not isinstance(cfg, dict):
        raise ValueError(f"Invalid YAML at {path}")
    return cfg


def load_scenario(name_or_path: str | Path = "netherlands.yaml") -> dict:
    """
    Load a scenario YAML config file content.
    """
    cfg = load_yaml_config(name_or_path)
    _validate_scenario(cfg)
    return cfg


def load_routing(name_or_path: str | Path = "routing.yaml") -> dict:
    """
    Load a routing YAML config file content.
    """
    cfg = load_yaml_config(name_or_path)
    _validate_routing(cfg)
    return cfg


def get_routing_token(
    routing_cfg: dict[str, Any],
    env_file: str | Path | None = None,
) -> str:
    """
    Read the directions service access token from the environment. A `.env`
    file at the project root (or `env_file`) is loaded first without
    overriding variables that are already set.
    """
    load_dotenv(env_file or PROJECT_ROOT / ".env", override=False)
    names = routing_cfg.get("token_env") or DEFAULT_TOKEN_ENV
    for name in names:
        value = os.environ.get(str(name), "").strip()
        if value:
            return value
    raise ConfigurationError(
        "No routing access token found; set one of "
        + ", ".join(str(n) for n in names)
        + " in the environment or in .env"
    )


def _validate_scenario(cfg: dict[str, Any]) -> None:
    """
    Validate a scenario YAML config file content. Requires:
        - seeds: stations, network and trips integers.
        - loop_length: positive animation loop length.
        - operators: non-empty list of operator labels.
        - city_hubs: non-empty list with name, coords and positive density.
        - highway_points: non-empty list with name and coords.
        - vehicles: non-empty list with category, brand, color, positive
          speed_multiplier and range_km.
    """
    required_top = [
        "seeds", "loop_length", "operators", "city_hubs",
        "highway_points", "vehicles",
    ]
    for k in required_top:
        if k not in cfg:
            raise ValueError(f"scenario missing key: {k}")
    seeds = cfg["seeds"]
    for kk in ["stations", "network", "trips"]:
        if not isinstance(seeds.get(kk), int):
            raise ValueError(f"seeds.{kk} must be an int")
    if not isinstance(cfg["loop_length"], (int, float)) or cfg["loop_length"] <= 0:
        raise ValueError("loop_length must be positive")
    if not cfg["operators"]:
        raise ValueError("operators must be non-empty")
    if not cfg["city_hubs"]:
        raise ValueError("city_hubs must be non-empty")
    for hub in cfg["city_hubs"]:
        _require_coords(hub, "city_hubs")
        if not isinstance(hub.get("density"), int) or hub["density"] <= 0:
            raise ValueError(f"city_hubs.{hub.get('name')}.density must be a positive int")
    if not cfg["highway_points"]:
        raise ValueError("highway_points must be non-empty")
    for point in cfg["highway_points"]:
        _require_coords(point, "highway_points")
    if not cfg["vehicles"]:
        raise ValueError("vehicles must be non-empty")
    for v in cfg["vehicles"]:
        for kk in ["category", "brand", "color", "speed_multiplier", "range_km"]:
            if kk not in v:
                raise ValueError(f"vehicles entry missing key: {kk}")
        if float(v["speed_multiplier"]) <= 0 or float(v["range_km"]) <= 0:
            raise ValueError(
                f"vehicles.{v['brand']} needs positive speed_multiplier and range_km"
            )
    categories = {str(v["category"]) for v in cfg["vehicles"]}
    if "van" not in categories or categories == {"van"}:
        raise ValueError(
            "vehicles must include vans for deliveries and other categories for the rest"
        )
    for city, boundary in (cfg.get("coastal_boundaries") or {}).items():
        if "min_lng" not in boundary:
            raise ValueError(f"coastal_boundaries.{city} must define min_lng")


def _validate_routing(cfg: dict[str, Any]) -> None:
    """
    Validate a routing YAML config file content. Requires:
        - base_url and profile of the directions service.
        - max_retries >= 0, retry_delay_sec >= 0, timeout_sec > 0.
        - batch_size >= 1 and batch_delay_sec >= 0.
        - output: route_table path.
    """
    for k in ["base_url", "profile"]:
        if not cfg.get(k):
            raise ValueError(f"routing missing key: {k}")
    if not isinstance(cfg.get("max_retries"), int) or cfg["max_retries"] < 0:
        raise ValueError("max_retries must be a non-negative int")
    if float(cfg.get("retry_delay_sec", -1)) < 0:
        raise ValueError("retry_delay_sec must be non-negative")
    if float(cfg.get("timeout_sec", 0)) <= 0:
        raise ValueError("timeout_sec must be positive")
    if not isinstance(cfg.get("batch_size"), int) or cfg["batch_size"] < 1:
        raise ValueError("batch_size must be a positive int")
    if float(cfg.get("batch_delay_sec", -1)) < 0:
        raise ValueError("batch_delay_sec must be non-negative")
    if "route_table" not in cfg.get("output", {}):
        raise ValueError("routing.output must define route_table")


def _require_coords(entry: dict[str, Any], section: str) -> None:
    if not entry.get("name"):
        raise ValueError(f"{section} entry missing name")
    coords = entry.get("coords")
    if coords is None or len(coords) != 2:
        raise ValueError(f"{section}.{entry['name']}.coords must be [lng, lat]")
