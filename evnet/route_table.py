"""
Persisted route table: a flat JSON object mapping a route key to its
geometry, `{route_key: {coordinates, duration, distance}}`.
"""

from pathlib import Path

from evnet.io import read_json, write_json
from evnet.models import RouteGeometry


def save_route_table(path: str | Path, table: dict[str, RouteGeometry]) -> None:
    """
    Save a route table to a JSON file, keys sorted for stable diffs.
    """
    write_json(
        path,
        {
            key: {
                "coordinates": [[lng, lat] for lng, lat in geom.coordinates],
                "duration": geom.duration,
                "distance": geom.distance,
            }
            for key, geom in sorted(table.items())
        },
        indent=None,
    )


def load_route_table(path: str | Path) -> dict[str, RouteGeometry]:
    """
    Load a route table saved by `save_route_table`.
    """
    raw = read_json(path)
    if not isinstance(raw, dict):
        raise ValueError(f"Route table at {path} must be a JSON object")
    return {str(key): route_from_dict(value) for key, value in raw.items()}


def route_from_dict(value: dict) -> RouteGeometry:
    return RouteGeometry(
        coordinates=tuple((float(p[0]), float(p[1])) for p in value["coordinates"]),
        duration=float(value["duration"]),
        distance=float(value["distance"]),
    )
