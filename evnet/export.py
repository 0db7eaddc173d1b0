"""
Plain-data export of network entities for rendering and storage.
"""

from dataclasses import asdict
from typing import Any

from evnet.models import ChargingStation, DemandEdge, RouteGeometry, Trip


def to_record(entity: ChargingStation | DemandEdge | RouteGeometry | Trip) -> dict[str, Any]:
    """
    Convert an entity to a JSON-ready dict tagged with its `kind`. Demand
    edges reference their stations by id.
    """
    if isinstance(entity, ChargingStation):
        return {"kind": "station", **_lists(asdict(entity))}
    if isinstance(entity, Trip):
        return {"kind": "trip", **_lists(asdict(entity))}
    if isinstance(entity, RouteGeometry):
        return {"kind": "route", **_lists(asdict(entity))}
    if isinstance(entity, DemandEdge):
        return {
            "kind": "demand_edge",
            "from_id": entity.from_station.id,
            "to_id": entity.to_station.id,
            "trip_type": entity.trip_type,
            "weight": entity.weight,
        }
    raise TypeError(f"Cannot export {type(entity).__name__}")


def _lists(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _lists(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_lists(v) for v in value]
    return value
