"""
Demand network generation between charging stations.

The network is a directed multigraph of demand edges. Each rule looks up
candidate stations inside a distance window, shuffles them with the
injected generator and keeps the first few. The filter, shuffle, truncate
order decides which edges a given seed selects.
"""

from pathlib import Path
from typing import Sequence
import networkx as nx
import numpy as np

from evnet.export import to_record
from evnet.geo import distances_km
from evnet.io import ensure_dir, write_json, write_manifest
from evnet.models import ChargingStation, DemandEdge
from evnet.prng import SeededRandom
from evnet.stations import is_highway


HIGHWAY_WINDOW_KM = (20.0, 80.0)
HIGHWAY_MAX_TARGETS = 3
CITY_TO_HIGHWAY_PROBABILITY = 0.3
CITY_TO_HIGHWAY_MAX_KM = 40.0
CITY_TO_HIGHWAY_WEIGHT = 2
COMMUTER_WINDOW_KM = (3.0, 25.0)
COMMUTER_MAX_TARGETS = 2
DELIVERY_WINDOW_KM = (2.0, 15.0)
DELIVERY_MAX_TARGETS = 4


def route_key(from_id: str, to_id: str) -> str:
    """
    Key of an ordered station pair, used for the route cache and the
    persisted route table. `route_key(a, b) != route_key(b, a)`.
    """
    return f"{from_id}-{to_id}"


def find_nearby(
    station: ChargingStation,
    candidates: Sequence[ChargingStation],
    min_km: float,
    max_km: float,
    rng: SeededRandom,
) -> list[ChargingStation]:
    """
    Get the candidates whose distance to `station` lies in [min_km, max_km],
    in shuffled order. The station itself is never returned.
    """
    if not candidates:
        return []
    dists = distances_km(station.coordinates, [c.coordinates for c in candidates])
    in_window = np.flatnonzero((dists >= min_km) & (dists <= max_km))
    nearby = [candidates[int(i)] for i in in_window if candidates[int(i)].id != station.id]
    return rng.shuffle(nearby)


def generate_route_network(
    stations: list[ChargingStation],
    rng: SeededRandom,
) -> list[DemandEdge]:
    """
    Generate the demand edges of a station set. Rules, in order:
        1. Highway corridor: each highway station to up to 3 highway stations
           20-80 km away, roadtrip, weight 3-6.
        2. City to highway: 30% of city stations to their nearest highway
           station under 40 km, roadtrip, weight 2.
        3. Commuter: each city station to up to 2 city stations 3-25 km
           away, weight 4-7.
        4. Delivery: each superfast city station to up to 4 stations 2-15 km
           away, weight 5-9.
    Edges are not de-duplicated.
    """
    highway = [s for s in stations if is_highway(s)]
    city = [s for s in stations if not is_highway(s)]
    edges: list[DemandEdge] = []

    for station in highway:
        targets = find_nearby(station, highway, *HIGHWAY_WINDOW_KM, rng)
        for target in targets[:HIGHWAY_MAX_TARGETS]:
            edges.append(
                DemandEdge(station, target, "roadtrip", rng.randint(3, 6))
            )

    highway_coords = [h.coordinates for h in highway]
    for station in city:
        if rng.next() > CITY_TO_HIGHWAY_PROBABILITY:
            continue
        if not highway:
            continue
        dists = distances_km(station.coordinates, highway_coords)
        nearest = int(np.argmin(dists))
        if dists[nearest] < CITY_TO_HIGHWAY_MAX_KM:
            edges.append(
                DemandEdge(
                    station, highway[nearest], "roadtrip", CITY_TO_HIGHWAY_WEIGHT
                )
            )

    for station in city:
        targets = find_nearby(station, city, *COMMUTER_WINDOW_KM, rng)
        for target in targets[:COMMUTER_MAX_TARGETS]:
            edges.append(
                DemandEdge(station, target, "commuter", rng.randint(4, 7))
            )

    hubs = [s for s in city if s.type == "superfast"]
    for hub in hubs:
        targets = find_nearby(hub, stations, *DELIVERY_WINDOW_KM, rng)
        for target in targets[:DELIVERY_MAX_TARGETS]:
            edges.append(
                DemandEdge(hub, target, "delivery", rng.randint(5, 9))
            )

    return edges


def unique_route_pairs(
    edges: list[DemandEdge],
) -> list[tuple[str, ChargingStation, ChargingStation]]:
    """
    Get the unique ordered station pairs whose geometry is needed to expand
    the edges: each edge's own direction followed by its reverse, in first
    appearance order.
    """
    pairs = []
    seen: set[str] = set()
    for e in edges:
        for a, b in ((e.from_station, e.to_station), (e.to_station, e.from_station)):
            key = route_key(a.id, b.id)
            if key not in seen:
                seen.add(key)
                pairs.append((key, a, b))
    return pairs


def build_demand_graph(
    stations: list[ChargingStation],
    edges: list[DemandEdge],
) -> nx.MultiDiGraph:
    """
    Build the demand network in networkx format. Nodes are station ids with
    the station attributes; every demand edge becomes one graph edge.
    """
    G = nx.MultiDiGraph()
    for s in stations:
        G.add_node(
            s.id,
            name=s.name,
            lng=s.coordinates[0],
            lat=s.coordinates[1],
            type=s.type,
            chargers=s.chargers,
            highway=is_highway(s),
        )
    for e in edges:
        G.add_edge(
            e.from_station.id,
            e.to_station.id,
            key=None,
            trip_type=e.trip_type,
            weight=e.weight,
        )
    return G


def write_network(
    out_dir: str | Path,
    stations: list[ChargingStation],
    edges: list[DemandEdge],
    meta: dict | None = None,
) -> None:
    """
    Write the demand edges of a network, and a manifest with its graph
    figures, to `out_dir`.
    """
    out_dir = ensure_dir(out_dir)
    write_json(out_dir / "edges.json", [to_record(e) for e in edges])
    G = build_demand_graph(stations, edges)
    by_type: dict[str, int] = {}
    for e in edges:
        by_type[e.trip_type] = by_type.get(e.trip_type, 0) + 1
    write_manifest(
        out_dir / "network_manifest.json",
        {
            **(meta or {}),
            "counts": {
                "n_edges": len(edges),
                "n_route_pairs": len(unique_route_pairs(edges)),
                "n_connected_stations": sum(1 for n in G.nodes if G.degree(n) > 0),
                "n_weakly_connected_components": nx.number_weakly_connected_components(G),
                "edges_by_trip_type": by_type,
                "total_weight": int(sum(e.weight for e in edges)),
            },
        },
    )
