"""
Precompute and save the route geometries of a scenario's demand network, so
trips can be generated later without access to the directions service.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from evnet.io import write_manifest
from evnet.models import DemandEdge, RouteGeometry
from evnet.network import generate_route_network, unique_route_pairs
from evnet.prng import SeededRandom
from evnet.route_table import save_route_table
from evnet.routing import RouteResolver
from evnet.stations import generate_stations_from_config


# progress(done, total, fetched, failed, elapsed_sec)
ProgressFn = Callable[[int, int, int, int, float], None]


@dataclass
class PrecomputeResult:
    """
    Outcome of a precomputation run. Pairs that failed or were never reached
    are simply absent from `table`.
    """
    table: dict[str, RouteGeometry] = field(default_factory=dict)
    total: int = 0
    fetched: int = 0
    failed: int = 0
    elapsed_sec: float = 0.0
    interrupted: bool = False


def precompute_routes(
    edges: list[DemandEdge],
    resolver: RouteResolver,
    *,
    batch_size: int = 2,
    batch_delay_sec: float = 0.5,
    progress: ProgressFn | None = None,
) -> PrecomputeResult:
    """
    Resolve every unique ordered station pair of the edges, both directions,
    in throttled batches. A KeyboardInterrupt stops the run and returns what
    was resolved so far.
    """
    pairs = unique_route_pairs(edges)
    jobs = [(key, a.coordinates, b.coordinates) for key, a, b in pairs]
    result = PrecomputeResult(total=len(jobs))
    start_time = time.time()
    done = 0
    try:
        for batch in resolver.resolve_batches(jobs, batch_size, batch_delay_sec):
            for key, geometry in batch.items():
                if geometry is None:
                    result.failed += 1
                else:
                    result.table[key] = geometry
                    result.fetched += 1
            done += len(batch)
            if progress is not None:
                progress(
                    done, result.total, result.fetched, result.failed,
                    time.time() - start_time,
                )
    except KeyboardInterrupt:
        result.interrupted = True
    result.elapsed_sec = time.time() - start_time
    return result


def compute_and_save_routes(
    scenario_cfg: dict,
    resolver: RouteResolver,
    out_path: str | Path,
    *,
    batch_size: int = 2,
    batch_delay_sec: float = 0.5,
    progress: ProgressFn | None = None,
) -> PrecomputeResult:
    """
    Generate the scenario's stations and demand network with its fixed seeds,
    precompute their routes and save the table with a manifest next to it.
    """
    stations = generate_stations_from_config(scenario_cfg)
    edges = generate_route_network(
        stations, SeededRandom(int(scenario_cfg["seeds"]["network"]))
    )
    result = precompute_routes(
        edges,
        resolver,
        batch_size=batch_size,
        batch_delay_sec=batch_delay_sec,
        progress=progress,
    )
    out_path = Path(out_path)
    save_route_table(out_path, result.table)
    write_manifest(
        out_path.with_name(f"{out_path.stem}_manifest.json"),
        {
            "scenario": scenario_cfg.get("name", "scenario"),
            "seeds": scenario_cfg["seeds"],
            "counts": {
                "n_stations": len(stations),
                "n_edges": len(edges),
                "n_pairs": result.total,
                "fetched": result.fetched,
                "failed": result.failed,
            },
            "elapsed_sec": round(result.elapsed_sec, 1),
            "interrupted": result.interrupted,
        },
    )
    return result
