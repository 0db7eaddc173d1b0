"""
Precompute the route geometries of the scenario's demand network through the
directions service and save them as a route table.

Needs a directions access token (MAPBOX_TOKEN in the environment or .env).
"""

import sys
from pathlib import Path

from evnet.config import PROJECT_ROOT, load_routing, load_scenario
from evnet.errors import ConfigurationError
from evnet.precompute import compute_and_save_routes
from evnet.routing import build_resolver


def print_progress(done: int, total: int, fetched: int, failed: int, elapsed: float) -> None:
    percent = round(done / total * 100) if total else 100
    print(
        f"\r        Progress: {done}/{total} ({percent}%) - {fetched} fetched, "
        f"{failed} failed - {elapsed:.0f}s elapsed",
        end="",
        flush=True,
    )


def precompute_routes(
    scenario: str = "netherlands.yaml",
    routing: str | Path = "routing.yaml",
) -> None:
    routing_cfg = load_routing(routing)
    # Raises ConfigurationError before any generation when no token is set.
    resolver = build_resolver(routing_cfg)
    scen_cfg = load_scenario(PROJECT_ROOT / "configs" / scenario)
    out_path = PROJECT_ROOT / Path(routing_cfg["output"]["route_table"])

    print(f"    - scenario {scen_cfg.get('name', Path(scenario).stem)}")
    print("        (this may take a few minutes due to API rate limits)")
    result = compute_and_save_routes(
        scen_cfg,
        resolver,
        out_path,
        batch_size=int(routing_cfg["batch_size"]),
        batch_delay_sec=float(routing_cfg["batch_delay_sec"]),
        progress=print_progress,
    )
    print()
    if result.interrupted:
        print("        Interrupted, saved the routes fetched so far")
    print(f"        Completed in {result.elapsed_sec:.1f}s")
    print(f"        {len(result.table)}/{result.total} routes saved to {out_path}")
    print(f"        File size: {out_path.stat().st_size / 1024:.1f} KB")


def main() -> None:
    try:
        precompute_routes()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
