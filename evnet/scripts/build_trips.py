"""
Expand the scenario's demand network into trips using the precomputed route
table, and write stations, trips and summary statistics.
"""

from pathlib import Path

from evnet.config import PROJECT_ROOT, load_routing, load_scenario
from evnet.export import to_record
from evnet.io import ensure_dir, file_sha256, write_csv_rows, write_json, write_manifest
from evnet.metrics import summarize_stations, summarize_trips, trips_by_type_rows
from evnet.pipeline import NetworkPipeline


def build_trips(scenario: str = "netherlands.yaml") -> None:
    routing_cfg = load_routing(PROJECT_ROOT / "configs" / "routing.yaml")
    data_dir = PROJECT_ROOT / Path(routing_cfg["output"].get("data_dir", "data"))
    table_path = PROJECT_ROOT / Path(routing_cfg["output"]["route_table"])
    scen_cfg = load_scenario(PROJECT_ROOT / "configs" / scenario)
    scen_name = scen_cfg.get("name", Path(scenario).stem)

    print(f"    - scenario {scen_name}")
    pipeline = NetworkPipeline(scen_cfg, fallback_table_path=table_path)
    pipeline.load_routes()
    trips = pipeline.trips()
    print(f"        - {len(pipeline.route_table)} route geometries")
    print(f"        - {len(trips)} trips")

    out_dir = ensure_dir(data_dir / "trips" / scen_name)
    write_json(out_dir / "stations.json", [to_record(s) for s in pipeline.stations])
    write_json(out_dir / "trips.json", [to_record(t) for t in trips], indent=None)
    write_json(
        out_dir / "network_summary.json",
        {
            "stations": summarize_stations(pipeline.stations),
            "trips": summarize_trips(trips),
            "loop_length": pipeline.loop_length,
        },
    )
    write_csv_rows(out_dir / "trips_by_type.csv", trips_by_type_rows(trips))
    write_manifest(
        out_dir / "manifest.json",
        {
            "scenario": scen_name,
            "seeds": scen_cfg["seeds"],
            "route_table": str(table_path),
            "route_table_sha256": file_sha256(table_path),
            "counts": {
                "n_stations": len(pipeline.stations),
                "n_edges": len(pipeline.edges),
                "n_trips": len(trips),
            },
        },
    )


def main() -> None:
    build_trips()


if __name__ == "__main__":
    main()
