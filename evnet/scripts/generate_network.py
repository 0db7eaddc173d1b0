"""
Generate the charging stations and demand network of the scenario.
"""

from pathlib import Path

from evnet.config import PROJECT_ROOT, load_routing, load_scenario
from evnet.network import generate_route_network, write_network
from evnet.prng import SeededRandom
from evnet.stations import generate_stations_for_scenario


def generate_network(scenario: str = "netherlands.yaml") -> None:
    routing_cfg = load_routing(PROJECT_ROOT / "configs" / "routing.yaml")
    data_dir = PROJECT_ROOT / Path(routing_cfg["output"].get("data_dir", "data"))
    scen_cfg = load_scenario(PROJECT_ROOT / "configs" / scenario)
    scen_name = scen_cfg.get("name", Path(scenario).stem)

    print(f"    - scenario {scen_name}")
    stations = generate_stations_for_scenario(scen_cfg, data_dir)
    print(f"        - {len(stations)} charging stations")

    seed = int(scen_cfg["seeds"]["network"])
    edges = generate_route_network(stations, SeededRandom(seed))
    write_network(
        data_dir / "network" / scen_name,
        stations,
        edges,
        {"scenario": scen_name, "seed": seed},
    )
    print(f"        - {len(edges)} demand edges")


def main() -> None:
    generate_network()


if __name__ == "__main__":
    main()
