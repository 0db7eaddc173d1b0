"""
Session-level runner that owns the generated network, its route table and
the trips expanded from them.
"""

import logging
import threading
from pathlib import Path
from typing import Any

from evnet.errors import ConfigurationError
from evnet.models import ChargingStation, DemandEdge, RouteGeometry, Trip
from evnet.network import generate_route_network, unique_route_pairs
from evnet.prng import SeededRandom
from evnet.route_table import load_route_table
from evnet.routing import RouteResolver, build_resolver
from evnet.stations import generate_stations_from_config
from evnet.trips import generate_trips, load_vehicle_profiles


logger = logging.getLogger(__name__)


class NetworkPipeline:
    """
    Generate stations and demand edges once, resolve their routes once, and
    expand trips from them. Each instance holds its own generators, cache and
    flags, so independent pipelines never share state.

    Routes come from `resolver` when given, otherwise from a resolver built
    from `routing_cfg`. When no resolver can be built for lack of a
    credential, the precomputed table at `fallback_table_path` is used
    instead.
    """

    def __init__(
        self,
        scenario_cfg: dict[str, Any],
        *,
        resolver: RouteResolver | None = None,
        routing_cfg: dict[str, Any] | None = None,
        fallback_table_path: str | Path | None = None,
        batch_size: int = 5,
        batch_delay_sec: float = 0.15,
    ):
        self.scenario_cfg = scenario_cfg
        self.routing_cfg = routing_cfg
        self.fallback_table_path = fallback_table_path
        self.batch_size = batch_size
        self.batch_delay_sec = batch_delay_sec
        self.loop_length = float(scenario_cfg["loop_length"])
        self.profiles = load_vehicle_profiles(scenario_cfg["vehicles"])
        self._resolver = resolver
        self._lock = threading.Lock()
        self._stations: list[ChargingStation] | None = None
        self._edges: list[DemandEdge] | None = None
        self._route_table: dict[str, RouteGeometry] = {}
        self._trips: list[Trip] | None = None
        self._routes_loaded = False
        self._loading = False
        self.route_source: str | None = None

    @property
    def stations(self) -> list[ChargingStation]:
        if self._stations is None:
            self._stations = generate_stations_from_config(self.scenario_cfg)
        return self._stations

    @property
    def edges(self) -> list[DemandEdge]:
        if self._edges is None:
            seed = int(self.scenario_cfg["seeds"]["network"])
            self._edges = generate_route_network(self.stations, SeededRandom(seed))
        return self._edges

    @property
    def route_table(self) -> dict[str, RouteGeometry]:
        return dict(self._route_table)

    @property
    def routes_loaded(self) -> bool:
        return self._routes_loaded

    @property
    def is_loading(self) -> bool:
        return self._loading

    def load_routes(self) -> bool:
        """
        Load the route table. Returns False without doing anything when the
        routes are already loaded or another caller is loading them.
        """
        with self._lock:
            if self._routes_loaded or self._loading:
                return False
            self._loading = True
        try:
            table = self._load_table()
            with self._lock:
                self._route_table = table
                self._trips = None
                self._routes_loaded = True
        finally:
            with self._lock:
                self._loading = False
        logger.info(
            "Loaded %d route geometries from %s", len(table), self.route_source
        )
        return True

    def trips(self) -> list[Trip]:
        """
        Trips of the loaded network, expanded once per load. Empty until the
        routes are loaded.
        """
        if not self._routes_loaded:
            return []
        with self._lock:
            if self._trips is None:
                self._trips = self._expand()
            return list(self._trips)

    def refresh_trips(self) -> list[Trip]:
        """
        Regenerate all trips from the current route table.
        """
        with self._lock:
            self._trips = self._expand() if self._routes_loaded else None
        return self.trips()

    def _expand(self) -> list[Trip]:
        seed = int(self.scenario_cfg["seeds"]["trips"])
        return generate_trips(
            self.edges,
            self._route_table,
            self.profiles,
            SeededRandom(seed),
            self.loop_length,
        )

    def _load_table(self) -> dict[str, RouteGeometry]:
        resolver = self._resolver
        if resolver is None and self.routing_cfg is not None:
            try:
                resolver = build_resolver(self.routing_cfg)
            except ConfigurationError:
                if self.fallback_table_path is None:
                    raise
                logger.warning(
                    "No routing credential, falling back to %s",
                    self.fallback_table_path,
                )
        if resolver is None:
            if self.fallback_table_path is None:
                raise ConfigurationError(
                    "No route resolver and no precomputed route table configured"
                )
            self.route_source = str(self.fallback_table_path)
            return load_route_table(self.fallback_table_path)

        jobs = [
            (key, a.coordinates, b.coordinates)
            for key, a, b in unique_route_pairs(self.edges)
        ]
        table: dict[str, RouteGeometry] = {}
        for batch in resolver.resolve_batches(jobs, self.batch_size, self.batch_delay_sec):
            table.update({k: g for k, g in batch.items() if g is not None})
        self.route_source = "directions service"
        return table
