"""
Route geometry resolution through a driving-directions service.

`MapboxDirectionsClient` issues a single request and classifies failures;
`RouteResolver` adds the in-memory cache, the retry policy and batched
concurrent resolution on top of any client with the same `fetch` method.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterator, Protocol
import requests

from evnet.config import get_routing_token
from evnet.errors import (
    PermanentRoutingFailure,
    RateLimitedError,
    TransientRoutingFailure,
)
from evnet.models import Coord, RouteGeometry


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.mapbox.com/directions/v5"
DEFAULT_PROFILE = "mapbox/driving"

# (route key, start coordinates, end coordinates)
RouteJob = tuple[str, Coord, Coord]


class DirectionsClient(Protocol):
    def fetch(self, start: Coord, end: Coord) -> RouteGeometry:
        ...


class MapboxDirectionsClient:
    """
    Client for the Mapbox Directions API. `fetch` returns the first route of
    the response or raises a `RoutingError` subclass.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        profile: str = DEFAULT_PROFILE,
        timeout_sec: float = 15.0,
        session: requests.Session | None = None,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.profile = profile.strip("/")
        self.timeout_sec = timeout_sec
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def route_url(self, start: Coord, end: Coord) -> str:
        return (
            f"{self.base_url}/{self.profile}/"
            f"{start[0]},{start[1]};{end[0]},{end[1]}"
        )

    def fetch(self, start: Coord, end: Coord) -> RouteGeometry:
        try:
            response = self.session.get(
                self.route_url(start, end),
                params={"geometries": "geojson", "access_token": self.token},
                timeout=self.timeout_sec,
            )
        except requests.RequestException as exc:
            raise TransientRoutingFailure(f"Request failed: {exc}") from exc

        status = response.status_code
        if status == 429:
            raise RateLimitedError("Rate limited by directions service", status)
        if status == 408 or status >= 500:
            raise TransientRoutingFailure(f"Directions service error {status}", status)
        if status >= 400:
            raise PermanentRoutingFailure(f"Directions request rejected {status}", status)

        try:
            data = response.json()
        except ValueError as exc:
            raise PermanentRoutingFailure("Malformed directions payload", status) from exc
        return _parse_route(data, status)


class RouteResolver:
    """
    Resolve coordinate pairs to route geometries with a permanent in-memory
    cache. A rate-limited request is retried after `retry_delay_sec *
    2**attempt`; any other transient failure after a flat `retry_delay_sec`.
    After `max_retries` retries, or on a permanent failure, the pair resolves
    to None.
    """

    def __init__(
        self,
        client: DirectionsClient,
        max_retries: int = 3,
        retry_delay_sec: float = 2.0,
        sleep: Callable[[float], Any] = time.sleep,
    ):
        self.client = client
        self.max_retries = max_retries
        self.retry_delay_sec = retry_delay_sec
        self._sleep = sleep
        self._cache: dict[str, RouteGeometry] = {}
        self._lock = threading.Lock()
        self.request_count = 0

    @staticmethod
    def cache_key(start: Coord, end: Coord) -> str:
        return f"{start[0]:.4f},{start[1]:.4f}-{end[0]:.4f},{end[1]:.4f}"

    def cached(self, start: Coord, end: Coord) -> RouteGeometry | None:
        return self._cache.get(self.cache_key(start, end))

    def clear_cache(self) -> None:
        self._cache.clear()

    def resolve(self, start: Coord, end: Coord) -> RouteGeometry | None:
        key = self.cache_key(start, end)
        hit = self._cache.get(key)
        if hit is not None:
            logger.debug("Route cache hit %s", key)
            return hit
        geometry = self._fetch_with_retry(start, end)
        if geometry is not None:
            self._cache[key] = geometry
        return geometry

    def resolve_batches(
        self,
        jobs: list[RouteJob],
        batch_size: int = 2,
        batch_delay_sec: float = 0.5,
    ) -> Iterator[dict[str, RouteGeometry | None]]:
        """
        Resolve jobs in batches of at most `batch_size` concurrent requests,
        yielding `{route_key: geometry or None}` after each batch and pausing
        `batch_delay_sec` between batches. Stopping the iteration between
        batches leaves every yielded result valid.
        """
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        with ThreadPoolExecutor(max_workers=batch_size) as pool:
            for i in range(0, len(jobs), batch_size):
                batch = jobs[i:i + batch_size]
                results = list(
                    pool.map(lambda job: self.resolve(job[1], job[2]), batch)
                )
                yield {key: geom for (key, _, _), geom in zip(batch, results)}
                if i + batch_size < len(jobs):
                    self._sleep(batch_delay_sec)

    def _fetch_with_retry(self, start: Coord, end: Coord) -> RouteGeometry | None:
        for attempt in range(self.max_retries + 1):
            with self._lock:
                self.request_count += 1
            try:
                return self.client.fetch(start, end)
            except RateLimitedError:
                wait = self.retry_delay_sec * 2 ** attempt
                reason = "rate limited"
            except TransientRoutingFailure as exc:
                wait = self.retry_delay_sec
                reason = str(exc)
            except PermanentRoutingFailure as exc:
                logger.warning("No route %s -> %s: %s", start, end, exc)
                return None

            if attempt >= self.max_retries:
                logger.error(
                    "Giving up on %s -> %s after %d retries (%s)",
                    start, end, self.max_retries, reason,
                )
                return None
            logger.warning(
                "Retry %d/%d for %s -> %s in %.2fs (%s)",
                attempt + 1, self.max_retries, start, end, wait, reason,
            )
            self._sleep(wait)
        return None


def build_resolver(
    routing_cfg: dict[str, Any],
    session: requests.Session | None = None,
) -> RouteResolver:
    """
    Build a resolver from a routing config. Raises `ConfigurationError` when
    no access token is available.
    """
    token = get_routing_token(routing_cfg)
    client = MapboxDirectionsClient(
        token,
        base_url=str(routing_cfg.get("base_url", DEFAULT_BASE_URL)),
        profile=str(routing_cfg.get("profile", DEFAULT_PROFILE)),
        timeout_sec=float(routing_cfg.get("timeout_sec", 15.0)),
        session=session,
    )
    return RouteResolver(
        client,
        max_retries=int(routing_cfg.get("max_retries", 3)),
        retry_delay_sec=float(routing_cfg.get("retry_delay_sec", 2.0)),
    )


def _parse_route(data: Any, status: int) -> RouteGeometry:
    routes = data.get("routes") if isinstance(data, dict) else None
    if not routes:
        code = data.get("code") if isinstance(data, dict) else None
        raise PermanentRoutingFailure(f"No route found ({code})", status)
    route = routes[0]
    try:
        coordinates = tuple(
            (float(p[0]), float(p[1])) for p in route["geometry"]["coordinates"]
        )
        return RouteGeometry(
            coordinates=coordinates,
            duration=float(route["duration"]),
            distance=float(route["distance"]),
        )
    except (KeyError, TypeError, IndexError, ValueError) as exc:
        raise PermanentRoutingFailure("Malformed route in payload", status) from exc
