"""
Functions to compute summary statistics of a network and its trips.
"""

from typing import Any
import pandas as pd

from evnet.models import ChargingStation, Trip


STATION_TYPES = ["superfast", "fast", "standard"]
TRIP_TYPES = ["commuter", "roadtrip", "delivery"]


def stations_frame(stations: list[ChargingStation]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "id": s.id,
                "type": s.type,
                "operator": s.operator,
                "chargers": s.chargers,
                "available": s.available,
                "price_per_kwh": s.price_per_kwh,
            }
            for s in stations
        ],
        columns=["id", "type", "operator", "chargers", "available", "price_per_kwh"],
    )


def trips_frame(trips: list[Trip]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "id": t.id,
                "trip_type": t.trip_type,
                "vehicle_type": t.vehicle_type,
                "battery_start": t.battery_start,
                "battery_end": t.battery_end,
                "distance_km": t.distance_km,
                "duration": t.end_time - t.start_time,
            }
            for t in trips
        ],
        columns=[
            "id", "trip_type", "vehicle_type", "battery_start",
            "battery_end", "distance_km", "duration",
        ],
    )


def summarize_stations(stations: list[ChargingStation]) -> dict[str, Any]:
    """
    Summarize the station set: counts per type, charger totals and the share
    of chargers in use.
    """
    df = stations_frame(stations)
    by_type = df["type"].value_counts()
    total_chargers = int(df["chargers"].sum())
    available = int(df["available"].sum())
    utilization = (
        round((total_chargers - available) / total_chargers * 100)
        if total_chargers > 0 else 0
    )
    return {
        "total_stations": int(len(df)),
        **{t: int(by_type.get(t, 0)) for t in STATION_TYPES},
        "total_chargers": total_chargers,
        "available_chargers": available,
        "utilization_pct": int(utilization),
        "operators": {k: int(v) for k, v in df["operator"].value_counts().sort_index().items()},
    }


def summarize_trips(trips: list[Trip]) -> dict[str, Any]:
    """
    Summarize the trips, grouped by their `trip_type` field.
    """
    df = trips_frame(trips)
    by_type = df["trip_type"].value_counts()
    return {
        "total_trips": int(len(df)),
        **{f"{t}_trips": int(by_type.get(t, 0)) for t in TRIP_TYPES},
        "by_vehicle_type": {
            k: int(v) for k, v in df["vehicle_type"].value_counts().sort_index().items()
        },
        "mean_battery_start": _mean(df["battery_start"]),
        "mean_battery_end": _mean(df["battery_end"]),
        "mean_distance_km": _mean(df["distance_km"]),
    }


def trips_by_type_rows(trips: list[Trip]) -> list[dict[str, Any]]:
    """
    One row per trip type with count, mean distance and mean battery use.
    """
    df = trips_frame(trips)
    rows = []
    for trip_type in TRIP_TYPES:
        sub = df[df["trip_type"] == trip_type]
        rows.append(
            {
                "trip_type": trip_type,
                "count": int(len(sub)),
                "mean_distance_km": _mean(sub["distance_km"]),
                "mean_battery_used": _mean(sub["battery_start"] - sub["battery_end"]),
                "mean_duration": _mean(sub["duration"]),
            }
        )
    return rows


def _mean(series: pd.Series) -> float | None:
    values = pd.to_numeric(series, errors="coerce").dropna()
    if values.empty:
        return None
    return float(values.mean())
