"""Great-circle distance helpers for radius search"""

import math
from typing import Any, Callable, Iterable, Optional

EARTH_RADIUS_KM = 6371
DEFAULT_RADIUS_KM = 30


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in kilometers between two GPS coordinates (Haversine formula)"""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def has_coordinates(lat: Optional[float], lon: Optional[float]) -> bool:
    """(0, 0) is how listings without a geocoded address are stored"""
    if lat is None or lon is None:
        return False
    return not (lat == 0 and lon == 0)


def is_within_radius(
    item_lat: float,
    item_lon: float,
    center_lat: float,
    center_lon: float,
    radius_km: float = DEFAULT_RADIUS_KM,
) -> bool:
    if not has_coordinates(item_lat, item_lon):
        return False
    return calculate_distance(item_lat, item_lon, center_lat, center_lon) <= radius_km


def filter_by_radius(
    items: Iterable[Any],
    center_lat: float,
    center_lon: float,
    radius_km: float = DEFAULT_RADIUS_KM,
    coordinates: Callable[[Any], tuple[float, float]] = lambda item: (item.latitude, item.longitude),
) -> list[tuple[Any, float]]:
    """
    Keep the items within `radius_km` of the center point.

    Returns (item, distance_km) pairs sorted closest first. Items without
    coordinates are always excluded.
    """
    results = []
    for item in items:
        lat, lon = coordinates(item)
        if not has_coordinates(lat, lon):
            continue
        distance = calculate_distance(lat, lon, center_lat, center_lon)
        if distance <= radius_km:
            results.append((item, distance))

    results.sort(key=lambda pair: pair[1])
    return results
