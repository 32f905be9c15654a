from __future__ import annotations

import math
from typing import Tuple

# Points are (lon, lat) tuples, the same order the session stores them in.
LonLat = Tuple[float, float]
Vector = Tuple[float, float]

EARTH_RADIUS_KM = 6371.0


def validate_lon_lat(point: LonLat) -> LonLat:
    """Return ``point`` as floats, raising ValueError for non-finite or out-of-range values."""
    lon, lat = float(point[0]), float(point[1])
    if not (math.isfinite(lon) and math.isfinite(lat)):
        raise ValueError("Coordinates must be finite numbers")
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"Latitude {lat} outside [-90, 90]")
    if not -180.0 <= lon <= 180.0:
        raise ValueError(f"Longitude {lon} outside [-180, 180]")
    return lon, lat


def haversine_km(p1: LonLat, p2: LonLat) -> float:
    lon1, lat1 = p1
    lon2, lat2 = p2
    dlon = math.radians(lon2 - lon1)
    dlat = math.radians(lat2 - lat1)
    a = math.sin(dlat / 2) ** 2 + math.cos(math.radians(lat1)) * math.cos(
        math.radians(lat2)
    ) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def projected_delta(origin: LonLat, target: LonLat) -> Vector:
    """
    Flat (east_km, north_km) displacement from origin to target.

    Equirectangular approximation: the longitude difference is wrapped across the
    antimeridian and scaled by cos(mean latitude). Only good over short spans; it
    is used for direction estimates, never for distance thresholds.
    """
    lon1, lat1 = origin
    lon2, lat2 = target
    dlon = (lon2 - lon1 + 180.0) % 360.0 - 180.0
    mean_lat = math.radians((lat1 + lat2) / 2)
    east = math.radians(dlon) * math.cos(mean_lat) * EARTH_RADIUS_KM
    north = math.radians(lat2 - lat1) * EARTH_RADIUS_KM
    return east, north


def normalize(vector: Vector) -> Vector:
    length = math.hypot(vector[0], vector[1])
    if length == 0:
        return 0.0, 0.0
    return vector[0] / length, vector[1] / length


def dot(a: Vector, b: Vector) -> float:
    return a[0] * b[0] + a[1] * b[1]


def alignment(move_from: LonLat, move_to: LonLat, seg_from: LonLat, seg_to: LonLat) -> float:
    """Cosine between the movement move_from->move_to and the segment seg_from->seg_to, in [-1, 1]."""
    move = normalize(projected_delta(move_from, move_to))
    segment = normalize(projected_delta(seg_from, seg_to))
    return dot(move, segment)
