#!/usr/bin/env python3
"""
Park Linking — Geospatial Proximity

Computes distance-based similarity between park locations using the
Haversine formula and an exponential decay curve.  The curve is gentle
near zero so that the few hundred metres of disagreement typical between
independently surveyed coordinates for the same park barely move the
score, while points tens of kilometres apart score close to zero.

No external geo-libraries required — pure math with stdlib.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EARTH_RADIUS_KM = 6371.0

# Distance at which the proximity score has fallen to 1/e (~0.37)
DEFAULT_DECAY_KM = 10.0


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 coordinate pair."""
    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        """Check whether coordinates fall within the WGS84 ranges."""
        return (
            -90.0 <= self.latitude <= 90.0
            and -180.0 <= self.longitude <= 180.0
        )


def coerce_coordinate(lat: object, lon: object) -> Coordinate | None:
    """
    Build a Coordinate from raw latitude/longitude values.

    Returns None when either value is missing, non-numeric, not finite,
    or the pair falls outside the WGS84 ranges.  Zero is a valid value.
    """
    if lat is None or lon is None or isinstance(lat, bool) or isinstance(lon, bool):
        return None
    try:
        coord = Coordinate(latitude=float(lat), longitude=float(lon))
    except (TypeError, ValueError):
        return None

    if not (math.isfinite(coord.latitude) and math.isfinite(coord.longitude)):
        return None
    if not coord.is_valid():
        return None
    return coord


# ---------------------------------------------------------------------------
# Core distance calculation
# ---------------------------------------------------------------------------


def haversine_km(coord_a: Coordinate, coord_b: Coordinate) -> float:
    """
    Compute the great-circle distance in kilometres between two WGS84 points
    using the Haversine formula.
    """
    lat1 = math.radians(coord_a.latitude)
    lat2 = math.radians(coord_b.latitude)
    dlat = math.radians(coord_b.latitude - coord_a.latitude)
    dlon = math.radians(coord_b.longitude - coord_a.longitude)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    )
    # Rounding can push a marginally above 1.0 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def distance_to_similarity(distance_km: float, decay_km: float = DEFAULT_DECAY_KM) -> float:
    """
    Map a distance to a proximity score in (0.0, 1.0].

    Scoring curve: exp(-distance / decay_km)
        - distance == 0          → 1.0
        - distance == 0.2 km     → ~0.98 (default decay)
        - distance == decay_km   → ~0.37
        - distance >= 5 × decay  → < 0.01
    """
    if distance_km <= 0:
        return 1.0
    return math.exp(-distance_km / decay_km)


def location_similarity(
    coord_a: Coordinate | None,
    coord_b: Coordinate | None,
    *,
    decay_km: float = DEFAULT_DECAY_KM,
) -> float:
    """
    Compute a proximity similarity score in [0.0, 1.0].

    A missing or unusable coordinate on either side (None, non-numeric or
    non-finite parts) scores 0.0, meaning "no location signal" rather than
    "different place".
    """
    if coord_a is None or coord_b is None:
        return 0.0
    coord_a = coerce_coordinate(coord_a.latitude, coord_a.longitude)
    coord_b = coerce_coordinate(coord_b.latitude, coord_b.longitude)
    if coord_a is None or coord_b is None:
        return 0.0
    return distance_to_similarity(haversine_km(coord_a, coord_b), decay_km)
