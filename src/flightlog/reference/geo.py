"""Great-circle distance and flight duration estimates."""

import math

EARTH_RADIUS_KM = 6371.0
CRUISE_SPEED_KMH = 800
GROUND_OVERHEAD_MIN = 30


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (matches Math.round)."""
    return int(math.floor(value + 0.5))


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> int:
    """Great-circle distance in whole kilometres between two points in degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round_half_up(EARTH_RADIUS_KM * c)


def estimate_duration_min(distance_km: float) -> int:
    """Rough block time: 800 km/h cruise plus 30 minutes on the ground."""
    if distance_km < 0:
        raise ValueError(f"Distance must be non-negative, got {distance_km}")
    return round_half_up(distance_km / CRUISE_SPEED_KMH * 60) + GROUND_OVERHEAD_MIN
