import math
from typing import Optional, Tuple

from apps.core.config import settings


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometres"""
    R = settings.earth_radius_km
    p1, p2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dlmb / 2) ** 2
    return 2 * R * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def valid_coordinates(lat, lng) -> Optional[Tuple[float, float]]:
    """Return ``(lat, lng)`` as floats, or None if either is missing, non-numeric or out of range."""
    if isinstance(lat, bool) or isinstance(lng, bool):
        return None
    try:
        lat_f, lng_f = float(lat), float(lng)
    except (TypeError, ValueError):
        return None
    if math.isnan(lat_f) or math.isnan(lng_f) or math.isinf(lat_f) or math.isinf(lng_f):
        return None
    if not (-90 <= lat_f <= 90 and -180 <= lng_f <= 180):
        return None
    return lat_f, lng_f


def within_radius(lat, lng, center_lat: float, center_lng: float, radius_km: float) -> bool:
    """Inclusive radius check; points without usable coordinates never pass."""
    coords = valid_coordinates(lat, lng)
    if coords is None:
        return False
    return haversine_km(center_lat, center_lng, coords[0], coords[1]) <= radius_km

