import math
from typing import NamedTuple, Optional, Dict


EARTH_RADIUS_KM = 6371


class LatLng(NamedTuple):
    """A geographic point in decimal degrees"""
    lat: float
    lng: float


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in km between two points (haversine)"""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (math.sin(d_lat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(d_lon / 2) ** 2)
    # Rounding can push a just outside [0, 1] for antipodal points
    a = min(max(a, 0.0), 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _is_coordinate(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def point_coordinates(feature: Dict) -> Optional[LatLng]:
    """Return the feature's point as LatLng, or None if the geometry is unusable"""
    geometry = feature.get('geometry') if isinstance(feature, dict) else None
    if not geometry or geometry.get('type') != 'Point':
        return None

    coordinates = geometry.get('coordinates')
    if not isinstance(coordinates, (list, tuple)) or len(coordinates) != 2:
        return None

    lng, lat = coordinates
    if not (_is_coordinate(lat) and _is_coordinate(lng)):
        return None
    return LatLng(lat, lng)
