"""
Aquarium Log Backend: Geographic Helpers
==========================================

What:  Great-circle distance and radius search over aquariums.
How:   A latitude/longitude bounding box narrows the candidates in SQL
       (uses idx_aquariums_lat_lng), then the exact haversine distance is
       computed in Python and used to drop corners of the box and to order
       the rows nearest first.
Who:   The `distance` sort of the aquarium listing and GET /aquariums/nearby.

Works the same on PostgreSQL and SQLite since no trigonometric SQL
functions are needed.
"""

import math
from typing import List, NamedTuple, Sequence, Tuple

from sqlalchemy import Select, and_, or_

from aquarium_log.constants import EARTH_RADIUS_KM
from aquarium_log.models.aquarium import Aquarium


class BoundingBox(NamedTuple):
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float
    # True when the box crosses the 180th meridian (min_lng > max_lng)
    wraps: bool


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometres between two WGS84 points."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(d_lng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def bounding_box(lat: float, lng: float, radius_km: float) -> BoundingBox:
    """
    Smallest lat/lng box containing the circle of `radius_km` around a point.

    Near the poles the longitude span becomes the whole globe.
    """
    d_lat = math.degrees(radius_km / EARTH_RADIUS_KM)
    min_lat = max(-90.0, lat - d_lat)
    max_lat = min(90.0, lat + d_lat)

    cos_lat = math.cos(math.radians(lat))
    if max_lat >= 90.0 or min_lat <= -90.0 or cos_lat <= 1e-12:
        return BoundingBox(min_lat, max_lat, -180.0, 180.0, False)

    d_lng = math.degrees(radius_km / (EARTH_RADIUS_KM * cos_lat))
    if d_lng >= 180.0:
        return BoundingBox(min_lat, max_lat, -180.0, 180.0, False)

    min_lng = lng - d_lng
    max_lng = lng + d_lng
    if min_lng < -180.0:
        return BoundingBox(min_lat, max_lat, min_lng + 360.0, max_lng, True)
    if max_lng > 180.0:
        return BoundingBox(min_lat, max_lat, min_lng, max_lng - 360.0, True)
    return BoundingBox(min_lat, max_lat, min_lng, max_lng, False)


def within_box(stmt: Select, box: BoundingBox) -> Select:
    """Add the bounding-box prefilter to a statement selecting Aquarium."""
    lat_clause = Aquarium.latitude.between(box.min_lat, box.max_lat)
    if box.wraps:
        lng_clause = or_(Aquarium.longitude >= box.min_lng, Aquarium.longitude <= box.max_lng)
    else:
        lng_clause = Aquarium.longitude.between(box.min_lng, box.max_lng)
    return stmt.where(and_(lat_clause, lng_clause))


def order_by_distance(
    aquariums: Sequence[Aquarium],
    lat: float,
    lng: float,
    radius_km: float,
) -> List[Tuple[Aquarium, float]]:
    """
    Keep the aquariums within `radius_km` and sort them nearest first.

    Equal distances are ordered by id so repeated reads match.
    """
    pairs = [
        (aquarium, haversine_km(lat, lng, aquarium.latitude, aquarium.longitude))
        for aquarium in aquariums
    ]
    in_range = [pair for pair in pairs if pair[1] <= radius_km]
    in_range.sort(key=lambda pair: (pair[1], pair[0].id))
    return in_range
