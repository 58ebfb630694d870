"""
Client-side property search helpers.
Haversine distance, radius checks and the listing filter predicate.
These functions are pure and never raise: a listing missing the data a
criterion needs simply does not match.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple, Union
import math
import uuid

EARTH_RADIUS_KM = 6371.0

Coordinates = Tuple[float, float]
Number = Union[int, float, Decimal]


class PropertySearchFilters:
    """
    Search criteria for property listings.

    Every criterion is optional and an absent criterion imposes no
    constraint. ``facilities`` requires all listed tags; an empty list
    behaves like None. The location criterion applies only when
    latitude, longitude and radius_km are all set.
    """

    def __init__(
        self,
        min_price: Optional[Number] = None,
        max_price: Optional[Number] = None,
        property_type: Optional[Any] = None,
        facilities: Optional[List[str]] = None,
        status: Optional[Any] = None,
        query: Optional[str] = None,
        latitude: Optional[Number] = None,
        longitude: Optional[Number] = None,
        radius_km: Optional[Number] = None,
        agent_id: Optional[uuid.UUID] = None,
        min_bedrooms: Optional[int] = None
    ):
        self.min_price = min_price
        self.max_price = max_price
        self.property_type = property_type
        self.facilities = facilities
        self.status = status
        self.query = query
        self.latitude = latitude
        self.longitude = longitude
        self.radius_km = radius_km
        self.agent_id = agent_id
        self.min_bedrooms = min_bedrooms

    @property
    def location(self) -> Optional[Coordinates]:
        if self.latitude is None or self.longitude is None:
            return None
        return float(self.latitude), float(self.longitude)

    @property
    def has_location_filter(self) -> bool:
        return self.location is not None and self.radius_km is not None

    @property
    def needs_client_side_filtering(self) -> bool:
        """True when a criterion cannot be expressed as portable SQL."""
        return bool(self.facilities) or self.has_location_filter

    def __repr__(self) -> str:
        criteria = {k: v for k, v in vars(self).items() if v is not None}
        return f"<PropertySearchFilters {criteria}>"


def calculate_distance(point1: Coordinates, point2: Coordinates) -> float:
    """
    Great-circle distance in kilometres between two (latitude, longitude)
    pairs given in degrees, using the haversine formula.
    """
    lat1, lon1 = point1
    lat2, lon2 = point2

    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    # Rounding can push a slightly past 1 for antipodal points
    a = min(1.0, max(0.0, a))

    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def is_within_radius(point1: Coordinates, point2: Coordinates, radius_km: Number) -> bool:
    return calculate_distance(point1, point2) <= float(radius_km)


def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        return None if math.isnan(number) else number
    return None


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _property_coordinates(property_obj: Any) -> Optional[Coordinates]:
    latitude = _as_number(getattr(property_obj, "latitude", None))
    longitude = _as_number(getattr(property_obj, "longitude", None))
    if latitude is None or longitude is None:
        return None
    return latitude, longitude


def _matches_query(property_obj: Any, query: str) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True

    for field in ("name", "address", "type"):
        value = _enum_value(getattr(property_obj, field, None))
        if isinstance(value, str) and needle in value.lower():
            return True
    return False


def matches_filters(property_obj: Any, filters: PropertySearchFilters) -> bool:
    """
    Return True iff the listing satisfies every criterion set on ``filters``.
    """
    if filters.min_price is not None or filters.max_price is not None:
        price = _as_number(getattr(property_obj, "price", None))
        if price is None:
            return False
        min_price = _as_number(filters.min_price)
        max_price = _as_number(filters.max_price)
        if min_price is not None and price < min_price:
            return False
        if max_price is not None and price > max_price:
            return False

    if filters.property_type is not None:
        if _enum_value(getattr(property_obj, "type", None)) != _enum_value(filters.property_type):
            return False

    if filters.status is not None:
        if _enum_value(getattr(property_obj, "status", None)) != _enum_value(filters.status):
            return False

    if filters.facilities:
        available = getattr(property_obj, "facilities", None)
        if not isinstance(available, (list, tuple, set, frozenset)):
            return False
        if not set(filters.facilities).issubset(available):
            return False

    if filters.query:
        if not _matches_query(property_obj, filters.query):
            return False

    if filters.agent_id is not None:
        if getattr(property_obj, "agent_id", None) != filters.agent_id:
            return False

    if filters.min_bedrooms is not None:
        bedrooms = _as_number(getattr(property_obj, "bedrooms", None))
        if bedrooms is None or bedrooms < filters.min_bedrooms:
            return False

    if filters.has_location_filter:
        coordinates = _property_coordinates(property_obj)
        radius = _as_number(filters.radius_km)
        if coordinates is None or radius is None:
            return False
        if not is_within_radius(coordinates, filters.location, radius):
            return False

    return True


def filter_properties(properties: Iterable[Any], filters: PropertySearchFilters) -> List[Any]:
    """Keep the listings that match ``filters``, preserving order."""
    return [property_obj for property_obj in properties if matches_filters(property_obj, filters)]
