"""
Tests for the client-side search helpers: distance, radius and the listing
filter predicate.
"""

import math
import uuid
from decimal import Decimal
from types import SimpleNamespace

import pytest

from realty.models.property import PropertyType, PropertyStatus
from realty.utils.search import (
    EARTH_RADIUS_KM,
    PropertySearchFilters,
    calculate_distance,
    filter_properties,
    is_within_radius,
    matches_filters
)


def make_listing(**overrides):
    data = {
        "name": "Harbour View Apartment",
        "address": "3 Marina Street, Larnaca",
        "type": PropertyType.APARTMENT,
        "status": PropertyStatus.AVAILABLE,
        "price": Decimal("1200.00"),
        "bedrooms": 2,
        "facilities": ["Wifi", "Gym", "Laundry"],
        "latitude": Decimal("34.9167"),
        "longitude": Decimal("33.6333"),
        "agent_id": uuid.UUID(int=1),
    }
    data.update(overrides)
    return SimpleNamespace(**data)


class TestCalculateDistance:
    """Haversine distance."""

    def test_zero_distance(self):
        assert calculate_distance((34.9, 33.6), (34.9, 33.6)) == 0

    def test_symmetric(self):
        a, b = (51.5074, -0.1278), (48.8566, 2.3522)
        assert calculate_distance(a, b) == pytest.approx(calculate_distance(b, a))

    def test_london_to_paris(self):
        assert calculate_distance((51.5074, -0.1278), (48.8566, 2.3522)) == pytest.approx(343.5, abs=1.0)

    def test_antipodal_points(self):
        distance = calculate_distance((0.0, 0.0), (0.0, 180.0))
        assert distance == pytest.approx(math.pi * EARTH_RADIUS_KM)

    def test_one_degree_of_latitude(self):
        assert calculate_distance((0.0, 0.0), (1.0, 0.0)) == pytest.approx(111.19, abs=0.01)

    def test_within_radius_is_inclusive(self):
        a, b = (0.0, 0.0), (1.0, 0.0)
        distance = calculate_distance(a, b)
        assert is_within_radius(a, b, distance)
        assert not is_within_radius(a, b, distance - 0.001)


class TestMatchesFilters:
    """Every set criterion must hold; absent criteria impose nothing."""

    def test_empty_filters_match_everything(self):
        listings = [make_listing(), make_listing(price=None, facilities=None, latitude=None)]
        assert filter_properties(listings, PropertySearchFilters()) == listings

    def test_price_range_is_inclusive(self):
        listing = make_listing(price=Decimal("1000"))
        assert matches_filters(listing, PropertySearchFilters(min_price=1000, max_price=1000))
        assert not matches_filters(listing, PropertySearchFilters(min_price=1000.01))
        assert not matches_filters(listing, PropertySearchFilters(max_price=999))

    def test_missing_price_never_matches_price_filter(self):
        assert not matches_filters(make_listing(price=None), PropertySearchFilters(min_price=0))
        assert not matches_filters(make_listing(price="cheap"), PropertySearchFilters(max_price=10))

    def test_type_and_status_accept_enum_or_value(self):
        listing = make_listing()
        assert matches_filters(listing, PropertySearchFilters(property_type=PropertyType.APARTMENT))
        assert matches_filters(listing, PropertySearchFilters(property_type="Apartment"))
        assert not matches_filters(listing, PropertySearchFilters(property_type=PropertyType.VILLA))
        assert matches_filters(listing, PropertySearchFilters(status="Available"))
        assert not matches_filters(listing, PropertySearchFilters(status=PropertyStatus.SOLD))

    def test_facilities_must_all_be_present(self):
        listing = make_listing()
        assert matches_filters(listing, PropertySearchFilters(facilities=["Wifi", "Gym"]))
        assert not matches_filters(listing, PropertySearchFilters(facilities=["Wifi", "Swimming pool"]))

    def test_empty_facilities_list_is_no_constraint(self):
        assert matches_filters(make_listing(facilities=[]), PropertySearchFilters(facilities=[]))

    def test_facilities_missing_on_listing(self):
        assert not matches_filters(make_listing(facilities=None), PropertySearchFilters(facilities=["Wifi"]))

    def test_query_matches_name_address_or_type(self):
        listing = make_listing()
        assert matches_filters(listing, PropertySearchFilters(query="harbour"))
        assert matches_filters(listing, PropertySearchFilters(query="LARNACA"))
        assert matches_filters(listing, PropertySearchFilters(query="apart"))
        assert not matches_filters(listing, PropertySearchFilters(query="villa"))

    def test_location_filter(self):
        listing = make_listing()
        nearby = PropertySearchFilters(latitude=34.92, longitude=33.63, radius_km=5)
        far_away = PropertySearchFilters(latitude=35.17, longitude=33.36, radius_km=5)
        assert matches_filters(listing, nearby)
        assert not matches_filters(listing, far_away)

    def test_location_filter_skips_listings_without_coordinates(self):
        listing = make_listing(latitude=None, longitude=None)
        assert not matches_filters(listing, PropertySearchFilters(latitude=0, longitude=0, radius_km=20000))

    def test_partial_location_is_no_constraint(self):
        listing = make_listing(latitude=None, longitude=None)
        filters = PropertySearchFilters(latitude=34.9, radius_km=1)
        assert not filters.has_location_filter
        assert matches_filters(listing, filters)

    def test_agent_and_bedrooms(self):
        listing = make_listing()
        assert matches_filters(listing, PropertySearchFilters(agent_id=uuid.UUID(int=1), min_bedrooms=2))
        assert not matches_filters(listing, PropertySearchFilters(agent_id=uuid.UUID(int=2)))
        assert not matches_filters(listing, PropertySearchFilters(min_bedrooms=3))

    def test_listing_missing_attributes_does_not_raise(self):
        bare = SimpleNamespace()
        filters = PropertySearchFilters(
            min_price=1,
            property_type="Villa",
            facilities=["Wifi"],
            query="x",
            latitude=0,
            longitude=0,
            radius_km=1
        )
        assert matches_filters(bare, filters) is False

    def test_filter_properties_preserves_order(self):
        listings = [make_listing(name=f"Flat {i}", price=Decimal(i * 100)) for i in range(1, 6)]
        result = filter_properties(listings, PropertySearchFilters(min_price=200, max_price=400))
        assert [p.name for p in result] == ["Flat 2", "Flat 3", "Flat 4"]

    def test_needs_client_side_filtering(self):
        assert not PropertySearchFilters(min_price=1, query="x").needs_client_side_filtering
        assert not PropertySearchFilters(facilities=[]).needs_client_side_filtering
        assert PropertySearchFilters(facilities=["Wifi"]).needs_client_side_filtering
        assert PropertySearchFilters(latitude=1, longitude=1, radius_km=1).needs_client_side_filtering
