"""Tests for haversine distance."""

import math

import pytest

from ranchwatch.core.geo import haversine_distance
from ranchwatch.core.models import GeoPoint

MEXICO_CITY = GeoPoint(19.4326, -99.1332, "Ciudad de México")
GUADALAJARA = GeoPoint(20.6597, -103.3496, "Guadalajara")


@pytest.mark.core
class TestHaversineDistance:
    def test_mexico_city_to_guadalajara(self) -> None:
        """The two cities are roughly 460-470 km apart."""
        distance = haversine_distance(MEXICO_CITY, GUADALAJARA)
        assert 455 <= distance <= 475

    def test_distance_is_symmetric(self) -> None:
        assert haversine_distance(MEXICO_CITY, GUADALAJARA) == pytest.approx(
            haversine_distance(GUADALAJARA, MEXICO_CITY)
        )

    def test_same_point_is_zero(self) -> None:
        assert haversine_distance(MEXICO_CITY, MEXICO_CITY) == 0.0

    def test_antipodal_points_are_half_the_circumference(self) -> None:
        distance = haversine_distance(GeoPoint(0.0, 0.0), GeoPoint(0.0, 180.0))
        assert distance == pytest.approx(math.pi * 6371.0)

    def test_missing_coordinates_give_nan(self) -> None:
        """Unvalidated input propagates as NaN instead of raising."""
        unknown = GeoPoint.from_mapping({"address": "somewhere"})
        assert math.isnan(haversine_distance(MEXICO_CITY, unknown))
