#!/usr/bin/env python3
"""
test_geo.py - Tests for Waypoint Projection

Tests for:
- Local (north/east/up) offset projection
- Polar (radius/bearing) offset projection
- Haversine distance

Run with:
    pytest tests/test_geo.py -v
"""

import math

import pytest

from examples.common.geo import (
    EARTH_RADIUS_M,
    METERS_PER_DEGREE_LATITUDE,
    GeoPosition,
    LocalOffset,
    PolarOffset,
    distance_m,
    project_local_offset,
    project_polar_offset,
)


# =============================================================================
# GeoPosition Tests
# =============================================================================


class TestGeoPosition:
    """Tests for GeoPosition dataclass."""

    def test_home_altitude(self, home_position):
        """Test home altitude is absolute minus relative altitude."""
        assert home_position.home_altitude_m == 450.0

    def test_from_telemetry(self):
        """Test conversion from a telemetry-shaped object."""

        class Position:
            latitude_deg = 1.0
            longitude_deg = 2.0
            absolute_altitude_m = 3.0
            relative_altitude_m = 4.0

        position = GeoPosition.from_telemetry(Position())
        assert position == GeoPosition(1.0, 2.0, 3.0, 4.0)

    def test_immutable(self, home_position):
        """Test positions cannot be modified."""
        with pytest.raises(AttributeError):
            home_position.latitude_deg = 0.0


# =============================================================================
# Local Offset Tests
# =============================================================================


class TestProjectLocalOffset:
    """Tests for project_local_offset."""

    def test_zero_offset(self, home_position):
        """Test zero offset keeps the horizontal position."""
        result = project_local_offset(home_position, LocalOffset(0.0, 0.0, 0.0))

        assert abs(result.latitude_deg - home_position.latitude_deg) < 1e-9
        assert abs(result.longitude_deg - home_position.longitude_deg) < 1e-9

    def test_zero_offset_altitude_is_home(self, home_position):
        """Test zero up offset puts the setpoint at home altitude."""
        result = project_local_offset(home_position, LocalOffset(0.0, 0.0, 0.0))
        assert result.absolute_altitude_m == home_position.home_altitude_m

    def test_one_degree_north(self, home_position):
        """Test 111111m north moves one degree of latitude."""
        result = project_local_offset(home_position, LocalOffset(north_m=111111.0))

        assert abs(result.latitude_deg - (home_position.latitude_deg + 1.0)) < 1e-9
        assert result.longitude_deg == home_position.longitude_deg

    @pytest.mark.parametrize("abs_alt, rel_alt, up", [
        (500.0, 50.0, 10.0),
        (488.0, 0.0, 35.0),
        (-12.5, 3.25, 0.0),
        (1234.5, 1234.5, 7.75),
    ])
    def test_altitude_is_height_above_home(self, abs_alt, rel_alt, up):
        """Test absolute altitude is home altitude plus up offset."""
        current = GeoPosition(10.0, 20.0, abs_alt, rel_alt)
        result = project_local_offset(current, LocalOffset(3.0, 4.0, up))

        assert result.absolute_altitude_m == (abs_alt - rel_alt) + up

    def test_relative_altitude_left_unset(self, home_position):
        """Test relative altitude is not computed."""
        result = project_local_offset(home_position, LocalOffset(3.0, 0.0, 1.0))
        assert math.isnan(result.relative_altitude_m)

    def test_east_uses_destination_latitude(self, home_position):
        """
        Test longitude scale uses the cosine of the destination latitude.

        This matches existing setpoints; the source latitude would differ
        in the last digits for combined north/east offsets.
        """
        offset = LocalOffset(north_m=5000.0, east_m=5000.0)
        result = project_local_offset(home_position, offset)

        new_lat = home_position.latitude_deg + 5000.0 / METERS_PER_DEGREE_LATITUDE
        expected_lon = home_position.longitude_deg + 5000.0 / (
            METERS_PER_DEGREE_LATITUDE * math.cos(math.radians(new_lat))
        )
        assert result.longitude_deg == expected_lon

        source_lon = home_position.longitude_deg + 5000.0 / (
            METERS_PER_DEGREE_LATITUDE * math.cos(math.radians(home_position.latitude_deg))
        )
        assert result.longitude_deg != source_lon

    def test_east_offset_at_equator(self):
        """Test 111111m east at the equator moves one degree of longitude."""
        current = GeoPosition(0.0, 0.0, 100.0, 0.0)
        result = project_local_offset(current, LocalOffset(east_m=111111.0))

        assert abs(result.longitude_deg - 1.0) < 1e-9
        assert result.latitude_deg == 0.0

    def test_does_not_mutate_input(self, home_position):
        """Test the reference position is unchanged."""
        before = GeoPosition(
            home_position.latitude_deg,
            home_position.longitude_deg,
            home_position.absolute_altitude_m,
            home_position.relative_altitude_m,
        )
        project_local_offset(home_position, LocalOffset(10.0, 10.0, 10.0))
        assert home_position == before


# =============================================================================
# Polar Offset Tests
# =============================================================================


class TestProjectPolarOffset:
    """Tests for project_polar_offset."""

    @pytest.mark.parametrize("bearing", [0.0, 45.0, 90.0, 180.0, 270.0, 359.0])
    def test_zero_radius(self, home_position, bearing):
        """Test zero radius returns the same position for any bearing."""
        result = project_polar_offset(home_position, PolarOffset(0.0, bearing))

        assert abs(result.latitude_deg - home_position.latitude_deg) < 1e-9
        assert abs(result.longitude_deg - home_position.longitude_deg) < 1e-9
        assert result.absolute_altitude_m == home_position.absolute_altitude_m
        assert result.relative_altitude_m == home_position.relative_altitude_m

    def test_altitudes_passed_through(self, home_position):
        """Test altitudes are copied unchanged."""
        result = project_polar_offset(home_position, PolarOffset(1000.0, 33.0))

        assert result.absolute_altitude_m == 500.0
        assert result.relative_altitude_m == 50.0

    @pytest.mark.parametrize("radius", [10.0, 1000.0, 50000.0, 300000.0])
    @pytest.mark.parametrize("bearing", [0.0, 60.0, 135.0, 270.0])
    def test_distance_matches_radius(self, home_position, radius, bearing):
        """Test the inverse distance equals the projected radius."""
        result = project_polar_offset(home_position, PolarOffset(radius, bearing))

        assert abs(distance_m(home_position, result) - radius) <= radius * 0.001

    @pytest.mark.parametrize("bearing", [0.0, 20.0, 90.0, 270.0, -45.0])
    def test_bearing_periodic(self, home_position, bearing):
        """Test bearing b and b + 360 give the same result."""
        first = project_polar_offset(home_position, PolarOffset(500.0, bearing))
        second = project_polar_offset(home_position, PolarOffset(500.0, bearing + 360.0))

        assert abs(first.latitude_deg - second.latitude_deg) < 1e-12
        assert abs(first.longitude_deg - second.longitude_deg) < 1e-12

    def test_due_north(self, home_position):
        """Test due north only changes latitude."""
        result = project_polar_offset(home_position, PolarOffset(1000.0, 0.0))

        assert result.latitude_deg > home_position.latitude_deg
        assert abs(result.longitude_deg - home_position.longitude_deg) < 1e-12
        expected = home_position.latitude_deg + math.degrees(1000.0 / EARTH_RADIUS_M)
        assert abs(result.latitude_deg - expected) < 1e-9

    def test_due_west_scenario(self, home_position):
        """Test 20m due west of the SITL home."""
        result = project_polar_offset(home_position, PolarOffset(20.0, 270.0))

        # Oracle: the closed-form formula itself
        lat = math.radians(47.398)
        lon = math.radians(8.546)
        brg = math.radians(270.0)
        d = 20.0 / 6371000.0
        lat2 = math.asin(
            math.sin(lat) * math.cos(d) + math.cos(lat) * math.sin(d) * math.cos(brg)
        )
        lon2 = lon + math.atan2(
            math.sin(brg) * math.sin(d) * math.cos(lat),
            math.cos(d) - math.sin(lat) * math.sin(lat2),
        )

        assert result.longitude_deg < 8.546
        assert abs(result.latitude_deg - 47.398) < 1e-6
        assert result.latitude_deg == pytest.approx(math.degrees(lat2), abs=1e-12)
        assert result.longitude_deg == pytest.approx(math.degrees(lon2), abs=1e-12)


# =============================================================================
# Distance Tests
# =============================================================================


class TestDistance:
    """Tests for distance_m."""

    def test_same_point(self, home_position):
        """Test distance to itself is zero."""
        assert distance_m(home_position, home_position) == 0.0

    def test_symmetric(self, home_position):
        """Test distance is symmetric."""
        other = GeoPosition(47.4, 8.55, 0.0, 0.0)
        assert distance_m(home_position, other) == pytest.approx(
            distance_m(other, home_position)
        )

    def test_one_degree_latitude(self):
        """Test one degree of latitude on the sphere."""
        a = GeoPosition(0.0, 0.0, 0.0, 0.0)
        b = GeoPosition(1.0, 0.0, 0.0, 0.0)
        expected = EARTH_RADIUS_M * math.radians(1.0)
        assert distance_m(a, b) == pytest.approx(expected, rel=1e-9)

    def test_ignores_altitude(self):
        """Test only horizontal distance is measured."""
        a = GeoPosition(10.0, 10.0, 0.0, 0.0)
        b = GeoPosition(10.0, 10.0, 100.0, 100.0)
        assert distance_m(a, b) == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
