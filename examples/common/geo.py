#!/usr/bin/env python3
"""
geo.py - Waypoint Projection

Computes new vehicle positions from a reference position plus an offset:

- project_local_offset: north/east/up offset in meters (flat-earth)
- project_polar_offset: radius + bearing on a spherical earth

Both are pure functions with no I/O, so they can be used from any task
or thread and tested without a vehicle connection.

Usage:
    from examples.common.geo import GeoPosition, PolarOffset, project_polar_offset

    home = GeoPosition(47.398, 8.546, 500.0, 0.0)
    west = project_polar_offset(home, PolarOffset(radius_m=20, bearing_deg=270))
"""

import math
from dataclasses import dataclass

# Approximate length of one degree of latitude
METERS_PER_DEGREE_LATITUDE = 111111.0

# Mean earth radius (spherical model)
EARTH_RADIUS_M = 6371000.0


@dataclass(frozen=True)
class GeoPosition:
    """
    Vehicle position in degrees and meters.

    Attributes:
        latitude_deg: Latitude in degrees.
        longitude_deg: Longitude in degrees.
        absolute_altitude_m: Altitude above mean sea level.
        relative_altitude_m: Altitude above the home (arming) position.
            NaN when not known yet, e.g. for a computed setpoint.
    """

    latitude_deg: float
    longitude_deg: float
    absolute_altitude_m: float
    relative_altitude_m: float

    @property
    def home_altitude_m(self) -> float:
        """Altitude of the home position above mean sea level."""
        return self.absolute_altitude_m - self.relative_altitude_m

    @classmethod
    def from_telemetry(cls, position) -> "GeoPosition":
        """
        Create from a MAVSDK telemetry position.

        Args:
            position: mavsdk.telemetry.Position (or anything with the same fields).

        Returns:
            GeoPosition: Copy of the position values.
        """
        return cls(
            latitude_deg=position.latitude_deg,
            longitude_deg=position.longitude_deg,
            absolute_altitude_m=position.absolute_altitude_m,
            relative_altitude_m=position.relative_altitude_m,
        )

    def __str__(self) -> str:
        return (
            f"{self.latitude_deg:.7f}, {self.longitude_deg:.7f} "
            f"(abs {self.absolute_altitude_m:.1f}m, rel {self.relative_altitude_m:.1f}m)"
        )


@dataclass(frozen=True)
class LocalOffset:
    """
    Tangent-plane displacement, valid for small distances only.

    Attributes:
        north_m: Displacement towards north in meters.
        east_m: Displacement towards east in meters.
        up_m: Desired height above home in meters (not above current altitude).
    """

    north_m: float = 0.0
    east_m: float = 0.0
    up_m: float = 0.0


@dataclass(frozen=True)
class PolarOffset:
    """
    Great-circle displacement.

    Attributes:
        radius_m: Distance to travel in meters.
        bearing_deg: Direction in degrees, clockwise from true north.
    """

    radius_m: float = 0.0
    bearing_deg: float = 0.0


def project_local_offset(current: GeoPosition, offset: LocalOffset) -> GeoPosition:
    """
    Project a north/east/up offset from the current position.

    The longitude scale uses the cosine of the destination latitude, not the
    source latitude. The difference is negligible for offsets of a few meters
    and the ordering is kept for compatibility with existing setpoints.

    The returned absolute altitude is the home altitude plus offset.up_m, so
    up_m is a height above home. The relative altitude of the result is NaN
    and must come from telemetry once the vehicle is there.

    Args:
        current: Reference position.
        offset: Local displacement.

    Returns:
        GeoPosition: New position.
    """
    latitude_deg = current.latitude_deg + offset.north_m / METERS_PER_DEGREE_LATITUDE
    longitude_deg = current.longitude_deg + offset.east_m / (
        METERS_PER_DEGREE_LATITUDE * math.cos(math.radians(latitude_deg))
    )
    absolute_altitude_m = (
        current.absolute_altitude_m - current.relative_altitude_m + offset.up_m
    )

    return GeoPosition(
        latitude_deg=latitude_deg,
        longitude_deg=longitude_deg,
        absolute_altitude_m=absolute_altitude_m,
        relative_altitude_m=float("nan"),
    )


def project_polar_offset(current: GeoPosition, offset: PolarOffset) -> GeoPosition:
    """
    Project a radius/bearing offset from the current position.

    Uses the closed-form destination-point formula on a sphere of radius
    EARTH_RADIUS_M. Altitudes are passed through unchanged.

    Args:
        current: Reference position.
        offset: Great-circle displacement.

    Returns:
        GeoPosition: New position.
    """
    bearing_rad = math.radians(offset.bearing_deg)
    latitude_rad = math.radians(current.latitude_deg)
    longitude_rad = math.radians(current.longitude_deg)
    angular_distance = offset.radius_m / EARTH_RADIUS_M

    new_latitude_rad = math.asin(
        math.sin(latitude_rad) * math.cos(angular_distance)
        + math.cos(latitude_rad) * math.sin(angular_distance) * math.cos(bearing_rad)
    )
    new_longitude_rad = longitude_rad + math.atan2(
        math.sin(bearing_rad) * math.sin(angular_distance) * math.cos(latitude_rad),
        math.cos(angular_distance) - math.sin(latitude_rad) * math.sin(new_latitude_rad),
    )

    return GeoPosition(
        latitude_deg=math.degrees(new_latitude_rad),
        longitude_deg=math.degrees(new_longitude_rad),
        absolute_altitude_m=current.absolute_altitude_m,
        relative_altitude_m=current.relative_altitude_m,
    )


def distance_m(a: GeoPosition, b: GeoPosition) -> float:
    """
    Horizontal great-circle distance between two positions (haversine).

    Args:
        a: First position.
        b: Second position.

    Returns:
        float: Distance in meters.
    """
    lat1 = math.radians(a.latitude_deg)
    lat2 = math.radians(b.latitude_deg)
    delta_lat = lat2 - lat1
    delta_lon = math.radians(b.longitude_deg - a.longitude_deg)

    h = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(delta_lon / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))
