#!/usr/bin/env python3
"""
config.py - Maneuver Configuration Parameters

Centralized parameters for the example maneuvers. Values match the
PX4 SITL defaults the maneuvers were tuned against.

Usage:
    from examples.common.config import MISSION_CONFIG, RTL_TEST_CONFIG
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from mavsdk.mission import MissionItem


@dataclass(frozen=True)
class SurveyWaypoint:
    """
    Mission waypoint relative to the start position.

    Attributes:
        radius_m: Distance from the start position in meters.
        bearing_deg: Direction from the start position (clockwise from north).
        gimbal_yaw_deg: Gimbal yaw at this waypoint.
    """

    radius_m: float
    bearing_deg: float
    gimbal_yaw_deg: float


@dataclass(frozen=True)
class RtlScenario:
    """
    One goto-then-RTL run of the RTL test.

    Attributes:
        description: What the scenario checks.
        north_m: Setpoint distance north of the start position.
        east_m: Setpoint distance east of the start position.
        height_above_home_m: Setpoint height above home.
        yaw_deg: Vehicle yaw at the setpoint.
    """

    description: str
    north_m: float
    east_m: float
    height_above_home_m: float
    yaw_deg: float = 0.0


def _default_waypoints() -> List[SurveyWaypoint]:
    return [
        SurveyWaypoint(radius_m=0.0, bearing_deg=0.0, gimbal_yaw_deg=-90.0),
        SurveyWaypoint(radius_m=20.0, bearing_deg=270.0, gimbal_yaw_deg=-70.0),
        SurveyWaypoint(radius_m=30.0, bearing_deg=180.0, gimbal_yaw_deg=-90.0),
        SurveyWaypoint(radius_m=10.0, bearing_deg=90.0, gimbal_yaw_deg=-20.0),
    ]


def _default_scenarios() -> List[RtlScenario]:
    # Distances are relative to RTL_CONE_DIST (default 5m) and RTL_RETURN_ALT
    return [
        RtlScenario(
            description=(
                "Fly less than RTL_CONE_DIST away; "
                "drone should only rise to the height given by the cone"
            ),
            north_m=3.0,
            east_m=0.0,
            height_above_home_m=1.0,
        ),
        RtlScenario(
            description=(
                "Fly more than RTL_CONE_DIST away; "
                "drone should rise all the way to RTL_RETURN_ALT"
            ),
            north_m=6.0,
            east_m=0.0,
            height_above_home_m=4.0,
        ),
        RtlScenario(
            description="Fly more than RTL_CONE_DIST away and above RTL_RETURN_ALT",
            north_m=10.0,
            east_m=0.0,
            height_above_home_m=35.0,
        ),
        RtlScenario(
            description="Fly less than RTL_CONE_DIST away but above the cone",
            north_m=3.0,
            east_m=0.0,
            height_above_home_m=15.0,
        ),
    ]


@dataclass
class MissionConfig:
    """
    Configuration for the survey mission.

    Attributes:
        relative_altitude_m: Altitude above home for every item.
        speed_m_s: Cruise speed between items.
        is_fly_through: Fly through items instead of stopping.
        gimbal_pitch_deg: Gimbal pitch for every item.
        loiter_time_s: Loiter time at each item.
        camera_action: Camera action triggered at each item.
        position_rate_hz: Position-velocity-NED telemetry rate while flying.
        waypoints: Waypoints relative to the start position.
    """

    relative_altitude_m: float = 10.0
    speed_m_s: float = 2.0
    is_fly_through: bool = True
    gimbal_pitch_deg: float = -60.0
    loiter_time_s: float = 0.0
    camera_action: Any = MissionItem.CameraAction.START_PHOTO_INTERVAL
    position_rate_hz: float = 1.0
    waypoints: List[SurveyWaypoint] = field(default_factory=_default_waypoints)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "relative_altitude_m": self.relative_altitude_m,
            "speed_m_s": self.speed_m_s,
            "is_fly_through": self.is_fly_through,
            "gimbal_pitch_deg": self.gimbal_pitch_deg,
            "loiter_time_s": self.loiter_time_s,
            "camera_action": str(self.camera_action),
            "position_rate_hz": self.position_rate_hz,
            "waypoints": [
                (wp.radius_m, wp.bearing_deg, wp.gimbal_yaw_deg)
                for wp in self.waypoints
            ],
        }


@dataclass
class RtlTestConfig:
    """
    Configuration for the return-to-launch test.

    Attributes:
        position_rate_hz: Position telemetry rate.
        takeoff_tolerance_m: Takeoff is done within this distance of the takeoff altitude.
        setpoint_timeout_s: Maximum time to wait at a goto setpoint.
        acceptance_radius_m: Horizontal distance at which a setpoint counts as reached.
        rtl_timeout_s: Maximum time to wait for disarm after RTL.
        scenarios: Goto-then-RTL runs, flown in order.
    """

    position_rate_hz: float = 1.0
    takeoff_tolerance_m: float = 0.2
    setpoint_timeout_s: float = 15.0
    acceptance_radius_m: float = 1.0
    rtl_timeout_s: float = 120.0
    scenarios: List[RtlScenario] = field(default_factory=_default_scenarios)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "position_rate_hz": self.position_rate_hz,
            "takeoff_tolerance_m": self.takeoff_tolerance_m,
            "setpoint_timeout_s": self.setpoint_timeout_s,
            "acceptance_radius_m": self.acceptance_radius_m,
            "rtl_timeout_s": self.rtl_timeout_s,
            "scenarios": [s.description for s in self.scenarios],
        }


@dataclass
class OffboardConfig:
    """
    Configuration for the offboard vision-yaw maneuver.

    Attributes:
        hold_time_s: Time to hold the zero body-velocity setpoint.
        vision_rate_hz: Rate of vision position estimates sent to the vehicle.
        landed_settle_s: Time to keep watching after touchdown (auto-disarm).
    """

    hold_time_s: float = 10.0
    vision_rate_hz: float = 50.0
    landed_settle_s: float = 3.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "hold_time_s": self.hold_time_s,
            "vision_rate_hz": self.vision_rate_hz,
            "landed_settle_s": self.landed_settle_s,
        }


# Default instances
MISSION_CONFIG = MissionConfig()
RTL_TEST_CONFIG = RtlTestConfig()
OFFBOARD_CONFIG = OffboardConfig()


def get_config_summary() -> Dict[str, Dict[str, Any]]:
    """
    Get a summary of all default configurations.

    Returns:
        dict: Configuration name to values.
    """
    return {
        "mission": MISSION_CONFIG.to_dict(),
        "rtl_test": RTL_TEST_CONFIG.to_dict(),
        "offboard": OFFBOARD_CONFIG.to_dict(),
    }
