"""
Common utilities for the maneuver programs.

Modules:
    geo: Waypoint projection (local and polar offsets).
    config: Maneuver parameters.
    mission_items: Mission item and survey mission construction.
    drone_helpers: Common drone operations (connect, takeoff, RTL, land, etc.)
    telemetry_manager: Background telemetry cache.
    vision: Vision yaw forwarder.
"""

from .geo import (
    EARTH_RADIUS_M,
    METERS_PER_DEGREE_LATITUDE,
    GeoPosition,
    LocalOffset,
    PolarOffset,
    project_local_offset,
    project_polar_offset,
    distance_m,
)

from .config import (
    MISSION_CONFIG,
    RTL_TEST_CONFIG,
    OFFBOARD_CONFIG,
    MissionConfig,
    RtlTestConfig,
    OffboardConfig,
    SurveyWaypoint,
    RtlScenario,
    get_config_summary,
)

from .mission_items import (
    make_mission_item,
    build_survey_items,
    build_survey_mission,
)

from .drone_helpers import (
    connect_drone,
    wait_until_ready,
    get_current_position,
    set_position_rate,
    arm_and_takeoff,
    goto_setpoint,
    wait_for_setpoint,
    trigger_rtl,
    rtl_if_armed,
    land_and_wait,
    safe_land,
    first_value,
    setup_logging,
    create_argument_parser,
    get_connection_string_from_args,
    is_stop_requested,
    setup_signal_handlers,
)

from .telemetry_manager import (
    TelemetryManager,
    AttitudeData,
    FlightStateData,
    wait_for_landed,
)

from .vision import (
    VisionYawForwarder,
    build_vision_estimate,
)

__all__ = [
    # geo
    "EARTH_RADIUS_M",
    "METERS_PER_DEGREE_LATITUDE",
    "GeoPosition",
    "LocalOffset",
    "PolarOffset",
    "project_local_offset",
    "project_polar_offset",
    "distance_m",
    # config
    "MISSION_CONFIG",
    "RTL_TEST_CONFIG",
    "OFFBOARD_CONFIG",
    "MissionConfig",
    "RtlTestConfig",
    "OffboardConfig",
    "SurveyWaypoint",
    "RtlScenario",
    "get_config_summary",
    # mission_items
    "make_mission_item",
    "build_survey_items",
    "build_survey_mission",
    # drone_helpers
    "connect_drone",
    "wait_until_ready",
    "get_current_position",
    "set_position_rate",
    "arm_and_takeoff",
    "goto_setpoint",
    "wait_for_setpoint",
    "trigger_rtl",
    "rtl_if_armed",
    "land_and_wait",
    "safe_land",
    "first_value",
    "setup_logging",
    "create_argument_parser",
    "get_connection_string_from_args",
    "is_stop_requested",
    "setup_signal_handlers",
    # telemetry_manager
    "TelemetryManager",
    "AttitudeData",
    "FlightStateData",
    "wait_for_landed",
    # vision
    "VisionYawForwarder",
    "build_vision_estimate",
]
