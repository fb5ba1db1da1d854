#!/usr/bin/env python3
"""
mission_items.py - Mission Item Construction

Builds MAVSDK mission items and the survey mission flown by mission.py.
"""

from typing import List

from mavsdk.mission import MissionItem, MissionPlan

from .config import MISSION_CONFIG, MissionConfig
from .geo import GeoPosition, PolarOffset, project_polar_offset

# MAVSDK treats NaN as "use the vehicle default"
UNSET = float("nan")


def make_mission_item(
    latitude_deg: float,
    longitude_deg: float,
    relative_altitude_m: float,
    speed_m_s: float,
    is_fly_through: bool,
    gimbal_pitch_deg: float,
    gimbal_yaw_deg: float,
    loiter_time_s: float,
    camera_action: MissionItem.CameraAction,
) -> MissionItem:
    """
    Create a mission item, leaving the remaining fields at vehicle defaults.

    Args:
        latitude_deg: Item latitude.
        longitude_deg: Item longitude.
        relative_altitude_m: Altitude above home.
        speed_m_s: Speed towards this item.
        is_fly_through: Fly through instead of stopping.
        gimbal_pitch_deg: Gimbal pitch.
        gimbal_yaw_deg: Gimbal yaw.
        loiter_time_s: Loiter time at the item.
        camera_action: Camera action at the item.

    Returns:
        MissionItem: The mission item.
    """
    return MissionItem(
        latitude_deg=latitude_deg,
        longitude_deg=longitude_deg,
        relative_altitude_m=relative_altitude_m,
        speed_m_s=speed_m_s,
        is_fly_through=is_fly_through,
        gimbal_pitch_deg=gimbal_pitch_deg,
        gimbal_yaw_deg=gimbal_yaw_deg,
        camera_action=camera_action,
        loiter_time_s=loiter_time_s,
        camera_photo_interval_s=UNSET,
        acceptance_radius_m=UNSET,
        yaw_deg=UNSET,
        camera_photo_distance_m=UNSET,
        vehicle_action=MissionItem.VehicleAction.NONE,
    )


def build_survey_items(
    start: GeoPosition,
    config: MissionConfig = MISSION_CONFIG,
) -> List[MissionItem]:
    """
    Build one mission item per configured waypoint.

    Every waypoint is projected from the start position, not from the
    previous waypoint.

    Args:
        start: Position the mission is laid out around.
        config: Mission parameters.

    Returns:
        List[MissionItem]: Items in flight order.
    """
    items = []
    for waypoint in config.waypoints:
        target = project_polar_offset(
            start, PolarOffset(waypoint.radius_m, waypoint.bearing_deg)
        )
        items.append(
            make_mission_item(
                target.latitude_deg,
                target.longitude_deg,
                config.relative_altitude_m,
                config.speed_m_s,
                config.is_fly_through,
                config.gimbal_pitch_deg,
                waypoint.gimbal_yaw_deg,
                config.loiter_time_s,
                config.camera_action,
            )
        )
    return items


def build_survey_mission(
    start: GeoPosition,
    config: MissionConfig = MISSION_CONFIG,
) -> MissionPlan:
    """Build the survey mission plan around the start position."""
    return MissionPlan(build_survey_items(start, config))
