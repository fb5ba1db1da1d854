"""
PX4 Maneuver Scripts

This package contains flight maneuvers demonstrating how to use MAVSDK
to control a PX4-based drone, with waypoints computed as offsets from
the vehicle's current position.

Examples:
    mission.py              - Survey mission laid out around the start position
    rtl_testing.py          - Return-to-launch altitude behaviour test
    offboard_vision_yaw.py  - Offboard hold with vision yaw feedback

Common Module:
    examples/common/        - Shared utilities for all maneuvers
        geo.py              - Waypoint projection (local and polar offsets)
        config.py           - Maneuver parameters
        mission_items.py    - Mission item construction
        drone_helpers.py    - Connection, takeoff, goto, RTL, land helpers
        telemetry_manager.py - Background telemetry cache
        vision.py           - Vision yaw forwarder

Connection Types:
    All maneuvers accept a MAVSDK connection URL or per-type options:
    - UDP (default): udp://:14540, or -c udp --udp-host HOST --udp-port PORT
    - TCP: -c tcp --tcp-host HOST --tcp-port PORT
    - Serial: -c serial --serial-device DEVICE --serial-baud BAUD

Usage:
    # Against PX4 SITL:
    python3 examples/mission.py udp://:14540

    # Serial link on a companion computer:
    python3 examples/rtl_testing.py serial:///dev/ttyAMA0:57600
"""
