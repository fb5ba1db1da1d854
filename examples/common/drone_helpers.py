#!/usr/bin/env python3
"""
drone_helpers.py - Common Drone Operations

Provides shared functionality for the maneuver programs:
- Connection management
- Readiness checks
- Takeoff, goto, return-to-launch and landing
- Logging and argument parsing setup

Every flight helper returns True on success and False on failure. SDK
errors are logged here so the maneuvers only need to check the result.

Usage:
    from examples.common import (
        connect_drone,
        wait_until_ready,
        arm_and_takeoff,
        trigger_rtl,
    )

    drone = await connect_drone(connection_string)
    if drone and await wait_until_ready(drone):
        await arm_and_takeoff(drone)
        await trigger_rtl(drone)
"""

import argparse
import asyncio
import logging
import signal
import time
from typing import Optional

from mavsdk.action import ActionError
from mavsdk.telemetry import TelemetryError

from scripts.mavlink_connection import (
    add_connection_arguments,
    config_from_args,
    log_connection_info,
)

from .geo import GeoPosition, distance_m

# Module-level logger
logger = logging.getLogger(__name__)


def setup_signal_handlers(stop_event: asyncio.Event) -> None:
    """
    Set the given event on SIGINT/SIGTERM.

    Must be called from inside the running event loop.

    Args:
        stop_event: Event the maneuver checks to stop early.
    """
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _request_stop, stop_event)


def _request_stop(stop_event: asyncio.Event) -> None:
    logger.warning("Shutdown requested (Ctrl+C)")
    stop_event.set()


def is_stop_requested(stop_event: Optional[asyncio.Event]) -> bool:
    """Check whether a stop was requested through the event."""
    return stop_event is not None and stop_event.is_set()


def setup_logging(
    level: int = logging.INFO,
    format_string: str = "%(asctime)s [%(levelname)s] %(message)s",
    datefmt: str = "%H:%M:%S",
) -> logging.Logger:
    """
    Configure logging for drone scripts.

    Args:
        level: Logging level (default: INFO).
        format_string: Log message format.
        datefmt: Date format string.

    Returns:
        logging.Logger: Configured root logger.
    """
    logging.basicConfig(
        level=level,
        format=format_string,
        datefmt=datefmt,
    )
    return logging.getLogger()


def create_argument_parser(
    description: str,
    add_verbose: bool = True,
) -> argparse.ArgumentParser:
    """
    Create a standard argument parser with connection options.

    Args:
        description: Script description.
        add_verbose: Add --verbose flag.

    Returns:
        argparse.ArgumentParser: Configured parser.
    """
    parser = argparse.ArgumentParser(description=description)

    if add_verbose:
        parser.add_argument(
            "--verbose",
            "-v",
            action="store_true",
            help="Enable verbose logging",
        )

    add_connection_arguments(parser)

    return parser


def get_connection_string_from_args(args: argparse.Namespace) -> str:
    """
    Build connection string from parsed arguments.

    Args:
        args: Parsed command line arguments.

    Returns:
        str: MAVSDK connection string.

    Raises:
        ValueError: If the connection arguments are invalid.
    """
    config = config_from_args(args)
    log_connection_info(config)
    return config.get_connection_string()


async def first_value(stream):
    """
    Return the first value of a telemetry stream.

    Args:
        stream: MAVSDK async telemetry generator.

    Returns:
        The first value, or None if the stream ended without one.
    """
    async for value in stream:
        return value
    return None


async def connect_drone(
    connection_string: str,
    timeout: float = 30.0,
    stop_event: Optional[asyncio.Event] = None,
) -> Optional["System"]:
    """
    Connect to a drone and wait for heartbeat.

    Args:
        connection_string: MAVSDK connection string.
        timeout: Connection timeout in seconds.
        stop_event: Optional event that cancels the wait.

    Returns:
        System: Connected MAVSDK System, or None if failed.
    """
    from mavsdk import System

    logger.info(f"Connecting to drone: {connection_string}")

    drone = System()
    await drone.connect(system_address=connection_string)

    start_time = time.time()
    async for state in drone.core.connection_state():
        if state.is_connected:
            logger.info("Connected to drone")
            return drone

        elapsed = time.time() - start_time
        if elapsed > timeout:
            logger.error(f"Connection timeout after {timeout}s")
            return None

        if is_stop_requested(stop_event):
            logger.warning("Connection cancelled by user")
            return None

        logger.info("Wait for system to connect via heartbeat")
        await asyncio.sleep(1.0)

    return None


async def wait_until_ready(
    drone: "System",
    timeout: float = 60.0,
    poll_interval: float = 3.0,
    stop_event: Optional[asyncio.Event] = None,
) -> bool:
    """
    Wait until all vehicle health checks pass.

    Args:
        drone: Connected MAVSDK System.
        timeout: Timeout in seconds.
        poll_interval: Seconds between checks.
        stop_event: Optional event that cancels the wait.

    Returns:
        bool: True if the vehicle is ready.
    """
    start_time = time.time()

    async for all_ok in drone.telemetry.health_all_ok():
        if all_ok:
            logger.info("System is ready")
            return True

        elapsed = time.time() - start_time
        if elapsed > timeout:
            logger.error(f"Health check timeout after {timeout}s")
            return False

        if is_stop_requested(stop_event):
            return False

        logger.info("Waiting for system to be ready")
        await asyncio.sleep(poll_interval)

    return False


async def get_current_position(drone: "System") -> Optional[GeoPosition]:
    """
    Read the current vehicle position.

    Args:
        drone: Connected MAVSDK System.

    Returns:
        GeoPosition: Current position, or None if telemetry ended.
    """
    position = await first_value(drone.telemetry.position())
    if position is None:
        return None
    return GeoPosition.from_telemetry(position)


async def set_position_rate(
    drone: "System",
    rate_hz: float,
    velocity_ned: bool = False,
) -> bool:
    """
    Set the rate of the position telemetry stream.

    Args:
        drone: Connected MAVSDK System.
        rate_hz: Update rate in Hz.
        velocity_ned: Set the local position-velocity-NED rate instead of
            the global position rate.

    Returns:
        bool: True if the rate was accepted.
    """
    try:
        if velocity_ned:
            await drone.telemetry.set_rate_position_velocity_ned(rate_hz)
        else:
            await drone.telemetry.set_rate_position(rate_hz)
    except TelemetryError as e:
        logger.error(f"Setting rate failed: {e}")
        return False
    return True


async def arm_and_takeoff(
    drone: "System",
    tolerance_m: float = 0.2,
    timeout: float = 60.0,
    stop_event: Optional[asyncio.Event] = None,
) -> bool:
    """
    Arm the drone and take off to the configured takeoff altitude.

    Takeoff is done once the relative altitude is within tolerance_m of the
    vehicle's takeoff altitude parameter.

    Args:
        drone: Connected MAVSDK System.
        tolerance_m: Accepted distance below the takeoff altitude.
        timeout: Takeoff timeout in seconds.
        stop_event: Optional event that cancels the climb wait.

    Returns:
        bool: True if takeoff successful.
    """
    try:
        logger.info("Arming...")
        await drone.action.arm()

        takeoff_altitude = await drone.action.get_takeoff_altitude()
        logger.info(f"Taking off to height {takeoff_altitude:.1f} meters")
        await drone.action.takeoff()
    except ActionError as e:
        logger.error(f"Takeoff failed: {e}")
        return False

    target_alt = takeoff_altitude - tolerance_m
    start_time = time.time()
    last_log_time = 0.0

    async for position in drone.telemetry.position():
        current_alt = position.relative_altitude_m
        now = time.time()

        if current_alt >= target_alt:
            logger.info(f"  Reached altitude: {current_alt:.1f}m")
            return True

        if now - last_log_time >= 1.0:
            logger.info(f"  Relative height: {current_alt:.2f}m")
            last_log_time = now

        if now - start_time > timeout:
            logger.error(f"  Takeoff timeout at {current_alt:.1f}m")
            return False

        if is_stop_requested(stop_event):
            logger.warning("  Takeoff cancelled by user")
            return False

        # Yield so command responses are not starved by the stream
        await asyncio.sleep(0)

    return False


async def goto_setpoint(
    drone: "System",
    setpoint: GeoPosition,
    yaw_deg: float = 0.0,
) -> bool:
    """
    Send the drone to a setpoint.

    Args:
        drone: Connected MAVSDK System.
        setpoint: Target; its absolute altitude is used.
        yaw_deg: Yaw at the target.

    Returns:
        bool: True if the command was accepted.
    """
    logger.info(f"Going to {setpoint.latitude_deg:.7f}, {setpoint.longitude_deg:.7f} "
                f"at {setpoint.absolute_altitude_m:.1f}m AMSL")
    try:
        await drone.action.goto_location(
            setpoint.latitude_deg,
            setpoint.longitude_deg,
            setpoint.absolute_altitude_m,
            yaw_deg,
        )
    except ActionError as e:
        logger.error(f"Going to new location failed: {e}")
        return False
    return True


async def wait_for_setpoint(
    drone: "System",
    setpoint: GeoPosition,
    acceptance_radius_m: float = 1.0,
    timeout: float = 15.0,
    poll_interval: float = 1.0,
) -> bool:
    """
    Watch the drone fly towards a setpoint.

    Args:
        drone: Connected MAVSDK System.
        setpoint: Target position.
        acceptance_radius_m: Horizontal distance counted as arrived.
        timeout: Maximum time to watch in seconds.
        poll_interval: Seconds between position reads.

    Returns:
        bool: True if the setpoint was reached before the timeout.
    """
    start_time = time.time()

    while True:
        current = await get_current_position(drone)
        if current is None:
            return False

        remaining = distance_m(current, setpoint)
        logger.info(f"  Relative height: {current.relative_altitude_m:.2f}m "
                    f"({remaining:.1f}m to setpoint)")

        if remaining <= acceptance_radius_m:
            logger.info("  Setpoint reached")
            return True

        if time.time() - start_time > timeout:
            logger.warning(f"  Setpoint not reached after {timeout}s")
            return False

        await asyncio.sleep(poll_interval)


async def trigger_rtl(
    drone: "System",
    timeout: float = 120.0,
    poll_interval: float = 1.0,
) -> bool:
    """
    Return to launch and wait until the vehicle has disarmed.

    Relies on the vehicle auto-disarming after landing at home.

    Args:
        drone: Connected MAVSDK System.
        timeout: Maximum time to wait for disarm in seconds.
        poll_interval: Seconds between state reads.

    Returns:
        bool: True if the vehicle returned and disarmed.
    """
    logger.info("Trigger RTL")
    try:
        await drone.action.return_to_launch()
    except ActionError as e:
        logger.error(f"Failed to command RTL: {e}")
        return False

    start_time = time.time()

    while True:
        armed = await first_value(drone.telemetry.armed())
        if armed is None:
            logger.error("  Armed state stream ended during RTL")
            return False
        if not armed:
            break

        position = await first_value(drone.telemetry.position())
        if position is not None:
            logger.info(f"  Relative height: {position.relative_altitude_m:.2f}m")

        if time.time() - start_time > timeout:
            logger.error(f"  Still armed {timeout}s after RTL")
            return False

        await asyncio.sleep(poll_interval)

    logger.info("Disarmed, ready for next part of maneuver.")
    return True


async def rtl_if_armed(drone: "System", timeout: float = 120.0) -> bool:
    """
    Bring the vehicle home after a failed step, if it is still armed.

    Returns:
        bool: True if the vehicle is (or ended up) disarmed.
    """
    armed = await first_value(drone.telemetry.armed())
    if armed is False:
        return True
    if armed is None:
        logger.warning("Armed state unknown, returning to launch")
    else:
        logger.warning("Vehicle still armed, returning to launch")
    return await trigger_rtl(drone, timeout=timeout)


async def land_and_wait(
    drone: "System",
    settle_time: float = 3.0,
    timeout: float = 60.0,
    poll_interval: float = 1.0,
) -> bool:
    """
    Land the drone and wait for touchdown.

    Args:
        drone: Connected MAVSDK System.
        settle_time: Seconds to wait after touchdown (auto-disarm).
        timeout: Landing timeout in seconds.
        poll_interval: Seconds between state reads.

    Returns:
        bool: True if landing successful.
    """
    logger.info("Landing...")

    try:
        await drone.action.land()
    except ActionError as e:
        logger.error(f"Landing failed: {e}")
        return False

    start_time = time.time()
    while True:
        in_air = await first_value(drone.telemetry.in_air())
        if in_air is None:
            logger.error("  In-air state stream ended during landing")
            return False
        if not in_air:
            break

        if time.time() - start_time > timeout:
            logger.error(f"  Landing timeout after {timeout}s")
            return False
        logger.info("  Vehicle is landing...")
        await asyncio.sleep(poll_interval)

    logger.info("  Landed!")

    await asyncio.sleep(settle_time)
    return True


async def safe_land(drone: "System") -> bool:
    """
    Emergency landing - attempt to land regardless of state.

    Args:
        drone: Connected MAVSDK System.

    Returns:
        bool: True if landing command was sent.
    """
    logger.warning("Initiating safe landing...")

    try:
        await drone.action.land()
    except ActionError as e:
        logger.error(f"Safe landing failed: {e}")
        return False

    logger.info("  Landing command sent")
    return True
