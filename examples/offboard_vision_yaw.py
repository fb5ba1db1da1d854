#!/usr/bin/env python3
"""
offboard_vision_yaw.py - Offboard Control with Vision Yaw Feedback

Runs offboard control while a background task feeds the vehicle's yaw back
as a motion-capture vision estimate (50 Hz by default):
1. Connect to the drone
2. Start telemetry caching and vision yaw forwarding
3. Send an initial attitude setpoint and start offboard mode
4. Hold a zero body-velocity setpoint
5. Land and wait for touchdown
6. Stop the vision forwarder

Usage:
    python3 offboard_vision_yaw.py udp://:14540
    python3 offboard_vision_yaw.py --hold-time 5
"""

import asyncio
import logging
import sys

# Add parent directory to path for imports
sys.path.insert(0, sys.path[0] + "/..")

from mavsdk.action import ActionError
from mavsdk.offboard import Attitude, OffboardError, VelocityBodyYawspeed

from examples.common import (
    OFFBOARD_CONFIG,
    OffboardConfig,
    TelemetryManager,
    VisionYawForwarder,
    connect_drone,
    create_argument_parser,
    get_connection_string_from_args,
    is_stop_requested,
    safe_land,
    setup_logging,
    setup_signal_handlers,
    wait_for_landed,
)

logger = setup_logging()

OFFBOARD_MODE = "ATTITUDE"


def offboard_log(mode: str, message: str) -> None:
    """Log a message tagged with the offboard mode."""
    logger.info(f"[{mode}] {message}")


async def offboard_hold(drone, hold_time: float, stop_event: asyncio.Event) -> bool:
    """
    Start offboard mode and hold a zero body-velocity setpoint.

    Args:
        drone: Connected MAVSDK System.
        hold_time: Seconds to hold the setpoint.
        stop_event: Set to end the hold early.

    Returns:
        bool: True if offboard control ran.
    """
    # Send a setpoint before starting, otherwise offboard is rejected
    await drone.offboard.set_attitude(Attitude(0.0, 0.0, 0.0, 0.0))

    try:
        await drone.offboard.start()
    except OffboardError as e:
        logger.error(f"Offboard start failed: {e}")
        return False
    offboard_log(OFFBOARD_MODE, "Offboard started")

    offboard_log(OFFBOARD_MODE, f"Hold zero body velocity for {hold_time:.0f}s")
    await drone.offboard.set_velocity_body(VelocityBodyYawspeed(0.0, 0.0, 0.0, 0.0))

    loop = asyncio.get_running_loop()
    deadline = loop.time() + hold_time
    while loop.time() < deadline:
        if is_stop_requested(stop_event):
            offboard_log(OFFBOARD_MODE, "Hold interrupted by user")
            break
        await asyncio.sleep(0.5)

    return True


async def offboard_sequence(
    drone,
    telemetry: TelemetryManager,
    config: OffboardConfig,
    stop_event: asyncio.Event,
) -> bool:
    """
    Hold the offboard setpoint, then land and wait for touchdown.

    Returns:
        bool: True if the vehicle landed.
    """
    try:
        logger.info("System is ready")

        if not await offboard_hold(drone, config.hold_time_s, stop_event):
            return False

        try:
            await drone.action.land()
        except ActionError as e:
            logger.error(f"Landing failed: {e}")
            return False

        if not await wait_for_landed(telemetry):
            logger.error("Landing timeout")
            return False
        logger.info("Landed!")

        # Keep the estimates flowing while the vehicle auto-disarms
        await asyncio.sleep(config.landed_settle_s)
        logger.info("Finished...")
        return True

    except OffboardError as e:
        logger.error(f"Offboard control failed: {e}")
        await safe_land(drone)
        return False


async def run(connection_string: str, config: OffboardConfig = OFFBOARD_CONFIG) -> bool:
    """
    Execute the offboard vision-yaw sequence.

    Args:
        connection_string: MAVSDK connection string.
        config: Maneuver parameters.

    Returns:
        bool: True if successful, False otherwise.
    """
    stop_event = asyncio.Event()
    setup_signal_handlers(stop_event)

    logger.info("=" * 50)
    logger.info("Offboard Control with Vision Yaw")
    logger.info("=" * 50)
    logger.info(f"  Hold time: {config.hold_time_s}s")
    logger.info(f"  Vision rate: {config.vision_rate_hz} Hz")
    logger.info("=" * 50)

    drone = await connect_drone(connection_string, stop_event=stop_event)
    if not drone:
        return False

    telemetry = TelemetryManager(drone)
    await telemetry.start()

    forwarder = VisionYawForwarder(drone, telemetry, rate_hz=config.vision_rate_hz)
    forwarder.start()

    try:
        success = await offboard_sequence(drone, telemetry, config, stop_event)
    finally:
        try:
            await forwarder.stop()
        finally:
            await telemetry.stop()

    if forwarder.error is not None:
        logger.error("Vision yaw feedback was lost during the maneuver")
        return False
    return success


def main():
    """Main entry point."""
    parser = create_argument_parser(
        description="Offboard control with vision yaw feedback using MAVSDK",
    )
    parser.add_argument(
        "--hold-time",
        type=float,
        default=OFFBOARD_CONFIG.hold_time_s,
        help=f"Seconds to hold the offboard setpoint (default: {OFFBOARD_CONFIG.hold_time_s})",
    )
    parser.add_argument(
        "--vision-rate",
        type=float,
        default=OFFBOARD_CONFIG.vision_rate_hz,
        help=f"Vision estimate rate in Hz (default: {OFFBOARD_CONFIG.vision_rate_hz})",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        connection_string = get_connection_string_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    config = OffboardConfig(hold_time_s=args.hold_time, vision_rate_hz=args.vision_rate)

    success = asyncio.run(run(connection_string=connection_string, config=config))

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
