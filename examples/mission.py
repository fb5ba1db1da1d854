#!/usr/bin/env python3
"""
mission.py - Survey Mission Example

Uploads and flies a small survey mission laid out around the current
position, then returns to launch:
1. Connect to the drone and wait until it is ready
2. Build mission items at fixed distances/bearings from the start position
3. Upload the mission
4. Arm and start the mission
5. Report progress until the mission is finished
6. Return to launch

Usage:
    python3 mission.py udp://:14540
    python3 mission.py -c tcp --tcp-host 192.168.1.100
"""

import asyncio
import logging
import sys

# Add parent directory to path for imports
sys.path.insert(0, sys.path[0] + "/..")

from mavsdk.action import ActionError
from mavsdk.mission import MissionError

from examples.common import (
    MISSION_CONFIG,
    MissionConfig,
    build_survey_mission,
    connect_drone,
    create_argument_parser,
    get_connection_string_from_args,
    get_current_position,
    is_stop_requested,
    rtl_if_armed,
    set_position_rate,
    setup_logging,
    setup_signal_handlers,
    trigger_rtl,
    wait_until_ready,
)

logger = setup_logging()


async def print_mission_progress(drone) -> None:
    """Log mission progress updates until cancelled."""
    async for progress in drone.mission.mission_progress():
        logger.info(f"Mission status update: {progress.current} / {progress.total}")


async def fly_mission(drone, config: MissionConfig, stop_event: asyncio.Event) -> bool:
    """
    Upload, start and watch the survey mission.

    Args:
        drone: Connected and ready MAVSDK System.
        config: Mission parameters.
        stop_event: Set to abandon the mission early.

    Returns:
        bool: True if the mission finished.
    """
    start = await get_current_position(drone)
    if start is None:
        logger.error("No position available")
        return False
    logger.info(f"Start position: {start}")

    logger.info("Creating and uploading mission")
    mission_plan = build_survey_mission(start, config)

    try:
        logger.info("Uploading mission...")
        await drone.mission.upload_mission(mission_plan)
    except MissionError as e:
        logger.error(f"Mission upload failed ({e}), exiting.")
        return False
    logger.info(f"Mission uploaded ({len(mission_plan.mission_items)} items).")

    # Listen to the local position at a low rate while flying
    if not await set_position_rate(drone, config.position_rate_hz, velocity_ned=True):
        return False

    try:
        await drone.action.arm()
    except ActionError as e:
        logger.error(f"Arming failed: {e}")
        return False
    logger.info("Armed")

    # Subscribe before starting so the first update is not missed
    progress_task = asyncio.create_task(print_mission_progress(drone))

    try:
        try:
            await drone.mission.start_mission()
        except MissionError as e:
            logger.error(f"Mission start failed: {e}")
            return False

        while not await drone.mission.is_mission_finished():
            if is_stop_requested(stop_event):
                logger.warning("Mission interrupted by user")
                return False
            await asyncio.sleep(1)
    finally:
        progress_task.cancel()
        await asyncio.gather(progress_task, return_exceptions=True)

    logger.info("Mission finished")
    return True


async def run(connection_string: str, config: MissionConfig = MISSION_CONFIG) -> bool:
    """
    Execute the survey mission.

    Args:
        connection_string: MAVSDK connection string.
        config: Mission parameters.

    Returns:
        bool: True if successful, False otherwise.
    """
    stop_event = asyncio.Event()
    setup_signal_handlers(stop_event)

    logger.info("=" * 50)
    logger.info("Survey Mission")
    logger.info("=" * 50)
    logger.info(f"  Altitude: {config.relative_altitude_m}m")
    logger.info(f"  Speed: {config.speed_m_s} m/s")
    logger.info(f"  Waypoints: {len(config.waypoints)}")
    logger.info("=" * 50)

    drone = await connect_drone(connection_string, stop_event=stop_event)
    if not drone:
        return False

    if not await wait_until_ready(drone, stop_event=stop_event):
        return False

    finished = await fly_mission(drone, config, stop_event)

    if not finished:
        await rtl_if_armed(drone)
        return False

    logger.info("Commanding RTL")
    if not await trigger_rtl(drone):
        return False

    logger.info("=" * 50)
    logger.info("Survey mission complete!")
    logger.info("=" * 50)
    return True


def main():
    """Main entry point."""
    parser = create_argument_parser(
        description="Survey mission example using MAVSDK",
    )
    parser.add_argument(
        "--altitude",
        type=float,
        default=MISSION_CONFIG.relative_altitude_m,
        help=f"Mission altitude above home in meters "
             f"(default: {MISSION_CONFIG.relative_altitude_m})",
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=MISSION_CONFIG.speed_m_s,
        help=f"Mission speed in m/s (default: {MISSION_CONFIG.speed_m_s})",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        connection_string = get_connection_string_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    config = MissionConfig(relative_altitude_m=args.altitude, speed_m_s=args.speed)

    success = asyncio.run(run(connection_string=connection_string, config=config))

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
