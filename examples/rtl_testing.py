#!/usr/bin/env python3
"""
rtl_testing.py - Return-To-Launch Behaviour Test

Flies a series of short hops and triggers RTL after each one, to check
how PX4 chooses its return altitude (RTL_RETURN_ALT and the RTL cone
defined by RTL_CONE_DIST):

1. Take off and trigger RTL directly above home
2. For each scenario: take off, fly to a setpoint given as meters
   north/east of home and a height above home, then trigger RTL

The vehicle is expected to auto-disarm after each RTL landing.

Usage:
    python3 rtl_testing.py udp://:14540
    python3 rtl_testing.py -c tcp --tcp-host 192.168.1.100
"""

import asyncio
import logging
import sys

# Add parent directory to path for imports
sys.path.insert(0, sys.path[0] + "/..")

from examples.common import (
    RTL_TEST_CONFIG,
    GeoPosition,
    LocalOffset,
    RtlScenario,
    RtlTestConfig,
    arm_and_takeoff,
    connect_drone,
    create_argument_parser,
    get_connection_string_from_args,
    get_current_position,
    goto_setpoint,
    is_stop_requested,
    project_local_offset,
    rtl_if_armed,
    set_position_rate,
    setup_logging,
    setup_signal_handlers,
    trigger_rtl,
    wait_for_setpoint,
    wait_until_ready,
)

logger = setup_logging()


def compute_scenario_setpoint(current: GeoPosition, scenario: RtlScenario) -> GeoPosition:
    """
    Compute the goto setpoint of a scenario.

    Args:
        current: Position on the ground at home, before takeoff.
        scenario: Scenario to fly.

    Returns:
        GeoPosition: Setpoint with the absolute altitude for goto_location.
    """
    offset = LocalOffset(
        north_m=scenario.north_m,
        east_m=scenario.east_m,
        up_m=scenario.height_above_home_m,
    )
    return project_local_offset(current, offset)


async def goto_setpoint_and_rtl(
    drone,
    scenario: RtlScenario,
    config: RtlTestConfig,
    stop_event: asyncio.Event,
) -> bool:
    """
    Take off, fly to the scenario setpoint and return to launch.

    Args:
        drone: Connected and ready MAVSDK System.
        scenario: Scenario to fly.
        config: Test parameters.
        stop_event: Set to abandon the climb.

    Returns:
        bool: True if the vehicle flew the scenario and disarmed at home.
    """
    current = await get_current_position(drone)
    if current is None:
        logger.error("No position available")
        return False

    setpoint = compute_scenario_setpoint(current, scenario)

    if not await arm_and_takeoff(
        drone,
        tolerance_m=config.takeoff_tolerance_m,
        stop_event=stop_event,
    ):
        await rtl_if_armed(drone, timeout=config.rtl_timeout_s)
        return False

    if not await goto_setpoint(drone, setpoint, scenario.yaw_deg):
        await trigger_rtl(drone, timeout=config.rtl_timeout_s)
        return False

    await wait_for_setpoint(
        drone,
        setpoint,
        acceptance_radius_m=config.acceptance_radius_m,
        timeout=config.setpoint_timeout_s,
    )

    return await trigger_rtl(drone, timeout=config.rtl_timeout_s)


async def run(connection_string: str, config: RtlTestConfig = RTL_TEST_CONFIG) -> bool:
    """
    Execute the RTL test sequence.

    Args:
        connection_string: MAVSDK connection string.
        config: Test parameters.

    Returns:
        bool: True if every step succeeded, False otherwise.
    """
    stop_event = asyncio.Event()
    setup_signal_handlers(stop_event)

    logger.info("=" * 50)
    logger.info("RTL Test")
    logger.info("=" * 50)
    logger.info(f"  Scenarios: {len(config.scenarios)}")
    logger.info("=" * 50)

    drone = await connect_drone(connection_string, stop_event=stop_event)
    if not drone:
        return False

    # Listen to the altitude at a low rate
    if not await set_position_rate(drone, config.position_rate_hz):
        return False

    if not await wait_until_ready(drone, poll_interval=1.0, stop_event=stop_event):
        return False

    logger.info("Trigger RTL at takeoff height and directly above home")
    if not await arm_and_takeoff(
        drone,
        tolerance_m=config.takeoff_tolerance_m,
        stop_event=stop_event,
    ):
        await rtl_if_armed(drone, timeout=config.rtl_timeout_s)
        return False

    # Land directly over home position (from takeoff height)
    if not await trigger_rtl(drone, timeout=config.rtl_timeout_s):
        return False

    for index, scenario in enumerate(config.scenarios, 1):
        if is_stop_requested(stop_event):
            logger.warning("RTL test interrupted by user")
            return False

        logger.info(f"Scenario {index}/{len(config.scenarios)}: {scenario.description}")
        if not await goto_setpoint_and_rtl(drone, scenario, config, stop_event):
            logger.error(f"Scenario {index} failed")
            return False

    logger.info("=" * 50)
    logger.info("RTL test complete!")
    logger.info("=" * 50)
    return True


def main():
    """Main entry point."""
    parser = create_argument_parser(
        description="Return-to-launch behaviour test using MAVSDK",
    )
    parser.add_argument(
        "--setpoint-timeout",
        type=float,
        default=RTL_TEST_CONFIG.setpoint_timeout_s,
        help=f"Seconds to wait at each setpoint before RTL "
             f"(default: {RTL_TEST_CONFIG.setpoint_timeout_s})",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        connection_string = get_connection_string_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    config = RtlTestConfig(setpoint_timeout_s=args.setpoint_timeout)

    success = asyncio.run(run(connection_string=connection_string, config=config))

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
