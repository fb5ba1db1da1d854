#!/usr/bin/env python3
"""
telemetry_manager.py - Background Telemetry Cache for MAVSDK

Follows the position, attitude, armed and in-air streams in background
tasks and keeps the latest sample of each. Code that runs at its own rate
(the vision yaw forwarder, landing checks) reads the cache instead of
opening a stream every time.

Every follower yields to the event loop after each sample, otherwise a
fast stream starves the command calls running next to it.

Usage:
    telemetry = TelemetryManager(drone)
    await telemetry.start()

    print(f"Yaw: {telemetry.attitude.yaw_deg:.1f}")

    await telemetry.stop()
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from .geo import GeoPosition

logger = logging.getLogger(__name__)


@dataclass
class AttitudeData:
    """Cached Euler attitude in degrees."""
    roll_deg: float = 0.0
    pitch_deg: float = 0.0
    yaw_deg: float = 0.0
    updated_at: float = 0.0


@dataclass
class FlightStateData:
    """Cached armed and in-air flags (None until the first sample)."""
    armed: Optional[bool] = None
    in_air: Optional[bool] = None
    updated_at: float = 0.0


class TelemetryManager:
    """
    Caches the latest telemetry in background tasks.

    Attributes:
        position: Latest position (None until the first sample).
        attitude: Latest attitude.
        flight_state: Latest armed / in-air flags.
    """

    def __init__(self, drone: "System"):
        """
        Create a cache for one vehicle.

        Args:
            drone: Connected MAVSDK System.
        """
        self._drone = drone
        self._stop_event = asyncio.Event()
        self._first_position = asyncio.Event()
        self._tasks: List[asyncio.Task] = []

        self.position: Optional[GeoPosition] = None
        self.attitude = AttitudeData()
        self.flight_state = FlightStateData()

    async def start(self, first_sample_timeout: float = 2.0) -> bool:
        """
        Start following the telemetry streams.

        Args:
            first_sample_timeout: Seconds to wait for the first position.

        Returns:
            bool: True if a position arrived within the timeout.
        """
        if self.is_running:
            logger.warning("TelemetryManager already started")
            return self.position is not None

        self._stop_event.clear()
        # Samples from an earlier run say nothing about this one
        self._first_position.clear()
        self.position = None
        self.flight_state = FlightStateData()
        telemetry = self._drone.telemetry
        self._tasks = [
            asyncio.create_task(self._follow("position", telemetry.position, self._on_position)),
            asyncio.create_task(self._follow("attitude", telemetry.attitude_euler, self._on_attitude)),
            asyncio.create_task(self._follow("armed", telemetry.armed, self._on_armed)),
            asyncio.create_task(self._follow("in_air", telemetry.in_air, self._on_in_air)),
        ]
        logger.debug("TelemetryManager started")

        try:
            await asyncio.wait_for(self._first_position.wait(), first_sample_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"No position within {first_sample_timeout}s")
            return False
        return True

    async def stop(self) -> None:
        """Stop the followers and wait for them to exit."""
        if not self._tasks:
            return

        self._stop_event.set()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.debug("TelemetryManager stopped")

    @property
    def is_running(self) -> bool:
        """Check if the followers are active."""
        return bool(self._tasks)

    async def _follow(self, name: str, stream: Callable, update: Callable) -> None:
        try:
            async for sample in stream():
                if self._stop_event.is_set():
                    break
                update(sample)
                await asyncio.sleep(0)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"{name} telemetry stopped: {e}")

    def _on_position(self, sample) -> None:
        self.position = GeoPosition.from_telemetry(sample)
        self._first_position.set()

    def _on_attitude(self, sample) -> None:
        self.attitude = AttitudeData(
            sample.roll_deg, sample.pitch_deg, sample.yaw_deg, time.time()
        )

    def _on_armed(self, armed: bool) -> None:
        self.flight_state.armed = armed
        self.flight_state.updated_at = time.time()

    def _on_in_air(self, in_air: bool) -> None:
        self.flight_state.in_air = in_air
        self.flight_state.updated_at = time.time()


async def wait_for_landed(
    telemetry: TelemetryManager,
    timeout: float = 60.0,
    poll_interval: float = 1.0,
) -> bool:
    """
    Wait until the cached in-air flag clears.

    A vehicle with no in-air sample yet counts as still flying.

    Args:
        telemetry: Running TelemetryManager.
        timeout: Maximum wait time in seconds.
        poll_interval: Seconds between checks.

    Returns:
        bool: True if the vehicle is on the ground within timeout.
    """
    deadline = time.time() + timeout
    while telemetry.flight_state.in_air is not False:
        if time.time() >= deadline:
            return False
        if telemetry.flight_state.in_air is None:
            logger.info("  Waiting for in-air state...")
        else:
            logger.info("  Vehicle is landing...")
        await asyncio.sleep(poll_interval)
    return True
