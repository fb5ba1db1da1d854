#!/usr/bin/env python3
"""
vision.py - Vision Yaw Forwarder

Feeds the vehicle's own yaw back to it as a motion-capture vision position
estimate at a fixed rate. Position is reported as the origin, so the
estimator only gains a heading source.

The forwarder runs as an asyncio task. It is stopped through an
asyncio.Event passed to run(); stop() sets the event and then awaits the
task, so the caller knows the loop has finished sending.

Usage:
    telemetry = TelemetryManager(drone)
    await telemetry.start()

    forwarder = VisionYawForwarder(drone, telemetry)
    forwarder.start()
    ...
    sent = await forwarder.stop()
"""

import asyncio
import logging
import math
import time
from typing import Optional

from mavsdk.mocap import (
    AngleBody,
    Covariance,
    MocapError,
    PositionBody,
    VisionPositionEstimate,
)

from .telemetry_manager import TelemetryManager

logger = logging.getLogger(__name__)

# Upper triangle of the 6x6 pose covariance
COVARIANCE_SIZE = 21


def build_vision_estimate(yaw_deg: float, time_usec: int) -> VisionPositionEstimate:
    """
    Build a vision estimate carrying only a yaw angle.

    Args:
        yaw_deg: Vehicle yaw in degrees.
        time_usec: Timestamp in microseconds.

    Returns:
        VisionPositionEstimate: Estimate at the origin with the given yaw.
    """
    return VisionPositionEstimate(
        time_usec=time_usec,
        position_body=PositionBody(0.0, 0.0, 0.0),
        angle_body=AngleBody(0.0, 0.0, math.radians(yaw_deg)),
        pose_covariance=Covariance([0.0] * COVARIANCE_SIZE),
        # Estimator is never reset, so the counter stays 0
        reset_counter=0,
    )


class VisionYawForwarder:
    """
    Sends the cached yaw as vision position estimates until stopped.

    Attributes:
        rate_hz: Estimates sent per second.
        sent_count: Estimates sent by the current or last run.
        error: Exception that ended the last run, or None.
    """

    def __init__(
        self,
        drone: "System",
        telemetry: TelemetryManager,
        rate_hz: float = 50.0,
    ):
        """
        Initialize the forwarder.

        Args:
            drone: Connected MAVSDK System.
            telemetry: Running TelemetryManager providing the yaw.
            rate_hz: Estimates sent per second.
        """
        self._drone = drone
        self._telemetry = telemetry
        self.rate_hz = rate_hz
        self.sent_count = 0
        self.error: Optional[Exception] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    async def run(self, stop_event: asyncio.Event) -> int:
        """
        Send estimates until stop_event is set.

        Args:
            stop_event: Checked before every estimate.

        Returns:
            int: Number of estimates sent.
        """
        interval = 1.0 / self.rate_hz
        self.sent_count = 0

        while not stop_event.is_set():
            estimate = build_vision_estimate(
                self._telemetry.attitude.yaw_deg,
                int(time.time() * 1e6),
            )
            try:
                await self._drone.mocap.set_vision_position_estimate(estimate)
                self.sent_count += 1
            except MocapError as e:
                logger.warning(f"Vision estimate rejected: {e}")

            await asyncio.sleep(interval)

        logger.debug(f"Vision forwarder stopped after {self.sent_count} estimates")
        return self.sent_count

    def start(self) -> None:
        """Start forwarding in a background task."""
        if self._task is not None and not self._task.done():
            logger.warning("VisionYawForwarder already running")
            return

        self.error = None
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self.run(self._stop_event))
        logger.info(f"Vision yaw forwarding started ({self.rate_hz:.0f} Hz)")

    async def stop(self) -> int:
        """
        Stop forwarding and wait for the task to finish.

        Returns:
            int: Number of estimates sent.
        """
        if self._task is None:
            return self.sent_count

        self._stop_event.set()
        try:
            sent = await self._task
        except Exception as e:
            logger.error(f"Vision yaw forwarding failed: {e}")
            self.error = e
            sent = self.sent_count
        self._task = None
        self._stop_event = None
        logger.info(f"Vision yaw forwarding stopped ({sent} estimates sent)")
        return sent

    @property
    def is_running(self) -> bool:
        """Check if the forwarding task is active."""
        return self._task is not None and not self._task.done()
