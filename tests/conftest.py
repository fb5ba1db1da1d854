"""
Pytest configuration and shared fixtures for the maneuver tests.

This module provides:
- Test markers configuration
- A simulated drone exposing the MAVSDK plugin surface used by the helpers
- A connected SITL drone fixture for flight tests
"""

import asyncio
import os
import time
from collections import deque
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

# Test configuration from environment
MAVLINK_URL = os.environ.get("MAVLINK_URL", "udp://:14540")
TEST_TIMEOUT = float(os.environ.get("TEST_TIMEOUT", "60"))
SITL_AVAILABLE = os.environ.get("PX4_SITL") == "1"

# PX4 SITL default home
HOME_LATITUDE = 47.398
HOME_LONGITUDE = 8.546
HOME_ALTITUDE = 488.0


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers",
        "flight: mark test as requiring a PX4 SITL vehicle (set PX4_SITL=1)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip flight tests unless a SITL vehicle is available."""
    if SITL_AVAILABLE:
        return
    skip_flight = pytest.mark.skip(reason="PX4 SITL not available (set PX4_SITL=1)")
    for item in items:
        if "flight" in item.keywords:
            item.add_marker(skip_flight)


def make_position(
    relative_altitude_m: float = 0.0,
    latitude_deg: float = HOME_LATITUDE,
    longitude_deg: float = HOME_LONGITUDE,
    home_altitude_m: float = HOME_ALTITUDE,
):
    """Build a telemetry position sample."""
    return SimpleNamespace(
        latitude_deg=latitude_deg,
        longitude_deg=longitude_deg,
        absolute_altitude_m=home_altitude_m + relative_altitude_m,
        relative_altitude_m=relative_altitude_m,
    )


class ScriptedStream:
    """
    Telemetry stream replaying scripted values.

    Every subscription continues where the previous one stopped; the last
    value repeats forever, like a vehicle that stays in its final state.
    """

    def __init__(self, values):
        self.values = deque(values)
        self.subscriptions = 0

    def set(self, values):
        self.values = deque(values)

    def __call__(self):
        self.subscriptions += 1
        return self._stream()

    async def _stream(self):
        while self.values:
            if len(self.values) > 1:
                value = self.values.popleft()
            else:
                value = self.values[0]
            yield value
            await asyncio.sleep(0)


class SimulatedTelemetry:
    """Scripted replacement for drone.telemetry."""

    def __init__(self):
        self.position = ScriptedStream([make_position()])
        self.armed = ScriptedStream([False])
        self.in_air = ScriptedStream([False])
        self.health_all_ok = ScriptedStream([True])
        self.attitude_euler = ScriptedStream(
            [SimpleNamespace(roll_deg=0.0, pitch_deg=0.0, yaw_deg=90.0)]
        )
        self.set_rate_position = AsyncMock()
        self.set_rate_position_velocity_ned = AsyncMock()


class SimulatedDrone:
    """
    Offline stand-in for mavsdk.System.

    Telemetry streams are scripted, plugin commands are AsyncMocks so tests
    can check which commands were sent. The plugins share one parent mock,
    so commands() gives the order across plugins.
    """

    def __init__(self):
        self.telemetry = SimulatedTelemetry()
        self._plugins = AsyncMock()
        self.action = self._plugins.action
        self.action.get_takeoff_altitude.return_value = 2.5
        self.mission = self._plugins.mission
        self.mission.mission_progress = ScriptedStream(
            [SimpleNamespace(current=1, total=4)]
        )
        self.mission.is_mission_finished.return_value = True
        self.offboard = self._plugins.offboard
        self.mocap = self._plugins.mocap

    def commands(self, *names):
        """
        Commands sent so far, in order, as "plugin.method" names.

        Args:
            names: Only report these commands (all but mocap if empty).
        """
        sent = [call[0] for call in self._plugins.mock_calls]
        if names:
            return [name for name in sent if name in names]
        return [name for name in sent if not name.startswith("mocap.")]


@pytest.fixture
def simulated_drone():
    """
    Fixture providing a simulated drone on the ground at home.

    Returns:
        SimulatedDrone: Fresh simulated drone.
    """
    return SimulatedDrone()


@pytest.fixture
def home_position():
    """
    Fixture providing the SITL home position 50m above home.

    Returns:
        GeoPosition: Position used by the projection tests.
    """
    from examples.common.geo import GeoPosition

    return GeoPosition(
        latitude_deg=HOME_LATITUDE,
        longitude_deg=HOME_LONGITUDE,
        absolute_altitude_m=500.0,
        relative_altitude_m=50.0,
    )


@pytest_asyncio.fixture
async def drone():
    """
    Fixture providing a connected MAVSDK drone instance.

    Yields:
        mavsdk.System: Connected drone instance.
    """
    from mavsdk import System

    drone = System()
    await drone.connect(system_address=MAVLINK_URL)

    start_time = time.time()
    async for state in drone.core.connection_state():
        if state.is_connected:
            break
        if time.time() - start_time > TEST_TIMEOUT:
            pytest.fail("Connection timeout")
        await asyncio.sleep(0.5)

    yield drone

    # Cleanup - bring the vehicle down if a test left it armed
    from mavsdk.action import ActionError

    async for armed in drone.telemetry.armed():
        if armed:
            try:
                await drone.action.return_to_launch()
            except ActionError:
                pass
        break
