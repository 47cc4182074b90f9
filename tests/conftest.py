"""Pytest configuration and fixtures for the Dirigera local server tests."""

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

LIVING_ROOM = {"id": "room-living", "name": "Living Room", "icon": "rooms_sofa"}
BEDROOM = {"id": "room-bed", "name": "Bedroom", "icon": "rooms_bed"}


def make_raw_device(
    device_id: str,
    device_type: str = "light",
    name: Optional[str] = None,
    room: Optional[Dict[str, Any]] = LIVING_ROOM,
    *,
    is_on: bool = False,
    reachable: bool = True,
    **attributes: Any,
) -> Dict[str, Any]:
    """Build a raw device record shaped like the hub's /devices response.

    Args:
        device_id: Hub-assigned device identifier.
        device_type: One of light, blinds, controller, gateway.
        name: Optional customName attribute.
        room: Room reference, or None for devices outside any room.
        is_on: Value of the isOn attribute.
        reachable: Value of isReachable.
        **attributes: Extra raw attributes (lightLevel, colorTemperature, ...).

    Returns:
        A raw device dictionary.

    """
    record_attributes: Dict[str, Any] = {"isOn": is_on, **attributes}
    if name is not None:
        record_attributes["customName"] = name
    record: Dict[str, Any] = {
        "id": device_id,
        "type": device_type,
        "isReachable": reachable,
        "attributes": record_attributes,
    }
    if room is not None:
        record["room"] = dict(room)
    return record


def make_gateway() -> Dict[str, Any]:
    """Build a gateway record with sun times and coordinates."""
    return {
        "id": "gw-1",
        "type": "gateway",
        "isReachable": True,
        "attributes": {
            "model": "DIRIGERA Hub for smart products",
            "firmwareVersion": "2.615.3",
            "hardwareVersion": "P2.5",
            "nextSunRise": "2025-03-01T06:12:00.000Z",
            "nextSunSet": "2025-03-01T17:48:00.000Z",
            "coordinates": {"latitude": 59.33, "longitude": 18.06},
        },
    }


@pytest.fixture
def sample_snapshot() -> List[Dict[str, Any]]:
    """Fixture providing a snapshot with a gateway, two rooms and mixed devices."""
    return [
        make_gateway(),
        make_raw_device("light-10", name="Lamp 10", is_on=True, lightLevel=40, colorTemperature=2700),
        make_raw_device("blind-r", "blinds", name="Right Blind", blindsCurrentLevel=30, batteryPercentage=80),
        make_raw_device("light-2", name="Lamp 2", is_on=True, lightLevel=63, colorTemperature=4000),
        make_raw_device("blind-l", "blinds", name="Left Blind", blindsCurrentLevel=30, batteryPercentage=75),
        make_raw_device("remote-1", "controller", name="Remote", batteryPercentage=9),
        make_raw_device("light-bed", name="Bedside", room=BEDROOM, lightLevel=20),
        make_raw_device("light-orphan", name="Hallway", room=None),
        make_raw_device("speaker-1", "speaker", name="Speaker"),
    ]


@pytest.fixture
def mock_proxy() -> MagicMock:
    """Create a mock proxy client with async list/patch/close."""
    proxy = MagicMock()
    proxy.list_devices = AsyncMock(return_value=[])
    proxy.patch_device = AsyncMock(return_value=None)
    proxy.close = AsyncMock()
    return proxy


def mock_response(status: int = 200, json_data: Any = None, text: str = "") -> MagicMock:
    """Create an aiohttp-style response usable as ``async with session.get(...)``."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=json_data)
    response.text = AsyncMock(return_value=text)

    context_manager = MagicMock()
    context_manager.__aenter__ = AsyncMock(return_value=response)
    context_manager.__aexit__ = AsyncMock(return_value=False)
    return context_manager


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp session."""
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    return session
