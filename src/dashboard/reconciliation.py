"""
Snapshot reconciliation
Folds a full device snapshot into the room model, keeping UI-only room state
"""

import logging
import math
import re
from datetime import datetime
from functools import cmp_to_key
from typing import Any, Dict, Iterable, List, Optional

from .models import (
    CARD_TYPES,
    DEVICE_TYPES,
    DashboardContext,
    DisplayDevice,
    GatewayStatus,
    Room,
    ThemeRegistry,
)

logger = logging.getLogger(__name__)

DEFAULT_ICON = 'fa-home'

ICON_MAPPING = {
    'rooms_sofa': 'fa-couch',
    'rooms_bed': 'fa-bed',
    'rooms_desk': 'fa-briefcase',
    'rooms_sink': 'fa-bath',
    'rooms_cutlery': 'fa-utensils',
}

# Color temperature thresholds in Kelvin
WHITE_ABOVE_KELVIN = 3000
YELLOW_ABOVE_KELVIN = 2500

# ================== DEVICE TRANSFORM ==================

def map_icon(hub_icon: Optional[str]) -> str:
    """Map the hub's room icon token to a display icon"""
    if not isinstance(hub_icon, str):
        return DEFAULT_ICON
    return ICON_MAPPING.get(hub_icon, DEFAULT_ICON)

def classify_color(color_temperature: Any) -> str:
    """
    Classify a color temperature reading as white, yellow or orange.
    An absent (or zero) reading counts as yellow, not orange.
    """
    if not color_temperature or not isinstance(color_temperature, (int, float)) \
            or isinstance(color_temperature, bool):
        return 'yellow'
    if color_temperature > WHITE_ABOVE_KELVIN:
        return 'white'
    if color_temperature > YELLOW_ABOVE_KELVIN:
        return 'yellow'
    return 'orange'

def _as_level(value: Any) -> int:
    """Numeric 0-100 level; anything missing or malformed becomes 0"""
    if isinstance(value, bool) or not isinstance(value, (int, float)) \
            or not math.isfinite(value):
        return 0
    return max(0, min(100, int(value)))

def _as_battery(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)) \
            or not math.isfinite(value):
        return None
    return int(value)

def transform_device(raw: Dict[str, Any]) -> DisplayDevice:
    """Raw hub record -> display device. Pure; never raises on missing fields."""
    attributes = raw.get('attributes')
    if not isinstance(attributes, dict):
        attributes = {}
    device_type = raw.get('type', '')
    custom_name = attributes.get('customName')

    device = DisplayDevice(
        id=str(raw.get('id', '')),
        name=custom_name if isinstance(custom_name, str) and custom_name else str(device_type),
        type=device_type,
        available=bool(raw.get('isReachable', False)),
        on=bool(attributes.get('isOn', False)),
        value=0,
    )

    if device_type == 'light':
        device.value = _as_level(attributes.get('lightLevel'))
        device.color = classify_color(attributes.get('colorTemperature'))
    elif device_type in ('blinds', 'controller'):
        device.battery_level = _as_battery(attributes.get('batteryPercentage'))
        if device_type == 'blinds':
            device.value = _as_level(attributes.get('blindsCurrentLevel'))

    return device

# ================== ORDERING ==================

def _natural_key(name: str) -> List[Any]:
    # Odd positions of the split are always the digit runs
    parts = re.split(r'(\d+)', name.casefold())
    return [int(part) if index % 2 else part for index, part in enumerate(parts)]

def compare_devices(a: DisplayDevice, b: DisplayDevice) -> int:
    """'left' sorts before 'right'; otherwise natural, case-insensitive name order"""
    name_a = a.name.casefold()
    name_b = b.name.casefold()

    a_left, a_right = 'left' in name_a, 'right' in name_a
    b_left, b_right = 'left' in name_b, 'right' in name_b

    if a_left and b_right:
        return -1
    if a_right and b_left:
        return 1

    key_a, key_b = _natural_key(a.name), _natural_key(b.name)
    return (key_a > key_b) - (key_a < key_b)

device_sort_key = cmp_to_key(compare_devices)

# ================== GATEWAY ==================

def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        logger.debug(f"Unparseable gateway timestamp: {value}")
        return None

def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)

def find_gateway(snapshot: Iterable[Any]) -> Optional[Dict[str, Any]]:
    return next((d for d in snapshot if isinstance(d, dict) and d.get('type') == 'gateway'), None)

def extract_gateway_status(gateway: Dict[str, Any]) -> GatewayStatus:
    """Header data from the gateway record; fields may sit at top level or under attributes"""
    attributes = gateway.get('attributes')
    if not isinstance(attributes, dict):
        attributes = {}
    coordinates = attributes.get('coordinates') or gateway.get('coordinates') or {}

    return GatewayStatus(
        reachable=bool(gateway.get('isReachable', False)),
        next_sunrise=_parse_timestamp(attributes.get('nextSunRise')),
        next_sunset=_parse_timestamp(attributes.get('nextSunSet')),
        model=gateway.get('model') or attributes.get('model') or '',
        firmware_version=gateway.get('firmwareVersion') or attributes.get('firmwareVersion') or '',
        hardware_version=gateway.get('hardwareVersion') or attributes.get('hardwareVersion') or '',
        latitude=_as_float(coordinates.get('latitude')) if isinstance(coordinates, dict) else None,
        longitude=_as_float(coordinates.get('longitude')) if isinstance(coordinates, dict) else None,
    )

# ================== RECONCILIATION ==================

def _room_reference(raw: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    room = raw.get('room')
    if not isinstance(room, dict) or room.get('id') is None:
        return None
    return room

def reconcile(previous_rooms: List[Room], snapshot: Iterable[Any],
              themes: ThemeRegistry) -> List[Room]:
    """
    Build a fresh room list from a snapshot.
    is_open is carried over by room id (new rooms start open); device order is
    recomputed every time. The previous list is replaced, never patched.
    """
    existing_open_states = {room.id: room.is_open for room in previous_rooms}
    rooms_map: Dict[str, Room] = {}

    for raw in snapshot:
        if not isinstance(raw, dict) or raw.get('type') not in DEVICE_TYPES:
            continue
        room_ref = _room_reference(raw)
        if room_ref is None:
            continue

        room_id = str(room_ref['id'])
        if room_id not in rooms_map:
            room_name = room_ref.get('name')
            room_name = room_name if isinstance(room_name, str) else ''
            icon = map_icon(room_ref.get('icon'))
            logger.debug(f"Creating room section: name='{room_name}', icon='{room_ref.get('icon')}', mapped_icon='{icon}'")
            rooms_map[room_id] = Room(
                id=room_id,
                name=room_name,
                theme=themes.theme_for(room_name),
                icon=icon,
                is_open=existing_open_states.get(room_id, True),
            )

        room = rooms_map[room_id]
        device = transform_device(raw)
        if device.type in CARD_TYPES:
            room.devices.append(device)
        else:
            room.controllers.append(device)

    for room in rooms_map.values():
        room.devices.sort(key=device_sort_key)
        room.controllers.sort(key=device_sort_key)

    return list(rooms_map.values())

def apply_snapshot(context: DashboardContext, snapshot: List[Any]) -> List[Room]:
    """Route the gateway to the header status and replace the context's rooms"""
    gateway = find_gateway(snapshot)
    if gateway is not None:
        context.gateway = extract_gateway_status(gateway)

    context.rooms = reconcile(context.rooms, snapshot, context.themes)
    return context.rooms
