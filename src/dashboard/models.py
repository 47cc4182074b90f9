"""
Dashboard data structures: display devices, rooms, gateway header status and the session context
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

DEVICE_TYPES = ('light', 'blinds', 'controller')
CARD_TYPES = ('light', 'blinds')

@dataclass(frozen=True)
class ColorTheme:
    """Room header colors"""
    header: str
    text: str

# Fixed palette handed out to rooms in order of first appearance
STATIC_COLOR_THEMES: Tuple[ColorTheme, ...] = (
    ColorTheme(header='#8DBCD4', text='#1f2937'),
    ColorTheme(header='#9FB842', text='#1f2937'),
    ColorTheme(header='#FFDD51', text='#1f2937'),
    ColorTheme(header='#E3AA3C', text='#1f2937'),
    ColorTheme(header='#FFB7B9', text='#1f2937'),
    ColorTheme(header='#DC5D65', text='#ffffff'),
    ColorTheme(header='#F0DFB5', text='#1f2937'),
    ColorTheme(header='#3B6BE0', text='#ffffff'),
)

class ThemeRegistry:
    """Assigns palette entries to room names, stable for the session"""

    def __init__(self, palette: Tuple[ColorTheme, ...] = STATIC_COLOR_THEMES):
        self.palette = palette
        self._assigned: Dict[str, ColorTheme] = {}

    def theme_for(self, room_name: str) -> ColorTheme:
        if room_name not in self._assigned:
            # Cycles once every palette entry is taken
            self._assigned[room_name] = self.palette[len(self._assigned) % len(self.palette)]
        return self._assigned[room_name]


@dataclass
class DisplayDevice:
    """A device as shown on a room card; derived fields come from one snapshot"""
    id: str
    name: str
    type: str
    available: bool
    on: bool
    value: int = 0
    color: Optional[str] = None
    battery_level: Optional[int] = None


@dataclass
class Room:
    id: str
    name: str
    theme: ColorTheme
    icon: str
    is_open: bool = True
    devices: List[DisplayDevice] = field(default_factory=list)
    controllers: List[DisplayDevice] = field(default_factory=list)


@dataclass
class GatewayStatus:
    """Header/status data taken from the gateway record"""
    reachable: bool
    next_sunrise: Optional[datetime] = None
    next_sunset: Optional[datetime] = None
    model: str = ''
    firmware_version: str = ''
    hardware_version: str = ''
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class ConnectionStatus(str, Enum):
    UNKNOWN = "unknown"
    OK = "ok"
    DEGRADED = "degraded"


class DashboardContext:
    """Session state shared by reconciliation, command dispatch and the poll loop.

    Rooms are replaced wholesale by reconciliation; the dispatcher mutates
    individual device fields for optimistic updates. Both run on the same
    event loop.
    """

    def __init__(self, themes: Optional[ThemeRegistry] = None):
        self.rooms: List[Room] = []
        self.gateway: Optional[GatewayStatus] = None
        self.themes = themes or ThemeRegistry()
        self.status = ConnectionStatus.UNKNOWN
        self.last_error: Optional[str] = None

    def find_room(self, room_id: str) -> Optional[Room]:
        return next((room for room in self.rooms if room.id == room_id), None)

    def find_device(self, device_id: str) -> Optional[DisplayDevice]:
        for room in self.rooms:
            for device in room.devices:
                if device.id == device_id:
                    return device
        return None

    def toggle_room_open(self, room_id: str) -> bool:
        """Flip a room's expanded state; returns the new value"""
        room = self.find_room(room_id)
        if room is None:
            raise KeyError(f"Unknown room: {room_id}")
        room.is_open = not room.is_open
        return room.is_open

    def mark_ok(self):
        self.status = ConnectionStatus.OK
        self.last_error = None

    def mark_degraded(self, error: str):
        self.status = ConnectionStatus.DEGRADED
        self.last_error = error
