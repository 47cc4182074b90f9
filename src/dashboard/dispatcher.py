"""
Command dispatch for dashboard intents
Immediate toggles, debounced sliders and sequenced room-wide toggles, with optimistic local updates
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from .models import DashboardContext, DisplayDevice

logger = logging.getLogger(__name__)

# Color classification -> color temperature sent to the hub (Kelvin)
COLOR_TEMPERATURES = {
    'white': 4000,
    'yellow': 2700,
    'orange': 2200,
}


class DispatchClass(str, Enum):
    IMMEDIATE = "immediate"
    DEBOUNCED = "debounced"
    SEQUENCED_DELAYED = "sequenced-delayed"


@dataclass(frozen=True)
class Command:
    """One attribute patch for one device; lives only while in flight"""
    device_id: str
    attributes: Dict[str, Any]
    dispatch: DispatchClass


class CommandDispatcher:
    """Turns user intents into proxy patch requests.

    Local state is updated before the request resolves. Immediate commands
    are fire-and-forget, debounced commands wait for a quiet period per
    device, and sequenced commands are sent one at a time with a pause in
    between, followed by a full refresh.
    """

    def __init__(self, context: DashboardContext, proxy,
                 refresh: Optional[Callable[[], Awaitable[Any]]] = None,
                 debounce_seconds: float = 0.25,
                 sequence_delay_seconds: float = 0.15):
        self.context = context
        self.proxy = proxy
        self.refresh = refresh
        self.debounce_seconds = debounce_seconds
        self.sequence_delay_seconds = sequence_delay_seconds

        self._tasks: Set[asyncio.Task] = set()
        self._debounce_timers: Dict[str, asyncio.Task] = {}
        self._rooms_in_progress: Set[str] = set()

    # ================== COMMAND INTERFACE ==================

    def submit(self, command: Command) -> None:
        """Dispatch an immediate or debounced command without blocking"""
        if command.dispatch is DispatchClass.IMMEDIATE:
            self._spawn(self._send(command.device_id, command.attributes))
        elif command.dispatch is DispatchClass.DEBOUNCED:
            pending = self._debounce_timers.pop(command.device_id, None)
            if pending is not None:
                pending.cancel()
            self._debounce_timers[command.device_id] = self._spawn(
                self._debounced_send(command.device_id, command.attributes)
            )
        else:
            raise ValueError("Sequenced commands must go through run_sequence()")

    async def run_sequence(self, commands: List[Command]) -> None:
        """Send commands strictly in order, pausing between them, then refresh"""
        for index, command in enumerate(commands):
            if command.dispatch is not DispatchClass.SEQUENCED_DELAYED:
                raise ValueError(f"Command for {command.device_id} is not sequenced")
            if index:
                await asyncio.sleep(self.sequence_delay_seconds)
            await self._send(command.device_id, command.attributes)

        if self.refresh is not None:
            await self.refresh()

    async def drain(self) -> None:
        """Wait for every pending and in-flight command"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ================== INTENTS ==================

    def toggle_device(self, device_id: str) -> Command:
        """Flip a light or blind; the card reflects the new state immediately"""
        device = self._require_device(device_id)
        new_is_on = not device.on
        new_value = 100 if new_is_on else 0

        if device.type == 'light':
            attributes: Dict[str, Any] = {'isOn': new_is_on}
            if new_is_on:
                attributes['lightLevel'] = 100
        else:
            attributes = {'blindsTargetLevel': new_value}

        command = Command(device.id, attributes, DispatchClass.IMMEDIATE)
        self.submit(command)

        device.on = new_is_on
        device.value = new_value
        return command

    def set_level(self, device_id: str, value: int) -> Command:
        """Slider tick: live local value, patch only after the quiet period"""
        device = self._require_device(device_id)
        value = max(0, min(100, int(value)))

        key = 'lightLevel' if device.type == 'light' else 'blindsTargetLevel'
        command = Command(device.id, {key: value}, DispatchClass.DEBOUNCED)

        device.value = value
        self.submit(command)
        return command

    def set_color(self, device_id: str, color: str) -> Command:
        """Change a light's color, restating its brightness in the same patch"""
        device = self._require_device(device_id)
        if device.type != 'light':
            raise ValueError(f"Device {device_id} is not a light")
        if color not in COLOR_TEMPERATURES:
            raise ValueError(f"Unknown color: {color}")

        command = Command(
            device.id,
            {'colorTemperature': COLOR_TEMPERATURES[color], 'lightLevel': device.value},
            DispatchClass.IMMEDIATE,
        )
        self.submit(command)

        device.color = color
        return command

    async def toggle_room(self, room_id: str) -> List[Command]:
        """Turn every available device in a room on (if any is off) or off (if all are on)"""
        room = self.context.find_room(room_id)
        if room is None:
            raise KeyError(f"Unknown room: {room_id}")
        if room_id in self._rooms_in_progress:
            logger.info(f"Room toggle already running for {room.name}, ignoring")
            return []

        available = [d for d in room.devices if d.available]
        turn_on = any(not d.on for d in available)
        new_value = 100 if turn_on else 0

        commands = []
        for device in available:
            if device.type == 'light':
                attributes = {'isOn': turn_on, 'lightLevel': new_value}
            else:
                attributes = {'blindsTargetLevel': new_value}
            commands.append(Command(device.id, attributes, DispatchClass.SEQUENCED_DELAYED))

        logger.info(f"Turning {'on' if turn_on else 'off'} {len(commands)} devices in {room.name}")
        self._rooms_in_progress.add(room_id)
        try:
            await self.run_sequence(commands)
        finally:
            self._rooms_in_progress.discard(room_id)
        return commands

    # ================== INTERNALS ==================

    def _require_device(self, device_id: str) -> DisplayDevice:
        device = self.context.find_device(device_id)
        if device is None:
            raise KeyError(f"Unknown device: {device_id}")
        return device

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _debounced_send(self, device_id: str, attributes: Dict[str, Any]) -> None:
        await asyncio.sleep(self.debounce_seconds)
        # Detach before sending so a later tick cannot cancel the request
        self._debounce_timers.pop(device_id, None)
        await self._send(device_id, attributes)

    async def _send(self, device_id: str, attributes: Dict[str, Any]) -> bool:
        try:
            await self.proxy.patch_device(device_id, attributes)
            return True
        except Exception as e:
            logger.error(f"Failed to update device {device_id}: {e}")
            self.context.mark_degraded(f"Failed to update device {device_id}: {e}")
            return False
