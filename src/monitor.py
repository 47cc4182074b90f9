"""
Dirigera Dashboard Monitor - console view of the poll/reconcile loop
Prints one status line per room every refresh
"""

import asyncio
import signal
import sys
import logging
import os

from config_loader import load_config, setup_logging
from dashboard import DashboardContext, DashboardSession, Room
from dashboard.models import ConnectionStatus

logger = logging.getLogger(__name__)

def format_room_line(room: Room) -> str:
    """One line per room: open marker, name, device states, controller batteries"""
    parts = []
    for device in room.devices:
        if not device.available:
            state = "n/a"
        elif device.type == 'light':
            state = f"{device.value}% {device.color}" if device.on else "off"
        elif device.value == 0:
            state = "up"
        elif device.value == 100:
            state = "down"
        else:
            state = f"{device.value}% down"
        parts.append(f"{device.name}={state}")

    batteries = [
        f"{c.name}={c.battery_level}%" for c in room.controllers if c.battery_level is not None
    ]
    marker = "-" if room.is_open else "+"
    line = f"[{marker}] {room.name}: {', '.join(parts) or 'no devices'}"
    if batteries:
        line += f" | batteries: {', '.join(batteries)}"
    return line

def print_dashboard(context: DashboardContext) -> None:
    if context.status is ConnectionStatus.DEGRADED:
        print(f"!! degraded: {context.last_error}")
        return
    header = "hub reachable" if context.gateway and context.gateway.reachable else "hub unreachable"
    print(f"== {header} | {len(context.rooms)} rooms")
    for room in context.rooms:
        print(format_room_line(room))

async def main():
    """Monitor entry point"""
    config_path = os.environ.get('CONFIG_FILE', 'config/config.yaml')
    try:
        config = load_config(config_path)
    except Exception as e:
        logger.error(f"Monitor failed: {e}")
        return 1
    setup_logging(config)

    session = DashboardSession(config['dashboard'], on_update=print_dashboard)
    stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop_event.set)
        except NotImplementedError:
            pass

    session.start()
    try:
        await stop_event.wait()
    finally:
        await session.stop()
    return 0

def run():
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nMonitor stopped by user")
        sys.exit(0)

if __name__ == "__main__":
    run()
