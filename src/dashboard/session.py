"""
Dashboard session - periodic fetch-and-reconcile loop plus command dispatch
"""

import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional

from .dispatcher import CommandDispatcher
from .models import ConnectionStatus, DashboardContext, Room
from .proxy_client import ProxyClient
from .reconciliation import apply_snapshot

logger = logging.getLogger(__name__)


class DashboardSession:
    """Owns the session context, the proxy client, the dispatcher and the poll timer"""

    def __init__(self, config: Dict, proxy: Optional[ProxyClient] = None,
                 context: Optional[DashboardContext] = None,
                 on_update: Optional[Callable[[DashboardContext], None]] = None):
        self.config = config
        self.on_update = on_update
        self.poll_interval = config.get('poll_interval_seconds', 10)
        self.context = context or DashboardContext()
        self.proxy = proxy or ProxyClient(
            config.get('proxy_url', 'http://127.0.0.1:3000'),
            timeout_seconds=config.get('request_timeout', 10)
        )
        self.dispatcher = CommandDispatcher(
            self.context,
            self.proxy,
            refresh=self.refresh,
            debounce_seconds=config.get('debounce_seconds', 0.25),
            sequence_delay_seconds=config.get('bulk_command_delay_seconds', 0.15)
        )

        self.running = False
        self._poll_task: Optional[asyncio.Task] = None
        self.refresh_count = 0

    async def refresh(self) -> List[Room]:
        """Fetch one snapshot and reconcile it; failures only degrade the status"""
        try:
            snapshot = await self.proxy.list_devices()
            if not isinstance(snapshot, list):
                raise ValueError(f"Expected a device list, got {type(snapshot).__name__}")
            rooms = apply_snapshot(self.context, snapshot)
        except Exception as e:
            logger.error(f"Failed to fetch or process devices: {e}")
            if self.context.status is not ConnectionStatus.DEGRADED:
                logger.warning("Dashboard status degraded - is the proxy server running?")
            self.context.mark_degraded(str(e))
            self._notify()
            return self.context.rooms

        self.context.mark_ok()
        self.refresh_count += 1
        self._notify()
        return rooms

    def _notify(self):
        if self.on_update is not None:
            self.on_update(self.context)

    async def run(self):
        """Refresh immediately, then every poll interval until stopped"""
        logger.info(f"Dashboard polling started (every {self.poll_interval}s)")

        while self.running:
            cycle_start_time = time.monotonic()
            await self.refresh()

            elapsed_time = time.monotonic() - cycle_start_time
            if elapsed_time > self.poll_interval:
                logger.warning(
                    f"Refresh took {elapsed_time:.1f}s (>{self.poll_interval}s configured) - "
                    f"starting next cycle immediately"
                )
                continue

            await asyncio.sleep(self.poll_interval - elapsed_time)

    def start(self) -> asyncio.Task:
        self.running = True
        self._poll_task = asyncio.create_task(self.run())
        return self._poll_task

    async def stop(self):
        """Stop polling, let in-flight commands finish and close the proxy session"""
        self.running = False
        if self._poll_task:
            self._poll_task.cancel()
            await asyncio.gather(self._poll_task, return_exceptions=True)
            self._poll_task = None
        await self.dispatcher.drain()
        await self.proxy.close()
