"""
mDNS discovery for the Dirigera hub
"""

import asyncio
import logging
import time
from typing import Dict, Optional, Set

from zeroconf import IPVersion, ServiceStateChange, Zeroconf
from zeroconf.asyncio import AsyncServiceBrowser, AsyncServiceInfo, AsyncZeroconf

from .models import DiscoveryResult, DiscoveryTimedOut, HubFound

logger = logging.getLogger(__name__)

# Time allowed for a single responder to answer the service info query
SERVICE_INFO_TIMEOUT_MS = 3000

class HubLocator:
    """Browses the local network for the hub's advertised service.

    The first responder that resolves to an address wins. Discovery is a
    one-shot operation: the browser and the zeroconf instance are released
    whether the hub was found or the window elapsed.
    """

    def __init__(self, config: Dict):
        self.config = config
        self.service_type = config.get('service_type', '_ihsp._tcp.local.')
        self.discovery_timeout = config.get('discovery_timeout', 30)

    async def locate(self, timeout: Optional[float] = None) -> DiscoveryResult:
        """Find the hub address, or report a timeout"""
        timeout = self.discovery_timeout if timeout is None else timeout
        logger.info(f"Looking for hub via mDNS ({self.service_type}, timeout {timeout}s)...")
        start_time = time.time()

        loop = asyncio.get_running_loop()
        found: asyncio.Future = loop.create_future()
        resolving: Set[asyncio.Task] = set()

        aiozc = AsyncZeroconf(ip_version=IPVersion.V4Only)

        def on_service_state_change(zeroconf: Zeroconf, service_type: str, name: str,
                                    state_change: ServiceStateChange) -> None:
            if state_change is not ServiceStateChange.Added or found.done():
                return
            logger.debug(f"Service announced: {name}")
            task = asyncio.ensure_future(self._resolve(zeroconf, service_type, name, found))
            resolving.add(task)
            task.add_done_callback(resolving.discard)

        browser = AsyncServiceBrowser(aiozc.zeroconf, [self.service_type],
                                      handlers=[on_service_state_change])
        try:
            address, name, port = await asyncio.wait_for(found, timeout)
        except asyncio.TimeoutError:
            logger.error(f"Hub discovery timed out after {timeout} seconds")
            return DiscoveryTimedOut(timeout_seconds=timeout)
        finally:
            for task in list(resolving):
                task.cancel()
            await browser.async_cancel()
            await aiozc.async_close()

        duration = time.time() - start_time
        logger.info(f"Found hub at {address}:{port} ({name}) in {duration:.1f}s")
        return HubFound(address=address, name=name, port=port, duration_seconds=duration)

    async def _resolve(self, zeroconf: Zeroconf, service_type: str, name: str,
                       found: asyncio.Future) -> None:
        """Query one responder for its address and settle the future if still open"""
        info = AsyncServiceInfo(service_type, name)
        try:
            if not await info.async_request(zeroconf, SERVICE_INFO_TIMEOUT_MS):
                logger.warning(f"No service info received from {name}")
                return
        except Exception as e:
            logger.warning(f"Failed to resolve {name}: {e}")
            return

        addresses = info.parsed_addresses(IPVersion.V4Only) or info.parsed_addresses()
        if not addresses:
            logger.warning(f"Responder {name} did not advertise an address")
            return

        if not found.done():
            found.set_result((addresses[0], name, info.port))
