"""
Dashboard-side client for the local proxy API
"""

import logging
from typing import Any, Dict, List, Optional

import aiohttp

from http_helper import create_proxy_session

logger = logging.getLogger(__name__)


class ProxyClientError(Exception):
    """Non-2xx response from the proxy."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"HTTP error! status: {status} {body}".rstrip())


class ProxyClient:
    """Fetches snapshots from and sends attribute patches to the proxy"""

    def __init__(self, base_url: str, timeout_seconds: float = 10,
                 session: Optional[aiohttp.ClientSession] = None):
        self.base_url = base_url.rstrip('/')
        self._timeout_seconds = timeout_seconds
        self._own_session = session is None
        self.session = session

    def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = create_proxy_session(self._timeout_seconds)
            self._own_session = True
        return self.session

    async def close(self):
        if self._own_session and self.session is not None and not self.session.closed:
            await self.session.close()

    async def list_devices(self) -> List[Dict[str, Any]]:
        async with self._get_session().get(f"{self.base_url}/devices") as response:
            if response.status != 200:
                raise ProxyClientError(response.status, await response.text())
            return await response.json(content_type=None)

    async def patch_device(self, device_id: str, attributes: Dict[str, Any]) -> None:
        logger.info(f"Updating device {device_id} with payload: {attributes}")
        body = {"attributes": attributes}
        async with self._get_session().patch(f"{self.base_url}/devices/{device_id}", json=body) as response:
            if response.status >= 300:
                raise ProxyClientError(response.status, await response.text())
