"""
Authenticated client for the hub's private HTTPS API
"""

import logging
from typing import Any, Dict, List, Optional

import aiohttp

# Import HTTP helper function
from http_helper import create_hub_session

logger = logging.getLogger(__name__)


class HubApiError(Exception):
    """Non-2xx response from the hub, carrying its status and body for diagnostics."""

    def __init__(self, status: int, body: str, method: str = "", path: str = ""):
        self.status = status
        self.body = body
        self.method = method
        self.path = path
        super().__init__(f"Hub returned HTTP {status} for {method} {path}: {body}")


class HubClient:
    """Issues authenticated requests against the discovered hub address.

    The client only holds the base URL, the token and an aiohttp session;
    every call is independent. Transport errors (``aiohttp.ClientError``,
    timeouts) propagate untranslated.
    """

    def __init__(self, address: str, token: str, port: int = 8443, api_version: str = "v1",
                 timeout_seconds: float = 10, session: Optional[aiohttp.ClientSession] = None):
        self.address = address
        self.base_url = f"https://{address}:{port}/{api_version}"
        self._token = token
        self._timeout_seconds = timeout_seconds
        self._own_session = session is None
        self.session = session

    def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = create_hub_session(self._token, self._timeout_seconds)
            self._own_session = True
        return self.session

    async def close(self):
        if self._own_session and self.session is not None and not self.session.closed:
            await self.session.close()

    async def list_devices(self) -> List[Dict[str, Any]]:
        """Return the hub's raw device records"""
        path = "/devices"
        async with self._get_session().get(f"{self.base_url}{path}") as response:
            if response.status >= 300:
                body = await response.text()
                raise HubApiError(response.status, body, "GET", path)
            return await response.json(content_type=None)

    async def patch_device(self, device_id: str, attributes: Dict[str, Any]) -> None:
        """Send a partial attribute update wrapped in the hub's envelope"""
        path = f"/devices/{device_id}"
        payload = [{"attributes": attributes}]
        async with self._get_session().patch(f"{self.base_url}{path}", json=payload) as response:
            if response.status >= 300:
                body = await response.text()
                raise HubApiError(response.status, body, "PATCH", path)
