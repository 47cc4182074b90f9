"""
Proxy Server - Main orchestrator: credential, discovery, hub client, HTTP listener
"""

import logging
from typing import Optional
import uvicorn

# Local imports
from config_loader import load_config, load_token, setup_logging
from discovery import HubLocator, DiscoveryTimedOut
from hub import HubClient
from api.main_api import ProxyAPI

logger = logging.getLogger(__name__)


class HubDiscoveryError(Exception):
    """The hub could not be located on the local network."""


class ProxyServer:
    """Main server wiring discovery, the authenticated hub client and the proxy API"""

    def __init__(self, config_path: str = "config/config.yaml"):
        self.config = load_config(config_path)
        setup_logging(self.config)

        # Credential is read once; a missing file is fatal
        self.token = load_token(self.config['hub']['token_file'])

        self.locator = HubLocator(self.config['hub'])
        self.hub: Optional[HubClient] = None
        self.api: Optional[ProxyAPI] = None
        self._server: Optional[uvicorn.Server] = None

    async def start(self):
        """Discover the hub once, then serve the proxy API"""
        logger.info("Starting Dirigera Local Proxy...")

        result = await self.locator.locate()
        if isinstance(result, DiscoveryTimedOut):
            raise HubDiscoveryError(
                f"Could not discover hub within {result.timeout_seconds}s. "
                "Please ensure it's on the same network."
            )

        hub_config = self.config['hub']
        self.hub = HubClient(
            result.address,
            self.token,
            port=hub_config['port'],
            api_version=hub_config['api_version'],
            timeout_seconds=hub_config['request_timeout']
        )
        self.api = ProxyAPI(self.hub, self.config)

        await self._start_api_server()

    async def stop(self):
        """Stop the listener and release the hub session"""
        logger.info("Stopping server...")
        if self._server:
            self._server.should_exit = True
        if self.hub:
            await self.hub.close()
        logger.info("Server stopped")

    async def _start_api_server(self):
        """Start the FastAPI server"""
        api_config = self.config['api']
        config = uvicorn.Config(
            self.api.app,
            host=api_config['host'],
            port=api_config['port'],
            log_level="info",
            access_log=False  # We handle our own logging
        )

        self._server = uvicorn.Server(config)

        logger.info(f"Dirigera proxy running on {api_config['host']}:{api_config['port']}")
        logger.info(f"Proxying requests to hub at {self.hub.address}")

        await self._server.serve()
