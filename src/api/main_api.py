"""
Local HTTP proxy for the Dirigera hub
Translates browser requests into authenticated hub calls; validation and pass-through only
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from typing import Dict
from pathlib import Path
import logging

# Import modular route factories
from .device_routes import create_device_routes
from .system_routes import create_system_routes

logger = logging.getLogger(__name__)

SERVER_VERSION = "1.0.0"


class ProxyAPI:
    """Local HTTP API proxying device list/patch calls to the hub"""

    def __init__(self, hub_client, config: Dict):
        self.hub = hub_client
        self.config = config
        self.app = FastAPI(
            title="Dirigera Local Proxy",
            description="Local API proxying device listing and attribute patches to the hub",
            version=SERVER_VERSION
        )
        self._setup_middleware()
        self._setup_error_handlers()
        self._setup_routes()

    def _setup_middleware(self):
        """Apply CORS settings from configuration"""
        origins = self.config.get('api', {}).get('cors_origins', ['*'])
        if origins:
            self.app.add_middleware(
                CORSMiddleware,
                allow_origins=origins,
                allow_methods=["GET", "PATCH", "OPTIONS"],
                allow_headers=["*"]
            )

    def _setup_error_handlers(self):
        """Malformed request bodies are client errors, same as a missing attribute patch"""

        @self.app.exception_handler(RequestValidationError)
        async def validation_error_handler(request: Request, exc: RequestValidationError):
            logger.warning(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
            return PlainTextResponse(
                "Bad Request: 'attributes' payload is missing or empty.", status_code=400
            )

    def _setup_routes(self):
        """Setup FastAPI routes using modular approach"""
        self.app.include_router(create_device_routes(self.hub))
        self.app.include_router(create_system_routes(self.hub, SERVER_VERSION))

        # Static UI is mounted last so API routes take precedence
        static_dir = self.config.get('api', {}).get('static_dir')
        if static_dir:
            if Path(static_dir).is_dir():
                self.app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
                logger.info(f"Serving static files from {static_dir}")
            else:
                logger.warning(f"Static directory not found: {static_dir}")
