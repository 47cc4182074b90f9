"""
Dirigera Local Server - Main Entry Point
"""

import asyncio
import sys
import logging
import os
from typing import Optional

from services.proxy_server import ProxyServer, HubDiscoveryError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = 'config/config.yaml'

async def main(config_path: Optional[str] = None) -> int:
    """Start the proxy; returns the process exit code"""
    config_path = config_path or os.environ.get('CONFIG_FILE', DEFAULT_CONFIG_PATH)

    # Config or token problems abort before discovery starts
    try:
        server = ProxyServer(config_path=config_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Startup aborted: {e}")
        return 1

    logger.info(f"Using configuration file: {config_path}")

    # uvicorn installs its own SIGINT/SIGTERM handling while serving
    try:
        await server.start()
    except HubDiscoveryError as e:
        logger.error(f"FATAL: {e}")
        return 1
    except Exception as e:
        logger.error(f"Server failed: {e}")
        return 1
    finally:
        await server.stop()

    return 0

def run():
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nServer stopped by user")
        sys.exit(0)

if __name__ == "__main__":
    run()
