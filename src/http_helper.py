# HTTP Helper for hub and proxy connections
# SSL-aware session configuration for the hub's self-signed endpoint and the local proxy

import aiohttp
import ssl
import logging

logger = logging.getLogger(__name__)

def create_hub_ssl_context() -> ssl.SSLContext:
    """
    TLS context for the hub connection only.
    The hub presents a self-signed certificate: traffic stays encrypted but
    the certificate chain and hostname are not verified.
    """
    ssl_context = ssl.create_default_context()
    ssl_context.check_hostname = False
    ssl_context.verify_mode = ssl.CERT_NONE
    return ssl_context

def create_hub_session(token: str, timeout_seconds: float = 10) -> aiohttp.ClientSession:
    """
    Create aiohttp session for the hub's private HTTPS API
    Every request carries the bearer token
    """
    logger.warning("Certificate verification disabled for hub connection (self-signed certificate)")

    connector = aiohttp.TCPConnector(
        ssl=create_hub_ssl_context(),
        limit_per_host=4,           # The hub is a small device
        enable_cleanup_closed=True
    )

    return aiohttp.ClientSession(
        connector=connector,
        headers={'Authorization': f'Bearer {token}'},
        timeout=aiohttp.ClientTimeout(total=timeout_seconds)
    )

def create_proxy_session(timeout_seconds: float = 10) -> aiohttp.ClientSession:
    """
    Create aiohttp session for dashboard connections to the local proxy (plain HTTP)
    """
    connector = aiohttp.TCPConnector(
        ssl=False,                  # Proxy listens on loopback over HTTP
        limit=10,
        limit_per_host=5,
        enable_cleanup_closed=True
    )

    return aiohttp.ClientSession(
        connector=connector,
        timeout=aiohttp.ClientTimeout(total=timeout_seconds)
    )
