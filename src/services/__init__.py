"""
Service orchestration for the hub proxy
"""

from .proxy_server import ProxyServer, HubDiscoveryError

__all__ = ['ProxyServer', 'HubDiscoveryError']
