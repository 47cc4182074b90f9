"""
Discovery module for locating the hub on the local network
"""

from .hub_locator import HubLocator
from .models import HubFound, DiscoveryTimedOut, DiscoveryResult

__all__ = ['HubLocator', 'HubFound', 'DiscoveryTimedOut', 'DiscoveryResult']
