"""
Discovery data structures and models
"""

from typing import Union
from dataclasses import dataclass

@dataclass(frozen=True)
class HubFound:
    """The hub answered the mDNS browse"""
    address: str
    name: str
    port: int
    duration_seconds: float

@dataclass(frozen=True)
class DiscoveryTimedOut:
    """Nobody answered within the discovery window"""
    timeout_seconds: float

DiscoveryResult = Union[HubFound, DiscoveryTimedOut]
