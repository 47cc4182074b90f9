"""
Hub module for authenticated access to the hub's private API
"""

from .client import HubClient, HubApiError

__all__ = ['HubClient', 'HubApiError']
