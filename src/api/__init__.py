"""
API module for the hub proxy
"""

from .main_api import ProxyAPI
from .device_routes import create_device_routes
from .system_routes import create_system_routes

__all__ = ['ProxyAPI', 'create_device_routes', 'create_system_routes']
