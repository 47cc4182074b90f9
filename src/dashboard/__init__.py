"""
Dashboard engine: snapshot reconciliation, command dispatch and the poll loop
"""

from .models import (
    ColorTheme,
    ConnectionStatus,
    DashboardContext,
    DisplayDevice,
    GatewayStatus,
    Room,
    ThemeRegistry,
)
from .reconciliation import apply_snapshot, reconcile, transform_device
from .dispatcher import Command, CommandDispatcher, DispatchClass
from .proxy_client import ProxyClient, ProxyClientError
from .session import DashboardSession

__all__ = [
    'ColorTheme', 'ConnectionStatus', 'DashboardContext', 'DisplayDevice', 'GatewayStatus',
    'Room', 'ThemeRegistry', 'apply_snapshot', 'reconcile', 'transform_device',
    'Command', 'CommandDispatcher', 'DispatchClass', 'ProxyClient', 'ProxyClientError',
    'DashboardSession',
]
