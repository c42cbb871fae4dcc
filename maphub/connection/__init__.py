"""
Connection module for the MapHub web map inventory.

This module provides credential resolution and the token-aware REST client
for the ArcGIS Online sharing API.
"""

from .auth_handler import AuthHandler
from .portal_client import PortalClient, TOKEN_EXPIRED_CODES

__all__ = [
    'AuthHandler',
    'PortalClient',
    'TOKEN_EXPIRED_CODES',
]
