"""
Custom exceptions for the MapHub web map inventory.

This module provides domain-specific exception classes for error handling
and debugging throughout the system.
"""

from .custom_exceptions import (
    MapHubBaseException,
    MapHubConfigurationError,
    MapHubValidationError,
    MapHubAuthenticationError,
    MapHubConnectionError,
    MapHubProcessingError,
)

__all__ = [
    "MapHubBaseException",
    "MapHubConfigurationError",
    "MapHubValidationError",
    "MapHubAuthenticationError",
    "MapHubConnectionError",
    "MapHubProcessingError",
]
