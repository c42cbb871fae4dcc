"""
Custom exception classes for the MapHub web map inventory.

This module defines domain-specific exceptions so that portal, configuration
and reporting failures can be told apart by callers and by the CLI.
"""

from typing import Optional, Dict, Any


class MapHubBaseException(Exception):
    """Base exception class for all MapHub inventory exceptions."""
    
    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}
    
    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class MapHubConfigurationError(MapHubBaseException):
    """
    Exception raised when configuration loading fails.
    
    This exception is raised when:
    - The environment configuration file is missing
    - The configuration file is not valid JSON
    """
    pass


class MapHubValidationError(MapHubBaseException):
    """
    Exception raised when validation fails.
    
    This exception is raised when:
    - Configuration structure is incomplete
    - None of the requested layer item IDs exist in the portal
    """
    pass


class MapHubAuthenticationError(MapHubBaseException):
    """
    Exception raised when authentication fails.
    
    This exception is raised when:
    - The portal rejects the username/password exchange
    - A token is still rejected after being refreshed
    - A token expires on an anonymous session
    """
    pass


class MapHubConnectionError(MapHubBaseException):
    """
    Exception raised when the portal cannot be reached.
    
    This exception is raised when:
    - Network connection issues persist after retries
    - The portal returns a non-success HTTP status
    - Token generation times out
    """
    pass


class MapHubProcessingError(MapHubBaseException):
    """
    Exception raised when inventory processing fails.
    
    This exception is raised when:
    - Search pagination exceeds the page ceiling
    - The portal returns a malformed search page
    - Report files cannot be written
    """
    pass
