"""
Authentication handler for ArcGIS Online portal connections.

This module resolves the username/password pair that is exchanged for a
portal token. Credentials come from explicit arguments, environment
variables, or an interactive password prompt, and are never written to logs.
An absent username means the run proceeds anonymously.
"""

import getpass
import os
from typing import Optional, Tuple, Dict
from ..config import ConfigLoader
from ..exceptions import MapHubAuthenticationError
from ..utils import get_logger

logger = get_logger(__name__)

USERNAME_ENV_VAR = 'ARCGIS_USERNAME'
PASSWORD_ENV_VAR = 'ARCGIS_PASSWORD'


class AuthHandler:
    """
    Handles authentication credentials for portal connections.
    
    This class manages loading and validation of username/password credentials,
    ensuring no credential exposure in logs.
    """
    
    def __init__(self, config_loader: ConfigLoader):
        """
        Initialize the authentication handler.
        
        Args:
            config_loader: ConfigLoader instance for accessing configuration
        """
        self.config_loader = config_loader
        self._credentials_cache: Optional[Dict[str, str]] = None
        logger.debug("AuthHandler initialized")
    
    def get_credentials(self,
                        username: Optional[str] = None,
                        password: Optional[str] = None,
                        prompt: bool = True) -> Optional[Tuple[str, str]]:
        """
        Resolve the credentials for this run.
        
        Explicit arguments take precedence over the ARCGIS_USERNAME and
        ARCGIS_PASSWORD environment variables. When a username is known but no
        password is, the password is read interactively if ``prompt`` is set.
        
        Args:
            username: Portal username, optional
            password: Portal password, optional
            prompt: Whether a missing password may be requested interactively
            
        Returns:
            Tuple of (username, password), or None for an anonymous run
            
        Raises:
            MapHubAuthenticationError: If a username is given without a usable password
        """
        username = username if username is not None else os.getenv(USERNAME_ENV_VAR)
        
        if not username:
            logger.info("No username supplied; continuing anonymously")
            return None
        
        password = password if password is not None else os.getenv(PASSWORD_ENV_VAR)
        
        if not password and prompt:
            password = getpass.getpass("AGOL password: ")
        
        if not password:
            raise MapHubAuthenticationError(
                f"A password is required for user '{username}'. "
                f"Set {PASSWORD_ENV_VAR} or run interactively."
            )
        
        self._validate_credentials(username, password)
        
        self._credentials_cache = {'username': username, 'password': password}
        logger.info("Loaded portal credentials")
        return username, password
    
    def _validate_credentials(self, username: str, password: str) -> None:
        """
        Validate credential basic requirements.
        
        Args:
            username: Username to validate
            password: Password to validate
            
        Raises:
            MapHubAuthenticationError: If credentials are invalid
        """
        if not username or len(username.strip()) == 0:
            raise MapHubAuthenticationError("Username cannot be empty")
        
        if not password or len(password.strip()) == 0:
            raise MapHubAuthenticationError("Password cannot be empty")
        
        logger.debug("Credential validation passed")
    
    def clear_credentials_cache(self) -> None:
        """Clear any cached credentials for security."""
        if self._credentials_cache:
            for key in self._credentials_cache:
                self._credentials_cache[key] = "CLEARED"
            self._credentials_cache = None
            logger.debug("Credentials cache cleared")
