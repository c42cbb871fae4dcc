"""
Configuration loader for the MapHub web map inventory.

This module provides the ConfigLoader class that handles loading and validating
the JSON environment configuration: portal URL, search query settings, token
lifetime, processing limits and report output location.
"""

import json
import os
from pathlib import Path
from typing import Dict, Any, Optional
from functools import lru_cache

from ..exceptions import MapHubConfigurationError, MapHubValidationError
from ..utils import get_logger


REQUIRED_ENVIRONMENT_KEYS = ["portal_url", "logging", "processing", "output"]
REQUIRED_MERGED_SECTIONS = ["search", "token"]


class ConfigLoader:
    """
    Configuration loader and validator for the inventory.
    
    This class loads environment-specific configuration from
    ``environment_config.json``, merges in the ``shared`` block, validates
    required sections and provides typed accessors for each section.
    """
    
    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize the configuration loader.
        
        Args:
            config_dir: Directory containing configuration files (defaults to 'config/')
        """
        self.logger = get_logger(__name__)
        self.config_dir = Path(config_dir) if config_dir else Path("config")
    
    @lru_cache(maxsize=2)
    def load_environment_config(self, environment: str) -> Dict[str, Any]:
        """
        Load configuration for a specific environment.
        
        Args:
            environment: Environment name (development/production)
            
        Returns:
            Dictionary containing environment-specific configuration merged with shared config
            
        Raises:
            MapHubConfigurationError: If the file is missing or is not valid JSON
            MapHubValidationError: If the configuration structure is incomplete
        """
        env_config_path = self.config_dir / "environment_config.json"
        
        if not env_config_path.exists():
            raise MapHubConfigurationError(
                f"Environment configuration file not found: {env_config_path}"
            )
        
        try:
            with open(env_config_path, 'r') as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise MapHubConfigurationError(
                f"Invalid JSON in environment configuration: {str(e)}",
                {"path": str(env_config_path)}
            )
        
        self._validate_environment_config(config_data, environment)
        
        env_config = json.loads(json.dumps(config_data["environments"][environment]))
        
        # Shared sections first, environment values win
        for key, shared_value in config_data.get("shared", {}).items():
            if key not in env_config:
                env_config[key] = json.loads(json.dumps(shared_value))
            elif isinstance(shared_value, dict) and isinstance(env_config[key], dict):
                merged = dict(shared_value)
                merged.update(env_config[key])
                env_config[key] = merged
        
        missing_sections = [s for s in REQUIRED_MERGED_SECTIONS if s not in env_config]
        if missing_sections:
            raise MapHubValidationError(
                f"Missing required sections in {environment} configuration "
                f"(including shared): {missing_sections}"
            )
        
        env_config["_validation"] = config_data.get("validation", {})
        
        self.logger.info(f"Loaded configuration for environment: {environment}")
        return env_config
    
    def get_portal_url(self, environment: str) -> str:
        """Return the portal base URL without a trailing slash."""
        return self.load_environment_config(environment)["portal_url"].rstrip("/")
    
    def get_search_config(self, environment: str) -> Dict[str, Any]:
        return self._get_section(environment, "search")
    
    def get_token_config(self, environment: str) -> Dict[str, Any]:
        return self._get_section(environment, "token")
    
    def get_processing_config(self, environment: str) -> Dict[str, Any]:
        return self._get_section(environment, "processing")
    
    def get_output_config(self, environment: str) -> Dict[str, Any]:
        return self._get_section(environment, "output")
    
    def get_logging_config(self, environment: str) -> Dict[str, Any]:
        return self._get_section(environment, "logging")
    
    def validate_environment_variables(self, environment: str) -> None:
        """
        Validate that required environment variables are set.
        
        Args:
            environment: Environment name to validate
            
        Raises:
            MapHubValidationError: If required environment variables are missing
        """
        env_config = self.load_environment_config(environment)
        required_vars = env_config.get("_validation", {}).get("required_environment_variables", [])
        
        missing_vars = [var for var in required_vars if not os.getenv(var)]
        
        if missing_vars:
            raise MapHubValidationError(
                f"Missing required environment variables: {', '.join(missing_vars)}"
            )
        
        self.logger.info(f"Environment variables validated for: {environment}")
    
    def _get_section(self, environment: str, section: str) -> Dict[str, Any]:
        env_config = self.load_environment_config(environment)
        if section not in env_config:
            raise MapHubConfigurationError(
                f"Section '{section}' not found in {environment} configuration"
            )
        return env_config[section]
    
    def _validate_environment_config(self, config_data: Dict[str, Any], environment: str) -> None:
        """
        Validate environment configuration structure.
        
        Args:
            config_data: Configuration data to validate
            environment: Environment name to validate
            
        Raises:
            MapHubValidationError: If configuration is invalid
        """
        if "environments" not in config_data:
            raise MapHubValidationError("Missing 'environments' key in configuration")
        
        if environment not in config_data["environments"]:
            available_envs = list(config_data["environments"].keys())
            raise MapHubValidationError(
                f"Environment '{environment}' not found. Available: {available_envs}"
            )
        
        env_config = config_data["environments"][environment]
        
        for key in REQUIRED_ENVIRONMENT_KEYS:
            if key not in env_config:
                raise MapHubValidationError(
                    f"Missing required key '{key}' in {environment} configuration"
                )
    
    def clear_cache(self) -> None:
        """Clear the configuration cache."""
        self.load_environment_config.cache_clear()
        self.logger.info("Configuration cache cleared")
