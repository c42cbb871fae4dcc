"""
Utility modules for the MapHub web map inventory.

This module provides logging setup and the performance decorator shared by
the connection layer and the inventory module.
"""

from .logging_setup import setup_logging, get_logger, log_performance

__all__ = ["setup_logging", "get_logger", "log_performance"]
