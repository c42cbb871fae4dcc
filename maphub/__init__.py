"""
MapHub Inventory Core Package

This package contains the shared infrastructure for the web map inventory:
configuration, logging, exceptions, the portal REST client and the processor
interface that inventory modules implement.
"""

from .interfaces import ModuleProcessor, ProcessingResult, ModuleStatus

__version__ = "1.0.0"
__all__ = ['ModuleProcessor', 'ProcessingResult', 'ModuleStatus']
