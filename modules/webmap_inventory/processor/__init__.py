"""Web Map Inventory Processor

This package contains the ModuleProcessor implementation that orchestrates a
complete inventory run.
"""

from .webmap_inventory import WebMapInventory

__all__ = ['WebMapInventory']
