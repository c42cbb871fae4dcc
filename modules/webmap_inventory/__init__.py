"""Web Map Inventory Module

This module enumerates an organization's web maps, resolves the layers each
map uses and reports the map to layer dependencies.
"""

from .processor import WebMapInventory

__all__ = ['WebMapInventory']
