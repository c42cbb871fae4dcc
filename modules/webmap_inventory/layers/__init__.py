"""Layer Resolution

Operational layer lookup, item id validation and parallel item detail
fetching for the web map inventory.
"""

from .layer_resolver import LayerResolver

__all__ = ['LayerResolver']
