"""Web Map Inventory Data Models

Pydantic models for web maps, their operational layers and the layer-centric
view used in the dependency reports.
"""

from .inventory_models import LayerReference, MapReference, MapSummary, LayerSummary

__all__ = ['LayerReference', 'MapReference', 'MapSummary', 'LayerSummary']
