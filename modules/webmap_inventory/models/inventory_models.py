"""Web Map Inventory Data Models

This module defines the Pydantic models for the maps and layers collected
during an inventory run. Field names follow Python conventions while the
serialized form keeps the portal's camelCase keys (``numViews``, ``itemId``)
so the YAML reports mirror what the portal returned.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any


class LayerReference(BaseModel):
    """An operational layer as listed in a web map definition.
    
    Attributes:
        id: Layer id local to the web map
        item_id: Portal item id of the layer's source item, when it has one
        title: Layer title as shown in the map
    """
    
    model_config = ConfigDict(populate_by_name=True, extra='ignore')
    
    id: Optional[str] = Field(None, description="Layer id within the web map")
    item_id: Optional[str] = Field(None, alias="itemId", description="Portal item id of the layer source")
    title: Optional[str] = Field(None, description="Layer title")


class MapReference(BaseModel):
    """A web map as cited from the layer report."""
    
    model_config = ConfigDict(populate_by_name=True, extra='ignore')
    
    id: str = Field(..., description="Portal item id of the web map")
    title: Optional[str] = Field(None, description="Web map title")
    num_views: Optional[int] = Field(None, alias="numViews", description="View count reported by the portal")
    owner: Optional[str] = Field(None, description="Username of the web map owner")


class MapSummary(MapReference):
    """A web map found by search, together with its operational layers."""
    
    layers: List[LayerReference] = Field(default_factory=list, description="Operational layers of the map")
    
    @classmethod
    def from_search_result(cls, result: Dict[str, Any]) -> "MapSummary":
        """Build a summary from one entry of a search response's ``results``."""
        return cls.model_validate({
            'id': result.get('id'),
            'title': result.get('title'),
            'numViews': result.get('numViews'),
            'owner': result.get('owner'),
        })
    
    def layer_item_ids(self) -> List[str]:
        """Item ids of this map's layers, in layer order, skipping layers without one."""
        return [layer.item_id for layer in self.layers if layer.item_id]
    
    def references_layer(self, item_id: str) -> bool:
        return any(layer.item_id == item_id for layer in self.layers)
    
    def to_reference(self) -> MapReference:
        return MapReference(
            id=self.id,
            title=self.title,
            num_views=self.num_views,
            owner=self.owner
        )


class LayerSummary(BaseModel):
    """A layer item with the web maps that depend on it.
    
    Attributes:
        id: Portal item id of the layer
        title: Item title
        url: Service URL of the layer, if the item has one
        maps: Web maps whose operational layers reference this item
    """
    
    model_config = ConfigDict(populate_by_name=True, extra='ignore')
    
    id: str = Field(..., description="Portal item id of the layer")
    title: Optional[str] = Field(None, description="Layer item title")
    url: Optional[str] = Field(None, description="Service URL of the layer")
    maps: List[MapReference] = Field(default_factory=list, description="Maps referencing this layer")
    
    @classmethod
    def from_item(cls, item: Dict[str, Any], maps: Optional[List[MapReference]] = None) -> "LayerSummary":
        """Build a summary from an item details response."""
        return cls(
            id=item.get('id'),
            title=item.get('title'),
            url=item.get('url'),
            maps=maps or []
        )
