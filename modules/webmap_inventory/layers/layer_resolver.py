"""Layer Resolver for web map operational layers.

Resolves the operational layers of each web map, validates user supplied
layer item ids, fetches layer item details in parallel and inverts the
map -> layers relationship into layer -> maps.
"""

import concurrent.futures
import logging
from typing import List, Dict, Any, Optional, Iterable

from maphub.connection import PortalClient
from maphub.exceptions import MapHubValidationError
from ..models import LayerReference, MapSummary, LayerSummary

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


class LayerResolver:
    """Fetches layer information for web maps and layer items.
    
    Map layer resolution is sequential; item detail lookups fan out over a
    thread pool sharing the portal client, whose token refresh is thread-safe.
    """
    
    def __init__(self, client: PortalClient, max_workers: int = DEFAULT_MAX_WORKERS):
        """Initialize the resolver.
        
        Args:
            client: Portal client for item and item data requests
            max_workers: Thread pool size for parallel item detail lookups
        """
        self.client = client
        self.max_workers = max(1, int(max_workers))
        logger.debug(f"LayerResolver initialized with max_workers={self.max_workers}")
    
    def get_map_layers(self, map_id: str) -> List[LayerReference]:
        """Get the operational layers of a web map.
        
        Args:
            map_id: Portal item id of the web map
            
        Returns:
            Layer references in map order; empty when the map defines none
        """
        webmap_data = self.client.get_item_data(map_id)
        if not isinstance(webmap_data, dict):
            return []
        operational_layers = webmap_data.get('operationalLayers') or []
        
        return [
            LayerReference(
                id=layer.get('id'),
                item_id=layer.get('itemId'),
                title=layer.get('title')
            )
            for layer in operational_layers
            if isinstance(layer, dict)
        ]
    
    def populate_map_layers(self, maps: List[MapSummary]) -> List[MapSummary]:
        """Attach operational layers to each map, one map at a time."""
        total = len(maps)
        for index, webmap in enumerate(maps, start=1):
            logger.info(f"{index}/{total} Getting layer information for webmap: {webmap.title}")
            webmap.layers = self.get_map_layers(webmap.id)
        return maps
    
    def get_detailed_layer(self, item_id: str) -> Optional[Dict[str, Any]]:
        """Fetch the item details of a layer.
        
        Args:
            item_id: Portal item id of the layer
            
        Returns:
            Item details, or None when the portal reports an error for the item
        """
        item = self.client.get_item(item_id)
        
        if item.get('error'):
            logger.warning(f"Error fetching layer with itemId: {item_id}")
            return None
        
        return item
    
    def is_valid_item_id(self, item_id: str) -> bool:
        item = self.client.get_item(item_id)
        return not item.get('error')
    
    def validate_item_ids(self, raw_item_ids: str) -> List[str]:
        """Parse and validate a comma separated list of layer item ids.
        
        Args:
            raw_item_ids: Comma separated item ids as entered by the user
            
        Returns:
            Valid item ids in the order first entered, without duplicates
            
        Raises:
            MapHubValidationError: If none of the entered ids could be found
        """
        requested = _unique(item_id.strip() for item_id in raw_item_ids.split(','))
        valid_ids = []
        
        for item_id in requested:
            if self.is_valid_item_id(item_id):
                valid_ids.append(item_id)
            else:
                logger.warning(
                    f"Could not locate item with ID {item_id} in ArcGIS Online. "
                    f"Please confirm that the item exists and that you have permission to access it."
                )
        
        if not valid_ids:
            raise MapHubValidationError(
                "Could not find any of the itemIds you entered. "
                "Please see earlier output for specific itemIds.",
                {"item_ids": ", ".join(requested)}
            )
        
        logger.info(f"Validated {len(valid_ids)}/{len(requested)} requested layer item ids")
        return valid_ids
    
    @staticmethod
    def collect_layer_item_ids(maps: Iterable[MapSummary]) -> List[str]:
        """Unique layer item ids across all maps, in first-seen order."""
        return _unique(item_id for webmap in maps for item_id in webmap.layer_item_ids())
    
    def get_detailed_layers(self, item_ids: List[str]) -> List[Dict[str, Any]]:
        """Fetch item details for many layers in parallel.
        
        Results keep the order of ``item_ids``. Items the portal reports an
        error for are dropped; any other failure aborts the whole batch.
        
        Args:
            item_ids: Layer item ids to look up
            
        Returns:
            Item details for every layer that could be fetched
        """
        if not item_ids:
            return []
        
        logger.info(f"Fetching details for {len(item_ids)} layers")
        
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(self.get_detailed_layer, item_id) for item_id in item_ids]
            detailed_layers = [future.result() for future in futures]
        
        found = [layer for layer in detailed_layers if layer is not None]
        logger.info(f"Fetched details for {len(found)}/{len(item_ids)} layers")
        return found
    
    @staticmethod
    def build_layer_summaries(detailed_layers: List[Dict[str, Any]],
                              maps: List[MapSummary]) -> List[LayerSummary]:
        """Invert map layers into layers with the maps that reference them.
        
        Args:
            detailed_layers: Layer item details
            maps: Web maps with populated layers
            
        Returns:
            One summary per detailed layer, in the same order
        """
        return [
            LayerSummary.from_item(
                layer,
                maps=[webmap.to_reference() for webmap in maps if webmap.references_layer(layer.get('id'))]
            )
            for layer in detailed_layers
        ]


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered
