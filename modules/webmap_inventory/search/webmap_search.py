"""Paginated Web Map Search

This module builds the organization web map query and walks the portal's
paginated search endpoint until the portal reports there is no next page.
"""

import logging
from typing import List, Dict, Any, Optional

from maphub.connection import PortalClient
from maphub.exceptions import MapHubProcessingError
from ..models import MapSummary

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 1000


def build_search_query(search_config: Dict[str, Any]) -> str:
    """Build the portal search query for an organization's web maps.
    
    The query restricts to the organization, includes the configured map item
    types, and excludes application, configuration and offline-area types
    that share those keywords.
    
    Args:
        search_config: The ``search`` configuration section
        
    Returns:
        Query string for the ``q`` parameter
    """
    item_types = search_config.get('item_types', ["Web Map"])
    excluded_types = search_config.get('excluded_types', [])
    excluded_keywords = search_config.get('excluded_type_keywords', [])
    
    included = " OR ".join(f'"{item_type}"' for item_type in item_types)
    
    # The first exclusion binds to the included types
    inner = f"type:({included})"
    remaining_types = list(excluded_types)
    if remaining_types:
        inner += f' -type:"{remaining_types.pop(0)}"'
    
    parts = []
    org_id = search_config.get('org_id')
    if org_id:
        parts.append(f"orgid:{org_id}")
    parts.append(f"({inner})")
    parts.extend(f'-type:"{item_type}"' for item_type in remaining_types)
    parts.extend(f'-typekeywords:"{keyword}"' for keyword in excluded_keywords)
    
    return " ".join(parts)


class WebMapSearcher:
    """Collects every web map matched by the search query."""
    
    def __init__(self, client: PortalClient, search_config: Dict[str, Any],
                 query: Optional[str] = None):
        """Initialize the searcher.
        
        Args:
            client: Portal client used for search requests
            search_config: The ``search`` configuration section
            query: Explicit query overriding the one built from configuration
        """
        self.client = client
        self.max_pages = int(search_config.get('max_pages', DEFAULT_MAX_PAGES))
        self.query = query or build_search_query(search_config)
        logger.debug(f"Search query: {self.query}")
    
    def get_all_search_results(self) -> List[Dict[str, Any]]:
        """Fetch all pages of search results.
        
        Pages are requested in order starting at 1 until the response's
        ``nextStart`` is -1 (or absent).
        
        Returns:
            Concatenated ``results`` entries of every page
            
        Raises:
            MapHubProcessingError: If the page ceiling is exceeded or a page has no results
        """
        results: List[Dict[str, Any]] = []
        page = 1
        
        while True:
            if page > self.max_pages:
                raise MapHubProcessingError(
                    "Too many pages! Something probably went wrong.",
                    {"max_pages": self.max_pages, "results_so_far": len(results)}
                )
            
            response = self.client.search_page(page, self.query)
            
            if 'results' not in response:
                logger.warning(f"Search page {page} returned no results: {response}")
                raise MapHubProcessingError(
                    "Search response did not contain results",
                    {"page": page, "error": response.get('error')}
                )
            
            results.extend(response['results'])
            logger.debug(f"Search page {page}: {len(response['results'])} results, "
                         f"nextStart={response.get('nextStart')}")
            
            next_start = response.get('nextStart', -1)
            if next_start is None or next_start == -1:
                break
            page += 1
        
        logger.info(f"Search returned {len(results)} web maps over {page} page(s)")
        return results
    
    def get_all_maps(self) -> List[MapSummary]:
        """Search all web maps and return them as summaries without layers."""
        return [MapSummary.from_search_result(result) for result in self.get_all_search_results()]
