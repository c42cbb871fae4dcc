"""Web Map Search

Query construction and pagination over the portal search endpoint.
"""

from .webmap_search import WebMapSearcher, build_search_query

__all__ = ['WebMapSearcher', 'build_search_query']
