"""
REST client for the ArcGIS Online sharing API.

This module wraps the three content endpoints the inventory consumes (search,
item data and item details) plus the generateToken form endpoint. Every
content request carries the current token and is retried once after a token
refresh when the portal reports the token as expired. Transport failures are
retried with exponential backoff before being surfaced as connection errors.
"""

import threading
from typing import Optional, Dict, Any, Tuple
from urllib.parse import quote

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from func_timeout import func_timeout, FunctionTimedOut

from ..config import ConfigLoader
from ..exceptions import MapHubConnectionError, MapHubAuthenticationError
from ..utils import get_logger

logger = get_logger(__name__)

# 498 is the portal's "invalid token" code; some proxies answer 401 instead
TOKEN_EXPIRED_CODES = frozenset([498, 401])


class PortalClient:
    """
    Token-aware client for an ArcGIS Online portal.
    
    The client holds the bearer token and the credentials needed to renew it.
    Token renewal is serialized with a lock so that parallel item lookups
    hitting an expired token trigger a single refresh.
    """
    
    def __init__(self, config_loader: ConfigLoader, environment: str = "development",
                 session: Optional[requests.Session] = None):
        """
        Initialize the portal client.
        
        Args:
            config_loader: ConfigLoader instance for accessing configuration
            environment: Environment whose portal settings are used
            session: Optional pre-built requests session
        """
        self.config_loader = config_loader
        self.environment = environment
        self.portal_url = config_loader.get_portal_url(environment)
        
        token_config = config_loader.get_token_config(environment)
        search_config = config_loader.get_search_config(environment)
        processing_config = config_loader.get_processing_config(environment)
        
        self.token_expiration_minutes = int(token_config.get("expiration_minutes", 360))
        self.token_timeout_seconds = float(token_config.get("timeout_seconds", 30))
        self.request_timeout = float(processing_config.get("request_timeout_seconds", 60))
        self.page_size = int(search_config.get("page_size", 100))
        self.sort_field = search_config.get("sort_field", "")
        self.sort_order = search_config.get("sort_order", "desc")
        
        self.session = session or requests.Session()
        self._token: Optional[str] = None
        self._credentials: Optional[Tuple[str, str]] = None
        self._token_lock = threading.Lock()
        logger.debug(f"PortalClient initialized for {self.portal_url}")
    
    @property
    def token_url(self) -> str:
        return f"{self.portal_url}/sharing/rest/generateToken"
    
    @property
    def search_url(self) -> str:
        return f"{self.portal_url}/sharing/rest/search"
    
    def item_url(self, item_id: str) -> str:
        return f"{self.portal_url}/sharing/rest/content/items/{quote(item_id, safe='')}"
    
    @property
    def token(self) -> Optional[str]:
        return self._token
    
    def is_authenticated(self) -> bool:
        return self._token is not None
    
    def authenticate(self, username: str, password: str) -> Optional[str]:
        """
        Exchange credentials for a token and keep them for later refreshes.
        
        Args:
            username: Portal username (case sensitive)
            password: Portal password (case sensitive)
            
        Returns:
            The issued token, or None if the portal issued none
        """
        self._credentials = (username, password)
        return self.generate_token(username, password)
    
    def generate_token(self, username: str, password: str) -> Optional[str]:
        """
        POST the credentials to the generateToken endpoint.
        
        The request runs under a hard time limit so a stalled portal cannot
        hang the run before any work has started.
        
        Args:
            username: Portal username
            password: Portal password
            
        Returns:
            The issued token, or None if the response contained none
            
        Raises:
            MapHubAuthenticationError: If the portal rejects the credentials
            MapHubConnectionError: If the request fails or times out
        """
        form = {
            'username': username,
            'password': password,
            'expiration': self.token_expiration_minutes,
            'referer': self.portal_url,
            'f': 'json',
        }
        
        logger.info(f"Requesting token from {self.token_url}")
        try:
            payload = func_timeout(
                self.token_timeout_seconds,
                self._fetch_json,
                args=('POST', self.token_url),
                kwargs={'data': form}
            )
        except FunctionTimedOut:
            raise MapHubConnectionError(
                "Token request timed out - portal may be unavailable",
                {"timeout_seconds": self.token_timeout_seconds}
            )
        
        if payload.get('error'):
            logger.error(f"Token request rejected: {payload['error']}")
            raise MapHubAuthenticationError(
                "An error occurred. Unable to retrieve token. "
                "Note that usernames and passwords are case sensitive.",
                {"code": payload['error'].get('code') if isinstance(payload['error'], dict) else None}
            )
        
        self._token = payload.get('token')
        if self._token:
            logger.info("Token generated successfully")
        else:
            logger.warning("Token endpoint returned no token")
        return self._token
    
    def search_page(self, page: int, query: str) -> Dict[str, Any]:
        """
        Fetch one page of search results.
        
        Args:
            page: 1-based page number
            query: Portal search query string
            
        Returns:
            Raw search response
        """
        params = {
            'num': self.page_size,
            'start': page * self.page_size - (self.page_size - 1),
            'sortField': self.sort_field,
            'sortOrder': self.sort_order,
            'q': query,
            'f': 'json',
        }
        return self.get_json(self.search_url, params, action="get page of results")
    
    def get_item_data(self, item_id: str) -> Dict[str, Any]:
        """Fetch the data (JSON definition) of an item such as a web map.
        
        Scenes store binary packages as their data, so a body that is not a
        JSON object yields an empty definition.
        """
        payload = self.get_json(f"{self.item_url(item_id)}/data", {'f': 'json'},
                                action="get layers from map", allow_non_json=True)
        if not isinstance(payload, dict):
            logger.warning(f"Item {item_id} has no JSON definition; treating it as having no layers")
            return {}
        return payload
    
    def get_item(self, item_id: str) -> Dict[str, Any]:
        """Fetch the item description (id, title, url, ...)."""
        return self.get_json(self.item_url(item_id), {'f': 'json'},
                             action="get item details")
    
    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None,
                 action: str = "complete request", retry_on_expiry: bool = True,
                 allow_non_json: bool = False) -> Optional[Dict[str, Any]]:
        """
        GET a JSON resource, refreshing the token once if it has expired.
        
        Args:
            url: Endpoint URL
            params: Query parameters, without the token
            action: Short description used in error messages
            retry_on_expiry: Whether an expired token may be refreshed and retried
            allow_non_json: Return None instead of failing when the body is not JSON
            
        Returns:
            Parsed JSON body, or None for a non-JSON body when allowed
            
        Raises:
            MapHubAuthenticationError: If the token is still rejected after a refresh
        """
        request_params = dict(params or {})
        used_token = self._token
        if used_token:
            request_params['token'] = used_token
        
        payload = self._fetch_json('GET', url, params=request_params, allow_non_json=allow_non_json)
        
        if self._is_token_expired(payload):
            if retry_on_expiry:
                logger.info("Token expired, attempting to refresh.")
                self._refresh_token(used_token)
                return self.get_json(url, params, action=action, retry_on_expiry=False,
                                     allow_non_json=allow_non_json)
            raise MapHubAuthenticationError(
                f"Unable to {action} after refreshing token",
                {"url": url}
            )
        
        return payload
    
    def close(self) -> None:
        """Close the HTTP session and forget credentials."""
        self.session.close()
        self._credentials = None
        self._token = None
        logger.debug("Closed portal session")
    
    def __enter__(self) -> "PortalClient":
        return self
    
    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
    
    def _refresh_token(self, stale_token: Optional[str]) -> None:
        with self._token_lock:
            if self._token != stale_token:
                logger.debug("Token already refreshed by a concurrent request")
                return
            if not self._credentials:
                raise MapHubAuthenticationError(
                    "Portal rejected the request token and no credentials are available to refresh it"
                )
            self.generate_token(*self._credentials)
    
    @staticmethod
    def _is_token_expired(payload: Dict[str, Any]) -> bool:
        error = payload.get('error') if isinstance(payload, dict) else None
        return isinstance(error, dict) and error.get('code') in TOKEN_EXPIRED_CODES
    
    def _fetch_json(self, method: str, url: str, params: Optional[Dict[str, Any]] = None,
                    data: Optional[Dict[str, Any]] = None,
                    allow_non_json: bool = False) -> Optional[Dict[str, Any]]:
        try:
            return self._send(method, url, params=params, data=data)
        except requests.JSONDecodeError as e:
            # JSONDecodeError is also a RequestException, so it is handled first
            if allow_non_json:
                logger.debug(f"{method} {url} returned a non-JSON body")
                return None
            raise MapHubConnectionError(f"Portal returned a non-JSON response: {str(e)}", {"url": url})
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {str(e)}")
            raise MapHubConnectionError(f"Request to portal failed: {str(e)}", {"url": url})
    
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        reraise=True
    )
    def _send(self, method: str, url: str, params: Optional[Dict[str, Any]] = None,
              data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = self.session.request(
            method, url, params=params, data=data, timeout=self.request_timeout
        )
        response.raise_for_status()
        return response.json()
