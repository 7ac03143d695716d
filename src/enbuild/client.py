"""
Async HTTP client for the ENBUILD catalog API.

The client is deliberately thin: it builds authenticated requests, unwraps
the API's response shapes and turns HTTP failures into EnbuildError
subclasses. Catalog records are returned exactly as the API sends them.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .config import DEFAULT_TIMEOUT, Credentials
from .errors import EnbuildAPIError, EnbuildConnectionError

logger = logging.getLogger(__name__)

CATALOGS_PATH = "/api/v1/catalogs"
USER_AGENT = "mcp-server-enbuild"

Catalog = Dict[str, Any]


class EnbuildClient:
    """
    Client for the ENBUILD catalog endpoints.

    Every method opens its own httpx.AsyncClient, so an instance holds no
    connection state and can be discarded after a single call.
    """

    def __init__(
        self,
        credentials: Credentials,
        timeout: float = DEFAULT_TIMEOUT,
        debug: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            credentials: Base URL plus a token or username/password pair
            timeout: Per-request timeout in seconds
            debug: Log every request and response status at DEBUG level
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        if not credentials.base_url:
            raise ValueError("base URL is required but not provided")
        if not credentials.token and not (credentials.username and credentials.password):
            raise ValueError("API token is required but not provided")

        self.base_url = credentials.base_url.rstrip("/")
        self.timeout = timeout
        self.debug = debug
        self._credentials = credentials
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        if self._credentials.token:
            headers["Authorization"] = f"Bearer {self._credentials.token}"
        return headers

    def _auth(self) -> Optional[httpx.Auth]:
        if self._credentials.token:
            return None
        return httpx.BasicAuth(self._credentials.username, self._credentials.password)

    async def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        """Make an authenticated GET request and return the decoded JSON body."""
        url = f"{self.base_url}{path}"
        if self.debug:
            logger.debug("GET %s params=%s", url, params or {})

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                auth=self._auth(),
            ) as client:
                response = await client.get(url, headers=self._headers(), params=params or {})
        except httpx.TimeoutException as e:
            raise EnbuildConnectionError(f"request to {url} timed out") from e
        except httpx.RequestError as e:
            raise EnbuildConnectionError(f"request to {url} failed: {e}") from e

        if self.debug:
            logger.debug("GET %s -> %s", url, response.status_code)

        if response.is_error:
            raise EnbuildAPIError(response.status_code, _error_detail(response))

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise EnbuildAPIError(response.status_code, "response body is not valid JSON") from e

    async def list_catalogs(
        self,
        name: Optional[str] = None,
        type: Optional[str] = None,
        vcs: Optional[str] = None,
    ) -> List[Catalog]:
        """
        List catalogs, optionally filtered.

        Args:
            name: Name to search for
            type: Catalog type (e.g. terraform, ansible)
            vcs: VCS provider (GITHUB or GITLAB)

        Returns:
            Catalog records in the order the API returned them
        """
        params = {}
        if name:
            params["name"] = name
        if type:
            params["type"] = type
        if vcs:
            params["vcs"] = vcs

        body = await self._get(CATALOGS_PATH, params)
        return _unwrap_list(body)

    async def get_catalog(self, catalog_id: str) -> Optional[Catalog]:
        """
        Fetch a single catalog by ID.

        Returns:
            The catalog record, or None if the API returned no item
        """
        body = await self._get(f"{CATALOGS_PATH}/{catalog_path_segment(catalog_id)}")
        if isinstance(body, dict) and "data" in body:
            body = body["data"]
        if body is not None and not isinstance(body, dict):
            raise EnbuildAPIError(200, f"unexpected catalog payload of type {type(body).__name__}")
        return body or None

    async def filter_catalogs_by_vcs(self, vcs: str) -> List[Catalog]:
        """List catalogs for one VCS provider."""
        return await self.list_catalogs(vcs=vcs)

    async def filter_catalogs_by_type(self, catalog_type: str) -> List[Catalog]:
        """List catalogs of one type."""
        return await self.list_catalogs(type=catalog_type)


def catalog_path_segment(catalog_id: str) -> str:
    """
    Encode a catalog ID as exactly one URL path segment.

    Slashes, "?" and "#" are percent-encoded, and the dot segments "." and
    ".." are escaped so they cannot be collapsed into a parent path.
    """
    segment = quote(catalog_id, safe="")
    if segment in (".", ".."):
        segment = segment.replace(".", "%2E")
    return segment


def _unwrap_list(body: Any) -> List[Catalog]:
    """Accept either a bare JSON array or an object wrapping it under 'data'."""
    if body is None:
        return []
    if isinstance(body, dict):
        body = body.get("data")
        if body is None:
            return []
    if not isinstance(body, list):
        raise EnbuildAPIError(200, f"unexpected catalog list payload of type {type(body).__name__}")
    return body


def _error_detail(response: httpx.Response) -> str:
    """Pull a readable message out of an error response."""
    try:
        payload = response.json()
    except ValueError:
        return response.text[:500]
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            if payload.get(key):
                return str(payload[key])
    return response.text[:500]
