"""
Catalog query dispatch.

Each QueryKind maps to exactly one backend call. Backend failures are
wrapped in a DispatchError carrying the label of the failed operation; no
retries or fallbacks happen here.
"""

import logging
from typing import Awaitable, Callable, Dict, List, Optional, Union

from src.enbuild.client import Catalog, EnbuildClient
from src.enbuild.config import Credentials, Settings
from src.enbuild.errors import EnbuildError

from .errors import DispatchError
from .models import CatalogQuery, QueryKind

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Credentials, Settings], EnbuildClient]
DispatchResult = Union[List[Catalog], Optional[Catalog]]

INIT_FAILED = "Failed to initialize ENBUILD client"

STAGE_LABELS: Dict[QueryKind, str] = {
    QueryKind.LIST_BY_VCS: "Failed to list catalogs",
    QueryKind.GET_BY_ID: "Failed to get catalog details",
    QueryKind.SEARCH: "Failed to search catalogs",
    QueryKind.FILTER_BY_TYPE: "Failed to filter catalogs by type",
    QueryKind.FILTER_BY_VCS: "Failed to filter catalogs by VCS",
}


def default_client_factory(credentials: Credentials, settings: Settings) -> EnbuildClient:
    """Build a real ENBUILD client for one call."""
    return EnbuildClient(credentials, timeout=settings.timeout, debug=settings.debug)


def _call_for(query: CatalogQuery, client: EnbuildClient) -> Awaitable[DispatchResult]:
    if query.kind is QueryKind.LIST_BY_VCS:
        return client.list_catalogs(vcs=query.vcs)
    if query.kind is QueryKind.GET_BY_ID:
        return client.get_catalog(query.id)
    if query.kind is QueryKind.SEARCH:
        return client.list_catalogs(name=query.name, type=query.type, vcs=query.vcs)
    if query.kind is QueryKind.FILTER_BY_TYPE:
        return client.filter_catalogs_by_type(query.type)
    if query.kind is QueryKind.FILTER_BY_VCS:
        return client.filter_catalogs_by_vcs(query.vcs)
    raise ValueError(f"Unsupported query kind: {query.kind}")


async def dispatch(
    query: CatalogQuery,
    settings: Settings,
    client_factory: ClientFactory = default_client_factory,
) -> DispatchResult:
    """
    Run a validated query against the backend.

    Args:
        query: Normalized query
        settings: Server settings, forwarded to the client factory
        client_factory: Builds the backend client from the query's credentials

    Returns:
        A list of catalogs for list/search/filter queries, or a single
        catalog (None if not found) for get queries

    Raises:
        DispatchError: If the client could not be built or the call failed
    """
    try:
        client = client_factory(query.credentials, settings)
    except (ValueError, EnbuildError) as e:
        raise DispatchError(INIT_FAILED, e) from e

    stage = STAGE_LABELS[query.kind]
    logger.debug("Dispatching %s with %s", query.kind.value, query.fields)
    try:
        return await _call_for(query, client)
    except EnbuildError as e:
        logger.warning("%s: %s", stage, e)
        raise DispatchError(stage, e) from e
