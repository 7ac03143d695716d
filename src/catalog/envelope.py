"""
Response envelope construction for catalog tools.
"""

import logging
from typing import Any, List, Optional

from .errors import CatalogError
from .models import CatalogQuery, CatalogResponse, QueryKind
from .rendering import render_table

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "Unexpected error"


def describe_filters(query: CatalogQuery) -> str:
    """Describe the effective filters, e.g. "name: 'foo', vcs: 'GITHUB'"."""
    return ", ".join(f"{name}: '{value}'" for name, value in query.fields.items())


def success_message(query: CatalogQuery, count: int) -> str:
    if query.kind is QueryKind.LIST_BY_VCS:
        return f"Successfully retrieved {count} catalogs for VCS: {query.vcs}"
    if query.kind is QueryKind.GET_BY_ID:
        if count == 0:
            return f"No catalog found for ID: {query.id}"
        return f"Successfully retrieved details for catalog ID: {query.id}"
    return f"Found {count} catalogs matching filters: {describe_filters(query)}"


def attach_table(response: CatalogResponse) -> CatalogResponse:
    """Add the text table to a successful, non-empty response if it renders."""
    if not response.success or not response.count:
        return response
    try:
        response.table = render_table(response.data)
    except Exception as e:
        logger.debug("Skipping table rendering: %s", e)
    return response


def build_success(query: CatalogQuery, result: Any, with_table: bool = True) -> CatalogResponse:
    """
    Wrap a dispatch result in a success envelope.

    Args:
        query: The query that produced the result
        result: A list of catalogs, a single catalog or None
        with_table: Whether to try attaching the table rendering

    Returns:
        CatalogResponse with success=True
    """
    if isinstance(result, list):
        items: List[Any] = result
        response = CatalogResponse(
            success=True,
            count=len(items),
            data=items,
            message=success_message(query, len(items)),
        )
    else:
        count = 0 if result is None else 1
        response = CatalogResponse(
            success=True,
            count=count,
            data=result,
            message=success_message(query, count),
        )

    if with_table:
        attach_table(response)
    return response


def build_failure(stage: str, error: Optional[BaseException] = None) -> CatalogResponse:
    """Wrap an error in a failure envelope: "<stage>: <error text>"."""
    message = stage if error is None else f"{stage}: {error}"
    return CatalogResponse(success=False, message=message)


def failure_from(error: CatalogError) -> CatalogResponse:
    """Build a failure envelope labelled with the error's own stage."""
    return build_failure(error.stage, error)
