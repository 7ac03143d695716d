"""
The request-validate-dispatch-envelope pipeline behind every catalog tool.
"""

import logging
from typing import Any, Mapping

from src.enbuild.config import Settings

from .dispatcher import ClientFactory, default_client_factory, dispatch
from .envelope import UNEXPECTED_ERROR, build_failure, build_success, failure_from
from .errors import CatalogError
from .models import CatalogResponse, QueryKind
from .normalizer import normalize

logger = logging.getLogger(__name__)


async def run_query(
    kind: QueryKind,
    arguments: Mapping[str, Any],
    settings: Settings,
    client_factory: ClientFactory = default_client_factory,
) -> CatalogResponse:
    """
    Handle one catalog tool call end to end.

    Never raises for per-call problems: validation and backend errors come
    back as failure envelopes so MCP clients can show them.

    Args:
        kind: Operation to run
        arguments: Raw tool arguments
        settings: Server settings
        client_factory: Builds the backend client

    Returns:
        The response envelope
    """
    try:
        query = normalize(kind, arguments, settings)
        result = await dispatch(query, settings, client_factory)
    except CatalogError as e:
        logger.info("%s call failed: %s: %s", kind.value, e.stage, e)
        return failure_from(e)
    except Exception as e:
        logger.exception("Unexpected error while handling %s", kind.value)
        return build_failure(UNEXPECTED_ERROR, e)

    response = build_success(query, result)
    logger.info("%s call succeeded with %d item(s)", kind.value, response.count)
    return response
