"""
MCP Server implementation using official MCP Python SDK (FastMCP).
Exposes ENBUILD catalog queries as tools via Model Context Protocol.

Tools:
- list_catalogs: all catalogs for a VCS provider
- get_catalog_details: one catalog by ID
- search_catalogs: catalogs by name, filtered by type and VCS
- filter_catalogs_by_type: catalogs of one type
- filter_catalogs_by_vcs: catalogs for one VCS provider

Every tool returns the same JSON envelope (success, message, count, data,
table) as a single text content item. Argument and backend errors come back
as envelopes with success=false rather than as protocol errors.

Transports: stdio (for Claude Desktop and other local MCP clients), SSE and
streamable HTTP (served with uvicorn).
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Annotated, Any, Dict

from mcp.server.fastmcp import Context, FastMCP
from pydantic import Field

from src.catalog.dispatcher import ClientFactory, default_client_factory
from src.catalog.models import QueryKind
from src.catalog.service import run_query
from src.enbuild.config import Settings

logger = logging.getLogger(__name__)

SERVER_NAME = "enbuild"
SERVER_DESCRIPTION = "MCP Server for ENBUILD Platform"
SERVER_VERSION = "0.1.0"

INSTRUCTIONS = """
ENBUILD MCP Server providing tools for:
- Listing catalogs for a VCS provider (GITHUB or GITLAB)
- Fetching catalog details by ID
- Searching catalogs by name, type and VCS
Every tool answers with a JSON object: success, message, count, data and an
optional plain-text table.
"""

VcsArg = Annotated[str, Field(description="VCS to filter by (GITHUB or GITLAB)")]
TokenArg = Annotated[str, Field(description="API token to use")]


@dataclass
class CatalogContext:
    """Application context shared by all tool calls of a server."""
    settings: Settings
    client_factory: ClientFactory


async def _run_tool(ctx: Context, kind: QueryKind, arguments: Dict[str, Any]) -> str:
    """Run a catalog query with the server's settings and return envelope JSON."""
    app: CatalogContext = ctx.request_context.lifespan_context
    response = await run_query(kind, arguments, app.settings, app.client_factory)
    return response.to_json()


async def list_catalogs(ctx: Context, vcs: VcsArg, token: TokenArg = "") -> str:
    """
    List all catalogs for a VCS provider.

    Args:
        vcs: 'GITHUB' or 'GITLAB' (any case)
        token: API token for this call (optional, defaults to the configured one)

    Returns:
        Envelope JSON with the catalogs and their count
    """
    return await _run_tool(ctx, QueryKind.LIST_BY_VCS, {"vcs": vcs, "token": token})


async def get_catalog_details(
    ctx: Context,
    id: Annotated[str, Field(description="ID of the catalog")],
    token: TokenArg = "",
) -> str:
    """
    Get the details of a catalog by ID.

    Args:
        id: The catalog's identifier
        token: API token for this call (optional)

    Returns:
        Envelope JSON with the catalog record, or count 0 when the API has no item
    """
    return await _run_tool(ctx, QueryKind.GET_BY_ID, {"id": id, "token": token})


async def search_catalogs(
    ctx: Context,
    name: Annotated[str, Field(description="Name to search for")],
    type: Annotated[str, Field(description="Type to filter by (e.g., terraform, ansible)")],
    vcs: VcsArg,
    token: TokenArg = "",
) -> str:
    """
    Search catalogs by name, filtered by type and VCS.

    Args:
        name: Name to search for
        type: Catalog type such as 'terraform' or 'ansible'
        vcs: 'GITHUB' or 'GITLAB' (any case)
        token: API token for this call (optional)

    Returns:
        Envelope JSON with the matching catalogs and a message listing the filters
    """
    return await _run_tool(
        ctx,
        QueryKind.SEARCH,
        {"name": name, "type": type, "vcs": vcs, "token": token},
    )


async def filter_catalogs_by_type(
    ctx: Context,
    type: Annotated[str, Field(description="Type to filter by (e.g., terraform, ansible)")],
    token: TokenArg = "",
) -> str:
    """
    List catalogs of one type.

    Args:
        type: Catalog type such as 'terraform' or 'ansible'
        token: API token for this call (optional)

    Returns:
        Envelope JSON with the catalogs of that type
    """
    return await _run_tool(ctx, QueryKind.FILTER_BY_TYPE, {"type": type, "token": token})


async def filter_catalogs_by_vcs(ctx: Context, vcs: VcsArg, token: TokenArg = "") -> str:
    """
    List catalogs for one VCS provider.

    Args:
        vcs: 'GITHUB' or 'GITLAB' (any case)
        token: API token for this call (optional)

    Returns:
        Envelope JSON with the catalogs hosted on that provider
    """
    return await _run_tool(ctx, QueryKind.FILTER_BY_VCS, {"vcs": vcs, "token": token})


# name -> (function, description shown to MCP clients)
TOOLS = {
    "list_catalogs": (
        list_catalogs,
        "Lists all catalogs for a given VCS type (GITHUB or GITLAB). Use this tool when "
        "the user wants to list or view all catalogs for a specific version control "
        "system (VCS).",
    ),
    "get_catalog_details": (
        get_catalog_details,
        "Fetches details of the catalog that matches a specific catalog ID. Use this tool "
        "when the user wants to get detailed information about a specific catalog.",
    ),
    "search_catalogs": (
        search_catalogs,
        "Search for catalogs using name, filtered by catalog type and VCS. Use this tool "
        "when the user wants to search for catalogs by name with specific filters.",
    ),
    "filter_catalogs_by_type": (
        filter_catalogs_by_type,
        "Lists all catalogs of a given type (e.g. terraform, ansible). Use this tool when "
        "the user wants catalogs of one kind regardless of VCS.",
    ),
    "filter_catalogs_by_vcs": (
        filter_catalogs_by_vcs,
        "Filters catalogs by VCS provider (GITHUB or GITLAB).",
    ),
}


def create_server(
    settings: Settings,
    client_factory: ClientFactory = default_client_factory,
) -> FastMCP:
    """
    Create the FastMCP server with all catalog tools registered.

    Args:
        settings: Validated server settings
        client_factory: Builds the ENBUILD client for each call

    Returns:
        Configured FastMCP instance
    """

    @asynccontextmanager
    async def app_lifespan(server: FastMCP) -> AsyncIterator[CatalogContext]:
        """Manage application lifecycle with the catalog context."""
        logger.debug("Opening catalog context for %s", settings.base_url)
        yield CatalogContext(settings=settings, client_factory=client_factory)

    server = FastMCP(
        SERVER_NAME,
        instructions=INSTRUCTIONS,
        lifespan=app_lifespan,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.upper(),
    )
    for name, (fn, description) in TOOLS.items():
        server.add_tool(fn, name=name, description=description)
    return server


def run_server(settings: Settings) -> None:
    """Run the MCP server with stdio transport (default for MCP)."""
    logger.info("Starting %s using stdio transport", SERVER_DESCRIPTION)
    create_server(settings).run(transport="stdio")


def run_sse_server(settings: Settings) -> None:
    """Run the MCP server with SSE transport."""
    import uvicorn

    logger.info(
        "Starting %s using SSE transport on http://%s:%d/sse",
        SERVER_DESCRIPTION, settings.host, settings.port,
    )
    app = create_server(settings).sse_app()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level)


def run_http_server(settings: Settings) -> None:
    """Run the MCP server with streamable HTTP transport."""
    import uvicorn

    logger.info(
        "Starting %s using streamable HTTP transport on http://%s:%d/mcp",
        SERVER_DESCRIPTION, settings.host, settings.port,
    )
    # FastMCP.run() doesn't accept host/port for streamable-http, so serve the ASGI app directly
    app = create_server(settings).streamable_http_app()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level)


RUNNERS = {
    "stdio": run_server,
    "sse": run_sse_server,
    "http": run_http_server,
}
