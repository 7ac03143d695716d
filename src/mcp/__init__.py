"""
MCP (Model Context Protocol) Module.

Exposes the ENBUILD catalog tools over MCP using the official `mcp` SDK.

### MCP Server
For Claude Desktop / local MCP clients, run in stdio mode:
    python run_servers.py --transport stdio

For web clients, run with SSE or streamable HTTP:
    python run_servers.py --transport sse --port 8080
    python run_servers.py --transport http --port 8080

### MCP Client
Talk to a running server over the protocol:
    from src.mcp import CatalogMCPClient

    client = CatalogMCPClient("http://localhost:8080/sse")
    response = client.list_catalogs("github")
"""

from .mcp_server import (
    RUNNERS,
    SERVER_NAME,
    TOOLS,
    CatalogContext,
    create_server,
    run_http_server,
    run_server,
    run_sse_server,
)
from .mcp_client import DEFAULT_MCP_URL, CatalogMCPClient, MCPToolError

__all__ = [
    # MCP Server
    "RUNNERS",
    "SERVER_NAME",
    "TOOLS",
    "CatalogContext",
    "create_server",
    "run_server",
    "run_sse_server",
    "run_http_server",
    # MCP Client
    "CatalogMCPClient",
    "MCPToolError",
    "DEFAULT_MCP_URL",
]
