"""
MCP Client for talking to a running ENBUILD catalog MCP server.

Uses the official MCP Python SDK for session management, over either the
SSE transport (endpoint /sse) or the streamable HTTP transport (endpoint
/mcp). Mostly useful for smoke-testing a deployed server and for the
integration tests.
"""

import asyncio
import json
import os
from typing import Any, Dict, List, Optional

from mcp import ClientSession
from mcp.client.sse import sse_client
from mcp.client.streamable_http import streamablehttp_client

from src.catalog.models import CatalogResponse

# Default MCP server URL - configurable via environment variable
DEFAULT_MCP_URL = os.environ.get("ENBUILD_MCP_URL", "http://localhost:8080/sse")

ENDPOINTS = {"sse": "/sse", "http": "/mcp"}


class CatalogMCPClient:
    """
    MCP Client for the ENBUILD catalog tools.

    The transport is picked from the URL path: ".../sse" uses SSE, anything
    else is treated as a streamable HTTP endpoint.
    """

    def __init__(self, url: str = DEFAULT_MCP_URL, token: Optional[str] = None):
        """
        Initialize the MCP client.

        Args:
            url: Server endpoint, e.g. http://localhost:8080/sse or http://localhost:8080/mcp
            token: ENBUILD API token forwarded with every tool call (optional)
        """
        self.url = url.rstrip("/")
        self.transport = "sse" if self.url.endswith(ENDPOINTS["sse"]) else "http"
        if self.transport == "http" and not self.url.endswith(ENDPOINTS["http"]):
            self.url = f"{self.url}{ENDPOINTS['http']}"
        self.token = token
        self._tools_cache: Optional[List[Dict[str, Any]]] = None

    async def _run_session(self, callback):
        """
        Run a callback within an MCP session.

        Args:
            callback: Async function that takes a ClientSession

        Returns:
            Result from the callback
        """
        if self.transport == "sse":
            async with sse_client(self.url) as (read_stream, write_stream):
                async with ClientSession(read_stream, write_stream) as session:
                    await session.initialize()
                    return await callback(session)

        async with streamablehttp_client(self.url) as (read_stream, write_stream, _):
            async with ClientSession(read_stream, write_stream) as session:
                await session.initialize()
                return await callback(session)

    def _run_sync(self, coro):
        """Run an async coroutine synchronously."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(coro)

        # Already inside an event loop: run on a separate thread
        import concurrent.futures
        with concurrent.futures.ThreadPoolExecutor() as pool:
            return pool.submit(asyncio.run, coro).result()

    async def list_tools_async(self) -> List[Dict[str, Any]]:
        """List available tools from the MCP server."""
        async def get_tools(session: ClientSession):
            result = await session.list_tools()
            return [
                {
                    "name": tool.name,
                    "description": tool.description or "",
                    "inputSchema": tool.inputSchema or {},
                }
                for tool in result.tools
            ]
        return await self._run_session(get_tools)

    async def call_tool_async(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        """
        Call a tool and decode its text content.

        Returns:
            The parsed JSON envelope, or the raw text if it is not JSON

        Raises:
            MCPToolError: If the server flagged the call as an error (isError: true)
        """
        async def call(session: ClientSession):
            result = await session.call_tool(name, arguments or {})
            text = _first_text(result.content)

            if result.isError:
                raise MCPToolError(name, text or "Tool execution failed")
            if text is None:
                return None
            try:
                return json.loads(text)
            except json.JSONDecodeError:
                return text

        return await self._run_session(call)

    def list_tools(self, use_cache: bool = True) -> List[Dict[str, Any]]:
        """
        List available tools from the MCP server.

        Args:
            use_cache: Whether to use cached tools list

        Returns:
            List of tool definitions with name, description, and input schema
        """
        if use_cache and self._tools_cache is not None:
            return self._tools_cache

        tools = self._run_sync(self.list_tools_async())
        self._tools_cache = tools
        return tools

    def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        """Call a tool on the MCP server via the tools/call method."""
        return self._run_sync(self.call_tool_async(name, arguments))

    def _catalog_call(self, name: str, arguments: Dict[str, str]) -> CatalogResponse:
        if self.token:
            arguments["token"] = self.token
        result = self.call_tool(name, arguments)
        if not isinstance(result, dict):
            raise MCPToolError(name, f"unexpected tool output: {result!r}")
        return CatalogResponse.from_dict(result)

    # Convenience methods for catalog tools

    def list_catalogs(self, vcs: str) -> CatalogResponse:
        """List all catalogs for a VCS provider."""
        return self._catalog_call("list_catalogs", {"vcs": vcs})

    def get_catalog_details(self, catalog_id: str) -> CatalogResponse:
        """Get a catalog by ID."""
        return self._catalog_call("get_catalog_details", {"id": catalog_id})

    def search_catalogs(self, name: str, catalog_type: str, vcs: str) -> CatalogResponse:
        """Search catalogs by name, type and VCS."""
        return self._catalog_call(
            "search_catalogs", {"name": name, "type": catalog_type, "vcs": vcs}
        )

    def filter_catalogs_by_type(self, catalog_type: str) -> CatalogResponse:
        return self._catalog_call("filter_catalogs_by_type", {"type": catalog_type})

    def filter_catalogs_by_vcs(self, vcs: str) -> CatalogResponse:
        return self._catalog_call("filter_catalogs_by_vcs", {"vcs": vcs})


def _first_text(content) -> Optional[str]:
    for item in content or []:
        text = getattr(item, "text", None)
        if text is not None:
            return text
    return None


class MCPToolError(Exception):
    """
    Exception raised when a tool execution fails (isError: true in response).

    Catalog tools report their own failures inside the envelope, so this
    mostly signals protocol-level problems such as unknown tools.
    """

    def __init__(self, tool_name: str, message: str):
        self.tool_name = tool_name
        self.message = message
        super().__init__(f"Tool '{tool_name}' failed: {message}")
