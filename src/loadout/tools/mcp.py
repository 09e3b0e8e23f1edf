"""
MCP tool provider for Loadout.

This module discovers tools served by MCP (Model Context Protocol) servers
and wraps each one as a Loadout tool:
- McpToolProvider: lists the tools of every configured server
- McpTool: a single server-advertised tool, named "<server>_<tool>"

Servers are queried concurrently and reported in server-name order, so the
same configuration always yields the same tool order. A server that cannot
be reached is logged and skipped; the others still contribute their tools.

Every MCP tool call needs consent from the permission authority. Without
one, calls are denied.
"""

import asyncio
import logging
from collections.abc import Mapping
from contextlib import AsyncExitStack
from typing import Any

from mcp import ClientSession, StdioServerParameters
from mcp.client.sse import sse_client
from mcp.client.stdio import get_default_environment, stdio_client

from loadout.capabilities import PermissionRequest, PermissionService
from loadout.errors import DiscoveryError
from loadout.schema import McpServerConfig, McpTransport
from loadout.tools.base import Tool, ToolContext, ToolOutput
from loadout.tools.discovery import DiscoveryResult

logger = logging.getLogger(__name__)


async def _open_session(stack: AsyncExitStack, config: McpServerConfig) -> ClientSession:
    """Connect to an MCP server and run the initialize handshake."""
    if config.type == McpTransport.SSE:
        read, write = await stack.enter_async_context(
            sse_client(config.url, headers=dict(config.headers) or None)
        )
    else:
        env = None
        if config.env:
            env = {**get_default_environment(), **config.env}
        params = StdioServerParameters(command=config.command, args=list(config.args), env=env)
        read, write = await stack.enter_async_context(stdio_client(params))

    session = await stack.enter_async_context(ClientSession(read, write))
    await session.initialize()
    return session


class McpTool(Tool):
    """
    A tool advertised by an MCP server.

    Attributes:
        server_name: Name of the server in the config
        tool_name: Name of the tool on the server
        config: How to reach the server
        permissions: Permission authority, or None (deny every call)
    """

    def __init__(
        self,
        server_name: str,
        config: McpServerConfig,
        tool_name: str,
        tool_description: str | None = None,
        input_schema: Mapping[str, Any] | None = None,
        permissions: PermissionService | None = None,
    ) -> None:
        self.server_name = server_name
        self.config = config
        self.tool_name = tool_name
        self._description = tool_description or f"Tool provided by MCP server {server_name}"
        self._schema = dict(input_schema or {})
        self.permissions = permissions

    @property
    def name(self) -> str:
        return f"{self.server_name}_{self.tool_name}"

    @property
    def description(self) -> str:
        return self._description

    @property
    def parameters(self) -> dict[str, Any]:
        return dict(self._schema.get("properties", {}))

    @property
    def required(self) -> list[str]:
        return list(self._schema.get("required", []))

    def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
        """Run the tool on its server. Must not be called from a running event loop."""
        return asyncio.run(self.call(args, context))

    async def call(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
        """Ask for permission, then call the tool on a fresh server session."""
        if self.permissions is None:
            return ToolOutput.fail(
                f"Permission denied: no permission authority available for {self.name}",
                tool=self.name,
            )

        request = PermissionRequest(
            session_id=context.session_id,
            tool_name=self.name,
            action="execute",
            description=f"execute {self.name} with the following parameters: {args}",
            params=dict(args),
            path=context.working_dir,
        )
        if not self.permissions.request(request):
            return ToolOutput.fail(f"Permission denied for {self.name}", tool=self.name)

        async with AsyncExitStack() as stack:
            session = await _open_session(stack, self.config)
            result = await session.call_tool(self.tool_name, args)

        text = "\n".join(
            item.text for item in result.content if getattr(item, "type", None) == "text"
        )
        if result.isError:
            return ToolOutput.fail(text or f"{self.name} reported an error", tool=self.name)
        return ToolOutput.ok(text, tool=self.name, server=self.server_name)


class McpToolProvider:
    """
    Lists the tools of all configured MCP servers.

    Usage:
        provider = McpToolProvider(config.mcp_servers, permissions)
        result = await provider.list_tools()
    """

    name = "mcp"

    def __init__(
        self,
        servers: Mapping[str, McpServerConfig],
        permissions: PermissionService | None = None,
    ) -> None:
        self.servers = dict(sorted(servers.items()))
        self.permissions = permissions

    async def list_tools(self) -> DiscoveryResult:
        if not self.servers:
            return DiscoveryResult.ok([])

        results = await asyncio.gather(
            *(self._server_tools(name, config) for name, config in self.servers.items()),
            return_exceptions=True,
        )

        tools: list[Tool] = []
        failures = []
        for server_name, result in zip(self.servers, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.warning("MCP server %s unavailable: %s", server_name, result)
                failures.append(server_name)
                continue
            tools.extend(result)

        if failures and len(failures) == len(self.servers):
            return DiscoveryResult.fail(
                DiscoveryError(provider=self.name, underlying_error=f"no MCP server reachable: {', '.join(failures)}")
            )
        return DiscoveryResult.ok(tools)

    async def _server_tools(self, server_name: str, config: McpServerConfig) -> list[McpTool]:
        async with AsyncExitStack() as stack:
            session = await _open_session(stack, config)
            listed = await session.list_tools()

        logger.debug("MCP server %s advertised %d tools", server_name, len(listed.tools))
        return [
            McpTool(
                server_name,
                config,
                tool.name,
                tool_description=tool.description,
                input_schema=tool.inputSchema,
                permissions=self.permissions,
            )
            for tool in listed.tools
        ]
