"""
Toolset assembly pipeline.

The order in which an agent's tools are put together:

    1. Role-based built-ins       (builder)
    2. Environment-gated tools    (conditional, Coder only)
    3. External provider tools    (external, Coder only)

Task sub-agents never receive external tools: their toolset stays the
read-only built-in subset.
"""

import asyncio

from loadout.assembly.builder import build_toolset
from loadout.assembly.external import aggregate_external_tools
from loadout.capabilities import AgentRole, CapabilityDescriptor
from loadout.schema import DEFAULT_DISCOVERY_TIMEOUT_SECONDS
from loadout.tools.discovery import ExternalToolProvider
from loadout.tools.factory import ToolFactory
from loadout.tools.toolset import Toolset


async def assemble_toolset(
    role: AgentRole | str,
    caps: CapabilityDescriptor | None = None,
    *,
    provider: ExternalToolProvider | None = None,
    factory: ToolFactory | None = None,
    timeout_seconds: float = DEFAULT_DISCOVERY_TIMEOUT_SECONDS,
    cancelled: asyncio.Event | None = None,
) -> Toolset:
    """
    Build the complete toolset for one agent instance.

    Example:
        caps = CapabilityDescriptor(permissions=perms, history=history)
        toolset = await assemble_toolset(
            AgentRole.CODER, caps, provider=McpToolProvider(config.mcp_servers, perms)
        )
    """
    role = AgentRole(role)
    toolset = build_toolset(role, caps, factory)
    if role != AgentRole.CODER or provider is None:
        return toolset
    return await aggregate_external_tools(
        toolset,
        provider,
        timeout_seconds=timeout_seconds,
        cancelled=cancelled,
    )
