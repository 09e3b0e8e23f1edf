"""
Tools module for Loadout.

This module provides the tool interface, the ordered Toolset, and the
built-in tool handles an agent can be given.

Built-in tools:
    - bash, edit, fetch, patch, write: side-effecting, need permission
    - glob, grep, ls, sourcegraph, view: read-only
    - agent: spawns a read-only Task sub-agent
    - diagnostics: only when language servers are configured

Architecture:
    - Tool: Abstract base class defining the tool interface
    - Toolset: Ordered, name-unique collection built per agent instance
    - ToolFactory: Builds built-in handles from the services they need
    - ToolContext / ToolOutput: Invocation contract

MCP tools live in loadout.tools.mcp and are imported explicitly.
"""

from loadout.tools.agent import AgentTool
from loadout.tools.base import Tool, ToolContext, ToolOutput
from loadout.tools.builtin import (
    MUTATING_TOOL_NAMES,
    READ_ONLY_TOOL_NAMES,
    BashTool,
    BuiltinTool,
    DiagnosticsTool,
    EditTool,
    FetchTool,
    GlobTool,
    GrepTool,
    LsTool,
    PatchTool,
    PermissionedTool,
    SourcegraphTool,
    ToolBackend,
    ViewTool,
    WriteTool,
)
from loadout.tools.discovery import DiscoveryResult, ExternalToolProvider
from loadout.tools.factory import ToolFactory
from loadout.tools.toolset import Toolset

__all__ = [
    "AgentTool",
    "BashTool",
    "BuiltinTool",
    "DiagnosticsTool",
    "DiscoveryResult",
    "EditTool",
    "ExternalToolProvider",
    "FetchTool",
    "GlobTool",
    "GrepTool",
    "LsTool",
    "MUTATING_TOOL_NAMES",
    "PatchTool",
    "PermissionedTool",
    "READ_ONLY_TOOL_NAMES",
    "SourcegraphTool",
    "Tool",
    "ToolBackend",
    "ToolContext",
    "ToolFactory",
    "ToolOutput",
    "Toolset",
    "ViewTool",
    "WriteTool",
]
