"""
Toolset assembly for Loadout.

This module decides which tools an agent instance gets, and in what order.

Components:
    - build_toolset / build_coder_toolset / build_task_toolset:
      role-based built-ins, pure and deterministic
    - inject_conditional_tools: environment-gated tools from a rule table
    - aggregate_external_tools: provider tools appended after built-ins,
      best-effort and time-bounded
    - assemble_toolset: all three, in order

Guarantees:
    - No two tools in a toolset share a name
    - Same role and descriptor -> same names in the same order
    - Task toolsets never contain side-effecting tools
    - Built-in tools always come before external tools
"""

from loadout.assembly.builder import (
    CODER_TOOLS,
    TASK_TOOL_NAMES,
    BuiltinRule,
    build_coder_toolset,
    build_task_toolset,
    build_toolset,
)
from loadout.assembly.conditional import (
    CONDITIONAL_TOOLS,
    ConditionalTool,
    inject_conditional_tools,
)
from loadout.assembly.external import aggregate_external_tools, discover
from loadout.assembly.pipeline import assemble_toolset

__all__ = [
    "BuiltinRule",
    "CODER_TOOLS",
    "CONDITIONAL_TOOLS",
    "ConditionalTool",
    "TASK_TOOL_NAMES",
    "aggregate_external_tools",
    "assemble_toolset",
    "build_coder_toolset",
    "build_task_toolset",
    "build_toolset",
    "discover",
    "inject_conditional_tools",
]
