"""
Loadout - Capability-scoped toolsets for LLM coding agents.

Loadout decides which tools an agent instance may call and guards the
process that hosts it:
- Role-based toolsets (Coder: full set, Task: read-only subset)
- Environment-gated tools (diagnostics only with language servers)
- Best-effort, time-bounded external tools from MCP servers
- A process supervisor that records every fatal fault before exiting

Example usage:
    $ loadout tools --role coder --config loadout.yaml
    $ loadout faults
"""

__version__ = "0.1.0"
__author__ = "Loadout Contributors"

from loadout.assembly import (
    aggregate_external_tools,
    assemble_toolset,
    build_coder_toolset,
    build_task_toolset,
    build_toolset,
)
from loadout.capabilities import AgentRole, CapabilityDescriptor
from loadout.supervisor import Supervisor

__all__ = [
    "__version__",
    "__author__",
    "AgentRole",
    "CapabilityDescriptor",
    "Supervisor",
    "aggregate_external_tools",
    "assemble_toolset",
    "build_coder_toolset",
    "build_task_toolset",
    "build_toolset",
]
