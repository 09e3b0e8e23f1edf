"""
Role-based toolset builder.

Turns an agent role and a capability descriptor into the ordered toolset
that role may call. Building is a pure function of its inputs: no I/O, no
shared state, the same names in the same order on every call.

The Coder role gets every built-in tool. The Task role gets the read-only
subset, picked from the Coder table by name, so a Task toolset can never
contain a tool the Coder table does not.

Missing services never cause an error or an omission. A tool built without
a service it depends on is built with reduced capability (for example,
side-effecting tools without a permission authority deny every call).
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from loadout.assembly.conditional import inject_conditional_tools
from loadout.capabilities import AgentRole, CapabilityDescriptor, LspClient
from loadout.tools.base import Tool
from loadout.tools.builtin import (
    AGENT,
    BASH,
    EDIT,
    FETCH,
    GLOB,
    GREP,
    LS,
    PATCH,
    SOURCEGRAPH,
    VIEW,
    WRITE,
)
from loadout.tools.factory import ToolFactory
from loadout.tools.toolset import Toolset


@dataclass(frozen=True)
class BuiltinRule:
    """
    One row of the built-in tool table.

    Attributes:
        name: Name of the tool the rule builds
        build: Builds the tool from the factory and the descriptor
    """

    name: str
    build: Callable[[ToolFactory, CapabilityDescriptor], Tool]


CODER_TOOLS: tuple[BuiltinRule, ...] = (
    BuiltinRule(BASH, lambda f, caps: f.bash(caps.permissions)),
    BuiltinRule(EDIT, lambda f, caps: f.edit(caps.lsp_clients, caps.permissions, caps.history)),
    BuiltinRule(FETCH, lambda f, caps: f.fetch(caps.permissions)),
    BuiltinRule(GLOB, lambda f, caps: f.glob()),
    BuiltinRule(GREP, lambda f, caps: f.grep()),
    BuiltinRule(LS, lambda f, caps: f.ls()),
    BuiltinRule(SOURCEGRAPH, lambda f, caps: f.sourcegraph()),
    BuiltinRule(VIEW, lambda f, caps: f.view(caps.lsp_clients)),
    BuiltinRule(PATCH, lambda f, caps: f.patch(caps.lsp_clients, caps.permissions, caps.history)),
    BuiltinRule(WRITE, lambda f, caps: f.write(caps.lsp_clients, caps.permissions, caps.history)),
    BuiltinRule(AGENT, lambda f, caps: f.agent(caps.sessions, caps.messages, caps.lsp_clients)),
)

TASK_TOOL_NAMES = frozenset({GLOB, GREP, LS, SOURCEGRAPH, VIEW})

TASK_TOOLS: tuple[BuiltinRule, ...] = tuple(
    rule for rule in CODER_TOOLS if rule.name in TASK_TOOL_NAMES
)


def rules_for(role: AgentRole | str) -> tuple[BuiltinRule, ...]:
    """The built-in table for a role."""
    if AgentRole(role) == AgentRole.TASK:
        return TASK_TOOLS
    return CODER_TOOLS


def build_toolset(
    role: AgentRole | str,
    caps: CapabilityDescriptor | None = None,
    factory: ToolFactory | None = None,
) -> Toolset:
    """
    Build the toolset for a role.

    Args:
        role: AgentRole (or its value, "coder" / "task")
        caps: Services available to the tools; defaults to none
        factory: Tool constructors; defaults to ToolFactory()

    Returns:
        A new Toolset. Coder toolsets include conditional tools.

    Raises:
        ValueError: If role is not a known AgentRole
    """
    role = AgentRole(role)
    caps = caps if caps is not None else CapabilityDescriptor()
    factory = factory if factory is not None else ToolFactory()

    toolset = Toolset(rule.build(factory, caps) for rule in rules_for(role))
    if role == AgentRole.CODER:
        inject_conditional_tools(toolset, caps, factory)
    return toolset


def build_coder_toolset(
    caps: CapabilityDescriptor | None = None,
    factory: ToolFactory | None = None,
) -> Toolset:
    """Full read/write/execute toolset for a Coder agent."""
    return build_toolset(AgentRole.CODER, caps, factory)


def build_task_toolset(
    lsp_clients: Mapping[str, LspClient] | None = None,
    factory: ToolFactory | None = None,
) -> Toolset:
    """Read-only toolset for a Task sub-agent. Only the LSP mapping is needed."""
    caps = CapabilityDescriptor(lsp_clients=lsp_clients or {})
    return build_toolset(AgentRole.TASK, caps, factory)
