"""
Environment-gated tools.

Some tools only make sense when the runtime has a particular service. Each
such tool is a row in CONDITIONAL_TOOLS: a predicate over the capability
descriptor and a constructor. Rules are evaluated once per build, in table
order, and matching tools are appended after the role's built-ins.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from loadout.capabilities import CapabilityDescriptor
from loadout.tools.base import Tool
from loadout.tools.builtin import DIAGNOSTICS
from loadout.tools.factory import ToolFactory
from loadout.tools.toolset import Toolset


@dataclass(frozen=True)
class ConditionalTool:
    """
    A tool that is included only when its predicate holds.

    Attributes:
        name: Name of the tool the rule builds
        predicate: Decides inclusion from the descriptor
        build: Builds the tool from the factory and the descriptor
    """

    name: str
    predicate: Callable[[CapabilityDescriptor], bool]
    build: Callable[[ToolFactory, CapabilityDescriptor], Tool]


CONDITIONAL_TOOLS: tuple[ConditionalTool, ...] = (
    ConditionalTool(
        DIAGNOSTICS,
        predicate=lambda caps: caps.has_lsp_clients,
        build=lambda f, caps: f.diagnostics(caps.lsp_clients),
    ),
)


def inject_conditional_tools(
    toolset: Toolset,
    caps: CapabilityDescriptor,
    factory: ToolFactory | None = None,
    rules: Iterable[ConditionalTool] = CONDITIONAL_TOOLS,
) -> list[str]:
    """
    Append every conditional tool whose predicate holds.

    Returns:
        Names of the tools that were appended
    """
    factory = factory if factory is not None else ToolFactory()
    injected = []
    for rule in rules:
        if rule.predicate(caps):
            toolset.add(rule.build(factory, caps))
            injected.append(rule.name)
    return injected
