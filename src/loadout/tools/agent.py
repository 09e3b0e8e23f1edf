"""
Sub-agent spawner tool.

The agent tool lets a Coder agent hand a self-contained search task to a
sandboxed Task sub-agent. The sub-agent gets the read-only toolset built
from the same language server mapping, plus the session and message stores
it needs to run its own conversation.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from loadout.capabilities import LspClient, MessageService, SessionService
from loadout.tools.base import ToolContext, ToolOutput
from loadout.tools.builtin import AGENT, BuiltinTool, ToolBackend

if TYPE_CHECKING:
    from loadout.tools.factory import ToolFactory
    from loadout.tools.toolset import Toolset


class AgentTool(BuiltinTool):
    """
    Launch a Task sub-agent with read-only tools.

    Arguments:
        prompt (str): The task for the sub-agent to perform (required)

    The sub-agent's toolset is built fresh on every call to task_tools(),
    so spawned agents never share toolset state.
    """

    tool_name = AGENT
    tool_description = (
        "Launch a new agent that has access to read-only tools: "
        "glob, grep, ls, sourcegraph and view"
    )
    tool_parameters = {
        "prompt": {"type": "string", "description": "The task for the agent to perform"},
    }
    tool_required = ("prompt",)

    def __init__(
        self,
        sessions: SessionService | None,
        messages: MessageService | None,
        lsp_clients: Mapping[str, LspClient],
        factory: "ToolFactory | None" = None,
        backend: ToolBackend | None = None,
    ) -> None:
        super().__init__(backend)
        self.sessions = sessions
        self.messages = messages
        self.lsp_clients = MappingProxyType(dict(lsp_clients))
        self._factory = factory

    @property
    def can_spawn(self) -> bool:
        """Whether the stores a sub-agent needs are available."""
        return self.sessions is not None and self.messages is not None

    def task_tools(self) -> "Toolset":
        """Build the toolset a spawned Task sub-agent receives."""
        from loadout.assembly.builder import build_task_toolset

        return build_task_toolset(self.lsp_clients, factory=self._factory)

    def authorize(self, args: dict[str, Any], context: ToolContext) -> ToolOutput | None:
        if not self.can_spawn:
            return ToolOutput.fail(
                "Cannot spawn a sub-agent: session and message stores are unavailable",
                tool=self.name,
            )
        return None
