"""
Tool factory: the constructor seam between the builder and the tools.

Each method accepts exactly the services its tool needs and returns a new
tool handle. Backends that perform the actual work are bound by tool name;
a tool without a bound backend still exists in the toolset but fails when
called.

Usage:
    factory = ToolFactory(backends={"bash": run_in_shell})
    toolset = build_coder_toolset(caps, factory=factory)
"""

from collections.abc import Mapping

from loadout.capabilities import (
    HistoryService,
    LspClient,
    MessageService,
    PermissionService,
    SessionService,
)
from loadout.tools.agent import AgentTool
from loadout.tools.builtin import (
    BashTool,
    DiagnosticsTool,
    EditTool,
    FetchTool,
    GlobTool,
    GrepTool,
    LsTool,
    PatchTool,
    SourcegraphTool,
    ToolBackend,
    ViewTool,
    WriteTool,
)


class ToolFactory:
    """
    Builds built-in tool handles.

    Attributes:
        backends: Tool name -> backend performing the tool's work
    """

    def __init__(self, backends: Mapping[str, ToolBackend] | None = None) -> None:
        self.backends = dict(backends or {})

    def _backend(self, name: str) -> ToolBackend | None:
        return self.backends.get(name)

    def bash(self, permissions: PermissionService | None) -> BashTool:
        return BashTool(permissions, self._backend(BashTool.tool_name))

    def edit(
        self,
        lsp_clients: Mapping[str, LspClient],
        permissions: PermissionService | None,
        history: HistoryService | None,
    ) -> EditTool:
        return EditTool(lsp_clients, permissions, history, self._backend(EditTool.tool_name))

    def fetch(self, permissions: PermissionService | None) -> FetchTool:
        return FetchTool(permissions, self._backend(FetchTool.tool_name))

    def glob(self) -> GlobTool:
        return GlobTool(self._backend(GlobTool.tool_name))

    def grep(self) -> GrepTool:
        return GrepTool(self._backend(GrepTool.tool_name))

    def ls(self) -> LsTool:
        return LsTool(self._backend(LsTool.tool_name))

    def sourcegraph(self) -> SourcegraphTool:
        return SourcegraphTool(self._backend(SourcegraphTool.tool_name))

    def view(self, lsp_clients: Mapping[str, LspClient]) -> ViewTool:
        return ViewTool(lsp_clients, self._backend(ViewTool.tool_name))

    def patch(
        self,
        lsp_clients: Mapping[str, LspClient],
        permissions: PermissionService | None,
        history: HistoryService | None,
    ) -> PatchTool:
        return PatchTool(lsp_clients, permissions, history, self._backend(PatchTool.tool_name))

    def write(
        self,
        lsp_clients: Mapping[str, LspClient],
        permissions: PermissionService | None,
        history: HistoryService | None,
    ) -> WriteTool:
        return WriteTool(lsp_clients, permissions, history, self._backend(WriteTool.tool_name))

    def agent(
        self,
        sessions: SessionService | None,
        messages: MessageService | None,
        lsp_clients: Mapping[str, LspClient],
    ) -> AgentTool:
        return AgentTool(
            sessions,
            messages,
            lsp_clients,
            factory=self,
            backend=self._backend(AgentTool.tool_name),
        )

    def diagnostics(self, lsp_clients: Mapping[str, LspClient]) -> DiagnosticsTool:
        return DiagnosticsTool(lsp_clients, self._backend(DiagnosticsTool.tool_name))
