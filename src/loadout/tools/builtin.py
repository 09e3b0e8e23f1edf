"""
Built-in tool handles for Loadout.

Built-in tools ship with the agent core: shell execution, file view/edit/
write/patch, search, listing, fetch and diagnostics. Loadout owns their
names, argument schemas and the services they are built with; the actual
work is done by a ToolBackend bound at construction time.

Side-effecting tools ask the permission authority before delegating.
A side-effecting tool built without a permission authority denies every
call (fail-closed) instead of being left out of the toolset.
"""

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any, ClassVar

from loadout.capabilities import (
    HistoryService,
    LspClient,
    PermissionRequest,
    PermissionService,
)
from loadout.tools.base import Tool, ToolContext, ToolOutput


BASH = "bash"
EDIT = "edit"
FETCH = "fetch"
GLOB = "glob"
GREP = "grep"
LS = "ls"
SOURCEGRAPH = "sourcegraph"
VIEW = "view"
PATCH = "patch"
WRITE = "write"
AGENT = "agent"
DIAGNOSTICS = "diagnostics"

# Tools that change files, run commands, reach the network or spawn agents
MUTATING_TOOL_NAMES = frozenset({BASH, EDIT, WRITE, PATCH, FETCH, AGENT})

READ_ONLY_TOOL_NAMES = frozenset({GLOB, GREP, LS, SOURCEGRAPH, VIEW, DIAGNOSTICS})

ToolBackend = Callable[["BuiltinTool", dict[str, Any], ToolContext], ToolOutput]


def _string(description: str) -> dict[str, Any]:
    return {"type": "string", "description": description}


def _number(description: str) -> dict[str, Any]:
    return {"type": "number", "description": description}


class BuiltinTool(Tool):
    """
    Base class for built-in tool handles.

    Subclasses declare their identity as class attributes. Execution is
    delegated to the backend; without one, calls fail with a clear error.
    """

    tool_name: ClassVar[str] = ""
    tool_description: ClassVar[str] = ""
    tool_parameters: ClassVar[dict[str, Any]] = {}
    tool_required: ClassVar[tuple[str, ...]] = ()

    def __init__(self, backend: ToolBackend | None = None) -> None:
        self._backend = backend

    @property
    def name(self) -> str:
        return self.tool_name

    @property
    def description(self) -> str:
        return self.tool_description

    @property
    def parameters(self) -> dict[str, Any]:
        return dict(self.tool_parameters)

    @property
    def required(self) -> list[str]:
        return list(self.tool_required)

    @property
    def has_backend(self) -> bool:
        return self._backend is not None

    def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
        errors = self.validate_args(args)
        if errors:
            return ToolOutput.fail(f"Invalid arguments: {'; '.join(errors)}")

        denied = self.authorize(args, context)
        if denied is not None:
            return denied

        if self._backend is None:
            return ToolOutput.fail(f"No backend bound for tool {self.name}", tool=self.name)
        return self._backend(self, args, context)

    def authorize(self, args: dict[str, Any], context: ToolContext) -> ToolOutput | None:
        """Return a failed output if the call is not allowed, else None."""
        return None


class PermissionedTool(BuiltinTool):
    """
    A built-in tool whose calls need consent from the permission authority.

    Attributes:
        action: Verb sent with the permission request
        permissions: The permission authority, or None (deny every call)
    """

    action: ClassVar[str] = "execute"

    def __init__(
        self,
        permissions: PermissionService | None,
        backend: ToolBackend | None = None,
    ) -> None:
        super().__init__(backend)
        self.permissions = permissions

    def describe_call(self, args: dict[str, Any]) -> str:
        return f"{self.action} via {self.name}"

    def authorize(self, args: dict[str, Any], context: ToolContext) -> ToolOutput | None:
        if self.permissions is None:
            return ToolOutput.fail(
                f"Permission denied: no permission authority available for {self.name}",
                tool=self.name,
            )

        request = PermissionRequest(
            session_id=context.session_id,
            tool_name=self.name,
            action=self.action,
            description=self.describe_call(args),
            params=dict(args),
            path=args.get("file_path") or args.get("path"),
        )
        if not self.permissions.request(request):
            return ToolOutput.fail(f"Permission denied for {self.name}", tool=self.name)
        return None


class FileMutationTool(PermissionedTool):
    """
    A permissioned tool that writes files.

    File writes are recorded in the history store when one is available and
    re-checked against the language servers when any are configured.
    """

    action: ClassVar[str] = "write"

    def __init__(
        self,
        lsp_clients: Mapping[str, LspClient],
        permissions: PermissionService | None,
        history: HistoryService | None,
        backend: ToolBackend | None = None,
    ) -> None:
        super().__init__(permissions, backend)
        self.lsp_clients = MappingProxyType(dict(lsp_clients))
        self.history = history

    @property
    def tracks_history(self) -> bool:
        return self.history is not None

    def describe_call(self, args: dict[str, Any]) -> str:
        target = args.get("file_path", "files")
        return f"{self.action} {target}"


class BashTool(PermissionedTool):
    tool_name = BASH
    tool_description = "Execute a shell command in a persistent shell session"
    tool_parameters = {
        "command": _string("The command to execute"),
        "timeout": _number("Optional timeout in milliseconds (max 600000)"),
    }
    tool_required = ("command",)

    def describe_call(self, args: dict[str, Any]) -> str:
        return f"Execute command: {args.get('command', '')}"


class EditTool(FileMutationTool):
    tool_name = EDIT
    tool_description = "Replace an exact string in a file, or create a new file"
    tool_parameters = {
        "file_path": _string("The absolute path to the file to modify"),
        "old_string": _string("The text to replace"),
        "new_string": _string("The text to replace it with"),
    }
    tool_required = ("file_path", "old_string", "new_string")


class FetchTool(PermissionedTool):
    tool_name = FETCH
    tool_description = "Fetch content from a URL as text, markdown or html"
    tool_parameters = {
        "url": _string("The URL to fetch content from"),
        "format": {
            "type": "string",
            "description": "The format to return the content in",
            "enum": ["text", "markdown", "html"],
        },
        "timeout": _number("Optional timeout in seconds (max 120)"),
    }
    tool_required = ("url", "format")
    action = "fetch"

    def describe_call(self, args: dict[str, Any]) -> str:
        return f"Fetch content from URL: {args.get('url', '')}"


class GlobTool(BuiltinTool):
    tool_name = GLOB
    tool_description = "Find files by name using glob patterns"
    tool_parameters = {
        "pattern": _string("The glob pattern to match files against"),
        "path": _string("The directory to search in; defaults to the working directory"),
    }
    tool_required = ("pattern",)


class GrepTool(BuiltinTool):
    tool_name = GREP
    tool_description = "Search file contents with regular expressions or literal text"
    tool_parameters = {
        "pattern": _string("The regex pattern to search for"),
        "path": _string("The directory to search in"),
        "include": _string("File pattern to include in the search"),
        "literal_text": {
            "type": "boolean",
            "description": "Treat the pattern as literal text",
        },
    }
    tool_required = ("pattern",)


class LsTool(BuiltinTool):
    tool_name = LS
    tool_description = "List files and directories as a tree"
    tool_parameters = {
        "path": _string("The directory to list"),
        "ignore": {
            "type": "array",
            "description": "Glob patterns to ignore",
            "items": {"type": "string"},
        },
    }


class SourcegraphTool(BuiltinTool):
    tool_name = SOURCEGRAPH
    tool_description = "Search code across public repositories with Sourcegraph"
    tool_parameters = {
        "query": _string("The Sourcegraph search query"),
        "count": _number("Number of results to return (default 10, max 20)"),
        "context_window": _number("Lines of context around each match"),
        "timeout": _number("Optional timeout in seconds (max 120)"),
    }
    tool_required = ("query",)


class ViewTool(BuiltinTool):
    """Read file contents, annotated with language server diagnostics when available."""

    tool_name = VIEW
    tool_description = "Read a file with line numbers"
    tool_parameters = {
        "file_path": _string("The path to the file to read"),
        "offset": _number("The line number to start reading from (0-based)"),
        "limit": _number("The number of lines to read (default 2000)"),
    }
    tool_required = ("file_path",)

    def __init__(
        self,
        lsp_clients: Mapping[str, LspClient],
        backend: ToolBackend | None = None,
    ) -> None:
        super().__init__(backend)
        self.lsp_clients = MappingProxyType(dict(lsp_clients))


class PatchTool(FileMutationTool):
    tool_name = PATCH
    tool_description = "Apply a multi-file patch"
    tool_parameters = {
        "patch_text": _string("The full patch text to apply"),
    }
    tool_required = ("patch_text",)

    def describe_call(self, args: dict[str, Any]) -> str:
        return "Apply patch"


class WriteTool(FileMutationTool):
    tool_name = WRITE
    tool_description = "Write content to a file, replacing it if it exists"
    tool_parameters = {
        "file_path": _string("The path to the file to write"),
        "content": _string("The content to write to the file"),
    }
    tool_required = ("file_path", "content")


class DiagnosticsTool(BuiltinTool):
    """Report language server diagnostics for a file or the whole project."""

    tool_name = DIAGNOSTICS
    tool_description = "Get diagnostics for a file and/or project from the language servers"
    tool_parameters = {
        "file_path": _string("The path to the file to get diagnostics for"),
    }

    def __init__(
        self,
        lsp_clients: Mapping[str, LspClient],
        backend: ToolBackend | None = None,
    ) -> None:
        super().__init__(backend)
        self.lsp_clients = MappingProxyType(dict(lsp_clients))

    @property
    def languages(self) -> list[str]:
        return sorted(self.lsp_clients)
