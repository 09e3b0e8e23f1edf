"""
Capability descriptor and collaborator interfaces.

The CapabilityDescriptor bundles references to the services a toolset may
depend on. It is supplied by the caller when an agent is constructed and is
read-only from then on: the builder only passes these references along to
the tool constructors that need them.

Collaborators are described as Protocols. Loadout never implements them;
permission decisions, session/message/history persistence and language
server clients all live outside this package.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable


class AgentRole(str, Enum):
    """
    The capability class of an agent instance.

    CODER gets the full read/write/execute toolset.
    TASK gets the read-only subset used by sandboxed sub-agents.
    """

    CODER = "coder"
    TASK = "task"


@dataclass(frozen=True)
class PermissionRequest:
    """
    A request for consent to perform a side-effecting action.

    Attributes:
        session_id: Session the request originates from
        tool_name: Tool asking for permission
        action: Short verb describing the action (e.g., "execute", "write")
        description: Human-readable description shown to the user
        params: Tool arguments, for display
        path: Filesystem path the action touches, if any
    """

    session_id: str
    tool_name: str
    action: str
    description: str = ""
    params: Mapping[str, Any] = field(default_factory=dict)
    path: str | None = None


@runtime_checkable
class PermissionService(Protocol):
    """Grants or denies side-effecting tool actions."""

    def request(self, request: PermissionRequest) -> bool: ...


@runtime_checkable
class SessionService(Protocol):
    """Session store handed to the sub-agent spawner."""


@runtime_checkable
class MessageService(Protocol):
    """Message store handed to the sub-agent spawner."""


@runtime_checkable
class HistoryService(Protocol):
    """File-version history used by the mutating file tools."""


@runtime_checkable
class LspClient(Protocol):
    """A language server client for one language."""

    language: str


@dataclass(frozen=True)
class LspEndpoint:
    """
    A configured language server, known by language and launch command.

    This is the LspClient handed around when the process only knows the
    configuration of a language server, not a live connection to it.
    """

    language: str
    command: str
    args: tuple[str, ...] = ()


@dataclass(frozen=True)
class CapabilityDescriptor:
    """
    Services available to the tools of one agent instance.

    Every field is optional. The lsp_clients mapping is copied into a
    read-only view, so the descriptor cannot change after construction.

    Attributes:
        permissions: Permission authority for side-effecting tools
        sessions: Session store for the sub-agent spawner
        messages: Message store for the sub-agent spawner
        history: File history for edit/patch/write
        lsp_clients: Language id -> language server client
    """

    permissions: PermissionService | None = None
    sessions: SessionService | None = None
    messages: MessageService | None = None
    history: HistoryService | None = None
    lsp_clients: Mapping[str, LspClient] = field(default_factory=dict)

    def __post_init__(self) -> None:
        clients = self.lsp_clients if self.lsp_clients is not None else {}
        object.__setattr__(self, "lsp_clients", MappingProxyType(dict(clients)))

    @property
    def has_lsp_clients(self) -> bool:
        """Whether at least one language server client is configured."""
        return len(self.lsp_clients) > 0
