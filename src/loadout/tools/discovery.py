"""
External tool discovery interface.

An external tool provider advertises tools that do not ship with Loadout
(for example tools served over MCP). Providers answer with a
DiscoveryResult instead of raising, so a failed discovery is an ordinary
value the aggregator can log and move past.
"""

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from loadout.errors import DiscoveryError
from loadout.tools.base import Tool


@dataclass(frozen=True)
class DiscoveryResult:
    """
    Outcome of querying an external tool provider.

    Attributes:
        tools: Tools in provider order (empty on failure)
        error: What went wrong, or None on success
    """

    tools: tuple[Tool, ...] = field(default_factory=tuple)
    error: DiscoveryError | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, tools: list[Tool] | tuple[Tool, ...]) -> "DiscoveryResult":
        """Create a successful result."""
        return cls(tools=tuple(tools))

    @classmethod
    def fail(cls, error: DiscoveryError) -> "DiscoveryResult":
        """Create a failed result."""
        return cls(error=error)


@runtime_checkable
class ExternalToolProvider(Protocol):
    """Something that can list additional tools at runtime."""

    name: str

    async def list_tools(self) -> DiscoveryResult: ...
