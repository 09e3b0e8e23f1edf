"""
Base classes for the tool interface.

This module defines the core abstractions for tools in Loadout:
- Tool: Abstract base class every tool handle implements
- ToolContext: Runtime context passed to tools during execution
- ToolOutput: Standardized result format from tool execution

Design Principles:
    - Identity is by name - a toolset never holds two tools with one name
    - Tools return ToolOutput - never raise exceptions for expected failures
    - Tools hold references to the services they were built with, nothing more
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from loadout.schema import ToolInfo


@dataclass(frozen=True)
class ToolOutput:
    """
    Standardized output from tool execution.

    Attributes:
        success: Whether the tool executed successfully
        data: The output data from the tool (type varies by tool)
        error: Error message if success is False
        metadata: Additional metadata about the execution
    """

    success: bool
    data: Any = None
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any, **metadata: Any) -> "ToolOutput":
        """Create a successful output."""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: str, **metadata: Any) -> "ToolOutput":
        """Create a failed output."""
        return cls(success=False, error=error, metadata=metadata)


@dataclass
class ToolContext:
    """
    Runtime context passed to tools during execution.

    Attributes:
        session_id: Session the call belongs to
        message_id: Assistant message that issued the call
        working_dir: The working directory for relative paths
        metadata: Additional context-specific metadata
    """

    session_id: str
    message_id: str = ""
    working_dir: str = "."
    metadata: dict[str, Any] = field(default_factory=dict)


class Tool(ABC):
    """
    Abstract base class for all Loadout tools.

    Subclasses must implement:
    - name property: Returns the tool's unique identifier
    - execute(): Performs (or delegates) the tool's action

    Example:
        class EchoTool(Tool):
            @property
            def name(self) -> str:
                return "echo"

            def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
                return ToolOutput.ok(args.get("message", ""))
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        The unique identifier for this tool.

        Built-in tools use short lowercase names ("bash", "view").
        MCP tools are prefixed with their server name ("github_search").
        """
        ...

    @property
    def description(self) -> str:
        """Human-readable description of what the tool does."""
        return f"Tool: {self.name}"

    @property
    def parameters(self) -> dict[str, Any]:
        """JSON-schema properties of the tool's arguments."""
        return {}

    @property
    def required(self) -> list[str]:
        """Names of required arguments."""
        return []

    def info(self) -> "ToolInfo":
        """Describe the tool for presentation to a model."""
        from loadout.schema import ToolInfo

        return ToolInfo(
            name=self.name,
            description=self.description,
            parameters=self.parameters,
            required=self.required,
        )

    @abstractmethod
    def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
        """
        Execute the tool with the given arguments.

        Note:
            - Do NOT raise exceptions for expected failures
            - Use ToolOutput.fail() for expected errors
        """
        ...

    def validate_args(self, args: dict[str, Any]) -> list[str]:
        """
        Validate the arguments for this tool.

        The default implementation checks that required arguments are present.

        Returns:
            List of validation error messages (empty if valid)
        """
        return [f"'{key}' is required" for key in self.required if key not in args]

    def __repr__(self) -> str:
        """String representation of the tool."""
        return f"<Tool: {self.name}>"
