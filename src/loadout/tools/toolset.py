"""
Ordered toolset for Loadout.

A Toolset is the list of tools one agent instance may call. Insertion order
is significant: it is the order tools are presented to the model and the
precedence used when tools are matched by name.

Design:
    - One toolset per agent instance, no global default
    - Names are unique; adding a name twice is an error
    - External tools are added with extend_external(), which skips
      collisions instead of raising so built-ins always win

Usage:
    toolset = Toolset([GlobTool(), GrepTool()])
    tool = toolset.get("grep")
"""

from collections.abc import Iterable
from typing import Iterator

from loadout.errors import DuplicateToolError, ToolNotFoundError
from loadout.tools.base import Tool


class Toolset:
    """
    Insertion-ordered, name-unique collection of tools.

    Attributes:
        _tools: Internal mapping of tool names to tool instances
    """

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        """
        Initialize a toolset.

        Args:
            tools: Tools to add, in order

        Raises:
            DuplicateToolError: If two of the tools share a name
        """
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.add(tool)

    def add(self, tool: Tool) -> None:
        """
        Append a tool.

        Raises:
            ValueError: If tool is None or has an empty name
            DuplicateToolError: If a tool with the same name is present
        """
        if tool is None:
            msg = "Cannot add None to a toolset"
            raise ValueError(msg)

        name = tool.name
        if not name:
            msg = "Tool must have a non-empty name"
            raise ValueError(msg)

        if name in self._tools:
            raise DuplicateToolError(tool=name)

        self._tools[name] = tool

    def extend_external(self, tools: Iterable[Tool]) -> list[str]:
        """
        Append tools from an external provider.

        Tools whose names are already present are skipped.

        Returns:
            Names of the skipped tools, in provider order
        """
        skipped = []
        for tool in tools:
            if tool.name in self._tools:
                skipped.append(tool.name)
                continue
            self.add(tool)
        return skipped

    def get(self, name: str) -> Tool:
        """
        Look up a tool by name.

        Raises:
            ToolNotFoundError: If no tool with that name is present
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(tool=name)
        return tool

    def get_optional(self, name: str) -> Tool | None:
        """Look up a tool by name, returning None if not found."""
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        """Check if a tool is present."""
        return name in self._tools

    def names(self) -> list[str]:
        """Tool names in toolset order."""
        return list(self._tools)

    def tools(self) -> list[Tool]:
        """Tools in toolset order."""
        return list(self._tools.values())

    def copy(self) -> "Toolset":
        """Shallow copy holding the same tool instances."""
        return Toolset(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __repr__(self) -> str:
        return f"<Toolset: [{', '.join(self._tools)}]>"
