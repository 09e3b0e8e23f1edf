"""
Unit tests for tool base classes and the Toolset.

Tests cover:
- ToolOutput creation and methods
- ToolContext creation
- Tool ABC implementation and info()
- Toolset ordering, uniqueness and lookups
- extend_external collision handling
"""

from typing import Any

import pytest

from loadout.errors import DuplicateToolError, ToolNotFoundError
from loadout.tools import Tool, ToolContext, ToolOutput, Toolset


# =============================================================================
# Test Fixtures
# =============================================================================


class MockTool(Tool):
    """A simple mock tool for testing."""

    def __init__(self, tool_name: str = "mock") -> None:
        self._name = tool_name

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return "A mock tool for testing"

    @property
    def parameters(self) -> dict[str, Any]:
        return {"message": {"type": "string"}}

    @property
    def required(self) -> list[str]:
        return ["message"]

    def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
        return ToolOutput.ok(f"executed: {args.get('message', 'default')}")


class BareTool(Tool):
    """A tool relying on every default."""

    @property
    def name(self) -> str:
        return "bare"

    def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
        return ToolOutput.fail("always fails")


# =============================================================================
# ToolOutput / ToolContext Tests
# =============================================================================


class TestToolOutput:
    """Tests for ToolOutput dataclass."""

    def test_ok_helper(self) -> None:
        output = ToolOutput.ok("data", key="value")
        assert output.success is True
        assert output.data == "data"
        assert output.error is None
        assert output.metadata["key"] == "value"

    def test_fail_helper(self) -> None:
        output = ToolOutput.fail("error message", key="value")
        assert output.success is False
        assert output.error == "error message"
        assert output.metadata["key"] == "value"

    def test_is_frozen(self) -> None:
        output = ToolOutput.ok("data")
        with pytest.raises(AttributeError):
            output.success = False  # type: ignore


class TestToolContext:
    """Tests for ToolContext dataclass."""

    def test_create_minimal(self) -> None:
        context = ToolContext(session_id="s1")
        assert context.session_id == "s1"
        assert context.message_id == ""
        assert context.working_dir == "."
        assert context.metadata == {}


# =============================================================================
# Tool ABC Tests
# =============================================================================


class TestTool:
    """Tests for Tool ABC."""

    def test_info(self) -> None:
        info = MockTool().info()
        assert info.name == "mock"
        assert info.description == "A mock tool for testing"
        assert info.parameters == {"message": {"type": "string"}}
        assert info.required == ["message"]

    def test_defaults(self) -> None:
        tool = BareTool()
        assert tool.description == "Tool: bare"
        assert tool.info().parameters == {}
        assert tool.validate_args({"any": "thing"}) == []

    def test_validate_required(self) -> None:
        tool = MockTool()
        assert tool.validate_args({}) == ["'message' is required"]
        assert tool.validate_args({"message": "hi"}) == []

    def test_repr(self) -> None:
        assert "mock" in repr(MockTool())


# =============================================================================
# Toolset Tests
# =============================================================================


class TestToolset:
    """Tests for Toolset."""

    def test_insertion_order(self) -> None:
        toolset = Toolset([MockTool("c"), MockTool("a"), MockTool("b")])
        assert toolset.names() == ["c", "a", "b"]
        assert [tool.name for tool in toolset] == ["c", "a", "b"]

    def test_duplicate_rejected(self) -> None:
        toolset = Toolset([MockTool("a")])
        with pytest.raises(DuplicateToolError) as exc_info:
            toolset.add(MockTool("a"))
        assert exc_info.value.tool == "a"

    def test_duplicate_in_constructor(self) -> None:
        with pytest.raises(DuplicateToolError):
            Toolset([MockTool("a"), MockTool("a")])

    def test_add_none(self) -> None:
        with pytest.raises(ValueError):
            Toolset().add(None)  # type: ignore

    def test_add_empty_name(self) -> None:
        with pytest.raises(ValueError):
            Toolset().add(MockTool(""))

    def test_get(self) -> None:
        tool = MockTool("a")
        toolset = Toolset([tool])
        assert toolset.get("a") is tool

    def test_get_missing(self) -> None:
        with pytest.raises(ToolNotFoundError) as exc_info:
            Toolset().get("nope")
        assert "nope" in str(exc_info.value)

    def test_get_optional(self) -> None:
        assert Toolset().get_optional("nope") is None

    def test_contains_and_len(self) -> None:
        toolset = Toolset([MockTool("a")])
        assert "a" in toolset
        assert "b" not in toolset
        assert toolset.has("a")
        assert len(toolset) == 1

    def test_copy_is_independent(self) -> None:
        toolset = Toolset([MockTool("a")])
        copy = toolset.copy()
        copy.add(MockTool("b"))
        assert toolset.names() == ["a"]
        assert copy.get("a") is toolset.get("a")

    def test_extend_external_skips_collisions(self) -> None:
        toolset = Toolset([MockTool("bash"), MockTool("view")])
        external_bash = MockTool("bash")
        skipped = toolset.extend_external(
            [MockTool("x"), external_bash, MockTool("y"), MockTool("x")]
        )
        assert skipped == ["bash", "x"]
        assert toolset.names() == ["bash", "view", "x", "y"]
        assert toolset.get("bash") is not external_bash

    def test_repr(self) -> None:
        assert "a, b" in repr(Toolset([MockTool("a"), MockTool("b")]))
