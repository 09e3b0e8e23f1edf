"""
Unit tests for the Loadout exception hierarchy.

Tests cover:
- Error codes and default messages
- Context population
- String formatting and to_dict()
"""

import pytest

from loadout.errors import (
    ERROR_CONFIG_INVALID,
    ERROR_DISCOVERY_FAILED,
    ERROR_DISCOVERY_MALFORMED,
    ERROR_DISCOVERY_TIMEOUT,
    ERROR_STORAGE_CONNECTION,
    ERROR_SUPERVISOR_STATE,
    ERROR_TOOL_DUPLICATE,
    ERROR_TOOL_NOT_FOUND,
    ConfigValidationError,
    DiscoveryError,
    DiscoveryMalformedError,
    DiscoveryTimeoutError,
    DuplicateToolError,
    LoadoutError,
    StorageConnectionError,
    SupervisorError,
    ToolNotFoundError,
)


class TestLoadoutError:
    """Tests for the base exception."""

    def test_str_with_suggestion(self) -> None:
        error = LoadoutError(message="broken", code=42, suggestion="fix it")
        assert str(error) == "[E42] broken\nSuggestion: fix it"

    def test_to_dict(self) -> None:
        error = ToolNotFoundError(tool="grep")
        data = error.to_dict()
        assert data["error_type"] == "ToolNotFoundError"
        assert data["code"] == ERROR_TOOL_NOT_FOUND
        assert data["context"] == {"tool": "grep"}

    def test_catch_all(self) -> None:
        with pytest.raises(LoadoutError):
            raise DuplicateToolError(tool="bash")


class TestDefaults:
    """Each subclass fills in its code and message."""

    @pytest.mark.parametrize(
        ("error", "code", "text"),
        [
            (ToolNotFoundError(tool="grep"), ERROR_TOOL_NOT_FOUND, "grep"),
            (DuplicateToolError(tool="bash"), ERROR_TOOL_DUPLICATE, "bash"),
            (DiscoveryError(provider="mcp", underlying_error="refused"), ERROR_DISCOVERY_FAILED, "refused"),
            (DiscoveryTimeoutError(provider="mcp", timeout_seconds=2.5), ERROR_DISCOVERY_TIMEOUT, "2.5s"),
            (DiscoveryMalformedError(provider="mcp", underlying_error="bad"), ERROR_DISCOVERY_MALFORMED, "malformed"),
            (ConfigValidationError(path="x.yaml", validation_error="nope"), ERROR_CONFIG_INVALID, "nope"),
            (StorageConnectionError(db_path="/tmp/x.db"), ERROR_STORAGE_CONNECTION, "/tmp/x.db"),
            (SupervisorError(source="main"), ERROR_SUPERVISOR_STATE, "main"),
        ],
    )
    def test_code_and_message(self, error: LoadoutError, code: int, text: str) -> None:
        assert error.code == code
        assert text in error.message

    def test_timeout_is_discovery_error(self) -> None:
        error = DiscoveryTimeoutError(provider="mcp", timeout_seconds=1.0)
        assert isinstance(error, DiscoveryError)
        assert error.context["timeout_seconds"] == 1.0
        assert error.context["provider"] == "mcp"

    def test_explicit_message_kept(self) -> None:
        error = DiscoveryError(provider="mcp", message="custom")
        assert error.message == "custom"
