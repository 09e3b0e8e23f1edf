"""
Schema definitions for Loadout.

This module defines the Pydantic models used throughout Loadout:
- ToolInfo: How a tool is described to a model
- FaultMarker: An unrecovered fault caught by the process supervisor
- McpServerConfig: An external MCP tool server
- LspServerConfig: A language server to start for one language
- LoadoutConfig: Everything read from a loadout YAML file

Design Decisions:
    - Models are immutable (frozen=True) and reject unknown keys
    - Config is loaded from YAML and validated in one step
"""

import os
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from loadout.errors import ConfigNotFoundError, ConfigValidationError


DEFAULT_DISCOVERY_TIMEOUT_SECONDS = 10.0


# =============================================================================
# Tool Models
# =============================================================================


class ToolInfo(BaseModel):
    """
    Description of a tool as presented to a model.

    Attributes:
        name: Unique tool name
        description: What the tool does
        parameters: JSON-schema properties of the arguments
        required: Names of required arguments
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Unique tool name")
    description: str = Field(default="", description="What the tool does")
    parameters: dict[str, Any] = Field(
        default_factory=dict,
        description="JSON-schema properties of the tool's arguments",
    )
    required: list[str] = Field(
        default_factory=list,
        description="Names of required arguments",
    )


# =============================================================================
# Fault Models
# =============================================================================


class FaultMarker(BaseModel):
    """
    Record of an unrecovered fault that ended (or was about to end) the process.

    Attributes:
        fault_id: Storage identifier, set once the marker is persisted
        source: Name of the fault boundary that caught the fault
        message: Summary of the fault
        error_type: Exception class name
        traceback: Formatted traceback
        occurred_at: When the fault was caught
        pid: Process that faulted
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    fault_id: str | None = Field(default=None, description="Storage identifier")
    source: str = Field(..., description="Fault boundary that caught the fault")
    message: str = Field(..., description="Summary of the fault")
    error_type: str = Field(..., description="Exception class name")
    traceback: str = Field(default="", description="Formatted traceback")
    occurred_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the fault was caught",
    )
    pid: int = Field(default_factory=os.getpid, description="Process that faulted")


# =============================================================================
# Config Models
# =============================================================================


class McpTransport(str, Enum):
    """How Loadout talks to an MCP server."""

    STDIO = "stdio"
    SSE = "sse"


class McpServerConfig(BaseModel):
    """
    An MCP server that advertises additional tools.

    Attributes:
        type: Transport, stdio (spawn a process) or sse (connect to a URL)
        command: Executable to spawn (stdio)
        args: Arguments for the executable (stdio)
        env: Extra environment variables for the process (stdio)
        url: Server endpoint (sse)
        headers: HTTP headers sent to the endpoint (sse)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: McpTransport = Field(default=McpTransport.STDIO, description="Transport")
    command: str | None = Field(default=None, description="Executable to spawn")
    args: list[str] = Field(default_factory=list, description="Executable arguments")
    env: dict[str, str] = Field(default_factory=dict, description="Extra environment")
    url: str | None = Field(default=None, description="SSE endpoint")
    headers: dict[str, str] = Field(default_factory=dict, description="SSE headers")

    @model_validator(mode="after")
    def check_transport_fields(self) -> "McpServerConfig":
        """stdio servers need a command, sse servers need a url."""
        if self.type == McpTransport.STDIO and not self.command:
            msg = "stdio MCP servers require 'command'"
            raise ValueError(msg)
        if self.type == McpTransport.SSE and not self.url:
            msg = "sse MCP servers require 'url'"
            raise ValueError(msg)
        return self


class LspServerConfig(BaseModel):
    """
    A language server for one language.

    Attributes:
        command: Executable that starts the server
        args: Arguments for the executable
        disabled: Keep the entry but do not use it
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    command: str = Field(..., min_length=1, description="Server executable")
    args: list[str] = Field(default_factory=list, description="Server arguments")
    disabled: bool = Field(default=False, description="Skip this server")


class LoadoutConfig(BaseModel):
    """
    Complete Loadout configuration.

    Attributes:
        mcp_servers: Server name -> MCP server config
        lsp: Language id -> language server config
        discovery_timeout_seconds: Upper bound on external tool discovery
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    mcp_servers: dict[str, McpServerConfig] = Field(
        default_factory=dict,
        alias="mcpServers",
        description="MCP servers providing external tools",
    )
    lsp: dict[str, LspServerConfig] = Field(
        default_factory=dict,
        description="Language servers keyed by language id",
    )
    discovery_timeout_seconds: float = Field(
        default=DEFAULT_DISCOVERY_TIMEOUT_SECONDS,
        description="Upper bound on external tool discovery",
        gt=0,
        le=120,
    )

    def enabled_lsp(self) -> dict[str, LspServerConfig]:
        """Language servers that are not disabled, sorted by language."""
        return {
            language: server
            for language, server in sorted(self.lsp.items())
            if not server.disabled
        }


# =============================================================================
# YAML Loading Helpers
# =============================================================================


def _validate_config(data: Any, path: str = "") -> LoadoutConfig:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigValidationError(
            path=path,
            validation_error=f"expected a mapping at the top level, got {type(data).__name__}",
        )
    try:
        return LoadoutConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(path=path, validation_error=str(e)) from e


def load_config(path: Path | str) -> LoadoutConfig:
    """
    Load a Loadout config from a YAML file.

    Raises:
        ConfigNotFoundError: If the file doesn't exist
        ConfigValidationError: If the YAML doesn't match the schema
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigNotFoundError(path=str(path))

    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(path=str(path), validation_error=str(e)) from e

    return _validate_config(data, str(path))


def load_config_from_string(content: str) -> LoadoutConfig:
    """Load a Loadout config from a YAML string."""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigValidationError(validation_error=str(e)) from e
    return _validate_config(data)
