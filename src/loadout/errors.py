"""
Exception hierarchy for Loadout.

All Loadout exceptions inherit from LoadoutError, allowing callers to catch
all Loadout-specific exceptions with a single except clause.

Exception Categories:
    - ToolNotFoundError / DuplicateToolError: Toolset lookups and additions
    - DiscoveryError: External tool provider failed (always recovered)
    - ConfigError: Configuration file missing or invalid
    - StorageError: Fault database operation failed
    - SupervisorError: Process supervisor misuse

Toolset construction never raises for a missing optional dependency.
Discovery errors are raised inside providers and swallowed by the
aggregator, which logs them and keeps the built-in tools.
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Toolset errors: 1xxx
ERROR_TOOL_NOT_FOUND = 1001
ERROR_TOOL_DUPLICATE = 1002

# Discovery errors: 2xxx
ERROR_DISCOVERY_FAILED = 2001
ERROR_DISCOVERY_TIMEOUT = 2002
ERROR_DISCOVERY_MALFORMED = 2003

# Config errors: 3xxx
ERROR_CONFIG_INVALID = 3001
ERROR_CONFIG_NOT_FOUND = 3002

# Storage errors: 4xxx
ERROR_STORAGE_CONNECTION = 4001
ERROR_STORAGE_WRITE = 4002
ERROR_STORAGE_READ = 4003

# Supervisor errors: 5xxx
ERROR_SUPERVISOR_STATE = 5001


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class LoadoutError(Exception):
    """
    Base exception for all Loadout errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Toolset Errors
# =============================================================================


@dataclass
class ToolsetError(LoadoutError):
    """
    Base class for toolset errors.

    Attributes:
        tool: Name of the tool involved
    """

    tool: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["tool"] = self.tool


@dataclass
class ToolNotFoundError(ToolsetError):
    """Raised when a tool is not present in a toolset."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Tool not found: {self.tool}"
        if self.code == 0:
            self.code = ERROR_TOOL_NOT_FOUND
        if not self.suggestion:
            self.suggestion = "Check the tool name or the role the toolset was built for"
        super().__post_init__()


@dataclass
class DuplicateToolError(ToolsetError):
    """Raised when a tool name is added to a toolset twice."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Duplicate tool name: {self.tool}"
        if self.code == 0:
            self.code = ERROR_TOOL_DUPLICATE
        super().__post_init__()


# =============================================================================
# Discovery Errors
# =============================================================================


@dataclass
class DiscoveryError(LoadoutError):
    """
    Raised when an external tool provider cannot produce its tools.

    Attributes:
        provider: Name of the provider (or MCP server) that failed
        underlying_error: Text of the original exception, if any
    """

    provider: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Tool discovery failed for {self.provider}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_DISCOVERY_FAILED
        self.context.update({
            "provider": self.provider,
            "underlying_error": self.underlying_error,
        })


@dataclass
class DiscoveryTimeoutError(DiscoveryError):
    """Raised when an external tool provider does not answer in time."""

    timeout_seconds: float = 0.0

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Tool discovery for {self.provider} timed out after {self.timeout_seconds}s"
        if self.code == 0:
            self.code = ERROR_DISCOVERY_TIMEOUT
        if not self.suggestion:
            self.suggestion = "Increase discovery_timeout_seconds or check the provider is running"
        super().__post_init__()
        self.context["timeout_seconds"] = self.timeout_seconds


@dataclass
class DiscoveryMalformedError(DiscoveryError):
    """Raised when an external tool provider returns data of the wrong shape."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Tool discovery for {self.provider} returned malformed data: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_DISCOVERY_MALFORMED
        super().__post_init__()


# =============================================================================
# Config Errors
# =============================================================================


@dataclass
class ConfigError(LoadoutError):
    """
    Base class for configuration errors.

    Attributes:
        path: Path of the configuration file, if loaded from disk
    """

    path: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if self.code == 0:
            self.code = ERROR_CONFIG_INVALID
        self.context["path"] = self.path


@dataclass
class ConfigNotFoundError(ConfigError):
    """Raised when a configuration file does not exist."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Config file not found: {self.path}"
        if self.code == 0:
            self.code = ERROR_CONFIG_NOT_FOUND
        super().__post_init__()


@dataclass
class ConfigValidationError(ConfigError):
    """Raised when a configuration file does not match the schema."""

    validation_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid config: {self.validation_error}"
        super().__post_init__()
        self.context["validation_error"] = self.validation_error


# =============================================================================
# Storage Errors
# =============================================================================


@dataclass
class StorageError(LoadoutError):
    """
    Base class for fault database errors.

    Attributes:
        operation: The operation that failed (e.g., "insert", "query")
    """

    operation: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["operation"] = self.operation


@dataclass
class StorageConnectionError(StorageError):
    """Raised when the fault database cannot be opened."""

    db_path: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to connect to database: {self.db_path}"
        if self.code == 0:
            self.code = ERROR_STORAGE_CONNECTION
        if not self.suggestion:
            self.suggestion = "Check that the database path is valid and writable"
        super().__post_init__()
        self.context["db_path"] = self.db_path


@dataclass
class StorageWriteError(StorageError):
    """Raised when a write operation fails."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Database write failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_STORAGE_WRITE
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class StorageReadError(StorageError):
    """Raised when a read operation fails."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Database read failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_STORAGE_READ
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


# =============================================================================
# Supervisor Errors
# =============================================================================


@dataclass
class SupervisorError(LoadoutError):
    """Raised when a supervisor is entered twice or nested inside another."""

    source: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Supervisor {self.source!r} cannot be started"
        if self.code == 0:
            self.code = ERROR_SUPERVISOR_STATE
        self.context["source"] = self.source
