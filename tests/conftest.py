"""
Pytest configuration and fixtures for Loadout tests.

This module provides shared fixtures used across unit and integration
tests: temporary directories, stand-in collaborator services and
capability descriptors.
"""

import logging
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from loadout.capabilities import (
    CapabilityDescriptor,
    LspEndpoint,
    PermissionRequest,
)


class RecordingPermissions:
    """Permission service that answers with a fixed decision and remembers requests."""

    def __init__(self, allow: bool = True) -> None:
        self.allow = allow
        self.requests: list[PermissionRequest] = []

    def request(self, request: PermissionRequest) -> bool:
        self.requests.append(request)
        return self.allow


class FakeStore:
    """Stand-in for the session, message and history stores."""

    def __init__(self, kind: str) -> None:
        self.kind = kind


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def permissions() -> RecordingPermissions:
    """Permission service that allows everything."""
    return RecordingPermissions(allow=True)


@pytest.fixture
def deny_permissions() -> RecordingPermissions:
    """Permission service that denies everything."""
    return RecordingPermissions(allow=False)


@pytest.fixture
def history() -> FakeStore:
    return FakeStore("history")


@pytest.fixture
def go_lsp() -> LspEndpoint:
    return LspEndpoint(language="go", command="gopls")


@pytest.fixture
def minimal_caps(permissions: RecordingPermissions, history: FakeStore) -> CapabilityDescriptor:
    """Permission authority and history store only."""
    return CapabilityDescriptor(permissions=permissions, history=history)


@pytest.fixture
def full_caps(
    permissions: RecordingPermissions,
    history: FakeStore,
    go_lsp: LspEndpoint,
) -> CapabilityDescriptor:
    """Every service, with one language server."""
    return CapabilityDescriptor(
        permissions=permissions,
        sessions=FakeStore("sessions"),
        messages=FakeStore("messages"),
        history=history,
        lsp_clients={"go": go_lsp},
    )


@pytest.fixture
def sample_config_yaml() -> str:
    """Return a config with one MCP server and two language servers."""
    return """
mcpServers:
  github:
    type: stdio
    command: github-mcp
    args: ["--read-only"]
    env:
      GITHUB_TOKEN: secret
lsp:
  go:
    command: gopls
  python:
    command: pyright-langserver
    args: ["--stdio"]
    disabled: true
discovery_timeout_seconds: 5
"""


@pytest.fixture(autouse=True)
def reset_loadout_logger() -> Generator[None, None, None]:
    """Undo configure_logging() so caplog sees loadout records in every test."""
    yield
    logger = logging.getLogger("loadout")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
