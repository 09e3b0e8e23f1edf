"""
External tool aggregation.

Appends tools from an external provider (usually MCP) after the built-in
toolset. The provider is optional infrastructure, so nothing it does can
make toolset construction fail:

    - provider raises, times out or returns malformed data -> logged,
      built-in toolset returned unchanged
    - build cancelled before or during the query -> query abandoned,
      built-in toolset returned unchanged
    - external tool name collides with an existing tool -> that external
      tool is dropped and logged; built-ins always win

The query is always bounded by a timeout.
"""

import asyncio
import logging

from loadout.errors import (
    DiscoveryError,
    DiscoveryMalformedError,
    DiscoveryTimeoutError,
)
from loadout.schema import DEFAULT_DISCOVERY_TIMEOUT_SECONDS
from loadout.tools.base import Tool
from loadout.tools.discovery import DiscoveryResult, ExternalToolProvider
from loadout.tools.toolset import Toolset

logger = logging.getLogger(__name__)

# Time allowed for an abandoned query to unwind after it is cancelled
CANCEL_GRACE_SECONDS = 1.0

# Queries that outlived their grace period, kept alive until they finish
_abandoned: set[asyncio.Future] = set()


def _provider_name(provider: object) -> str:
    return getattr(provider, "name", None) or type(provider).__name__


def _has_valid_name(tool: Tool) -> bool:
    try:
        name = tool.name
    except Exception:
        return False
    return isinstance(name, str) and name != ""


def _consume_result(task: asyncio.Future) -> None:
    """Retrieve the outcome of an abandoned query so it is never reported as lost."""
    _abandoned.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Abandoned discovery query finished with %s: %s", type(exc).__name__, exc)


def _check_result(provider_name: str, result: object) -> DiscoveryResult:
    """Turn whatever the provider returned into a well-formed DiscoveryResult."""
    if not isinstance(result, DiscoveryResult):
        return DiscoveryResult.fail(
            DiscoveryMalformedError(
                provider=provider_name,
                underlying_error=f"expected DiscoveryResult, got {type(result).__name__}",
            )
        )
    if not result.success:
        return result

    try:
        tools = list(result.tools)
    except TypeError as e:
        return DiscoveryResult.fail(
            DiscoveryMalformedError(provider=provider_name, underlying_error=str(e))
        )

    bad = [type(tool).__name__ for tool in tools if not isinstance(tool, Tool)]
    if bad:
        return DiscoveryResult.fail(
            DiscoveryMalformedError(
                provider=provider_name,
                underlying_error=f"non-tool entries: {', '.join(bad)}",
            )
        )

    unnamed = [type(tool).__name__ for tool in tools if not _has_valid_name(tool)]
    if unnamed:
        return DiscoveryResult.fail(
            DiscoveryMalformedError(
                provider=provider_name,
                underlying_error=f"tools without a usable name: {', '.join(unnamed)}",
            )
        )
    return DiscoveryResult.ok(tools)


async def discover(
    provider: ExternalToolProvider,
    timeout_seconds: float = DEFAULT_DISCOVERY_TIMEOUT_SECONDS,
    cancelled: asyncio.Event | None = None,
) -> DiscoveryResult:
    """
    Query a provider within a time budget.

    Never raises for provider faults; every failure comes back as
    DiscoveryResult.fail(). Cancellation of the calling task propagates.
    """
    name = _provider_name(provider)

    try:
        query = asyncio.ensure_future(provider.list_tools())
    except Exception as e:
        return DiscoveryResult.fail(
            DiscoveryError(provider=name, underlying_error=f"{type(e).__name__}: {e}")
        )

    waiters: set[asyncio.Future] = {query}
    cancel_wait = None
    if cancelled is not None:
        cancel_wait = asyncio.ensure_future(cancelled.wait())
        waiters.add(cancel_wait)

    try:
        done, _ = await asyncio.wait(
            waiters,
            timeout=timeout_seconds,
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        pending = [task for task in waiters if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            _, stuck = await asyncio.wait(pending, timeout=CANCEL_GRACE_SECONDS)
            for task in stuck:
                if task is query:
                    logger.warning(
                        "Discovery query for %s ignored cancellation for %.1fs; abandoning it",
                        name,
                        CANCEL_GRACE_SECONDS,
                    )
                _abandoned.add(task)
                task.add_done_callback(_consume_result)

    if query not in done:
        if cancel_wait is not None and cancel_wait in done:
            return DiscoveryResult.fail(
                DiscoveryError(provider=name, underlying_error="discovery cancelled")
            )
        return DiscoveryResult.fail(
            DiscoveryTimeoutError(provider=name, timeout_seconds=timeout_seconds)
        )

    try:
        result = query.result()
    except asyncio.CancelledError:
        return DiscoveryResult.fail(
            DiscoveryError(provider=name, underlying_error="provider query was cancelled")
        )
    except Exception as e:
        return DiscoveryResult.fail(
            DiscoveryError(provider=name, underlying_error=f"{type(e).__name__}: {e}")
        )

    return _check_result(name, result)


async def aggregate_external_tools(
    base: Toolset,
    provider: ExternalToolProvider | None,
    *,
    timeout_seconds: float | None = DEFAULT_DISCOVERY_TIMEOUT_SECONDS,
    cancelled: asyncio.Event | None = None,
) -> Toolset:
    """
    Append a provider's tools after the built-in toolset.

    Args:
        base: Built-in toolset; never modified
        provider: External tool provider, or None for built-ins only
        timeout_seconds: Upper bound on the query; non-positive values use the default
        cancelled: Set to abandon the query and keep the built-ins

    Returns:
        A new Toolset: base tools first, then external tools in provider order
    """
    toolset = base.copy()
    if provider is None:
        return toolset

    if timeout_seconds is None or timeout_seconds <= 0:
        timeout_seconds = DEFAULT_DISCOVERY_TIMEOUT_SECONDS

    name = _provider_name(provider)
    if cancelled is not None and cancelled.is_set():
        logger.info("Skipping external tools from %s: build cancelled", name)
        return toolset

    result = await discover(provider, timeout_seconds, cancelled)
    if not result.success:
        logger.warning(
            "External tools unavailable, continuing with %d built-in tools: %s",
            len(base),
            result.error,
        )
        return toolset

    skipped = toolset.extend_external(result.tools)
    if skipped:
        logger.warning(
            "Ignoring external tools from %s that collide with existing tools: %s",
            name,
            ", ".join(skipped),
        )
    logger.debug("Added %d external tools from %s", len(toolset) - len(base), name)
    return toolset
