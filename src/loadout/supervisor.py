"""
Process supervisor for Loadout.

The supervisor is the single last-resort fault boundary around the
program's entrypoint. It does not recover from faults. It makes sure none
of them is silent: an unrecovered exception is written to the fault
recorder as a FaultMarker before the process is allowed to terminate.

Lifecycle:
    IDLE -> RUNNING -> COMPLETED              (normal exit)
                    -> TERMINATED             (fault caught, marker recorded)

A fault recorded on a background thread does not stop the entrypoint, but
the run still ends TERMINATED and exits non-zero.

A supervisor is used once. Only one supervisor may be running per process.

Usage:
    store = FaultStore("loadout.db")
    sys.exit(Supervisor(store, source="main").run(app))

Or as a context manager, which re-raises after recording:
    with Supervisor(store):
        app()
"""

import logging
import sys
import threading
import traceback
from collections.abc import Callable
from enum import Enum
from typing import Any, ClassVar, Protocol

from loadout.errors import SupervisorError
from loadout.schema import FaultMarker

EXIT_OK = 0
EXIT_FAULT = 1
EXIT_INTERRUPTED = 130


class FaultRecorder(Protocol):
    """Durably stores a fault marker before returning."""

    def persist(self, marker: FaultMarker) -> Any: ...


class SupervisorState(str, Enum):
    """Where a supervisor is in its lifecycle."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    TERMINATED = "terminated"


def build_marker(source: str, exc: BaseException, summary: str | None = None) -> FaultMarker:
    """Describe an exception as a FaultMarker."""
    error_type = type(exc).__name__
    detail = str(exc) or error_type
    return FaultMarker(
        source=source,
        message=summary or f"Application terminated due to unhandled {error_type}: {detail}",
        error_type=error_type,
        traceback="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    )


def exit_code_of(exit_request: SystemExit) -> int:
    """Exit status the interpreter would use for a SystemExit."""
    code = exit_request.code
    if code is None:
        return EXIT_OK
    if isinstance(code, int):
        return code
    print(code, file=sys.stderr)
    return EXIT_FAULT


class Supervisor:
    """
    Whole-process fault boundary.

    Attributes:
        recorder: Where fault markers are persisted
        source: Name stored on every marker this supervisor records
        state: Current lifecycle state
        faults: Markers recorded so far, in order
    """

    _active: ClassVar["Supervisor | None"] = None
    _active_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        recorder: FaultRecorder,
        source: str = "main",
        logger: logging.Logger | None = None,
    ) -> None:
        self.recorder = recorder
        self.source = source
        self.logger = logger or logging.getLogger(__name__)
        self.state = SupervisorState.IDLE
        self.faults: list[FaultMarker] = []
        self._previous_thread_hook: Callable[[threading.ExceptHookArgs], Any] | None = None

    # =========================================================================
    # Boundary
    # =========================================================================

    def __enter__(self) -> "Supervisor":
        if self.state != SupervisorState.IDLE:
            raise SupervisorError(
                source=self.source,
                message=f"Supervisor {self.source!r} has already run ({self.state.value})",
            )
        with Supervisor._active_lock:
            if Supervisor._active is not None:
                raise SupervisorError(
                    source=self.source,
                    message=f"Supervisor {Supervisor._active.source!r} is already running",
                    suggestion="Use a single supervisor around the program entrypoint",
                )
            Supervisor._active = self

        self.state = SupervisorState.RUNNING
        self._previous_thread_hook = threading.excepthook
        threading.excepthook = self._thread_hook
        return self

    def __exit__(self, exc_type: Any, exc: BaseException | None, tb: Any) -> bool:
        threading.excepthook = self._previous_thread_hook or threading.__excepthook__
        self._previous_thread_hook = None
        with Supervisor._active_lock:
            Supervisor._active = None

        if exc is None or isinstance(exc, (SystemExit, GeneratorExit)):
            # A fault recorded on a background thread still ends the run as a fault
            self.state = SupervisorState.TERMINATED if self.faults else SupervisorState.COMPLETED
            return False

        self.record(exc)
        self.state = SupervisorState.TERMINATED
        return False

    def run(self, entrypoint: Callable[..., Any], *args: Any, **kwargs: Any) -> int:
        """
        Call the entrypoint inside the fault boundary.

        Returns:
            Exit code: 0 on normal completion, the SystemExit status if the
            entrypoint exits itself, 1 after any recorded fault (including
            one on a background thread), 130 after a recorded
            KeyboardInterrupt

        Raises:
            SupervisorError: If this supervisor cannot be started
        """
        entered = False
        try:
            with self:
                entered = True
                entrypoint(*args, **kwargs)
        except SystemExit as e:
            code = exit_code_of(e)
            if code == EXIT_OK and self.state == SupervisorState.TERMINATED:
                return EXIT_FAULT
            return code
        except KeyboardInterrupt:
            return EXIT_INTERRUPTED
        except BaseException:
            if entered and self.state == SupervisorState.TERMINATED:
                return EXIT_FAULT
            raise
        if self.state == SupervisorState.TERMINATED:
            return EXIT_FAULT
        return EXIT_OK

    # =========================================================================
    # Recording
    # =========================================================================

    def record(self, exc: BaseException, source: str | None = None, summary: str | None = None) -> FaultMarker:
        """
        Log and persist a marker for an exception.

        Recorder failures are reported on the log and stderr; they are
        never raised.
        """
        marker = build_marker(source or self.source, exc, summary)
        self.faults.append(marker)
        self.logger.critical(marker.message)

        try:
            self.recorder.persist(marker)
        except Exception as e:
            self.logger.error("Failed to persist fault marker: %s", e)
            print(f"loadout: could not record fault marker: {e}", file=sys.stderr)
            print(marker.traceback, file=sys.stderr)
        return marker

    def _thread_hook(self, args: threading.ExceptHookArgs) -> None:
        """Record faults that end background threads, then defer to the previous hook."""
        if args.exc_value is not None and args.exc_type is not SystemExit:
            thread_name = args.thread.name if args.thread is not None else "unknown"
            self.record(
                args.exc_value,
                source=f"{self.source}:{thread_name}",
                summary=f"Thread {thread_name} died due to unhandled {args.exc_type.__name__}: {args.exc_value}",
            )
        previous = self._previous_thread_hook or threading.__excepthook__
        previous(args)
