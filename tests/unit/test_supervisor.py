"""
Unit tests for the process supervisor.

Tests cover:
- Exit codes for normal completion, SystemExit, faults and interrupts
- Exactly one fault marker per unrecovered fault
- Recorder failures never mask the original fault
- Context-manager use re-raises after recording
- Single-use and one-per-process rules
- Faults on background threads, which also make the run exit non-zero
- BaseException faults such as CancelledError
"""

import asyncio
import threading
from pathlib import Path

import pytest

from loadout.errors import SupervisorError
from loadout.schema import FaultMarker
from loadout.store import FaultLog, FaultStore
from loadout.supervisor import (
    EXIT_FAULT,
    EXIT_INTERRUPTED,
    EXIT_OK,
    Supervisor,
    SupervisorState,
    build_marker,
)


class MemoryRecorder:
    """Keeps persisted markers in a list."""

    def __init__(self) -> None:
        self.markers: list[FaultMarker] = []

    def persist(self, marker: FaultMarker) -> str:
        self.markers.append(marker)
        return str(len(self.markers))


class ShutdownSignal(BaseException):
    """A BaseException that is neither SystemExit nor KeyboardInterrupt."""


class BrokenRecorder:
    def persist(self, marker: FaultMarker) -> str:
        raise OSError("disk full")


@pytest.fixture
def recorder() -> MemoryRecorder:
    return MemoryRecorder()


# =============================================================================
# Exit Codes
# =============================================================================


class TestRun:
    """Tests for Supervisor.run."""

    def test_normal_completion(self, recorder: MemoryRecorder) -> None:
        calls = []
        supervisor = Supervisor(recorder)

        code = supervisor.run(calls.append, "arg")

        assert code == EXIT_OK
        assert calls == ["arg"]
        assert recorder.markers == []
        assert supervisor.state == SupervisorState.COMPLETED

    def test_fault_records_one_marker(self, recorder: MemoryRecorder) -> None:
        def crash() -> None:
            raise RuntimeError("nil map")

        supervisor = Supervisor(recorder, source="main")
        code = supervisor.run(crash)

        assert code == EXIT_FAULT
        assert supervisor.state == SupervisorState.TERMINATED
        assert len(recorder.markers) == 1
        marker = recorder.markers[0]
        assert marker.source == "main"
        assert marker.error_type == "RuntimeError"
        assert "nil map" in marker.message
        assert "crash" in marker.traceback

    @pytest.mark.parametrize(("status", "expected"), [(None, 0), (0, 0), (3, 3)])
    def test_system_exit_passthrough(self, recorder: MemoryRecorder, status, expected: int) -> None:
        def leave() -> None:
            raise SystemExit(status)

        supervisor = Supervisor(recorder)
        assert supervisor.run(leave) == expected
        assert recorder.markers == []
        assert supervisor.state == SupervisorState.COMPLETED

    def test_system_exit_message(self, recorder: MemoryRecorder, capsys: pytest.CaptureFixture) -> None:
        def leave() -> None:
            raise SystemExit("bad usage")

        assert Supervisor(recorder).run(leave) == EXIT_FAULT
        assert "bad usage" in capsys.readouterr().err

    def test_keyboard_interrupt(self, recorder: MemoryRecorder) -> None:
        def interrupted() -> None:
            raise KeyboardInterrupt

        assert Supervisor(recorder).run(interrupted) == EXIT_INTERRUPTED
        assert len(recorder.markers) == 1
        assert recorder.markers[0].error_type == "KeyboardInterrupt"

    @pytest.mark.parametrize("exc", [asyncio.CancelledError(), ShutdownSignal("stop")], ids=["cancelled", "base-exception"])
    def test_base_exception_fault(self, recorder: MemoryRecorder, exc: BaseException) -> None:
        """Faults outside the Exception hierarchy still end in a recorded exit code."""

        def crash() -> None:
            raise exc

        supervisor = Supervisor(recorder)
        assert supervisor.run(crash) == EXIT_FAULT
        assert supervisor.state == SupervisorState.TERMINATED
        assert len(recorder.markers) == 1
        assert recorder.markers[0].error_type == type(exc).__name__

    def test_recorder_failure_not_raised(self, capsys: pytest.CaptureFixture) -> None:
        def crash() -> None:
            raise ValueError("original")

        supervisor = Supervisor(BrokenRecorder())
        assert supervisor.run(crash) == EXIT_FAULT
        assert len(supervisor.faults) == 1
        err = capsys.readouterr().err
        assert "disk full" in err
        assert "original" in err

    def test_persists_to_fault_log(self, temp_dir: Path) -> None:
        db_path = temp_dir / "faults.db"

        def crash() -> None:
            raise RuntimeError("boom")

        assert Supervisor(FaultLog(db_path)).run(crash) == EXIT_FAULT
        with FaultStore(db_path) as store:
            markers = store.list_faults()
        assert len(markers) == 1
        assert markers[0].error_type == "RuntimeError"

    def test_clean_run_does_not_touch_disk(self, temp_dir: Path) -> None:
        db_path = temp_dir / "faults.db"
        assert Supervisor(FaultLog(db_path)).run(lambda: None) == EXIT_OK
        assert not db_path.exists()


# =============================================================================
# Context Manager
# =============================================================================


class TestContextManager:
    """Tests for with-statement use."""

    def test_reraises_after_recording(self, recorder: MemoryRecorder) -> None:
        with pytest.raises(RuntimeError, match="boom"):
            with Supervisor(recorder):
                raise RuntimeError("boom")
        assert len(recorder.markers) == 1

    def test_single_use(self, recorder: MemoryRecorder) -> None:
        supervisor = Supervisor(recorder)
        supervisor.run(lambda: None)
        with pytest.raises(SupervisorError):
            supervisor.run(lambda: None)

    def test_one_active_per_process(self, recorder: MemoryRecorder) -> None:
        with Supervisor(recorder, source="outer"):
            with pytest.raises(SupervisorError) as exc_info:
                with Supervisor(recorder, source="inner"):
                    pass
            assert "outer" in exc_info.value.message
        assert recorder.markers == []

    def test_active_cleared_after_fault(self, recorder: MemoryRecorder) -> None:
        def crash() -> None:
            raise RuntimeError("boom")

        Supervisor(recorder).run(crash)
        assert Supervisor(recorder).run(lambda: None) == EXIT_OK


# =============================================================================
# Background Threads
# =============================================================================


class TestThreads:
    """Tests for the thread exception hook."""

    def test_thread_fault_recorded(self, recorder: MemoryRecorder, monkeypatch: pytest.MonkeyPatch) -> None:
        chained = []
        monkeypatch.setattr(threading, "excepthook", chained.append)

        def worker() -> None:
            raise RuntimeError("worker died")

        def entrypoint() -> None:
            thread = threading.Thread(target=worker, name="lsp-reader")
            thread.start()
            thread.join()

        supervisor = Supervisor(recorder, source="main")
        assert supervisor.run(entrypoint) == EXIT_FAULT
        assert supervisor.state == SupervisorState.TERMINATED
        assert len(recorder.markers) == 1
        assert recorder.markers[0].source == "main:lsp-reader"
        assert "worker died" in recorder.markers[0].message
        assert len(chained) == 1

    def test_thread_fault_overrides_clean_exit(self, recorder: MemoryRecorder, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(threading, "excepthook", lambda args: None)

        def worker() -> None:
            raise RuntimeError("worker died")

        def entrypoint() -> None:
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()
            raise SystemExit(0)

        assert Supervisor(recorder).run(entrypoint) == EXIT_FAULT
        assert len(recorder.markers) == 1

    def test_hook_restored(self, recorder: MemoryRecorder, monkeypatch: pytest.MonkeyPatch) -> None:
        def original(args) -> None:
            pass

        monkeypatch.setattr(threading, "excepthook", original)
        Supervisor(recorder).run(lambda: None)
        assert threading.excepthook is original


def test_build_marker_summary() -> None:
    marker = build_marker("main", RuntimeError("x"), summary="custom")
    assert marker.message == "custom"
    assert marker.error_type == "RuntimeError"


def test_build_marker_empty_message() -> None:
    marker = build_marker("main", KeyboardInterrupt())
    assert marker.message == "Application terminated due to unhandled KeyboardInterrupt: KeyboardInterrupt"
