"""
Tests for the start/stop/replace protocol.

These spawn real `sh` children. The controller fixture uses a short grace
period so SIGKILL escalation can be observed quickly.
"""

import signal
import time
from unittest.mock import Mock

import pytest

from respawner.process import EXEC_FAILURE_STATUS, ProcessHandle
from tests.fixtures.supervisor import TEST_GRACE_PERIOD
from tests.helpers.process import pid_alive, wait_until


def _term_ignoring_command(temp_dir):
    """Command that ignores SIGTERM and touches a file once the trap is set."""
    ready = temp_dir / "ready"
    return f"trap '' TERM; touch {ready}; exec sleep 30", ready


@pytest.mark.integration
class TestStart:
    def test_start_installs_handle_and_reaper(self, controller, state):
        handle = controller.start("exec sleep 30")
        assert not handle.is_empty
        assert state.current == handle
        assert state.pending_pids() == [handle.pid]
        assert pid_alive(handle.pid)

    def test_start_logs_command(self, controller, log_stream):
        handle = controller.start("exec sleep 30")
        output = log_stream.getvalue()
        assert "started managed process" in output
        assert f"[pid:{handle.pid}]" in output
        assert "[cmd:exec sleep 30]" in output

    def test_spawn_failure_returns_empty_handle(
        self, controller, state, log_stream, monkeypatch
    ):
        monkeypatch.setattr(
            "respawner.process.subprocess.Popen",
            Mock(side_effect=BlockingIOError(11, "Resource temporarily unavailable")),
        )
        handle = controller.start("exec sleep 30")
        assert handle.is_empty
        assert state.current is None
        assert state.pending_pids() == []
        assert "failed to start managed process" in log_stream.getvalue()

    def test_reaper_thread_failure_keeps_process_stoppable(
        self, controller, state, log_stream, monkeypatch
    ):
        monkeypatch.setattr(
            "respawner.process.Reaper.start",
            Mock(side_effect=RuntimeError("can't start new thread")),
        )
        handle = controller.start("exec sleep 30")
        assert state.current == handle
        assert state.pending_pids() == []
        assert "failed to start reaper" in log_stream.getvalue()

        assert controller.stop(state.take_current()) == -signal.SIGTERM
        assert not pid_alive(handle.pid)

    def test_exec_failure_surfaces_as_127(self, controller, state):
        handle = controller.start("respawner-no-such-command-xyz")
        assert wait_until(lambda: state.current is None)
        assert controller.stop(handle) == EXEC_FAILURE_STATUS
        assert state.pending_pids() == []


@pytest.mark.integration
class TestStop:
    def test_none_and_empty_handles_are_noops(self, controller):
        assert controller.stop(None) is None
        assert controller.stop(ProcessHandle()) is None

    def test_graceful_stop(self, controller, state, log_stream):
        handle = controller.start("exec sleep 30")
        assert controller.stop(state.take_current()) == -signal.SIGTERM
        assert not pid_alive(handle.pid)
        assert state.pending_pids() == []
        assert "SIGKILL" not in log_stream.getvalue()

    def test_escalates_to_sigkill(self, controller, state, temp_dir, log_stream):
        command, ready = _term_ignoring_command(temp_dir)
        handle = controller.start(command)
        assert wait_until(ready.exists)

        begin = time.monotonic()
        returncode = controller.stop(state.take_current())
        elapsed = time.monotonic() - begin

        assert returncode == -signal.SIGKILL
        assert elapsed >= TEST_GRACE_PERIOD
        assert elapsed < TEST_GRACE_PERIOD + 3.0
        assert not pid_alive(handle.pid)
        assert state.pending_pids() == []
        assert "sending SIGKILL" in log_stream.getvalue()

    def test_stop_after_natural_exit(self, controller, state):
        handle = controller.start("exit 4")
        assert wait_until(lambda: state.current is None)
        assert controller.stop(handle) == 4
        assert state.pending_pids() == []

    def test_signal_failure_is_logged_and_escalates(
        self, controller, state, log_stream, monkeypatch
    ):
        handle = controller.start("exec sleep 30")
        real_send = handle.process.send_signal

        def refuse_term(sig):
            if sig == signal.SIGTERM:
                raise PermissionError(1, "Operation not permitted")
            real_send(sig)

        monkeypatch.setattr(handle.process, "send_signal", refuse_term)

        assert controller.stop(state.take_current()) == -signal.SIGKILL
        assert "failed to signal managed process" in log_stream.getvalue()
        assert state.pending_pids() == []


@pytest.mark.integration
class TestReplace:
    def test_replace_from_empty_starts(self, controller, state):
        handle = controller.replace("exec sleep 30")
        assert state.current == handle
        assert state.pending_pids() == [handle.pid]

    def test_replace_swaps_processes(self, controller, state):
        first = controller.replace("exec sleep 30")
        second = controller.replace("exec sleep 30")

        assert first.pid != second.pid
        assert first.process.returncode == -signal.SIGTERM
        assert state.current == second
        assert state.pending_pids() == [second.pid]

    def test_at_most_one_child_alive(self, controller, state):
        handles = []
        for _ in range(4):
            handles.append(controller.replace("exec sleep 30"))
            alive = [h for h in handles if h.process.poll() is None]
            assert alive == [handles[-1]]
            assert state.current == handles[-1]

    def test_replace_after_spawn_failure_retries(self, controller, state, monkeypatch):
        with monkeypatch.context() as m:
            m.setattr(
                "respawner.process.subprocess.Popen",
                Mock(side_effect=OSError(12, "Cannot allocate memory")),
            )
            assert controller.replace("exec sleep 30").is_empty
        handle = controller.replace("exec sleep 30")
        assert not handle.is_empty
        assert state.current == handle


@pytest.mark.integration
class TestShutdown:
    def test_shutdown_stops_current_and_joins_all(self, controller, state):
        handle = controller.start("exec sleep 30")
        controller.shutdown()
        assert state.current is None
        assert state.pending_pids() == []
        assert handle.process.returncode == -signal.SIGTERM

    def test_join_all_after_natural_exit(self, controller, state):
        controller.start("exit 0")
        assert wait_until(lambda: state.current is None)
        controller.join_all()
        assert state.pending_pids() == []

    def test_shutdown_when_idle(self, controller, state):
        controller.shutdown()
        assert state.current is None
