# Tests for gfsync.watch.lifecycle
# Detached daemon start, stop and status through the PID marker

import os
import signal
import subprocess
import sys
from unittest.mock import MagicMock, patch

import pytest

from gfsync.config.loader import get_pid_path
from gfsync.sync.engine import SyncEngine
from gfsync.sync.errors import NotInitializedError
from gfsync.watch.lifecycle import (
    StartOutcome,
    StopOutcome,
    daemon_command,
    start_watch,
    stop_watch,
    watch_status,
)
from gfsync.watch.pidfile import PidFile


@pytest.fixture
def pid_file(config_dir) -> PidFile:
    return PidFile(get_pid_path())


@pytest.fixture
def tracked_engine(engine, temp_home) -> SyncEngine:
    (temp_home / ".zshrc").write_text("x", encoding="utf-8")
    engine.add("~/.zshrc")
    return engine


class TestStartWatch:
    """Tests for start_watch."""

    def test_command(self):
        assert daemon_command() == [sys.executable, "-m", "gfsync", "watch", "run"]

    @patch("gfsync.watch.lifecycle.subprocess.Popen")
    def test_spawns_detached(self, mock_popen, tracked_engine, pid_file, temp_home):
        mock_popen.return_value = MagicMock(pid=5150)

        result = start_watch(tracked_engine, pid_file)

        assert result.outcome == StartOutcome.STARTED
        assert result.pid == 5150
        assert result.tracked == [temp_home / ".zshrc"]
        assert pid_file.read() == 5150

        args, kwargs = mock_popen.call_args
        assert args[0] == daemon_command()
        assert kwargs["start_new_session"] is True
        assert kwargs["stdin"] == subprocess.DEVNULL
        assert kwargs["stdout"] == subprocess.DEVNULL
        assert kwargs["stderr"] == subprocess.DEVNULL

    @patch("gfsync.watch.lifecycle.subprocess.Popen")
    def test_already_running(self, mock_popen, tracked_engine, pid_file):
        pid_file.write(os.getpid())

        result = start_watch(tracked_engine, pid_file)

        assert result.outcome == StartOutcome.ALREADY_RUNNING
        assert result.pid == os.getpid()
        mock_popen.assert_not_called()

    @patch("gfsync.watch.lifecycle.subprocess.Popen")
    def test_stale_marker_replaced(self, mock_popen, tracked_engine, pid_file):
        mock_popen.return_value = MagicMock(pid=5150)
        pid_file.write(99999)

        with patch("gfsync.watch.pidfile.os.kill", side_effect=ProcessLookupError):
            result = start_watch(tracked_engine, pid_file)

        assert result.outcome == StartOutcome.STARTED
        assert pid_file.read() == 5150

    @patch("gfsync.watch.lifecycle.subprocess.Popen")
    def test_nothing_to_watch(self, mock_popen, engine, pid_file):
        result = start_watch(engine, pid_file)

        assert result.outcome == StartOutcome.NOTHING_TO_WATCH
        mock_popen.assert_not_called()
        assert not pid_file.exists()

    @patch("gfsync.watch.lifecycle.subprocess.Popen")
    def test_not_initialized(self, mock_popen, config_dir, pid_file):
        with pytest.raises(NotInitializedError):
            start_watch(SyncEngine(), pid_file)
        mock_popen.assert_not_called()


class TestStopWatch:
    """Tests for stop_watch."""

    def test_not_running(self, pid_file):
        assert stop_watch(pid_file).outcome == StopOutcome.NOT_RUNNING

    @patch("gfsync.watch.lifecycle.os.kill")
    def test_stops(self, mock_kill, pid_file):
        pid_file.write(4242)

        result = stop_watch(pid_file)

        assert result.outcome == StopOutcome.STOPPED
        assert result.pid == 4242
        mock_kill.assert_called_once_with(4242, signal.SIGTERM)
        assert not pid_file.exists()

    @patch("gfsync.watch.lifecycle.os.kill", side_effect=ProcessLookupError)
    def test_process_already_gone(self, mock_kill, pid_file):
        pid_file.write(4242)

        result = stop_watch(pid_file)

        assert result.outcome == StopOutcome.STALE
        assert not pid_file.exists()


class TestWatchStatus:
    """Tests for watch_status."""

    def test_running(self, pid_file):
        pid_file.write(os.getpid())
        status = watch_status(pid_file)
        assert status.running is True
        assert status.pid == os.getpid()

    def test_no_marker(self, pid_file):
        status = watch_status(pid_file)
        assert status.running is False
        assert status.stale_cleaned is False

    @patch("gfsync.watch.pidfile.os.kill", side_effect=ProcessLookupError)
    def test_stale_marker_cleaned(self, mock_kill, pid_file):
        pid_file.write(99999)
        status = watch_status(pid_file)
        assert status.running is False
        assert status.stale_cleaned is True
        assert not pid_file.exists()
