# gfsync Watch Lifecycle
# Start, stop and inspect the detached watch daemon

import logging
import os
import signal
import subprocess
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from gfsync.sync.engine import SyncEngine
from gfsync.watch.pidfile import PidFile

logger = logging.getLogger("gfsync.watch")


class StartOutcome(str, Enum):
    STARTED = "started"
    ALREADY_RUNNING = "already_running"
    NOTHING_TO_WATCH = "nothing_to_watch"


class StopOutcome(str, Enum):
    STOPPED = "stopped"
    NOT_RUNNING = "not_running"
    STALE = "stale"


@dataclass
class WatchStartResult:
    outcome: StartOutcome
    pid: Optional[int] = None
    tracked: list[Path] = field(default_factory=list)


@dataclass
class WatchStopResult:
    outcome: StopOutcome
    pid: Optional[int] = None


@dataclass
class WatchStatus:
    """State of the daemon as seen through the PID marker."""

    running: bool
    pid: Optional[int] = None
    stale_cleaned: bool = False


def daemon_command() -> list[str]:
    """Command line that runs the daemon in the foreground."""
    return [sys.executable, "-m", "gfsync", "watch", "run"]


def start_watch(engine: SyncEngine, pid_file: PidFile) -> WatchStartResult:
    """
    Spawn the daemon fully detached from the calling terminal.

    Args:
        engine: Reconciler, used to check that something is tracked.
        pid_file: PID marker of the daemon.

    Returns:
        WatchStartResult with the spawned pid on success.

    Raises:
        NotInitializedError: If no config was saved.
    """
    pid = pid_file.live_pid()
    if pid is not None:
        return WatchStartResult(StartOutcome.ALREADY_RUNNING, pid=pid)

    tracked = engine.tracked_paths()
    if not tracked:
        return WatchStartResult(StartOutcome.NOTHING_TO_WATCH)

    process = subprocess.Popen(
        daemon_command(),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
        close_fds=True,
    )
    pid_file.write(process.pid)
    logger.info("Spawned watch daemon, PID %d", process.pid)

    return WatchStartResult(StartOutcome.STARTED, pid=process.pid, tracked=[path for _, path in tracked])


def stop_watch(pid_file: PidFile) -> WatchStopResult:
    """
    Terminate the daemon recorded in the PID marker.

    A marker whose process is gone is removed and reported as stale.
    """
    pid = pid_file.read()
    if pid is None:
        if pid_file.exists():
            pid_file.remove()
        return WatchStopResult(StopOutcome.NOT_RUNNING)

    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        pid_file.remove()
        return WatchStopResult(StopOutcome.STALE, pid=pid)

    pid_file.remove()
    logger.info("Sent SIGTERM to watch daemon, PID %d", pid)
    return WatchStopResult(StopOutcome.STOPPED, pid=pid)


def watch_status(pid_file: PidFile) -> WatchStatus:
    """Report whether the daemon runs, cleaning up a stale marker."""
    had_marker = pid_file.exists()
    pid = pid_file.live_pid()
    if pid is not None:
        return WatchStatus(running=True, pid=pid)
    return WatchStatus(running=False, stale_cleaned=had_marker)
