# gfsync Watch Module
# Background daemon that pushes tracked files on change

from gfsync.watch.daemon import DaemonAlreadyRunningError, TrackedFileHandler, WatchDaemon, configure_logging
from gfsync.watch.debounce import DEBOUNCE_SECONDS, Debouncer
from gfsync.watch.lifecycle import (
    StartOutcome,
    StopOutcome,
    WatchStartResult,
    WatchStatus,
    WatchStopResult,
    start_watch,
    stop_watch,
    watch_status,
)
from gfsync.watch.pidfile import PidFile

__all__ = [
    # Debounce
    "DEBOUNCE_SECONDS",
    "Debouncer",
    # Marker
    "PidFile",
    # Daemon
    "WatchDaemon",
    "TrackedFileHandler",
    "DaemonAlreadyRunningError",
    "configure_logging",
    # Lifecycle
    "StartOutcome",
    "StopOutcome",
    "WatchStartResult",
    "WatchStopResult",
    "WatchStatus",
    "start_watch",
    "stop_watch",
    "watch_status",
]
