# gfsync Watch Daemon
# Watches tracked files and pushes after changes settle

import logging
import os
import signal
import threading
from pathlib import Path
from typing import Callable, Optional

from rich.logging import RichHandler
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from gfsync.git.operations import GitError
from gfsync.sync.engine import SyncEngine
from gfsync.sync.errors import SyncError
from gfsync.watch.debounce import DEBOUNCE_SECONDS, Debouncer
from gfsync.watch.pidfile import PidFile

logger = logging.getLogger("gfsync.watch")

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


class DaemonAlreadyRunningError(SyncError):
    """Raised when another live daemon owns the PID marker."""

    def __init__(self, pid: int):
        self.pid = pid
        super().__init__(f"Watch daemon is already running (PID: {pid})")


def configure_logging(log_path: Path, *, foreground: bool = False) -> None:
    """
    Send gfsync log records to the append-only daemon log.

    Args:
        log_path: Log file, opened in append mode.
        foreground: Also log to the terminal through rich.
    """
    root = logging.getLogger("gfsync")
    root.setLevel(logging.INFO)

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(file_handler)

    if foreground:
        root.addHandler(RichHandler(show_path=False))


class TrackedFileHandler(FileSystemEventHandler):
    """Forwards events for one tracked file, ignoring its siblings."""

    def __init__(self, target: Path, on_change: Callable[[Path], None]):
        self.target = Path(os.path.abspath(target))
        self.on_change = on_change

    def _matches(self, raw_path) -> bool:
        return Path(os.path.abspath(os.fsdecode(raw_path))) == self.target

    def on_modified(self, event):
        if not event.is_directory and self._matches(event.src_path):
            self.on_change(self.target)

    def on_created(self, event):
        if not event.is_directory and self._matches(event.src_path):
            self.on_change(self.target)

    def on_moved(self, event):
        # editors that save through a rename land the file via dest_path
        if not event.is_directory and self._matches(event.dest_path):
            self.on_change(self.target)


class WatchDaemon:
    """
    Long-running process that pushes tracked files after they change.

    The set of watched files is fixed at startup. All files share one
    debounce timer, and at most one push runs at a time.
    """

    def __init__(
        self,
        engine: SyncEngine,
        pid_file: PidFile,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        *,
        observer_factory: Callable = Observer,
    ):
        """
        Initialize watch daemon.

        Args:
            engine: Reconciler used for pushing.
            pid_file: PID marker owned by this daemon while running.
            debounce_seconds: Quiet period before a push.
            observer_factory: Creates the filesystem observer.
        """
        self.engine = engine
        self.pid_file = pid_file
        self.debouncer = Debouncer(debounce_seconds, self.push_changes)
        self.watched: list[Path] = []
        self._observer_factory = observer_factory
        self._observer = None
        self._watches: list = []
        self._stop_event = threading.Event()

    def start(self) -> None:
        """
        Register watchers and claim the PID marker.

        Raises:
            DaemonAlreadyRunningError: If another daemon is alive.
            NotInitializedError: If no config was saved.
        """
        owner: Optional[int] = self.pid_file.live_pid()
        if owner is not None and owner != os.getpid():
            raise DaemonAlreadyRunningError(owner)

        tracked = self.engine.tracked_paths()

        self._observer = self._observer_factory()
        for entry, path in tracked:
            if not path.is_file():
                logger.warning("%s: %s does not exist, not watching", entry.id, path)
                continue
            handler = TrackedFileHandler(path, self.on_file_changed)
            self._watches.append(self._observer.schedule(handler, str(path.parent), recursive=False))
            self.watched.append(path)
            logger.info("Watching %s", path)

        if not self.watched:
            logger.warning("No tracked files exist on this machine, watching nothing")

        self._observer.start()
        self.pid_file.write(os.getpid())
        logger.info("Watch daemon started, PID %d, %d file(s)", os.getpid(), len(self.watched))

    def on_file_changed(self, path: Path) -> None:
        logger.info("Change detected: %s", path)
        self.debouncer.notify()

    def push_changes(self) -> None:
        """Push once; failures are logged and the daemon keeps running."""
        try:
            result = self.engine.push()
        except (SyncError, GitError, OSError) as e:
            logger.error("Push failed: %s", e)
            return

        if result.pushed:
            logger.info("Changes pushed")
        else:
            logger.info("No changes to push")

    def stop(self) -> None:
        """Ask run_forever() to return."""
        self._stop_event.set()

    def run_forever(self) -> None:
        """
        Block until SIGTERM or SIGINT, then shut down.

        Must be called from the main thread.
        """
        self._setup_signals()
        try:
            while not self._stop_event.is_set():
                self._stop_event.wait(timeout=1)
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        """Stop every watcher, cancel the timer and release the PID marker."""
        logger.info("Watch daemon stopping...")
        self.debouncer.cancel()

        if self._observer is not None:
            self._observer.unschedule_all()
            self._watches.clear()
            self._observer.stop()
            self._observer.join(timeout=10)
            self._observer = None

        if self.pid_file.read() == os.getpid():
            self.pid_file.remove()
        logger.info("Watch daemon stopped.")

    def _setup_signals(self) -> None:
        for sig in (signal.SIGTERM, signal.SIGINT):
            signal.signal(sig, self._handle_signal)

    def _handle_signal(self, signum, frame):
        logger.info("Received signal %s, stopping", signal.Signals(signum).name)
        self._stop_event.set()
