# gfsync PID Marker
# Identifies the detached watch daemon between CLI invocations

import os
from pathlib import Path
from typing import Optional

from gfsync.utils.paths import ensure_dir


class PidFile:
    """
    PID marker file of the watch daemon.

    The marker holds a single decimal pid. Whether that process still exists
    is checked with a signal-0 probe, so a marker left behind by a crashed
    daemon is detected as stale.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Optional[int]:
        """
        Read the recorded pid.

        Returns:
            The pid, or None if the marker is missing or unreadable.
        """
        try:
            return int(self.path.read_text(encoding="utf-8").strip())
        except FileNotFoundError:
            return None
        except ValueError:
            return None

    def write(self, pid: Optional[int] = None) -> int:
        """Record a pid (the current process by default)."""
        pid = os.getpid() if pid is None else pid
        ensure_dir(self.path.parent)
        self.path.write_text(str(pid), encoding="utf-8")
        return pid

    def remove(self) -> None:
        self.path.unlink(missing_ok=True)

    @staticmethod
    def is_alive(pid: int) -> bool:
        """
        Probe whether a process exists.

        A process owned by another user still counts as alive.
        """
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            return True
        return True

    def live_pid(self) -> Optional[int]:
        """
        Pid of a running daemon, if any.

        A stale marker is removed as a side effect.
        """
        pid = self.read()
        if pid is None:
            if self.exists():
                self.remove()
            return None

        if not self.is_alive(pid):
            self.remove()
            return None

        return pid
