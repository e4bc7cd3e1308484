# gfsync Autostart
# Registers the watch daemon with the OS service manager

from __future__ import annotations

import logging
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from string import Template
from typing import Callable, Optional

from gfsync.config.loader import get_config_dir, get_log_path
from gfsync.sync.errors import SyncError
from gfsync.utils.paths import atomic_write
from gfsync.utils.platform import get_current_platform

logger = logging.getLogger("gfsync.autostart")

SYSTEMD_UNIT_NAME = "gfsync-watch.service"
LAUNCHD_LABEL = "com.gfsync.watch"
LAUNCHD_PLIST_NAME = f"{LAUNCHD_LABEL}.plist"

TEMPLATES_DIR = Path(__file__).parent / "templates"


class AutostartError(SyncError):
    """Raised when the service manager rejects a command."""


class UnsupportedPlatformError(AutostartError):
    """Raised when no autostart backend exists for the platform."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"Autostart is not supported on platform: {platform}")


@dataclass
class AutostartStatus:
    """
    Registration state of the daemon.

    Attributes:
        enabled: Whether the daemon starts at login.
        running: Whether the service manager reports it as running.
        descriptor_path: Where the service descriptor lives.
    """

    enabled: bool = False
    running: bool = False
    descriptor_path: Optional[Path] = None


@dataclass(frozen=True)
class AutostartBackend:
    """One service manager: where its descriptor goes and how to drive it."""

    name: str
    descriptor_file_name: str
    target_dir: Callable[[], Path]
    activate: Callable[[Path], None]
    deactivate: Callable[[Path], None]
    query: Callable[[Path], AutostartStatus]

    def target_path(self) -> Path:
        return self.target_dir() / self.descriptor_file_name


def _run(cmd: list[str]) -> subprocess.CompletedProcess:
    """
    Run a service manager command and capture output.

    Raises:
        AutostartError: If the command is not installed.
    """
    try:
        return subprocess.run(cmd, capture_output=True, text=True, timeout=30)
    except FileNotFoundError as e:
        raise AutostartError(f"{cmd[0]} not found. Is it installed?") from e


def _check(result: subprocess.CompletedProcess, cmd: list[str]) -> None:
    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip()
        raise AutostartError(f"'{' '.join(cmd)}' failed: {detail}" if detail else f"'{' '.join(cmd)}' failed")


def _run_checked(*cmd: str) -> subprocess.CompletedProcess:
    result = _run(list(cmd))
    _check(result, list(cmd))
    return result


# systemd (linux)


def _systemd_dir() -> Path:
    return Path.home() / ".config" / "systemd" / "user"


def _systemd_activate(descriptor: Path) -> None:
    _run_checked("systemctl", "--user", "daemon-reload")
    _run_checked("systemctl", "--user", "enable", "--now", SYSTEMD_UNIT_NAME)


def _systemd_deactivate(descriptor: Path) -> None:
    _run_checked("systemctl", "--user", "disable", "--now", SYSTEMD_UNIT_NAME)
    descriptor.unlink(missing_ok=True)
    _run_checked("systemctl", "--user", "daemon-reload")


def _systemd_query(descriptor: Path) -> AutostartStatus:
    status = AutostartStatus(descriptor_path=descriptor)
    if not descriptor.exists():
        return status

    r = _run(["systemctl", "--user", "is-enabled", SYSTEMD_UNIT_NAME])
    status.enabled = r.stdout.strip() == "enabled"

    r = _run(["systemctl", "--user", "is-active", SYSTEMD_UNIT_NAME])
    status.running = r.stdout.strip() == "active"

    return status


# launchd (macos)


def _launchd_dir() -> Path:
    return Path.home() / "Library" / "LaunchAgents"


def _launchd_activate(descriptor: Path) -> None:
    _run_checked("launchctl", "load", "-w", str(descriptor))


def _launchd_deactivate(descriptor: Path) -> None:
    _run_checked("launchctl", "unload", "-w", str(descriptor))
    descriptor.unlink(missing_ok=True)


def _launchd_query(descriptor: Path) -> AutostartStatus:
    status = AutostartStatus(descriptor_path=descriptor)
    status.enabled = descriptor.exists()
    if status.enabled:
        status.running = _run(["launchctl", "list", LAUNCHD_LABEL]).returncode == 0
    return status


BACKENDS: dict[str, AutostartBackend] = {
    "linux": AutostartBackend(
        name="systemd",
        descriptor_file_name=SYSTEMD_UNIT_NAME,
        target_dir=_systemd_dir,
        activate=_systemd_activate,
        deactivate=_systemd_deactivate,
        query=_systemd_query,
    ),
    "macos": AutostartBackend(
        name="launchd",
        descriptor_file_name=LAUNCHD_PLIST_NAME,
        target_dir=_launchd_dir,
        activate=_launchd_activate,
        deactivate=_launchd_deactivate,
        query=_launchd_query,
    ),
}


def get_backend(platform: Optional[str] = None) -> AutostartBackend:
    """
    Look up the autostart backend for a platform.

    Args:
        platform: Platform identifier (current platform if not provided).

    Raises:
        UnsupportedPlatformError: If the platform has no backend.
    """
    platform = platform or get_current_platform()
    backend = BACKENDS.get(platform)
    if backend is None:
        raise UnsupportedPlatformError(platform)
    return backend


def render_descriptor(backend: AutostartBackend) -> str:
    """Fill the backend's descriptor template for this installation."""
    template = Template((TEMPLATES_DIR / backend.descriptor_file_name).read_text(encoding="utf-8"))
    return template.substitute(
        python=sys.executable,
        config_dir=str(get_config_dir()),
        log_path=str(get_log_path()),
        label=LAUNCHD_LABEL,
    )


def enable_autostart(platform: Optional[str] = None) -> Path:
    """
    Install the service descriptor and register it with the service manager.

    Returns:
        Path of the installed descriptor.
    """
    backend = get_backend(platform)
    target = backend.target_path()

    atomic_write(target, render_descriptor(backend))
    backend.activate(target)

    logger.info("Enabled %s autostart: %s", backend.name, target)
    return target


def disable_autostart(platform: Optional[str] = None) -> bool:
    """
    Unregister the daemon and delete its descriptor.

    Returns:
        False if autostart was not enabled.
    """
    backend = get_backend(platform)
    target = backend.target_path()
    if not target.exists():
        return False

    backend.deactivate(target)

    logger.info("Disabled %s autostart", backend.name)
    return True


def autostart_status(platform: Optional[str] = None) -> AutostartStatus:
    backend = get_backend(platform)
    return backend.query(backend.target_path())
