"""Click-based CLI for gfsync - git-backed file sync across machines."""

from __future__ import annotations

import sys
from typing import Optional

import click
from rich.prompt import Confirm, Prompt

from gfsync import __version__
from gfsync.autostart import autostart_status, disable_autostart, enable_autostart
from gfsync.config.loader import ConfigStore, get_log_path, get_pid_path
from gfsync.git.operations import GitError
from gfsync.output.console import create_console
from gfsync.sync.engine import SyncEngine
from gfsync.sync.errors import SyncError
from gfsync.watch.daemon import WatchDaemon, configure_logging
from gfsync.watch.lifecycle import StartOutcome, StopOutcome, start_watch, stop_watch, watch_status
from gfsync.watch.pidfile import PidFile

console = create_console()


def _fail(error: Exception) -> None:
    """Print an error and exit with status 1."""
    message = str(error)
    if isinstance(error, GitError) and error.stderr and error.stderr.strip() not in message:
        message = f"{message}\n{error.stderr.strip()}"
    console.print_error(message)
    sys.exit(1)


def _engine() -> SyncEngine:
    return SyncEngine()


def _pid_file() -> PidFile:
    return PidFile(get_pid_path())


@click.group()
@click.version_option(version=__version__, prog_name="gfs")
def cli() -> None:
    """gfsync - keep individual files in sync across machines through a git repository.

    \b
    Workflow:
      gfs init <repo-url>   clone the sync repository on this machine
      gfs add <path>        start tracking a file
      gfs push              publish local changes
      gfs pull              receive changes from other machines
    """
    pass


@cli.command()
@click.argument("repository", required=False)
@click.option("--base-dir", "-b", default=None, help="Base directory for relative paths (default: ~)")
@click.option("--yes", "-y", is_flag=True, help="Do not ask before reinitializing")
def init(repository: Optional[str], base_dir: Optional[str], yes: bool) -> None:
    """Initialize this machine with a sync repository.

    Clones REPOSITORY into the local state directory and saves the machine
    configuration. Prompts for anything not given on the command line.
    """
    store = ConfigStore()
    if store.exists() and not yes:
        if not Confirm.ask("This machine is already initialized. Reinitialize?", default=False):
            console.print_info("Aborted.")
            return

    if not repository:
        repository = Prompt.ask("Repository URL")
    if base_dir is None:
        base_dir = "~" if yes else Prompt.ask("Base directory", default="~")

    try:
        result = SyncEngine(config_store=store).init(repository, base_dir)
    except (SyncError, GitError) as e:
        _fail(e)
        return

    console.print_init_result(result)


@cli.command()
@click.argument("path")
def add(path: str) -> None:
    """Start tracking the file at PATH."""
    try:
        result = _engine().add(path)
    except (SyncError, GitError, FileNotFoundError) as e:
        _fail(e)
        return

    console.print_add_result(result)


@cli.command()
@click.option("--verbose", "-v", is_flag=True, help="Show collected files and git changes")
def push(verbose: bool) -> None:
    """Commit and push changes of tracked files."""
    console.verbose = verbose
    try:
        result = _engine().push()
    except (SyncError, GitError, FileNotFoundError) as e:
        _fail(e)
        return

    console.print_push_result(result)


@cli.command()
@click.option("--verbose", "-v", is_flag=True, help="Also list files that were already up to date")
def pull(verbose: bool) -> None:
    """Pull changes and update tracked files on this machine."""
    console.verbose = verbose
    try:
        result = _engine().pull()
    except (SyncError, GitError, FileNotFoundError) as e:
        _fail(e)
        return

    console.print_pull_result(result)


@cli.command()
def status() -> None:
    """Show the sync state of every tracked file."""
    try:
        report = _engine().status()
    except (SyncError, GitError, FileNotFoundError) as e:
        _fail(e)
        return

    console.print_status(report)


@cli.command()
@click.argument("file_id")
@click.argument("path")
def override(file_id: str, path: str) -> None:
    """Use PATH for FILE_ID on this machine only."""
    try:
        result = _engine().override(file_id, path)
    except (SyncError, GitError, FileNotFoundError) as e:
        _fail(e)
        return

    console.print_override_result(result)


# ============================================================================
# Watch Daemon Commands
# ============================================================================


@cli.group()
def watch() -> None:
    """Push tracked files automatically when they change."""
    pass


@watch.command("start")
def watch_start() -> None:
    """Start the watch daemon in the background."""
    try:
        result = start_watch(_engine(), _pid_file())
    except (SyncError, GitError, FileNotFoundError) as e:
        _fail(e)
        return

    if result.outcome == StartOutcome.ALREADY_RUNNING:
        console.print_warning(f"Watch daemon is already running (PID: {result.pid})")
    elif result.outcome == StartOutcome.NOTHING_TO_WATCH:
        console.print_warning("No files tracked. Run 'gfs add <path>' first.")
    else:
        console.print_success(f"Watch daemon started (PID: {result.pid})")
        console.print_monitored_files(result.tracked)
        console.print(f"[dim]Log: {get_log_path()}[/dim]")


@watch.command("stop")
def watch_stop() -> None:
    """Stop the watch daemon."""
    result = stop_watch(_pid_file())

    if result.outcome == StopOutcome.NOT_RUNNING:
        console.print_info("Watch daemon is not running")
    elif result.outcome == StopOutcome.STALE:
        console.print_info("Watch daemon was not running (removed stale PID file)")
    else:
        console.print_success(f"Watch daemon stopped (PID: {result.pid})")


@watch.command("status")
def watch_status_cmd() -> None:
    """Show whether the watch daemon is running and which files it watches."""
    status = watch_status(_pid_file())

    paths = None
    if status.running:
        try:
            paths = [path for _, path in _engine().tracked_paths()]
        except SyncError as e:
            console.print_warning(str(e))

    console.print_watch_status(status, log_path=str(get_log_path()), paths=paths)


@watch.command("run")
def watch_run() -> None:
    """Run the watch daemon in the foreground."""
    configure_logging(get_log_path(), foreground=sys.stderr.isatty())

    daemon = WatchDaemon(_engine(), _pid_file())
    try:
        daemon.start()
    except (SyncError, GitError, FileNotFoundError) as e:
        _fail(e)
        return

    daemon.run_forever()


@watch.group("autostart")
def watch_autostart() -> None:
    """Start the watch daemon at login."""
    pass


@watch_autostart.command("enable")
def autostart_enable() -> None:
    """Register the watch daemon with the service manager."""
    try:
        target = enable_autostart()
    except SyncError as e:
        _fail(e)
        return

    console.print_success(f"Autostart enabled: {target}")


@watch_autostart.command("disable")
def autostart_disable() -> None:
    """Unregister the watch daemon from the service manager."""
    try:
        removed = disable_autostart()
    except SyncError as e:
        _fail(e)
        return

    if removed:
        console.print_success("Autostart disabled")
    else:
        console.print_info("Autostart is not enabled")


@watch_autostart.command("status")
def autostart_status_cmd() -> None:
    """Show autostart registration."""
    try:
        status = autostart_status()
    except SyncError as e:
        _fail(e)
        return

    console.print_autostart_status(status)


if __name__ == "__main__":
    cli()
