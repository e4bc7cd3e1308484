# gfsync Console Output
# Rich-based console output for user-friendly display

from pathlib import Path
from typing import Optional

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table

from gfsync.autostart import AutostartStatus
from gfsync.sync.engine import (
    AddResult,
    FileStatus,
    InitResult,
    OverrideResult,
    PullOutcome,
    PullResult,
    PushResult,
    StatusReport,
)
from gfsync.watch.lifecycle import WatchStatus


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for sync operations.
    """

    def __init__(self, *, verbose: bool = False, colored: Optional[bool] = None, stderr: bool = False):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Force colored output on or off (autodetect if not provided).
            stderr: Write to stderr instead of stdout.
        """
        self.verbose = verbose
        if colored is None:
            self._console = RichConsole(stderr=stderr)
        else:
            self._console = RichConsole(force_terminal=colored, no_color=not colored, stderr=stderr)

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {message}", highlight=False)

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {message}", highlight=False)

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{message}[/green]", highlight=False)

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{message}[/blue]", highlight=False)

    def print_init_result(self, result: InitResult) -> None:
        if result.cloned:
            self.print_success(f"Cloned {result.repository} into {result.repo_dir}")
        else:
            self.print_info(f"Using existing repository at {result.repo_dir}")

        self._console.print(
            Panel(
                f"Repository: {result.repository}\n" f"Base directory: {result.base_dir}",
                title="gfsync initialized",
                border_style="green",
            )
        )

    def print_add_result(self, result: AddResult) -> None:
        if result.already_tracked:
            self.print_warning(f"{result.source_path} is already tracked as {result.file_id}")
            return

        self.print_success(f"Added {result.source_path}")
        self._console.print(f"  ID:   {result.file_id}", highlight=False)
        self._console.print(f"  Path: {result.relative_path}", highlight=False)
        self._console.print("[dim]Run 'gfs push' to upload.[/dim]")

    def print_override_result(self, result: OverrideResult) -> None:
        self.print_success(f"Overrode path for {result.file_id} on this machine")
        self._console.print(f"  Previous: {result.previous_path}", highlight=False)
        self._console.print(f"  New:      {result.new_path}", highlight=False)

    def print_push_result(self, result: PushResult) -> None:
        if self.verbose:
            for file_id in result.collected:
                self._console.print(f"    [yellow]↑[/yellow] {file_id}")

        if not result.changes.strip():
            self.print_info("No changes to push")
            return

        if self.verbose:
            self._console.print(result.changes.rstrip(), highlight=False)

        if result.pushed:
            self.print_success("Pushed changes")
        else:
            self.print_info("Nothing to commit")

    def print_pull_result(self, result: PullResult) -> None:
        """
        Print per-file pull outcomes and a summary.

        Args:
            result: Pull result to display.
        """
        for item in result.items:
            if item.outcome == PullOutcome.SYNCED:
                self._console.print(f"  [cyan]↓[/cyan] {item.file_id} → {item.target_path}", highlight=False)
            elif item.outcome == PullOutcome.UP_TO_DATE:
                if self.verbose:
                    self._console.print(f"  [green]✓[/green] [dim]{item.file_id} (up to date)[/dim]")
            elif item.outcome == PullOutcome.MISSING_IN_REPO:
                self.print_warning(f"{item.file_id}: {item.message}")
            else:
                self._console.print(f"  [red]✗[/red] {item.file_id}: {item.message}", highlight=False)

        failures = len(result.failures)
        self._console.print(
            Panel(
                f"Synced: {result.synced_count}\n" f"Skipped: {result.skipped_count}",
                title="Pull",
                border_style="yellow" if failures else "green",
            )
        )

    def print_status(self, report: StatusReport) -> None:
        """
        Print machine config, repository state and tracked files.

        Args:
            report: Status report to display.
        """
        config = report.config
        self._console.print(
            Panel(
                f"Repository: {config.repository}\n" f"Base directory: {config.base_dir}",
                title="gfsync",
                border_style="blue",
            )
        )

        if report.git_error:
            self.print_warning(f"Could not read repository status: {report.git_error}")
        elif report.git_status and report.git_status.strip():
            self._console.print("[bold]Uncommitted changes:[/bold]")
            self._console.print(report.git_status.rstrip(), highlight=False)
        else:
            self._console.print("[dim]Repository clean[/dim]")

        if not report.entries:
            self._console.print("[dim]No files tracked. Run 'gfs add <path>' to start.[/dim]")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("ID")
        table.add_column("Path")
        table.add_column("Status")

        for entry in report.entries:
            path = str(entry.target_path)
            if entry.overridden:
                path += " [dim](override)[/dim]"
            table.add_row(entry.entry.id, path, self._format_status(entry.status))

        self._console.print(table)

    def _format_status(self, status: FileStatus) -> str:
        """Get colored label for a file status."""
        colors = {
            FileStatus.SYNCED: "green",
            FileStatus.MODIFIED: "yellow",
            FileStatus.LOCAL_MISSING: "red",
            FileStatus.NOT_IN_REPOSITORY: "red",
        }
        return f"[{colors.get(status, 'white')}]{status.value}[/{colors.get(status, 'white')}]"

    def print_monitored_files(self, paths: list[Path]) -> None:
        """
        Print the effective local paths the daemon watches.

        Paths missing on this machine are marked; the daemon skips them.
        """
        self._console.print(f"Watching {len(paths)} file(s)")
        if not paths:
            return
        self._console.print("[bold]Monitored files:[/bold]")
        for path in paths:
            suffix = "" if path.is_file() else " [dim](missing)[/dim]"
            self._console.print(f"  {path}{suffix}", highlight=False)

    def print_watch_status(
        self,
        status: WatchStatus,
        log_path: Optional[str] = None,
        paths: Optional[list[Path]] = None,
    ) -> None:
        if status.running:
            self.print_success(f"Watch daemon is running (PID: {status.pid})")
            if paths is not None:
                self.print_monitored_files(paths)
        else:
            self.print_info("Watch daemon is not running")
            if status.stale_cleaned:
                self._console.print("[dim]Removed stale PID file[/dim]")

        if log_path:
            self._console.print(f"[dim]Log: {log_path}[/dim]")

    def print_autostart_status(self, status: AutostartStatus) -> None:
        enabled = "[green]enabled[/green]" if status.enabled else "[dim]disabled[/dim]"
        running = "[green]running[/green]" if status.running else "[dim]not running[/dim]"
        self._console.print(f"Autostart: {enabled}")
        self._console.print(f"Service:   {running}")
        if status.descriptor_path is not None:
            self._console.print(f"[dim]{status.descriptor_path}[/dim]")


def create_console(*, verbose: bool = False, colored: Optional[bool] = None) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Force colored output on or off.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
