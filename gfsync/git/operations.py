# gfsync Git Operations
# Git command execution against the sync repository working copy

import subprocess
from datetime import datetime
from pathlib import Path
from typing import Optional

DEFAULT_COMMIT_PREFIX = "sync files"
NOTHING_TO_COMMIT = "nothing to commit"


class GitError(Exception):
    """Exception raised for git operation errors."""

    def __init__(self, message: str, returncode: int = 1, stderr: str = "", stdout: str = ""):
        self.message = message
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout
        super().__init__(message)

    @property
    def output(self) -> str:
        """Combined command output, stderr first."""
        return "\n".join(part for part in (self.stderr, self.stdout) if part)


def _run_git(
    *args: str,
    cwd: Optional[Path] = None,
    check: bool = True,
    capture_output: bool = True,
) -> subprocess.CompletedProcess[str]:
    """
    Run a git command.

    Args:
        *args: Git command arguments.
        cwd: Working directory.
        check: Whether to raise on non-zero exit.
        capture_output: Whether to capture stdout/stderr.

    Returns:
        CompletedProcess with result.

    Raises:
        GitError: If command fails and check is True.
    """
    cmd = ["git", *args]
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            capture_output=capture_output,
            text=True,
        )
        if check and result.returncode != 0:
            raise GitError(
                f"Git command failed: {' '.join(cmd)}",
                returncode=result.returncode,
                stderr=result.stderr.strip() if result.stderr else "",
                stdout=result.stdout.strip() if result.stdout else "",
            )
        return result
    except FileNotFoundError:
        raise GitError("git command not found. Is git installed?")


def is_git_repo(path: Path) -> bool:
    """
    Check if path is a git working copy.

    Args:
        path: Directory to check.

    Returns:
        True if git recognizes the directory as a repository.
    """
    if not Path(path).is_dir():
        return False
    try:
        _run_git("rev-parse", "--git-dir", cwd=path)
        return True
    except GitError:
        return False


def git_status(path: Path) -> str:
    """
    Get short-form status output.

    Args:
        path: Repository path.

    Returns:
        Status output; empty when the working tree is clean.
    """
    result = _run_git("status", "--short", cwd=path)
    return result.stdout


def clone_repo(url: str, dest: Path) -> None:
    """
    Clone a repository.

    Args:
        url: Repository URL.
        dest: Destination directory.
    """
    _run_git("clone", url, str(dest))


def pull(path: Path) -> None:
    """
    Pull changes from the remote.

    Args:
        path: Repository path.
    """
    _run_git("pull", cwd=path)


def stage_all(path: Path) -> None:
    """Stage all changes, including untracked files."""
    _run_git("add", "-A", cwd=path)


def commit(message: str, path: Path) -> bool:
    """
    Create a commit.

    Args:
        message: Commit message.
        path: Repository path.

    Returns:
        True if a commit was created, False if there was nothing to commit.

    Raises:
        GitError: For any failure other than an empty commit.
    """
    try:
        _run_git("commit", "-m", message, cwd=path)
    except GitError as e:
        if NOTHING_TO_COMMIT in e.output:
            return False
        raise
    return True


def push(
    path: Path,
    *,
    remote: str = "origin",
    branch: str = "HEAD",
    set_upstream: bool = True,
) -> None:
    """
    Push commits to remote.

    Args:
        path: Repository path.
        remote: Remote name.
        branch: Ref to push (current branch by default).
        set_upstream: Set upstream tracking, needed after cloning an empty repository.
    """
    args = ["push"]

    if set_upstream:
        args.append("-u")

    args.extend([remote, branch])

    _run_git(*args, cwd=path)


def commit_message(prefix: str = DEFAULT_COMMIT_PREFIX, now: Optional[datetime] = None) -> str:
    """Build a commit message: prefix plus local timestamp."""
    timestamp = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    return f"{prefix} - {timestamp}"


def push_all(path: Path, message_prefix: str = DEFAULT_COMMIT_PREFIX) -> bool:
    """
    Stage everything, commit and push.

    Args:
        path: Repository path.
        message_prefix: Commit message prefix; a timestamp is appended.

    Returns:
        True if a commit was pushed, False if there was nothing to commit.
    """
    stage_all(path)
    if not commit(commit_message(message_prefix), path):
        return False
    push(path)
    return True
