# gfsync Git Module
# Git backend used as transport for the sync repository

from gfsync.git.operations import (
    GitError,
    clone_repo,
    commit,
    commit_message,
    git_status,
    is_git_repo,
    pull,
    push,
    push_all,
    stage_all,
)

__all__ = [
    "GitError",
    "is_git_repo",
    "git_status",
    "clone_repo",
    "pull",
    "stage_all",
    "commit",
    "commit_message",
    "push",
    "push_all",
]
