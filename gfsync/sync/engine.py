# gfsync Sync Engine
# Reconciles tracked local files with the sync repository

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

from gfsync.config.loader import ConfigStore, get_files_dir, get_repo_dir
from gfsync.config.schema import FileEntry, MachineConfig, Manifest
from gfsync.git import operations as git
from gfsync.git.operations import DEFAULT_COMMIT_PREFIX, GitError
from gfsync.sync.errors import FileNotTrackedError, NotInitializedError, SyncError
from gfsync.sync.manifest import ManifestStore
from gfsync.utils.hashing import file_hash
from gfsync.utils.paths import copy_file, ensure_dir, expand_user_path, file_id, to_absolute, to_relative

logger = logging.getLogger("gfsync.sync")


class FileStatus(str, Enum):
    """Sync state of a tracked file on this machine."""

    LOCAL_MISSING = "Local file not found"
    SYNCED = "Synced"
    MODIFIED = "Modified (not pushed)"
    NOT_IN_REPOSITORY = "Not in repository"


class PullOutcome(str, Enum):
    """What pull did with a single file."""

    SYNCED = "synced"
    UP_TO_DATE = "up_to_date"
    MISSING_IN_REPO = "missing_in_repo"
    FAILED = "failed"


def classify(local_hash: Optional[str], store_hash: Optional[str]) -> FileStatus:
    """
    Classify a tracked file from content hashes alone.

    Args:
        local_hash: Hash of the local file, None if it does not exist.
        store_hash: Hash of the stored copy, None if it does not exist.

    Returns:
        Exactly one FileStatus.
    """
    if local_hash is None:
        return FileStatus.LOCAL_MISSING
    if store_hash is None:
        return FileStatus.NOT_IN_REPOSITORY
    if local_hash == store_hash:
        return FileStatus.SYNCED
    return FileStatus.MODIFIED


def _wrap_git_error(context: str, error: GitError) -> GitError:
    """Re-label a backend failure with what we were trying to do."""
    detail = error.output or error.message
    return GitError(f"{context}: {detail}", returncode=error.returncode, stderr=error.stderr, stdout=error.stdout)


@dataclass
class InitResult:
    """Result of initializing this machine."""

    repository: str
    base_dir: str
    repo_dir: Path
    cloned: bool = False


@dataclass
class AddResult:
    """Result of adding a file."""

    file_id: str
    source_path: Path
    relative_path: str
    stored_path: Path
    already_tracked: bool = False


@dataclass
class OverrideResult:
    """Result of overriding a file path on this machine."""

    file_id: str
    previous_path: Path
    new_path: Path
    relative_path: str


@dataclass
class PushResult:
    """Result of a push."""

    pushed: bool
    changes: str = ""
    collected: list[str] = field(default_factory=list)


@dataclass
class PullItem:
    """Outcome of pulling a single file."""

    file_id: str
    target_path: Path
    outcome: PullOutcome
    message: str = ""


@dataclass
class PullResult:
    """Result of a pull."""

    items: list[PullItem] = field(default_factory=list)

    @property
    def synced_count(self) -> int:
        return sum(1 for item in self.items if item.outcome == PullOutcome.SYNCED)

    @property
    def skipped_count(self) -> int:
        return len(self.items) - self.synced_count

    @property
    def failures(self) -> list[PullItem]:
        return [item for item in self.items if item.outcome == PullOutcome.FAILED]


@dataclass
class StatusEntry:
    """Status of one tracked file."""

    entry: FileEntry
    relative_path: str
    target_path: Path
    overridden: bool
    status: FileStatus


@dataclass
class StatusReport:
    """Result of a status query."""

    config: MachineConfig
    entries: list[StatusEntry] = field(default_factory=list)
    git_status: Optional[str] = None
    git_error: Optional[str] = None


class SyncEngine:
    """
    Reconciler for tracked files.

    Composes the machine config store, the manifest store and the git
    backend. Every operation except init requires a saved configuration.
    """

    def __init__(
        self,
        config_store: Optional[ConfigStore] = None,
        manifest_store: Optional[ManifestStore] = None,
        repo_dir: Optional[Path] = None,
        *,
        commit_prefix: str = DEFAULT_COMMIT_PREFIX,
    ):
        """
        Initialize sync engine.

        Args:
            config_store: Machine config store (default location if not provided).
            manifest_store: Manifest store (inside repo_dir if not provided).
            repo_dir: Repository working copy (default location if not provided).
            commit_prefix: Prefix for commit messages created by push.
        """
        self.repo_dir = repo_dir or get_repo_dir()
        self.config_store = config_store or ConfigStore()
        self.manifest_store = manifest_store or ManifestStore(self.repo_dir)
        self.files_dir = get_files_dir(self.repo_dir)
        self.commit_prefix = commit_prefix

    def require_config(self) -> MachineConfig:
        """Load the machine config or fail with NotInitializedError."""
        config = self.config_store.load()
        if config is None:
            raise NotInitializedError()
        return config

    def load_manifest(self) -> Manifest:
        return self.manifest_store.load()

    def blob_path(self, entry_id: str) -> Path:
        """Location of the stored content for an id."""
        return self.files_dir / entry_id

    def init(self, repository: str, base_dir: str = "~") -> InitResult:
        """
        Initialize this machine: clone the repository and save a fresh config.

        An existing working copy is reused. Re-initializing replaces the
        previous configuration, including path overrides.

        Raises:
            GitError: If cloning fails.
            SyncError: If the repository directory exists but is not a git repository.
        """
        cloned = False
        if self.repo_dir.exists():
            if not git.is_git_repo(self.repo_dir):
                raise SyncError(f"{self.repo_dir} exists but is not a git repository")
            logger.info("Reusing existing repository at %s", self.repo_dir)
        else:
            ensure_dir(self.repo_dir.parent)
            try:
                git.clone_repo(repository, self.repo_dir)
            except GitError as e:
                raise _wrap_git_error("Failed to clone repository", e) from e
            cloned = True

        ensure_dir(self.files_dir)

        config = MachineConfig(repository=repository, base_dir=base_dir or "~")
        self.config_store.save(config)

        return InitResult(repository=repository, base_dir=config.base_dir, repo_dir=self.repo_dir, cloned=cloned)

    def add(self, path: str | Path) -> AddResult:
        """
        Start tracking a file.

        A file this machine already maps is reported as already tracked and
        nothing changes.

        Raises:
            NotInitializedError: If no config was saved.
            FileNotFoundError: If the file does not exist.
        """
        config = self.require_config()

        absolute = expand_user_path(path)
        if not absolute.is_file():
            raise FileNotFoundError(f"File not found: {absolute}")

        entry_id = file_id(absolute)
        relative = to_relative(config, absolute)
        stored = self.blob_path(entry_id)

        if config.has_override(entry_id):
            return AddResult(entry_id, absolute, relative, stored, already_tracked=True)

        copy_file(absolute, stored)
        digest = file_hash(stored)

        manifest = self.load_manifest()
        manifest.upsert(FileEntry(id=entry_id, relative_path=relative, hash=digest))
        self.manifest_store.save(manifest)

        config.local_mappings[entry_id] = relative
        self.config_store.save(config)

        logger.info("Added %s as %s", absolute, entry_id)
        return AddResult(entry_id, absolute, relative, stored)

    def override(self, entry_id: str, new_path: str | Path) -> OverrideResult:
        """
        Map a tracked file to a different path on this machine only.

        Raises:
            NotInitializedError: If no config was saved.
            FileNotTrackedError: If the id is not in the manifest.
        """
        config = self.require_config()
        entry = self.load_manifest().get(entry_id)
        if entry is None:
            raise FileNotTrackedError(entry_id)

        absolute = expand_user_path(new_path)
        relative = to_relative(config, absolute)
        previous = to_absolute(config, config.effective_path(entry))

        config.local_mappings[entry_id] = relative
        self.config_store.save(config)

        return OverrideResult(entry_id, previous, absolute, relative)

    def collect(self, config: MachineConfig) -> list[str]:
        """
        Copy changed local files into the repository.

        Files whose local content hash differs from the stored copy replace
        it and get a refreshed hash and timestamp. Missing local files are
        left alone.

        Returns:
            Ids of the files that were collected.
        """
        manifest = self.load_manifest()
        collected: list[str] = []

        for entry in manifest.files:
            local = to_absolute(config, config.effective_path(entry))
            local_hash = file_hash(local)
            if local_hash is None:
                continue

            stored = self.blob_path(entry.id)
            if local_hash == file_hash(stored):
                continue

            copy_file(local, stored)
            entry.hash = local_hash
            entry.last_modified = datetime.now(timezone.utc)
            collected.append(entry.id)

        if collected:
            self.manifest_store.save(manifest)
            logger.info("Collected %d changed file(s): %s", len(collected), ", ".join(collected))

        return collected

    def push(self) -> PushResult:
        """
        Collect local changes, commit and push them.

        Whether anything needs pushing is decided by the git status of the
        working copy. An empty commit is not an error.

        Raises:
            NotInitializedError: If no config was saved.
            GitError: If a git step fails.
        """
        config = self.require_config()
        collected = self.collect(config)

        try:
            changes = git.git_status(self.repo_dir)
        except GitError as e:
            raise _wrap_git_error("Failed to check repository status", e) from e

        if not changes.strip():
            return PushResult(pushed=False, collected=collected)

        try:
            pushed = git.push_all(self.repo_dir, self.commit_prefix)
        except GitError as e:
            raise _wrap_git_error("Failed to push", e) from e

        return PushResult(pushed=pushed, changes=changes, collected=collected)

    def pull(self) -> PullResult:
        """
        Pull from the remote and materialize tracked files locally.

        Files missing in the repository and local files that cannot be read
        or written are skipped without aborting the rest.

        Raises:
            NotInitializedError: If no config was saved.
            GitError: If the pull itself fails.
        """
        config = self.require_config()

        try:
            git.pull(self.repo_dir)
        except GitError as e:
            raise _wrap_git_error("Failed to pull", e) from e

        manifest = self.load_manifest()
        result = PullResult()
        config_changed = False
        manifest_changed = False

        for entry in manifest.files:
            had_override = config.has_override(entry.id)
            relative = config.effective_path(entry)
            target = to_absolute(config, relative)
            stored = self.blob_path(entry.id)

            stored_hash = file_hash(stored)
            if stored_hash is None:
                logger.warning("%s: file not found in repository, skipping", entry.id)
                result.items.append(
                    PullItem(entry.id, target, PullOutcome.MISSING_IN_REPO, "File not found in repository")
                )
                continue

            try:
                if file_hash(target) == stored_hash:
                    result.items.append(PullItem(entry.id, target, PullOutcome.UP_TO_DATE, "Already up to date"))
                    continue
                copy_file(stored, target)
            except OSError as e:
                logger.warning("%s: failed to update %s: %s", entry.id, target, e)
                result.items.append(PullItem(entry.id, target, PullOutcome.FAILED, f"Failed to update ({e})"))
                continue

            result.items.append(PullItem(entry.id, target, PullOutcome.SYNCED))

            if entry.hash != stored_hash:
                entry.hash = stored_hash
                manifest_changed = True
            if not had_override:
                config.local_mappings[entry.id] = relative
                config_changed = True

        if manifest_changed:
            self.manifest_store.save(manifest)
        if config_changed:
            self.config_store.save(config)

        return result

    def status(self) -> StatusReport:
        """
        Classify every tracked file by comparing local and stored content.

        Raises:
            NotInitializedError: If no config was saved.
        """
        config = self.require_config()
        report = StatusReport(config=config)

        try:
            report.git_status = git.git_status(self.repo_dir)
        except GitError as e:
            report.git_error = e.message

        for entry in self.load_manifest().files:
            relative = config.effective_path(entry)
            target = to_absolute(config, relative)
            report.entries.append(
                StatusEntry(
                    entry=entry,
                    relative_path=relative,
                    target_path=target,
                    overridden=config.has_override(entry.id),
                    status=classify(file_hash(target), file_hash(self.blob_path(entry.id))),
                )
            )

        return report

    def tracked_paths(self) -> list[tuple[FileEntry, Path]]:
        """
        Effective local path of every tracked file on this machine.

        Raises:
            NotInitializedError: If no config was saved.
        """
        config = self.require_config()
        return [
            (entry, to_absolute(config, config.effective_path(entry)))
            for entry in self.load_manifest().files
        ]
