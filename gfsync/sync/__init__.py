# gfsync Sync Module
# Manifest persistence and the reconciler

from gfsync.sync.engine import (
    AddResult,
    FileStatus,
    InitResult,
    OverrideResult,
    PullItem,
    PullOutcome,
    PullResult,
    PushResult,
    StatusEntry,
    StatusReport,
    SyncEngine,
    classify,
)
from gfsync.sync.errors import FileNotTrackedError, NotInitializedError, SyncError
from gfsync.sync.manifest import MANIFEST_FILE_NAME, ManifestStore

__all__ = [
    # Errors
    "SyncError",
    "NotInitializedError",
    "FileNotTrackedError",
    # Manifest
    "MANIFEST_FILE_NAME",
    "ManifestStore",
    # Engine
    "SyncEngine",
    "FileStatus",
    "classify",
    "InitResult",
    "AddResult",
    "OverrideResult",
    "PushResult",
    "PullOutcome",
    "PullItem",
    "PullResult",
    "StatusEntry",
    "StatusReport",
]
