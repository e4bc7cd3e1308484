# gfsync Sync Errors
# Exceptions raised by the reconciler


class SyncError(Exception):
    """Base class for sync errors reported to the user."""


class NotInitializedError(SyncError):
    """Raised when no machine configuration has been saved."""

    def __init__(self, message: str = "Not initialized. Run 'gfs init <repo-url>' first."):
        super().__init__(message)


class FileNotTrackedError(SyncError, KeyError):
    """Raised when a file id is not present in the manifest."""

    def __init__(self, file_id: str):
        self.file_id = file_id
        super().__init__(f"File ID not found: {file_id}\nRun 'gfs status' to see available file IDs.")

    def __str__(self) -> str:
        return self.args[0]
