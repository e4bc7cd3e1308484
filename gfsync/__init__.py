"""gfsync - GitHub Files Sync.

Keeps a chosen set of files in sync across machines, using a git
repository as transport and source of truth.
"""

__version__ = "1.0.0"
__author__ = "gfsync contributors"

__all__ = [
    "__version__",
    "SyncEngine",
    "FileStatus",
    "MachineConfig",
    "Manifest",
    "FileEntry",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("SyncEngine", "FileStatus"):
        from gfsync.sync import engine

        return getattr(engine, name)
    if name in ("MachineConfig", "Manifest", "FileEntry"):
        from gfsync.config import schema

        return getattr(schema, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
