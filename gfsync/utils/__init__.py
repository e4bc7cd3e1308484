# gfsync Utilities Module
# Helper functions for path handling, file identity and content hashing

from gfsync.utils.hashing import content_hash, file_hash
from gfsync.utils.paths import (
    atomic_write,
    copy_file,
    ensure_dir,
    expand_base_dir,
    expand_user_path,
    file_id,
    to_absolute,
    to_relative,
)
from gfsync.utils.platform import get_current_platform

__all__ = [
    # Platform
    "get_current_platform",
    # Paths
    "expand_user_path",
    "expand_base_dir",
    "file_id",
    "to_relative",
    "to_absolute",
    "ensure_dir",
    "copy_file",
    "atomic_write",
    # Hashing
    "content_hash",
    "file_hash",
]
