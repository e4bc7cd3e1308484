# gfsync Path Utilities
# File identity, base-directory relative paths and safe file operations

from __future__ import annotations

import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gfsync.config.schema import MachineConfig

HOME_MARKER = "~"
HOME_ID_PREFIX = "home"
ID_SEPARATOR = "_"

_SEPARATORS = re.compile(r"[\\/]+")


def expand_user_path(path: str | Path) -> Path:
    """
    Expand ~ and make a user-supplied path absolute.

    Symlinks are not resolved, so the result keeps the spelling the user
    chose and stays comparable against the configured base directory.

    Args:
        path: Path string or Path object.

    Returns:
        Absolute Path object.
    """
    return Path(os.path.abspath(os.path.expanduser(str(path))))


def file_id(path: str | Path) -> str:
    """
    Derive the tracking id of a file from its absolute path.

    The home directory is mapped to a fixed ``home`` prefix, separators and
    extension dots become ``_`` and leading dots of hidden names are dropped::

        /home/u/.zshrc          -> home_zshrc
        /home/u/.config/fish    -> home_config_fish
        /etc/hosts              -> etc_hosts

    Distinct paths that normalize to the same id are treated as one file.

    Args:
        path: Absolute path (or a path starting with ~).

    Returns:
        File id string.
    """
    path_str = str(path)
    home = str(Path.home())

    if path_str == home or path_str.startswith(home + os.sep):
        path_str = HOME_MARKER + path_str[len(home):]

    path_str = path_str.lstrip("/\\")
    if path_str.startswith(HOME_MARKER):
        path_str = HOME_ID_PREFIX + path_str[len(HOME_MARKER):]

    parts = []
    for part in _SEPARATORS.split(path_str):
        part = part.lstrip(".").replace(".", ID_SEPARATOR)
        if part:
            parts.append(part)

    return ID_SEPARATOR.join(parts)


def expand_base_dir(config: MachineConfig) -> Path:
    """Get the configured base directory with ~ expanded."""
    return expand_user_path(config.base_dir or HOME_MARKER)


def to_relative(config: MachineConfig, absolute_path: str | Path) -> str:
    """
    Strip the configured base directory from a path.

    Paths outside the base directory are returned unchanged, so the
    result may itself be absolute.

    Args:
        config: Machine configuration providing the base directory.
        absolute_path: Path to convert.

    Returns:
        Path relative to the base directory, or the input as a string.
    """
    path_str = str(absolute_path)
    base = str(expand_base_dir(config))
    prefix = base if base.endswith(os.sep) else base + os.sep

    if path_str.startswith(prefix):
        return path_str[len(prefix):]
    return path_str


def to_absolute(config: MachineConfig, relative_path: str) -> Path:
    """
    Join the configured base directory with a relative path.

    An absolute ``relative_path`` is returned as-is.
    """
    return Path(os.path.join(str(expand_base_dir(config)), relative_path))


def ensure_dir(path: Path) -> Path:
    """
    Ensure directory exists, creating if necessary.

    Args:
        path: Directory path.

    Returns:
        The path that was ensured.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def copy_file(source: Path, dest: Path) -> Path:
    """
    Atomically copy a single file, creating parent directories.

    Content bytes are copied exactly; the copy lands under a temporary name
    in the destination directory and is renamed into place.

    Args:
        source: Source file.
        dest: Destination file.

    Returns:
        The destination path.

    Raises:
        FileNotFoundError: If source doesn't exist.
    """
    source, dest = Path(source), Path(dest)
    if not source.is_file():
        raise FileNotFoundError(f"Source does not exist: {source}")

    ensure_dir(dest.parent)

    temp_dest = dest.with_name(f".{dest.name}.tmp.{os.getpid()}")
    try:
        shutil.copy2(source, temp_dest)
        os.replace(temp_dest, dest)
    except OSError:
        if temp_dest.exists():
            temp_dest.unlink()
        raise

    return dest


def atomic_write(path: Path, content: str | bytes, *, encoding: str = "utf-8") -> None:
    """
    Atomically write content to file.

    Uses a temporary file and atomic rename.

    Args:
        path: Target file path.
        content: Content to write (str or bytes).
        encoding: Encoding for string content (default utf-8).
    """
    ensure_dir(path.parent)

    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        if isinstance(content, str):
            with os.fdopen(fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
        os.replace(temp_path, path)
    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise
