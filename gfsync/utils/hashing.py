# gfsync Hashing Utilities
# Content hashing for change detection between machines

import hashlib
from pathlib import Path


def content_hash(content: str | bytes, *, algorithm: str = "sha256") -> str:
    """
    Calculate hash of content.

    Args:
        content: String or bytes content.
        algorithm: Hash algorithm (default sha256).

    Returns:
        Hex digest of hash.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    hasher = hashlib.new(algorithm)
    hasher.update(content)
    return hasher.hexdigest()


def file_hash(path: Path, *, algorithm: str = "sha256", chunk_size: int = 8192) -> str | None:
    """
    Calculate hash of file content.

    Args:
        path: Path to file.
        algorithm: Hash algorithm (default sha256).
        chunk_size: Chunk size for reading large files.

    Returns:
        Hex digest of hash, or None if path is not an existing file.
    """
    path = Path(path)
    if not path.is_file():
        return None

    hasher = hashlib.new(algorithm)

    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)

    return hasher.hexdigest()
