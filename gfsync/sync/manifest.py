# gfsync Manifest Store
# Persistence of the manifest inside the sync repository

from pathlib import Path

from gfsync.config.schema import Manifest
from gfsync.utils.paths import atomic_write

MANIFEST_FILE_NAME = ".sync-manifest.json"


class ManifestStore:
    """
    Loads and saves the manifest of tracked files.

    The manifest lives at the root of the repository working copy and is
    transported with the stored content.
    """

    def __init__(self, repo_dir: Path):
        """
        Initialize manifest store.

        Args:
            repo_dir: Repository working copy.
        """
        self.repo_dir = repo_dir
        self.manifest_path = repo_dir / MANIFEST_FILE_NAME

    def load(self) -> Manifest:
        """
        Load manifest from file.

        Returns:
            Manifest; empty when the file does not exist yet.

        Raises:
            ValidationError: If the file content is not a valid manifest.
        """
        try:
            data = self.manifest_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return Manifest()
        return Manifest.model_validate_json(data)

    def save(self, manifest: Manifest) -> None:
        """Overwrite the manifest file with the given document."""
        atomic_write(self.manifest_path, manifest.model_dump_json(by_alias=True, indent=2) + "\n")
