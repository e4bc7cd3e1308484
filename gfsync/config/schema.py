# gfsync Data Model
# Pydantic models for the transported manifest and the machine-local config

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FileEntry(BaseModel):
    """A tracked file as recorded in the manifest."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Deterministic id derived from the source path")
    relative_path: str = Field(alias="relativePath", description="Default path relative to the base directory")
    last_modified: datetime = Field(default_factory=_utcnow, alias="lastModified")
    hash: Optional[str] = Field(default=None, description="SHA-256 of the stored content")


class Manifest(BaseModel):
    """Record of every tracked file, synced through the repository."""

    files: list[FileEntry] = Field(default_factory=list)

    def get(self, file_id: str) -> Optional[FileEntry]:
        """Get the entry for an id."""
        for entry in self.files:
            if entry.id == file_id:
                return entry
        return None

    def upsert(self, entry: FileEntry) -> None:
        """Replace any entry with the same id, then append."""
        self.files = [f for f in self.files if f.id != entry.id]
        self.files.append(entry)

    @property
    def ids(self) -> list[str]:
        return [f.id for f in self.files]


class MachineConfig(BaseModel):
    """Settings of this machine. Never transported."""

    model_config = ConfigDict(populate_by_name=True)

    repository: str = Field(description="Remote repository URL")
    base_dir: str = Field(default="~", alias="baseDir", description="Base directory for relative paths")
    local_mappings: dict[str, str] = Field(
        default_factory=dict,
        alias="localMappings",
        description="Machine-specific path overrides: file id -> relative path",
    )

    @field_validator("base_dir")
    @classmethod
    def default_base_dir(cls, v: str) -> str:
        """Fall back to ~ for an empty base directory."""
        return v or "~"

    def has_override(self, file_id: str) -> bool:
        """Check if this machine maps the id to its own path."""
        return bool(self.local_mappings.get(file_id))

    def effective_path(self, entry: FileEntry) -> str:
        """Relative path of an entry on this machine: override, else manifest default."""
        if self.has_override(entry.id):
            return self.local_mappings[entry.id]
        return entry.relative_path
