# Tests for gfsync.config
# Data model, state locations and the machine config store

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from gfsync.config.loader import (
    ConfigStore,
    get_config_dir,
    get_config_path,
    get_files_dir,
    get_log_path,
    get_pid_path,
    get_repo_dir,
)
from gfsync.config.schema import FileEntry, MachineConfig, Manifest


class TestStateLocations:
    """Tests for fixed state locations."""

    def test_default_under_home(self, temp_home, monkeypatch):
        monkeypatch.delenv("GFS_CONFIG_DIR", raising=False)
        assert get_config_dir() == temp_home / ".sync-config"

    def test_env_override(self, temp_dir, monkeypatch):
        monkeypatch.setenv("GFS_CONFIG_DIR", str(temp_dir / "state"))
        assert get_config_dir() == temp_dir / "state"

    def test_layout(self, config_dir):
        assert get_config_path() == config_dir / "config.json"
        assert get_repo_dir() == config_dir / "repo"
        assert get_files_dir() == config_dir / "repo" / "files"
        assert get_pid_path() == config_dir / "watch.pid"
        assert get_log_path() == config_dir / "watch.log"

    def test_files_dir_of_other_repo(self, temp_dir):
        assert get_files_dir(temp_dir / "r") == temp_dir / "r" / "files"


class TestFileEntry:
    """Tests for FileEntry."""

    def test_aliases_on_dump(self):
        entry = FileEntry(id="home_zshrc", relative_path=".zshrc", hash="abc")
        data = json.loads(entry.model_dump_json(by_alias=True))
        assert data["relativePath"] == ".zshrc"
        assert "lastModified" in data
        assert data["hash"] == "abc"

    def test_parse_from_alias(self):
        entry = FileEntry.model_validate(
            {"id": "etc_hosts", "relativePath": "/etc/hosts", "lastModified": "2024-01-02T03:04:05Z"}
        )
        assert entry.relative_path == "/etc/hosts"
        assert entry.last_modified == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert entry.hash is None

    def test_requires_id(self):
        with pytest.raises(ValidationError):
            FileEntry.model_validate({"relativePath": ".zshrc"})


class TestManifest:
    """Tests for Manifest."""

    def test_get(self):
        manifest = Manifest(files=[FileEntry(id="a", relative_path="a")])
        assert manifest.get("a").relative_path == "a"
        assert manifest.get("b") is None

    def test_upsert_replaces_by_id(self):
        manifest = Manifest(files=[FileEntry(id="a", relative_path="old"), FileEntry(id="b", relative_path="b")])
        manifest.upsert(FileEntry(id="a", relative_path="new"))
        assert manifest.ids == ["b", "a"]
        assert manifest.get("a").relative_path == "new"

    def test_ids_unique_after_repeated_upsert(self):
        manifest = Manifest()
        for _ in range(3):
            manifest.upsert(FileEntry(id="a", relative_path="a"))
        assert manifest.ids == ["a"]


class TestMachineConfig:
    """Tests for MachineConfig."""

    def test_defaults(self):
        config = MachineConfig(repository="git@example.com:me/dotfiles.git")
        assert config.base_dir == "~"
        assert config.local_mappings == {}

    def test_aliases(self):
        config = MachineConfig.model_validate(
            {"repository": "r", "baseDir": "~/work", "localMappings": {"home_zshrc": ".zshrc.local"}}
        )
        assert config.base_dir == "~/work"
        assert config.local_mappings == {"home_zshrc": ".zshrc.local"}

    def test_effective_path_prefers_override(self):
        entry = FileEntry(id="home_zshrc", relative_path=".zshrc")
        config = MachineConfig(repository="r", local_mappings={"home_zshrc": "alt/.zshrc"})
        assert config.has_override("home_zshrc")
        assert config.effective_path(entry) == "alt/.zshrc"

    def test_empty_override_falls_back(self):
        entry = FileEntry(id="home_zshrc", relative_path=".zshrc")
        config = MachineConfig(repository="r", local_mappings={"home_zshrc": ""})
        assert not config.has_override("home_zshrc")
        assert config.effective_path(entry) == ".zshrc"


class TestConfigStore:
    """Tests for ConfigStore."""

    def test_load_missing(self, config_dir):
        store = ConfigStore()
        assert not store.exists()
        assert store.load() is None

    def test_save_and_load(self, config_dir):
        store = ConfigStore()
        config = MachineConfig(repository="r", base_dir="~/dev", local_mappings={"x": "y"})
        path = store.save(config)

        assert path == config_dir / "config.json"
        assert store.exists()
        assert store.load() == config

    def test_file_uses_camel_case_keys(self, config_dir):
        ConfigStore().save(MachineConfig(repository="r"))
        data = json.loads((config_dir / "config.json").read_text(encoding="utf-8"))
        assert set(data) == {"repository", "baseDir", "localMappings"}

    def test_explicit_path(self, temp_dir):
        store = ConfigStore(temp_dir / "other" / "config.json")
        store.save(MachineConfig(repository="r"))
        assert (temp_dir / "other" / "config.json").exists()

    def test_invalid_file(self, config_dir):
        config_dir.mkdir(parents=True)
        (config_dir / "config.json").write_text('{"baseDir": "~"}', encoding="utf-8")
        with pytest.raises(ValidationError):
            ConfigStore().load()
