# gfsync Test Fixtures
# Pytest fixtures for gfsync tests

import subprocess
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from gfsync.config.loader import ConfigStore, get_repo_dir
from gfsync.config.schema import MachineConfig
from gfsync.sync.engine import SyncEngine
from gfsync.sync.manifest import ManifestStore


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def config_dir(temp_home: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the gfsync state directory into the temporary home."""
    path = temp_home / ".sync-config"
    monkeypatch.setenv("GFS_CONFIG_DIR", str(path))
    return path


@pytest.fixture
def machine_config() -> MachineConfig:
    """Configuration with the default base directory."""
    return MachineConfig(repository="https://example.com/dotfiles.git")


@pytest.fixture
def initialized(config_dir: Path, machine_config: MachineConfig) -> Path:
    """
    Save a config and create a plain repository directory.

    The directory is not a git repository, so only operations that do not
    talk to git work against it.
    """
    (get_repo_dir() / "files").mkdir(parents=True)
    ConfigStore().save(machine_config)
    return config_dir


@pytest.fixture
def engine(initialized: Path) -> SyncEngine:
    """Sync engine over the initialized state directory."""
    return SyncEngine()


@pytest.fixture
def manifest_store(initialized: Path) -> ManifestStore:
    return ManifestStore(get_repo_dir())


@pytest.fixture
def git_identity(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give git a committer identity independent of the host config."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "gfsync tests")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "tests@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "gfsync tests")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "tests@example.com")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", "/dev/null")
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")


@pytest.fixture
def bare_remote(temp_dir: Path, git_identity: None) -> Path:
    """Create an empty bare repository to act as the remote."""
    remote = temp_dir / "remote.git"
    subprocess.run(["git", "init", "--bare", str(remote)], check=True, capture_output=True)
    return remote
