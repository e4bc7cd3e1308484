# gfsync Configuration Loader
# Fixed state locations and the machine config store

import os
from pathlib import Path
from typing import Optional

from gfsync.config.schema import MachineConfig
from gfsync.utils.paths import atomic_write, ensure_dir

CONFIG_DIR_ENV = "GFS_CONFIG_DIR"
CONFIG_DIR_NAME = ".sync-config"
CONFIG_FILE_NAME = "config.json"
REPO_DIR_NAME = "repo"
FILES_DIR_NAME = "files"
PID_FILE_NAME = "watch.pid"
LOG_FILE_NAME = "watch.log"


def get_config_dir() -> Path:
    """Get the gfsync state directory (~/.sync-config)."""
    # Allow override via environment variable
    env_path = os.environ.get(CONFIG_DIR_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / CONFIG_DIR_NAME


def get_config_path() -> Path:
    """Get the path to the machine configuration file."""
    return get_config_dir() / CONFIG_FILE_NAME


def get_repo_dir() -> Path:
    """Get the local working copy of the sync repository."""
    return get_config_dir() / REPO_DIR_NAME


def get_files_dir(repo_dir: Optional[Path] = None) -> Path:
    """Get the directory holding stored file content inside the repository."""
    return (repo_dir or get_repo_dir()) / FILES_DIR_NAME


def get_pid_path() -> Path:
    """Get the watch daemon PID marker path."""
    return get_config_dir() / PID_FILE_NAME


def get_log_path() -> Path:
    """Get the watch daemon log file path."""
    return get_config_dir() / LOG_FILE_NAME


class ConfigStore:
    """
    Loads and saves the machine configuration.

    The file is read and written as a whole document.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config store.

        Args:
            config_path: Path to config file. Defaults to ~/.sync-config/config.json
        """
        self.config_path = config_path or get_config_path()

    def exists(self) -> bool:
        """Check if a configuration has been saved."""
        return self.config_path.exists()

    def load(self) -> Optional[MachineConfig]:
        """
        Load configuration from file.

        Returns:
            MachineConfig, or None if this machine was never initialized.

        Raises:
            ValidationError: If the file content is not a valid config.
        """
        try:
            data = self.config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        return MachineConfig.model_validate_json(data)

    def save(self, config: MachineConfig) -> Path:
        """
        Save configuration to file, creating the directory if needed.

        Returns:
            Path where config was saved.
        """
        ensure_dir(self.config_path.parent)
        atomic_write(self.config_path, config.model_dump_json(by_alias=True, indent=2) + "\n")
        return self.config_path
