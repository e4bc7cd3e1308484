# gfsync Configuration Module
# Data model, machine config persistence and fixed state locations

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

__all__ = [
    # Schema
    "FileEntry",
    "Manifest",
    "MachineConfig",
    # Loader
    "ConfigStore",
    "get_config_dir",
    "get_config_path",
    "get_repo_dir",
    "get_files_dir",
    "get_pid_path",
    "get_log_path",
]
