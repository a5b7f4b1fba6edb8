"""
Directory layout for openblock-cli.

Directory Structure:
    User home:
        - .openblockrc          : User settings (registry URL, GitHub token, ...)

    Project-Local (<project-root>/.openblock/):
        - toolchains/<name>/    : Extracted toolchains, ready for merging
        - downloads/<archive>   : Cached toolchain archives
        - downloads/.locks/     : Per-toolchain lock files
"""

from pathlib import Path, PurePath
from typing import Union

PROJECT_LOCAL_DIR = ".openblock"
TOOLCHAINS_DIR = f"{PROJECT_LOCAL_DIR}/toolchains"
DOWNLOAD_CACHE_DIR = f"{PROJECT_LOCAL_DIR}/downloads"
SETTINGS_FILE_NAME = ".openblockrc"


def _as_path(path: Union[str, Path]) -> Path:
    if not isinstance(path, (Path, PurePath)):
        path = Path(path)
    return path


def get_project_local_dir(project_root: Union[str, Path]) -> Path:
    """
    Get the project-local .openblock directory path.

    Example:
        >>> get_project_local_dir(Path('/path/to/plugin'))
        PosixPath('/path/to/plugin/.openblock')
    """
    return _as_path(project_root) / PROJECT_LOCAL_DIR


def get_toolchains_dir(project_root: Union[str, Path]) -> Path:
    """Directory holding extracted toolchains keyed by name."""
    return _as_path(project_root) / TOOLCHAINS_DIR


def get_downloads_dir(project_root: Union[str, Path]) -> Path:
    """Directory holding cached archives keyed by archive file name."""
    return _as_path(project_root) / DOWNLOAD_CACHE_DIR


def get_toolchain_dir(project_root: Union[str, Path], name: str) -> Path:
    """Final extraction directory for one toolchain."""
    return get_toolchains_dir(project_root) / name


def get_settings_file() -> Path:
    """Path to the user settings file (~/.openblockrc)."""
    return Path.home() / SETTINGS_FILE_NAME


__all__ = [
    "PROJECT_LOCAL_DIR",
    "TOOLCHAINS_DIR",
    "DOWNLOAD_CACHE_DIR",
    "get_project_local_dir",
    "get_toolchains_dir",
    "get_downloads_dir",
    "get_toolchain_dir",
    "get_settings_file",
]
