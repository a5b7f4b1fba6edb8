"""
Core functionality for openblock-cli.

This package contains the foundational modules the toolchain and
dependency layers depend on.
"""

from .cache import TtlCache

from .directory import (
    get_project_local_dir,
    get_toolchains_dir,
    get_downloads_dir,
    get_toolchain_dir,
    get_settings_file,
)

from .locking import (
    LockManager,
    LockTimeout,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    get_host_string,
    clear_platform_cache,
)

from .exceptions import (
    OpenBlockError,
    ProjectConfigError,
    SettingsError,
    ToolchainError,
    ToolchainNotFoundError,
    InvalidToolchainNameError,
    NoVersionError,
    NoArtifactError,
    DownloadError,
    ChecksumError,
    FilesystemError,
    ArchiveExtractionError,
    InsecureArchiveError,
    ServiceUnavailableError,
    LibraryIndexError,
)

__all__ = [
    "TtlCache",
    "get_project_local_dir",
    "get_toolchains_dir",
    "get_downloads_dir",
    "get_toolchain_dir",
    "get_settings_file",
    "LockManager",
    "LockTimeout",
    "PlatformInfo",
    "detect_platform",
    "get_host_string",
    "clear_platform_cache",
    "OpenBlockError",
    "ProjectConfigError",
    "SettingsError",
    "ToolchainError",
    "ToolchainNotFoundError",
    "InvalidToolchainNameError",
    "NoVersionError",
    "NoArtifactError",
    "DownloadError",
    "ChecksumError",
    "FilesystemError",
    "ArchiveExtractionError",
    "InsecureArchiveError",
    "ServiceUnavailableError",
    "LibraryIndexError",
]
