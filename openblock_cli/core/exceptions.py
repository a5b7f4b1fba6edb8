"""
Centralized exception hierarchy for openblock-cli.

Structural failures (bad project configuration, malformed dependency
values) raise these directly. Per-toolchain failures during a batch fetch
are caught by the fetcher and reported as failed results instead.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class OpenBlockError(Exception):
    """Base exception for all openblock-cli errors."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ProjectConfigError(OpenBlockError):
    """Raised when the project's package.json is missing or malformed."""

    pass


class SettingsError(OpenBlockError):
    """Raised when user settings cannot be read or written."""

    pass


# ============================================================================
# Toolchain-related Exceptions
# ============================================================================


class ToolchainError(OpenBlockError):
    """Base exception for toolchain-related errors."""

    pass


class ToolchainNotFoundError(ToolchainError):
    """Raised when a toolchain is absent from the packages index."""

    def __init__(self, toolchain_name: str):
        self.toolchain_name = toolchain_name
        super().__init__(
            f'Toolchain "{toolchain_name}" not found in packages.json. '
            "Make sure Resource Service is running and the toolchain is "
            "available in an enabled repository."
        )


class InvalidToolchainNameError(ToolchainError):
    """Raised when a toolchain name would resolve outside the toolchains directory."""

    def __init__(self, toolchain_name: str):
        self.toolchain_name = toolchain_name
        super().__init__(
            f'Invalid toolchain name "{toolchain_name}": '
            "must be a single directory name"
        )


class NoVersionError(ToolchainError):
    """Raised when a toolchain entry has no resolvable version."""

    def __init__(self, toolchain_name: str):
        self.toolchain_name = toolchain_name
        super().__init__(f'No version available for toolchain "{toolchain_name}"')


class NoArtifactError(ToolchainError):
    """Raised when no download URL matches the running host."""

    def __init__(self, toolchain_name: str, version: str, host: str):
        self.toolchain_name = toolchain_name
        self.version = version
        self.host = host
        super().__init__(f"No download URL for {toolchain_name}@{version} on {host}")


# ============================================================================
# Download / Integrity Exceptions
# ============================================================================


class DownloadError(OpenBlockError):
    """Raised when an archive download fails."""

    pass


class ChecksumError(OpenBlockError):
    """Raised when a downloaded archive does not match its checksum."""

    pass


# ============================================================================
# Filesystem Exceptions
# ============================================================================


class FilesystemError(OpenBlockError):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Companion Service Exceptions
# ============================================================================


class ServiceUnavailableError(OpenBlockError):
    """Raised when the local Resource Service cannot be reached."""

    pass


class LibraryIndexError(OpenBlockError):
    """Raised when the Arduino library index cannot be fetched."""

    pass
