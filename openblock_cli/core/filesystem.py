"""
File system utilities for openblock-cli.

This module provides:
- Archive extraction (zip, tar.gz, tar.xz, tar.bz2) with traversal checks
- Atomic extraction through a sibling staging directory
- Safe file operations (atomic writes, guarded deletion)
- Small helpers (directory emptiness, byte formatting)
"""

import logging
import os
import shutil
import sys
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Callable, Optional, Union

from openblock_cli.core.exceptions import (
    ArchiveExtractionError,
    FilesystemError,
    InsecureArchiveError,
)

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"

STAGING_SUFFIX = ".extracting"


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent.

    Example:
        >>> is_relative_to(Path('/a/b/c'), Path('/a'))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def staging_dir_for(destination: Union[str, Path]) -> Path:
    """Sibling staging directory used while extracting into destination."""
    destination = Path(destination)
    return destination.with_name(destination.name + STAGING_SUFFIX)


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "Extraction has been blocked."
        )


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> None:
    """
    Extract an archive to a destination directory.

    The format is detected from the file name; anything that is not a
    recognised tarball is opened as a zip, which is what the registry
    publishes.

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to
        progress_callback: Optional callback(current, total)

    Raises:
        ArchiveExtractionError: If the archive is missing or corrupt
        InsecureArchiveError: If archive contains malicious paths
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    destination.mkdir(parents=True, exist_ok=True)

    archive_name = archive_path.name.lower()

    try:
        if archive_name.endswith((".tar.gz", ".tgz")):
            _extract_tar(archive_path, destination, "r:gz", progress_callback)
        elif archive_name.endswith(".tar.xz"):
            _extract_tar(archive_path, destination, "r:xz", progress_callback)
        elif archive_name.endswith((".tar.bz2", ".tbz2")):
            _extract_tar(archive_path, destination, "r:bz2", progress_callback)
        else:
            _extract_zip(archive_path, destination, progress_callback)
    except InsecureArchiveError:
        raise
    except Exception as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e


def _extract_zip(
    archive_path: Path,
    destination: Path,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> None:
    """Extract a ZIP archive."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.namelist()
        total = len(members)

        for member in members:
            _validate_archive_path(member, destination)

        for i, member in enumerate(members):
            zf.extract(member, destination)
            if progress_callback:
                progress_callback(i + 1, total)


def _extract_tar(
    archive_path: Path,
    destination: Path,
    mode: str,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> None:
    """Extract a tar archive with specified compression."""
    with tarfile.open(archive_path, mode) as tar:
        members = tar.getmembers()
        total = len(members)

        for member in members:
            _validate_archive_path(member.name, destination)

        if sys.version_info >= (3, 12):
            tar.extractall(destination, filter="data")
        else:
            tar.extractall(destination)

        if progress_callback:
            progress_callback(total, total)


def extract_archive_atomic(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    progress_callback: Optional[Callable[[int, int], None]] = None,
    root: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Extract an archive so that destination is never partially populated.

    Files are extracted into ``{destination}.extracting`` first. Only after
    extraction succeeds is any previous destination removed and the staging
    directory renamed into place. On failure the staging directory is
    removed and destination is left exactly as it was.

    Args:
        archive_path: Archive to extract
        destination: Final directory
        progress_callback: Optional callback(current, total)
        root: If given, destination must lie strictly inside it and nothing
            outside it is ever removed

    Returns:
        The destination path

    Raises:
        ArchiveExtractionError: If extraction fails or destination is outside root
        InsecureArchiveError: If archive contains malicious paths
    """
    destination = Path(destination)
    staging = staging_dir_for(destination)

    if root is not None:
        root = Path(root).resolve()
        resolved = destination.resolve()
        if resolved == root or not is_relative_to(resolved, root):
            raise ArchiveExtractionError(
                f"Refusing to extract to {destination}: not inside {root}"
            )

    # Leftover from an interrupted run
    _remove_tree(staging, root)
    staging.mkdir(parents=True, exist_ok=True)

    try:
        extract_archive(archive_path, staging, progress_callback)
    except Exception:
        logger.debug(f"Extraction failed, removing staging dir: {staging}")
        _remove_tree(staging, root)
        raise

    try:
        _remove_tree(destination, root)
        staging.rename(destination)
    except OSError as e:
        _remove_tree(staging, root)
        raise ArchiveExtractionError(
            f"Failed to move extracted files into {destination}: {e}"
        ) from e

    logger.debug(f"Extracted {Path(archive_path).name} to {destination}")
    return destination


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    If the write fails, the original file (if any) remains unchanged.

    Example:
        >>> atomic_write('avr-gcc.zip', b'PK...')
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        temp_path.unlink(missing_ok=True)
        raise


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Remove a directory tree, optionally refusing paths outside a prefix.

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails

    Example:
        >>> safe_rmtree('.openblock/toolchains/avr-gcc', require_prefix='.openblock')
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, 0o777)
                    func(path)
                else:
                    raise

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)

    except Exception as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


def _remove_tree(path: Path, root: Optional[Path] = None) -> None:
    if path.is_dir() and not path.is_symlink():
        safe_rmtree(path, require_prefix=root)
    elif path.exists() or path.is_symlink():
        path.unlink()


def has_contents(path: Union[str, Path]) -> bool:
    """True if path is an existing directory with at least one entry."""
    path = Path(path)
    return path.is_dir() and any(path.iterdir())


def format_bytes(num_bytes: float) -> str:
    """
    Format a byte count for display.

    Example:
        >>> format_bytes(1536)
        '1.5 KB'
    """
    if num_bytes <= 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB"]
    value = float(num_bytes)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {units[i]}"


__all__ = [
    "STAGING_SUFFIX",
    "is_relative_to",
    "staging_dir_for",
    "extract_archive",
    "extract_archive_atomic",
    "atomic_write",
    "safe_rmtree",
    "has_contents",
    "format_bytes",
]
