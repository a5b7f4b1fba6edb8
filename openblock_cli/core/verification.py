"""
Checksum verification for downloaded archives.

Registry metadata publishes checksums either as a bare hex digest or in
the prefixed ``ALGORITHM:hexdigest`` form (e.g. ``SHA-256:ab12...``).
Only the digest after the first colon is compared, case-insensitively.
An absent checksum means the artifact is trusted as-is.
"""

import hashlib
import logging
import secrets
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def parse_checksum(checksum: Optional[str]) -> Optional[str]:
    """
    Strip an optional ``ALGORITHM:`` prefix from a checksum.

    Args:
        checksum: Checksum as published in registry metadata

    Returns:
        Lowercased hex digest, or None if no checksum was given

    Example:
        >>> parse_checksum("SHA-256:ABC123")
        'abc123'
    """
    if not checksum:
        return None

    if ":" in checksum:
        checksum = checksum.split(":", 1)[1]

    checksum = checksum.strip().lower()
    return checksum or None


def compute_sha256(data: bytes) -> str:
    """Compute the SHA-256 hex digest of a buffer."""
    return hashlib.sha256(data).hexdigest()


def compute_file_sha256(file_path: Path) -> str:
    """
    Compute the SHA-256 hex digest of a file.

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    hasher = hashlib.sha256()
    with open(file_path, "rb") as f:
        while chunk := f.read(8192):
            hasher.update(chunk)

    return hasher.hexdigest()


def verify_checksum(data: bytes, expected: Optional[str]) -> bool:
    """
    Verify a buffer against an expected SHA-256 checksum.

    Args:
        data: Downloaded bytes
        expected: Bare hex digest or ``ALGO:hex``; empty or None skips the check

    Returns:
        True if the digest matches or no checksum was supplied
    """
    digest = parse_checksum(expected)
    if digest is None:
        return True

    return _constant_time_compare(compute_sha256(data), digest)


def verify_file_checksum(file_path: Path, expected: Optional[str]) -> bool:
    """
    Verify a file on disk against an expected SHA-256 checksum.

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    digest = parse_checksum(expected)
    if digest is None:
        return True

    return _constant_time_compare(compute_file_sha256(file_path), digest)


def _constant_time_compare(a: str, b: str) -> bool:
    """Compare two hex strings in constant time."""
    return secrets.compare_digest(a.lower().encode("utf-8"), b.lower().encode("utf-8"))


__all__ = [
    "parse_checksum",
    "compute_sha256",
    "compute_file_sha256",
    "verify_checksum",
    "verify_file_checksum",
]
