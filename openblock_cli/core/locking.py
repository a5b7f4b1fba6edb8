"""
Per-toolchain file locks.

Toolchain archives and extraction directories live under the project and
are shared by every CLI invocation run there. A lock per toolchain name is
held while one process downloads and extracts it so a second invocation
does not race on the same ``.extracting`` staging directory.

Usage:
    from openblock_cli.core.locking import LockManager

    locks = LockManager(project_root / ".openblock" / "downloads" / ".locks")
    with locks.toolchain_lock("avr-gcc"):
        ...
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout as LockTimeout

logger = logging.getLogger(__name__)

DEFAULT_TOOLCHAIN_LOCK_TIMEOUT = 300


class LockManager:
    """
    Manages lock files for toolchain downloads.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Path):
        self.lock_dir = Path(lock_dir)

    @contextmanager
    def toolchain_lock(
        self, toolchain_name: str, timeout: float = DEFAULT_TOOLCHAIN_LOCK_TIMEOUT
    ):
        """
        Acquire the lock for one toolchain name.

        Args:
            toolchain_name: Toolchain name as declared by the project
            timeout: Maximum wait time in seconds (default: 300 for long downloads)

        Raises:
            LockTimeout: If lock can't be acquired within timeout
        """
        self.lock_dir.mkdir(parents=True, exist_ok=True)

        safe_name = (
            toolchain_name.replace("/", "-").replace("\\", "-").replace(":", "-")
        )
        lock_path = self.lock_dir / f"{safe_name}.lock"
        lock = FileLock(str(lock_path), timeout=timeout)

        try:
            with lock:
                logger.debug(f"Acquired toolchain lock: {lock_path}")
                yield
                logger.debug(f"Released toolchain lock: {lock_path}")
        except LockTimeout as e:
            raise LockTimeout(str(lock_path)) from e


__all__ = ["LockManager", "LockTimeout", "DEFAULT_TOOLCHAIN_LOCK_TIMEOUT"]
