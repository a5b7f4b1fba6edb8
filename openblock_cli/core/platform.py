"""
Host platform detection.

Registry artifacts are keyed by a host identifier of the form
``{platform}-{arch}`` (e.g. ``darwin-arm64``, ``win32-x64``,
``linux-x64``). The vocabulary is the one the registry publishes, so the
machine name reported by Python is mapped onto it here. Matching against
artifact entries is always an exact string comparison.

Usage:
    from openblock_cli.core.platform import detect_platform

    info = detect_platform()
    print(info.host_string())
"""

import functools
import platform
import sys
from dataclasses import dataclass


@dataclass(frozen=True)
class PlatformInfo:
    """
    Running platform as seen by the package registry.

    Attributes:
        os: Operating system key ('win32', 'darwin', 'linux', ...)
        arch: CPU architecture ('x64', 'arm64', 'ia32', 'arm', ...)
    """

    os: str
    arch: str

    def host_string(self) -> str:
        """
        Get the host identifier used to select artifacts.

        Example:
            >>> PlatformInfo("darwin", "arm64").host_string()
            'darwin-arm64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.host_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect the running platform.

    Cached; only runs detection once per process.
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    """
    Detect operating system key.

    Returns:
        'win32', 'darwin', 'linux', or the raw ``sys.platform`` value
    """
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform in ("win32", "cygwin"):
        return "win32"
    return sys.platform


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'ia32', 'arm'
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "ia32"
    elif machine.startswith("arm"):
        return "arm"
    elif machine.startswith("riscv"):
        return "riscv64"
    else:
        return machine


def get_host_string() -> str:
    """Host identifier of the running platform."""
    return detect_platform().host_string()


def clear_platform_cache():
    """
    Clear the platform detection cache.

    Forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "detect_platform",
    "get_host_string",
    "clear_platform_cache",
]
