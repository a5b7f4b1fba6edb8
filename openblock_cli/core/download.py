"""
Archive download with progress tracking and a checksum-keyed local cache.

This module provides:
- ArchiveCache: maps an archive file name to a cached file under the
  project's downloads directory and decides whether a download is needed
- StreamingDownload: streams a response body into memory while yielding
  progress updates whenever the whole-number percentage changes

The body is only written to the cache after it has been fully received
and verified, so an interrupted download never leaves a cached archive
behind. There is no resume support.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional, Tuple, Union

import requests
from requests.exceptions import RequestException

from openblock_cli.core.exceptions import DownloadError
from openblock_cli.core.filesystem import atomic_write, format_bytes
from openblock_cli.core.verification import parse_checksum, verify_file_checksum

logger = logging.getLogger(__name__)

DEFAULT_ARCHIVE_NAME = "_temp_download.zip"

# Socket-level (connect, read) timeouts; the overall download is unbounded.
DOWNLOAD_TIMEOUT: Tuple[int, int] = (10, 60)

USER_AGENT = "openblock-cli"


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    percent: int
    bytes_downloaded: int
    total_bytes: int
    speed_bps: float  # bytes per second

    def __str__(self) -> str:
        return format_progress(self)


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> format_progress(DownloadProgress(50, 512, 1024, 2048.0))
        '50% (512 B/1 KB) 2 KB/s'
    """
    return (
        f"{progress.percent}% "
        f"({format_bytes(progress.bytes_downloaded)}/{format_bytes(progress.total_bytes)}) "
        f"{format_bytes(progress.speed_bps)}/s"
    )


class ArchiveCache:
    """
    Local cache of downloaded toolchain archives.

    Archives are keyed by their canonical file name. A cached archive is
    only reused when a checksum is known and the file still matches it;
    without a checksum every fetch downloads again.

    Example:
        >>> cache = ArchiveCache(Path(".openblock/downloads"))
        >>> cached = cache.lookup("avr-gcc.zip", "SHA-256:ab12...")
        >>> if cached is None:
        ...     cache.store("avr-gcc.zip", data)
    """

    def __init__(self, cache_dir: Path):
        self.cache_dir = Path(cache_dir)

    def path_for(self, archive_file_name: Optional[str] = None) -> Path:
        """Cache path for an archive name (fallback name if none is known)."""
        name = archive_file_name or DEFAULT_ARCHIVE_NAME
        # Registry names are plain file names; drop any directory part.
        return self.cache_dir / Path(name).name

    def contains(self, archive_file_name: Optional[str]) -> bool:
        return self.path_for(archive_file_name).is_file()

    def lookup(
        self, archive_file_name: Optional[str], checksum: Optional[str]
    ) -> Optional[Path]:
        """
        Return the cached archive if it can be reused without downloading.

        Args:
            archive_file_name: Canonical archive name from metadata
            checksum: Expected checksum (bare or ``ALGO:hex``)

        Returns:
            Path to a verified cached archive, or None if a download is needed
        """
        if parse_checksum(checksum) is None:
            return None

        archive_path = self.path_for(archive_file_name)
        if not archive_path.is_file():
            return None

        if verify_file_checksum(archive_path, checksum):
            logger.debug(f"Reusing cached archive: {archive_path}")
            return archive_path

        logger.info(f"Cached archive failed checksum, re-downloading: {archive_path.name}")
        return None

    def store(self, archive_file_name: Optional[str], data: bytes) -> Path:
        """Atomically write a fully downloaded archive into the cache."""
        archive_path = self.path_for(archive_file_name)
        atomic_write(archive_path, data)
        logger.debug(f"Cached archive: {archive_path} ({format_bytes(len(data))})")
        return archive_path


class StreamingDownload:
    """
    Stream a URL into memory, yielding progress as it arrives.

    Iterating performs the request. Progress is only yielded when the total
    size is known and the whole-number percentage has changed since the
    last update. After iteration finishes, ``data`` holds the full body.

    Example:
        >>> download = StreamingDownload(url, total_size=1024)
        >>> for progress in download:
        ...     print(progress)
        >>> archive_bytes = download.data
    """

    def __init__(
        self,
        url: str,
        total_size: Optional[Union[int, str]] = None,
        session: Optional[requests.Session] = None,
        timeout: Tuple[int, int] = DOWNLOAD_TIMEOUT,
        chunk_size: int = 8192,
        clock: Optional[Callable[[], float]] = None,
    ):
        if not url:
            raise ValueError("URL cannot be empty")

        self.url = url
        self.total_size = _parse_size(total_size)
        self.session = session or requests.Session()
        self.timeout = timeout
        self.chunk_size = chunk_size
        self._clock = clock or time.monotonic
        self.data: Optional[bytes] = None

    def __iter__(self) -> Iterator[DownloadProgress]:
        logger.debug(f"Downloading from {self.url}")

        try:
            response = self.session.get(
                self.url,
                stream=True,
                timeout=self.timeout,
                allow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            )
        except RequestException as e:
            raise DownloadError(f"Failed to download from {self.url}: {e}") from e

        with response:
            if not response.ok:
                raise DownloadError(
                    f"Failed to download from {self.url}: "
                    f"{response.status_code} {response.reason}"
                )

            total = self.total_size or _parse_size(
                response.headers.get("content-length")
            )

            chunks = []
            downloaded = 0
            last_percent = -1
            start_time = self._clock()

            try:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if not chunk:
                        continue
                    chunks.append(chunk)
                    downloaded += len(chunk)

                    if total > 0:
                        percent = round(downloaded / total * 100)
                        if percent != last_percent:
                            last_percent = percent
                            elapsed = self._clock() - start_time
                            yield DownloadProgress(
                                percent=percent,
                                bytes_downloaded=downloaded,
                                total_bytes=total,
                                speed_bps=downloaded / elapsed if elapsed > 0 else 0.0,
                            )
            except RequestException as e:
                raise DownloadError(
                    f"Download from {self.url} interrupted: {e}"
                ) from e

        self.data = b"".join(chunks)
        logger.debug(f"Downloaded {format_bytes(downloaded)} from {self.url}")


def _parse_size(value: Optional[Union[int, str]]) -> int:
    if value is None:
        return 0
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


__all__ = [
    "DEFAULT_ARCHIVE_NAME",
    "DownloadProgress",
    "format_progress",
    "ArchiveCache",
    "StreamingDownload",
]
