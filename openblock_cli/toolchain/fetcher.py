"""
Toolchain fetching: metadata lookup, download, verification and extraction.

For each toolchain name the fetcher:
1. Skips if ``.openblock/toolchains/<name>`` already has contents
2. Skips if the Resource Service reports the toolchain as cached
3. Looks the toolchain up in the packages index
4. Takes the newest version and resolves the artifact for this host
5. Reuses a verified cached archive or downloads it
6. Verifies the SHA-256 checksum (if one is published)
7. Extracts atomically into ``.openblock/toolchains/<name>``

Progress is reported as a stream of typed events. ``iter_fetch_events``
yields them as they happen; ``fetch_all_toolchains`` drains the stream
(optionally forwarding each event to a callback) and returns the results.

Toolchains in a batch are processed strictly one after another: they share
one download cache directory and one progress channel. Failures of one
toolchain are captured in its FetchResult and never abort the batch.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import (
    Callable,
    Generator,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Union,
)

import requests

from openblock_cli.core.directory import get_downloads_dir, get_toolchains_dir
from openblock_cli.core.download import (
    ArchiveCache,
    DownloadProgress,
    StreamingDownload,
)
from openblock_cli.core.exceptions import (
    ChecksumError,
    InvalidToolchainNameError,
    NoArtifactError,
    NoVersionError,
    ToolchainNotFoundError,
)
from openblock_cli.core.filesystem import extract_archive_atomic, has_contents
from openblock_cli.core.locking import DEFAULT_TOOLCHAIN_LOCK_TIMEOUT, LockManager
from openblock_cli.core.platform import PlatformInfo, detect_platform
from openblock_cli.core.verification import parse_checksum, verify_checksum
from openblock_cli.deps.resolver import LATEST
from openblock_cli.toolchain.metadata import (
    Artifact,
    get_latest_version,
    resolve_artifact,
)
from openblock_cli.toolchain.packages_index import PackagesIndexClient, find_toolchain

logger = logging.getLogger(__name__)


class FetchStatus(str, Enum):
    """User-visible fetch status."""

    FETCHING = "fetching"
    DOWNLOADING = "downloading"
    VERIFYING = "verifying"
    EXTRACTING = "extracting"
    DONE = "done"
    ERROR = "error"


@dataclass
class FetchResult:
    """Outcome of fetching one toolchain."""

    name: str
    success: bool
    version: str = LATEST

    extract_path: Optional[Path] = None
    """Local directory ready for merging; None for a Resource Service cache hit"""

    error: Optional[str] = None

    skipped: bool = False
    """True if nothing was downloaded because the toolchain already existed"""


@dataclass
class BatchResult:
    """Results of a batch fetch, one per requested name, in input order."""

    success: bool
    results: List[FetchResult] = field(default_factory=list)

    @property
    def failures(self) -> List[FetchResult]:
        return [r for r in self.results if not r.success]

    @property
    def skipped_count(self) -> int:
        return sum(1 for r in self.results if r.skipped)

    @property
    def downloaded_count(self) -> int:
        return sum(1 for r in self.results if r.success and not r.skipped)

    @property
    def mergeable(self) -> List[FetchResult]:
        """Results whose files are available locally for merging."""
        return [r for r in self.results if r.extract_path is not None]


# ============================================================================
# Events
# ============================================================================


@dataclass(frozen=True)
class ToolchainStarted:
    name: str

    @property
    def status(self) -> FetchStatus:
        return FetchStatus.FETCHING


@dataclass(frozen=True)
class StatusChanged:
    name: str
    status: FetchStatus


@dataclass(frozen=True)
class DownloadProgressed:
    name: str
    progress: DownloadProgress


@dataclass(frozen=True)
class ToolchainFinished:
    name: str
    result: FetchResult

    @property
    def status(self) -> FetchStatus:
        return FetchStatus.DONE if self.result.success else FetchStatus.ERROR


FetchEvent = Union[ToolchainStarted, StatusChanged, DownloadProgressed, ToolchainFinished]

ToolchainNames = Union[str, Iterable[str], Mapping[str, str]]


def normalize_names(toolchains: ToolchainNames) -> List[str]:
    """
    Normalize the accepted input forms into a list of names.

    Accepts a single name, a list/tuple of names, or a mapping such as
    ``{"avr-gcc": "latest"}`` (keys are used).

    Raises:
        TypeError: For any other input
    """
    if isinstance(toolchains, str):
        return [toolchains]
    if isinstance(toolchains, Mapping):
        names = list(toolchains.keys())
    elif isinstance(toolchains, (list, tuple)):
        names = list(toolchains)
    else:
        raise TypeError("toolchains must be a string or a list of strings")

    if not all(isinstance(name, str) for name in names):
        raise TypeError("toolchains must be a string or a list of strings")

    return names


class ToolchainFetcher:
    """
    Fetches remote toolchains into a project.

    Example:
        >>> fetcher = ToolchainFetcher(Path("my-plugin"))
        >>> batch = fetcher.fetch_all_toolchains(["avr-gcc"])
        >>> for result in batch.results:
        ...     print(result.name, result.success, result.extract_path)
    """

    def __init__(
        self,
        project_dir: Path,
        index_client: Optional[PackagesIndexClient] = None,
        registry_url: Optional[str] = None,
        has_toolchain: Optional[Callable[[str], bool]] = None,
        platform: Optional[PlatformInfo] = None,
        session: Optional[requests.Session] = None,
        lock_timeout: float = DEFAULT_TOOLCHAIN_LOCK_TIMEOUT,
    ):
        """
        Initialize fetcher.

        Args:
            project_dir: Plugin project root
            index_client: Packages index client (default: new client)
            registry_url: Registry packages.json URL to use instead of the
                Resource Service
            has_toolchain: Predicate reporting toolchains the Resource
                Service already has cached
            platform: Target platform (default: the running platform)
            session: HTTP session for archive downloads
            lock_timeout: Seconds to wait for another process fetching the
                same toolchain
        """
        self.project_dir = Path(project_dir)
        self.toolchains_dir = get_toolchains_dir(self.project_dir)
        self.downloads_dir = get_downloads_dir(self.project_dir)
        self.index_client = index_client or PackagesIndexClient()
        self.registry_url = registry_url
        self.has_toolchain = has_toolchain
        self.platform = platform or detect_platform()
        self.session = session or requests.Session()
        self.lock_timeout = lock_timeout

        self.archive_cache = ArchiveCache(self.downloads_dir)
        self.locks = LockManager(self.downloads_dir / ".locks")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def iter_fetch_events(self, toolchains: ToolchainNames) -> Iterator[FetchEvent]:
        """
        Fetch toolchains sequentially, yielding progress events.

        For every name the stream contains a ToolchainStarted, any number of
        StatusChanged/DownloadProgressed events, and a ToolchainFinished
        carrying the FetchResult. Names are processed in input order.

        Raises:
            TypeError: If toolchains is not a name, list of names or mapping
        """
        names = normalize_names(toolchains)

        for name in names:
            yield ToolchainStarted(name)
            result = yield from self._fetch_one(name)
            yield ToolchainFinished(name, result)

    def fetch_all_toolchains(
        self,
        toolchains: ToolchainNames,
        on_event: Optional[Callable[[FetchEvent], None]] = None,
    ) -> BatchResult:
        """
        Fetch toolchains and collect one result per name.

        Args:
            toolchains: Name, list of names, or mapping of names
            on_event: Optional callback receiving every event

        Returns:
            BatchResult; success is True only if every fetch succeeded
        """
        results = []

        for event in self.iter_fetch_events(toolchains):
            if on_event:
                on_event(event)
            if isinstance(event, ToolchainFinished):
                results.append(event.result)

        return BatchResult(success=all(r.success for r in results), results=results)

    def fetch_toolchain(
        self, name: str, on_event: Optional[Callable[[FetchEvent], None]] = None
    ) -> FetchResult:
        """Fetch a single toolchain."""
        return self.fetch_all_toolchains([name], on_event=on_event).results[0]

    # ------------------------------------------------------------------
    # Per-toolchain steps
    # ------------------------------------------------------------------

    def _toolchain_dir(self, name: str) -> Path:
        """Extraction directory for name, which must be a single path component."""
        extract_dir = self.toolchains_dir / name
        if extract_dir.resolve().parent != self.toolchains_dir.resolve():
            raise InvalidToolchainNameError(name)
        return extract_dir

    def _fetch_one(self, name: str) -> Generator[FetchEvent, None, FetchResult]:
        version = LATEST

        try:
            extract_dir = self._toolchain_dir(name)

            if has_contents(extract_dir):
                logger.debug(f"Toolchain already extracted: {extract_dir}")
                return FetchResult(
                    name=name, success=True, extract_path=extract_dir, skipped=True
                )

            if self.has_toolchain and self.has_toolchain(name):
                logger.debug(f"Toolchain cached by Resource Service: {name}")
                return FetchResult(name=name, success=True, skipped=True)

            index = self.index_client.get_packages_index(registry_url=self.registry_url)
            toolchain_info = find_toolchain(index, name)
            if toolchain_info is None:
                raise ToolchainNotFoundError(name)

            entry = get_latest_version(toolchain_info)
            if entry is None:
                raise NoVersionError(name)
            version = entry.version

            artifact = resolve_artifact(entry, self.platform)
            if artifact is None:
                raise NoArtifactError(name, version, self.platform.host_string())

            logger.debug(f"Resolved {name}@{version}: {artifact.url}")

            with self.locks.toolchain_lock(name, timeout=self.lock_timeout):
                # Another process may have finished while we waited
                if has_contents(extract_dir):
                    return FetchResult(
                        name=name,
                        success=True,
                        version=version,
                        extract_path=extract_dir,
                        skipped=True,
                    )

                archive_path = yield from self._obtain_archive(name, artifact)

                yield StatusChanged(name, FetchStatus.EXTRACTING)
                extract_archive_atomic(
                    archive_path, extract_dir, root=self.toolchains_dir
                )

            logger.info(f"Fetched toolchain {name}@{version}")
            return FetchResult(
                name=name, success=True, version=version, extract_path=extract_dir
            )

        except Exception as e:
            # Per-toolchain failures are reported in the result, never raised.
            logger.debug(f"Failed to fetch toolchain {name}: {e}", exc_info=True)
            return FetchResult(name=name, success=False, version=version, error=str(e))

    def _obtain_archive(
        self, name: str, artifact: Artifact
    ) -> Generator[FetchEvent, None, Path]:
        """Return a verified archive path, downloading it if needed."""
        has_checksum = parse_checksum(artifact.checksum) is not None

        if has_checksum and self.archive_cache.contains(artifact.file_name):
            yield StatusChanged(name, FetchStatus.VERIFYING)
            cached = self.archive_cache.lookup(artifact.file_name, artifact.checksum)
            if cached is not None:
                return cached

        yield StatusChanged(name, FetchStatus.DOWNLOADING)
        download = StreamingDownload(
            artifact.url, total_size=artifact.size, session=self.session
        )
        for progress in download:
            yield DownloadProgressed(name, progress)

        if has_checksum:
            yield StatusChanged(name, FetchStatus.VERIFYING)
            if not verify_checksum(download.data, artifact.checksum):
                raise ChecksumError(f"Checksum verification failed for {artifact.url}")

        return self.archive_cache.store(artifact.file_name, download.data)


def fetch_all_toolchains(
    project_dir: Path,
    toolchains: ToolchainNames,
    on_event: Optional[Callable[[FetchEvent], None]] = None,
    **kwargs,
) -> BatchResult:
    """
    Convenience function to fetch toolchains into a project.

    Extra keyword arguments are passed to ToolchainFetcher.
    """
    return ToolchainFetcher(project_dir, **kwargs).fetch_all_toolchains(
        toolchains, on_event=on_event
    )
