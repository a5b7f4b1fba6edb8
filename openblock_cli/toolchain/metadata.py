"""
Toolchain version metadata and artifact selection.

Registry entries describe downloads in one of three shapes:

- ``systems``: a list of per-host artifacts (Arduino package-index style)::

      {"host": "darwin-arm64", "url": "...", "checksum": "SHA-256:...",
       "archiveFileName": "avr-gcc.zip", "size": "1234"}

- ``platforms``: a map keyed by OS name (``win32``, ``darwin``, ``linux``),
  whose entries may spell the URL ``downloadUrl`` or ``url`` and the
  checksum ``checksum`` or ``sha256``
- a direct ``url`` / ``checksum`` / ``archiveFileName`` / ``size``

Raw entries are parsed once into a VersionEntry holding its sources in
priority order (systems, platforms, direct). resolve_artifact() then
picks the first source that yields a URL for the running platform.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from openblock_cli.core.platform import PlatformInfo, detect_platform

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Artifact:
    """A concrete downloadable archive."""

    url: str
    checksum: Optional[str] = None
    file_name: Optional[str] = None
    size: Optional[int] = None


@dataclass(frozen=True)
class SystemArtifact:
    host: str
    artifact: Optional[Artifact]


@dataclass(frozen=True)
class SystemsSource:
    """Per-host artifacts matched exactly on the host identifier."""

    systems: Tuple[SystemArtifact, ...]


@dataclass(frozen=True)
class PlatformsSource:
    """Artifacts keyed by OS name."""

    platforms: Dict[str, Artifact]


@dataclass(frozen=True)
class DirectSource:
    """A single platform-independent artifact."""

    artifact: Artifact


ArtifactSource = Union[SystemsSource, PlatformsSource, DirectSource]


@dataclass(frozen=True)
class VersionEntry:
    """One resolvable toolchain version with its artifact sources."""

    version: str
    sources: Tuple[ArtifactSource, ...] = ()


def _parse_size(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring invalid artifact size: {value!r}")
        return None


def _parse_artifact(
    raw: Dict[str, Any], url_keys=("url",), checksum_keys=("checksum",)
) -> Optional[Artifact]:
    url = next((raw[k] for k in url_keys if raw.get(k)), None)
    if not url:
        return None

    checksum = next((raw[k] for k in checksum_keys if raw.get(k)), None)
    return Artifact(
        url=url,
        checksum=checksum,
        file_name=raw.get("archiveFileName") or None,
        size=_parse_size(raw.get("size")),
    )


def parse_version_entry(raw: Dict[str, Any]) -> VersionEntry:
    """
    Parse a raw version descriptor into a VersionEntry.

    Args:
        raw: Version descriptor from the packages index

    Returns:
        VersionEntry with sources in resolution priority order
    """
    sources: List[ArtifactSource] = []

    systems = raw.get("systems")
    if isinstance(systems, list):
        sources.append(
            SystemsSource(
                tuple(
                    SystemArtifact(host=s.get("host"), artifact=_parse_artifact(s))
                    for s in systems
                    if isinstance(s, dict)
                )
            )
        )

    platforms = raw.get("platforms")
    if isinstance(platforms, dict):
        parsed = {}
        for os_name, entry in platforms.items():
            if not isinstance(entry, dict):
                continue
            artifact = _parse_artifact(
                entry,
                url_keys=("downloadUrl", "url"),
                checksum_keys=("checksum", "sha256"),
            )
            if artifact:
                parsed[os_name] = artifact
        sources.append(PlatformsSource(parsed))

    direct = _parse_artifact(raw)
    if direct:
        sources.append(DirectSource(direct))

    return VersionEntry(version=str(raw.get("version") or "latest"), sources=tuple(sources))


def get_latest_version(toolchain_info: Optional[Dict[str, Any]]) -> Optional[VersionEntry]:
    """
    Get the newest version entry of a toolchain.

    Supports a single inline version (``{"id", "version", "systems", ...}``)
    and a ``versions`` list ordered newest-first.

    Returns:
        VersionEntry, or None if the toolchain has no resolvable version
    """
    if not isinstance(toolchain_info, dict):
        return None

    versions = toolchain_info.get("versions")

    # An explicit versions list, even an empty one, overrides the inline version
    if toolchain_info.get("version") and versions is None:
        return parse_version_entry(toolchain_info)

    if isinstance(versions, list) and versions and isinstance(versions[0], dict):
        return parse_version_entry(versions[0])

    return None


def find_matching_system(
    systems: Optional[Sequence[Union[Dict[str, Any], SystemArtifact]]],
    host: Optional[str] = None,
) -> Optional[Union[Dict[str, Any], SystemArtifact]]:
    """
    Find the systems entry whose ``host`` equals the host identifier.

    Exact string equality only; no alias normalization. The first matching
    entry wins.

    Args:
        systems: Raw ``systems`` array or parsed SystemArtifacts
        host: Host identifier (default: the running host)

    Example:
        >>> find_matching_system([{"host": "darwin-arm64"}], host="darwin-arm64")
        {'host': 'darwin-arm64'}
        >>> find_matching_system([{"host": "darwin-x64"}], host="darwin-arm64") is None
        True
    """
    if not isinstance(systems, (list, tuple)):
        return None

    host = host or detect_platform().host_string()

    for system in systems:
        if isinstance(system, SystemArtifact):
            system_host = system.host
        elif isinstance(system, dict):
            system_host = system.get("host")
        else:
            continue
        if system_host == host:
            return system

    return None


def resolve_artifact(
    entry: VersionEntry, platform: Optional[PlatformInfo] = None
) -> Optional[Artifact]:
    """
    Resolve the artifact to download for a platform.

    Tries systems (exact host match), then platforms (OS name), then the
    direct URL, returning the first that yields a URL.

    Args:
        entry: Parsed version entry
        platform: Target platform (default: the running platform)

    Returns:
        Artifact, or None if no source covers the platform
    """
    platform = platform or detect_platform()
    host = platform.host_string()

    for source in entry.sources:
        if isinstance(source, SystemsSource):
            system = find_matching_system(source.systems, host)
            if system is not None and system.artifact:
                return system.artifact
        elif isinstance(source, PlatformsSource):
            artifact = source.platforms.get(platform.os)
            if artifact:
                return artifact
        elif isinstance(source, DirectSource):
            return source.artifact

    return None
