"""
Toolchain package index, fetching and merging.
"""

from openblock_cli.toolchain.companion import (
    CompanionServiceClient,
    MergeResult,
    ServiceStatus,
)
from openblock_cli.toolchain.fetcher import (
    BatchResult,
    DownloadProgressed,
    FetchEvent,
    FetchResult,
    FetchStatus,
    StatusChanged,
    ToolchainFetcher,
    ToolchainFinished,
    ToolchainStarted,
    fetch_all_toolchains,
    normalize_names,
)
from openblock_cli.toolchain.merger import (
    MergeSummary,
    ToolchainMergeCoordinator,
    platform_for_toolchain,
)
from openblock_cli.toolchain.metadata import (
    Artifact,
    VersionEntry,
    find_matching_system,
    get_latest_version,
    parse_version_entry,
    resolve_artifact,
)
from openblock_cli.toolchain.packages_index import (
    PackagesIndexClient,
    empty_index,
    find_library,
    find_toolchain,
)

__all__ = [
    "CompanionServiceClient",
    "MergeResult",
    "ServiceStatus",
    "BatchResult",
    "DownloadProgressed",
    "FetchEvent",
    "FetchResult",
    "FetchStatus",
    "StatusChanged",
    "ToolchainFetcher",
    "ToolchainFinished",
    "ToolchainStarted",
    "fetch_all_toolchains",
    "normalize_names",
    "MergeSummary",
    "ToolchainMergeCoordinator",
    "platform_for_toolchain",
    "Artifact",
    "VersionEntry",
    "find_matching_system",
    "get_latest_version",
    "parse_version_entry",
    "resolve_artifact",
    "PackagesIndexClient",
    "empty_index",
    "find_library",
    "find_toolchain",
]
