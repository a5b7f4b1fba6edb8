"""
Merge extracted toolchains into the Resource Service's unified tree.

Each fetched toolchain with local files is sent to the service's merge
endpoint under its platform family. Merge failures are collected per
toolchain; the remaining toolchains are still merged.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from openblock_cli.toolchain.companion import CompanionServiceClient
from openblock_cli.toolchain.fetcher import FetchResult

logger = logging.getLogger(__name__)

ARDUINO = "arduino"
MICROPYTHON = "micropython"


def platform_for_toolchain(name: str) -> str:
    """
    Map a toolchain name to its platform family.

    Example:
        >>> platform_for_toolchain("micropython-esp32")
        'micropython'
        >>> platform_for_toolchain("avr-gcc")
        'arduino'
    """
    return MICROPYTHON if name.startswith(MICROPYTHON) else ARDUINO


@dataclass
class MergeSummary:
    success: bool
    merged: int = 0
    """Total components merged across all toolchains"""

    errors: List[str] = field(default_factory=list)


class ToolchainMergeCoordinator:
    """Merges fetched toolchains through the Resource Service."""

    def __init__(self, service: Optional[CompanionServiceClient] = None):
        self.service = service or CompanionServiceClient()

    def merge_all(self, results: Iterable[FetchResult]) -> MergeSummary:
        """
        Merge every result that has an extracted directory.

        Results without ``extract_path`` (failures and Resource Service
        cache hits) are ignored.

        Returns:
            MergeSummary; success is True if no merge failed
        """
        summary = MergeSummary(success=True)

        for result in results:
            if result.extract_path is None:
                continue

            platform = platform_for_toolchain(result.name)
            source_path = str(result.extract_path.resolve())
            logger.debug(f"Merging {result.name} ({platform}) from {source_path}")

            merge = self.service.merge_toolchain(platform, source_path)
            if merge.success:
                logger.info(
                    f"Merged toolchain {result.name}: "
                    f"{merge.merged} merged, {merge.skipped} skipped"
                )
                summary.merged += merge.merged
            else:
                summary.errors.append(f"{result.name}: {merge.message}")

        summary.success = not summary.errors
        return summary
