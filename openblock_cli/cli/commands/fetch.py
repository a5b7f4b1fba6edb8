"""
Fetch command implementation.

Downloads and extracts named toolchains into the project without
consulting package.json.
"""

import logging

from openblock_cli.cli.utils import (
    FetchProgressPrinter,
    build_clients,
    print_batch_summary,
    resolve_project_root,
)
from openblock_cli.toolchain.fetcher import ToolchainFetcher

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the fetch command.

    Args:
        args: Parsed command-line arguments with:
            - names: Toolchain names
            - registry: Optional registry URL

    Returns:
        Exit code (0 if every toolchain was fetched)
    """
    project_root = resolve_project_root(args.project_root)
    _, index_client, registry_url = build_clients(args.registry)

    fetcher = ToolchainFetcher(
        project_root, index_client=index_client, registry_url=registry_url
    )
    batch = fetcher.fetch_all_toolchains(args.names, on_event=FetchProgressPrinter())
    print_batch_summary(batch)

    for result in batch.mergeable:
        logger.debug(f"{result.name}: {result.extract_path}")

    return 0 if batch.success else 1
