"""
Index command implementation.

Lists the toolchains and libraries published in the packages index,
together with the newest version and whether it has a download for
this host.
"""

import logging

from openblock_cli.cli.utils import build_clients, print_section, print_warning
from openblock_cli.core.platform import detect_platform
from openblock_cli.toolchain.metadata import get_latest_version, resolve_artifact

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the index command.

    Args:
        args: Parsed command-line arguments with:
            - registry: Optional registry URL
            - refresh: Ignore any cached index

    Returns:
        Exit code (0 for success)
    """
    _, index_client, registry_url = build_clients(args.registry)
    index = index_client.get_packages_index(
        registry_url=registry_url, force_refresh=args.refresh
    )

    toolchains = index.get("toolchains") or []
    libraries = index.get("libraries") or []

    if not toolchains and not libraries:
        print_warning("Packages index is empty")
        return 0

    platform = detect_platform()
    host = platform.host_string()

    print_section(f"Toolchains ({len(toolchains)}) for {host}:")
    for info in toolchains:
        if not isinstance(info, dict):
            continue
        name = info.get("id") or info.get("name") or "?"
        entry = get_latest_version(info)
        if entry is None:
            print(f"  {name}: no version")
            continue
        available = resolve_artifact(entry, platform) is not None
        marker = "" if available else " (not available for this host)"
        print(f"  {name}@{entry.version}{marker}")

    print_section(f"Libraries ({len(libraries)}):")
    for info in libraries:
        if not isinstance(info, dict):
            continue
        name = info.get("id") or info.get("name") or "?"
        version = info.get("version")
        print(f"  {name}@{version}" if version else f"  {name}")

    return 0
