"""
Deps command implementation.

Resolves the dependencies declared in the project's package.json:
validates local libraries and toolchains, downloads remote toolchains and
merges them into the Resource Service's unified toolchain tree.
"""

import logging

from openblock_cli.cli.utils import (
    FetchProgressPrinter,
    build_clients,
    print_batch_summary,
    print_error,
    print_section,
    print_warning,
    resolve_project_root,
)
from openblock_cli.core.exceptions import ProjectConfigError
from openblock_cli.deps.resolver import (
    has_remote_toolchains,
    parse_dependencies,
    validate_local_dependencies,
)
from openblock_cli.toolchain.fetcher import ToolchainFetcher
from openblock_cli.toolchain.merger import ToolchainMergeCoordinator

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the deps command.

    Args:
        args: Parsed command-line arguments with:
            - project_root: Plugin project directory
            - registry: Optional registry URL
            - no_merge: Skip merging downloaded toolchains

    Returns:
        Exit code (0 for success, 1 if validation or any download failed)
    """
    project_root = resolve_project_root(args.project_root)

    try:
        deps = parse_dependencies(project_root)
    except ProjectConfigError as e:
        print_error(str(e))
        return 1

    if deps.warnings:
        print_section("Dependency warnings:")
        for warning in deps.warnings:
            print(f"  [WARN] {warning}")

    validation = validate_local_dependencies(project_root, deps)
    if not validation.valid:
        print_section("Local dependency errors:")
        for error in validation.errors:
            print(f"  [ERROR] {error}")
        return 1

    if not has_remote_toolchains(deps):
        logger.info("No remote toolchains to resolve")
        return 0

    service, index_client, registry_url = build_clients(args.registry)

    print_section("Toolchain Resolution:")

    fetcher = ToolchainFetcher(
        project_root, index_client=index_client, registry_url=registry_url
    )
    batch = fetcher.fetch_all_toolchains(
        deps.toolchains.remote, on_event=FetchProgressPrinter()
    )
    print_batch_summary(batch)

    if not batch.success:
        print_error("Dependency resolution failed. Please fix the errors above.")
        return 1

    if args.no_merge or not batch.mergeable:
        return 0

    status = service.check()
    if not status.running:
        print_warning(f"{status.message}; toolchains were not merged")
        return 0

    print("  Merging toolchains to unified directory...")
    summary = ToolchainMergeCoordinator(service).merge_all(batch.mergeable)

    if summary.success:
        print(f"  [OK] Merged {summary.merged} components")
    else:
        print_warning("Merge completed with errors")
        for error in summary.errors:
            print(f"  [ERROR] {error}")

    return 0
