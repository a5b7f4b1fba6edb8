"""
Libraries command implementation.

Classifies the libraries bundled under the project's ``libraries/``
directory against the Arduino Library Index and prints the
``dependencies.libraries`` block that replaces the official ones.
"""

import json
import logging

from openblock_cli.cli.utils import (
    print_error,
    print_section,
    print_warning,
    resolve_project_root,
)
from openblock_cli.core.exceptions import LibraryIndexError
from openblock_cli.libraries.processor import process_libraries

logger = logging.getLogger(__name__)


def _describe(lib) -> str:
    return f"{lib.name}@{lib.version}" if lib.version else lib.name


def run(args) -> int:
    """
    Run the libraries command.

    Args:
        args: Parsed command-line arguments with:
            - project_root: Plugin project directory

    Returns:
        Exit code (0 for success, 1 if the Arduino index is unavailable)
    """
    project_root = resolve_project_root(args.project_root)

    try:
        result = process_libraries(project_root)
    except LibraryIndexError as e:
        print_error(str(e))
        return 1

    if not result.kept and not result.extracted:
        print("No libraries found")
        return 0

    print_section("Libraries:")
    for lib in result.extracted:
        print(f"  [OFFICIAL] {_describe(lib)} -> dependencies.libraries")
    for lib in result.kept:
        print(f"  [KEEP] {_describe(lib)} ({lib.type.value})")

    for warning in result.warnings:
        print_warning(warning)

    if result.extracted:
        print_section("Add to package.json:")
        print(json.dumps({"dependencies": result.dependencies}, indent=2))

    return 0
