"""
Project dependency resolution.
"""

from .resolver import (
    LATEST,
    ParsedDependencies,
    ToolchainDependencies,
    ValidationResult,
    is_local_path,
    parse_dependencies,
    validate_local_dependencies,
    has_remote_toolchains,
    get_library_paths,
    parse_toolchain,
)

__all__ = [
    "LATEST",
    "ParsedDependencies",
    "ToolchainDependencies",
    "ValidationResult",
    "is_local_path",
    "parse_dependencies",
    "validate_local_dependencies",
    "has_remote_toolchains",
    "get_library_paths",
    "parse_toolchain",
]
