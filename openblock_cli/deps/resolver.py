"""
Dependency resolution for plugin projects.

Projects declare dependencies in package.json::

    "openblock": {
        "dependencies": {
            "libraries": {"Servo": "./libraries/Servo"},
            "toolchains": {"avr-gcc": "latest", "esptool": "../tools/esptool"}
        }
    }

Libraries accept only local paths. Toolchains accept a local path or the
literal ``"latest"``. Any other identifier (version ranges, URLs, ...) is
dropped with a warning and never resolved remotely.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from openblock_cli.config.project import get_openblock_config
from openblock_cli.core.exceptions import ProjectConfigError

logger = logging.getLogger(__name__)

LATEST = "latest"


@dataclass
class ToolchainDependencies:
    local: Dict[str, str] = field(default_factory=dict)
    """Local toolchains: name -> relative path"""

    remote: Dict[str, str] = field(default_factory=dict)
    """Remote toolchains: name -> 'latest'"""


@dataclass
class ParsedDependencies:
    """Classified dependency declarations of one project."""

    libraries: Dict[str, str] = field(default_factory=dict)
    """Local libraries: name -> relative path"""

    toolchains: ToolchainDependencies = field(default_factory=ToolchainDependencies)

    warnings: List[str] = field(default_factory=list)
    """Declarations that were ignored"""


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)


def is_local_path(identifier: str) -> bool:
    """
    Check if a dependency identifier is a relative filesystem path.

    Example:
        >>> is_local_path("./libs/foo")
        True
        >>> is_local_path("^1.2.3")
        False
    """
    return identifier.startswith("./") or identifier.startswith("../")


def _section(dependencies: Dict[str, Any], key: str) -> Dict[str, Any]:
    section = dependencies.get(key) or {}
    if not isinstance(section, dict):
        raise ProjectConfigError(
            f"openblock.dependencies.{key} must be an object mapping names to paths"
        )
    return section


def _identifier(kind: str, name: str, identifier: Any) -> str:
    if not isinstance(identifier, str):
        raise ProjectConfigError(
            f'{kind} "{name}" must be declared as a string, '
            f"got {type(identifier).__name__}"
        )
    return identifier


def parse_dependencies(project_dir: Union[str, Path]) -> ParsedDependencies:
    """
    Parse and classify a project's dependency declarations.

    Args:
        project_dir: Project directory containing package.json

    Returns:
        ParsedDependencies with local libraries, local/remote toolchains and
        warnings for ignored entries

    Raises:
        ProjectConfigError: If package.json is missing or a declaration has
            the wrong type
    """
    openblock_config = get_openblock_config(project_dir)

    dependencies = openblock_config.get("dependencies") or {}
    if not isinstance(dependencies, dict):
        raise ProjectConfigError("openblock.dependencies must be an object")

    result = ParsedDependencies()

    for name, identifier in _section(dependencies, "libraries").items():
        identifier = _identifier("Library", name, identifier)
        if is_local_path(identifier):
            result.libraries[name] = identifier
        else:
            result.warnings.append(
                f'Library "{name}" must use local path (e.g., ./libraries/{name}). '
                "Remote libraries are not supported. Ignoring."
            )

    for name, identifier in _section(dependencies, "toolchains").items():
        identifier = _identifier("Toolchain", name, identifier)
        if is_local_path(identifier):
            result.toolchains.local[name] = identifier
        elif identifier == LATEST:
            result.toolchains.remote[name] = identifier
        else:
            result.warnings.append(
                f"Toolchain \"{name}\" must use 'latest' or local path. "
                "Version ranges are not supported. Ignoring."
            )

    for warning in result.warnings:
        logger.debug(warning)

    return result


def validate_local_dependencies(
    project_dir: Union[str, Path], deps: ParsedDependencies
) -> ValidationResult:
    """
    Check that every declared local dependency exists on disk.

    All missing paths are reported together; nothing is raised.
    """
    project_dir = Path(project_dir)
    errors = []

    for name, relative_path in deps.libraries.items():
        if not (project_dir / relative_path).resolve().exists():
            errors.append(f'Local library "{name}" not found at: {relative_path}')

    for name, relative_path in deps.toolchains.local.items():
        if not (project_dir / relative_path).resolve().exists():
            errors.append(f'Local toolchain "{name}" not found at: {relative_path}')

    return ValidationResult(valid=not errors, errors=errors)


def has_remote_toolchains(deps: ParsedDependencies) -> bool:
    return bool(deps.toolchains.remote)


def get_library_paths(
    project_dir: Union[str, Path], deps: ParsedDependencies
) -> List[Path]:
    """Absolute paths of local libraries that exist (missing ones are skipped)."""
    project_dir = Path(project_dir)
    paths = []

    for relative_path in deps.libraries.values():
        absolute_path = (project_dir / relative_path).resolve()
        if absolute_path.exists():
            paths.append(absolute_path)

    return paths


def parse_toolchain(project_dir: Union[str, Path]) -> Optional[str]:
    """
    Read the single toolchain name from ``openblock.toolchains``.

    Returns:
        Toolchain name, or None if the project declares none

    Raises:
        ProjectConfigError: If the field is present but not a string
    """
    toolchain = get_openblock_config(project_dir).get("toolchains")

    if not toolchain:
        return None

    if not isinstance(toolchain, str):
        raise ProjectConfigError(
            "openblock.toolchains must be a string (toolchain name)"
        )

    return toolchain
