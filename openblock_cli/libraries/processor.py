"""
Classification of the libraries bundled in a plugin's ``libraries/`` directory.

Each subdirectory is classified as:

- ``official``: its name and version are published in the Arduino Library
  Index, so it can be shared as a dependency instead of bundled
- ``official-version-mismatch``: the library is official but this version
  is not published; it stays in the plugin
- ``third-party``: has a library.properties but is not in the index
- ``private``: no library.properties (or no name in it)

The Arduino index is only fetched when a library with a
library.properties is found.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from openblock_cli.libraries.arduino_index import ArduinoLibraryIndex
from openblock_cli.libraries.properties import get_library_info

logger = logging.getLogger(__name__)

LIBRARIES_DIR = "libraries"


class LibraryType(str, Enum):
    """How a bundled library is published."""

    OFFICIAL = "official"
    OFFICIAL_VERSION_MISMATCH = "official-version-mismatch"
    THIRD_PARTY = "third-party"
    PRIVATE = "private"


@dataclass
class LibraryClassification:
    """How one bundled library should be published."""

    name: str
    version: Optional[str]
    type: LibraryType
    path: Path
    official_info: Optional[Dict[str, Any]] = None


@dataclass
class LibraryProcessingResult:
    """
    Outcome of processing a plugin's libraries for publishing.

    Attributes:
        dependencies: ``{"libraries": {name: version}}`` for official libraries
        kept: Libraries that stay bundled in the plugin
        extracted: Official libraries replaced by a dependency
        warnings: Human-readable notes about kept official libraries
    """

    dependencies: Dict[str, Dict[str, str]] = field(
        default_factory=lambda: {"libraries": {}}
    )
    kept: List[LibraryClassification] = field(default_factory=list)
    extracted: List[LibraryClassification] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def classify_library(
    lib_path: Union[str, Path],
    dir_name: Optional[str] = None,
    index: Optional[ArduinoLibraryIndex] = None,
) -> LibraryClassification:
    """
    Classify a single library directory.

    Args:
        lib_path: Library directory
        dir_name: Name reported for private libraries (default: directory name)
        index: Arduino Library Index client (default: new client)

    Raises:
        LibraryIndexError: If the Arduino index is needed but unavailable
    """
    lib_path = Path(lib_path)
    dir_name = dir_name or lib_path.name

    info = get_library_info(lib_path)
    if info is None:
        return LibraryClassification(
            name=dir_name, version=None, type=LibraryType.PRIVATE, path=lib_path
        )

    index = index or ArduinoLibraryIndex()

    official = index.find_library(info.name, info.version)
    if official is not None:
        return LibraryClassification(
            name=info.name,
            version=info.version,
            type=LibraryType.OFFICIAL,
            path=lib_path,
            official_info=official,
        )

    if index.is_official_library(info.name):
        library_type = LibraryType.OFFICIAL_VERSION_MISMATCH
    else:
        library_type = LibraryType.THIRD_PARTY

    return LibraryClassification(
        name=info.name, version=info.version, type=library_type, path=lib_path
    )


def scan_libraries(
    plugin_dir: Union[str, Path], index: Optional[ArduinoLibraryIndex] = None
) -> List[LibraryClassification]:
    """
    Classify every subdirectory of ``{plugin_dir}/libraries``.

    Returns:
        Classifications ordered by directory name (empty if there is no
        libraries directory)
    """
    libraries_dir = Path(plugin_dir) / LIBRARIES_DIR
    if not libraries_dir.is_dir():
        return []

    index = index or ArduinoLibraryIndex()

    return [
        classify_library(entry, entry.name, index)
        for entry in sorted(libraries_dir.iterdir())
        if entry.is_dir()
    ]


def process_libraries(
    plugin_dir: Union[str, Path], index: Optional[ArduinoLibraryIndex] = None
) -> LibraryProcessingResult:
    """
    Split a plugin's libraries into shared dependencies and bundled ones.

    Official libraries become ``dependencies.libraries`` entries; all others
    are kept in the plugin.

    Example:
        >>> result = process_libraries(Path("my-plugin"))
        >>> result.dependencies
        {'libraries': {'Servo': '1.2.1'}}
    """
    result = LibraryProcessingResult()

    for lib in scan_libraries(plugin_dir, index):
        if lib.type == LibraryType.OFFICIAL:
            result.dependencies["libraries"][lib.name] = lib.version
            result.extracted.append(lib)
            logger.info(f"{lib.name}@{lib.version} -> shared dependency (official Arduino library)")
        elif lib.type == LibraryType.OFFICIAL_VERSION_MISMATCH:
            result.kept.append(lib)
            result.warnings.append(
                f"{lib.name}@{lib.version} is not published in the Arduino Library "
                "Index; kept in plugin"
            )
            logger.info(f"{lib.name}@{lib.version} -> kept in plugin (version mismatch)")
        elif lib.type == LibraryType.THIRD_PARTY:
            result.kept.append(lib)
            logger.info(f"{lib.name}@{lib.version} -> kept in plugin (third-party)")
        else:
            result.kept.append(lib)
            logger.info(f"{lib.name} -> kept in plugin (private)")

    return result
