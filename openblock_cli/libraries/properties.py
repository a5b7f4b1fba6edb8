"""
Parser for Arduino ``library.properties`` files.

The format is one ``key=value`` pair per line; blank lines and lines
starting with ``#`` are ignored. Only the first ``=`` separates key and
value. See
https://arduino.github.io/arduino-cli/latest/library-specification/#libraryproperties-file-format
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)

LIBRARY_PROPERTIES = "library.properties"

DEFAULT_VERSION = "0.0.0"
DEFAULT_CATEGORY = "Uncategorized"


@dataclass
class LibraryInfo:
    """Metadata declared by a library's library.properties."""

    name: str
    version: str = DEFAULT_VERSION
    author: str = ""
    maintainer: str = ""
    sentence: str = ""
    paragraph: str = ""
    category: str = DEFAULT_CATEGORY
    url: str = ""
    architectures: List[str] = field(default_factory=lambda: ["*"])
    depends: List[str] = field(default_factory=list)


def parse_library_properties(file_path: Union[str, Path]) -> Optional[Dict[str, str]]:
    """
    Parse a library.properties file.

    Args:
        file_path: Path to library.properties

    Returns:
        Mapping of keys to values, or None if the file does not exist

    Example:
        >>> parse_library_properties("libraries/Servo/library.properties")
        {'name': 'Servo', 'version': '1.2.1', ...}
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        return None

    content = file_path.read_text(encoding="utf-8", errors="replace")
    props = {}

    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        key, sep, value = line.partition("=")
        key = key.strip()
        if sep and key:
            props[key] = value.strip()

    logger.debug(f"Parsed {len(props)} properties from {file_path}")
    return props


def _split_list(value: Optional[str]) -> List[str]:
    return [item.strip() for item in value.split(",")] if value else []


def get_library_info(lib_dir: Union[str, Path]) -> Optional[LibraryInfo]:
    """
    Read library metadata from a library directory.

    Returns:
        LibraryInfo, or None if there is no library.properties or it has
        no ``name``
    """
    props = parse_library_properties(Path(lib_dir) / LIBRARY_PROPERTIES)
    if not props or not props.get("name"):
        return None

    return LibraryInfo(
        name=props["name"],
        version=props.get("version") or DEFAULT_VERSION,
        author=props.get("author", ""),
        maintainer=props.get("maintainer", ""),
        sentence=props.get("sentence", ""),
        paragraph=props.get("paragraph", ""),
        category=props.get("category") or DEFAULT_CATEGORY,
        url=props.get("url", ""),
        architectures=_split_list(props.get("architectures")) or ["*"],
        depends=_split_list(props.get("depends")),
    )


def is_arduino_library(lib_dir: Union[str, Path]) -> bool:
    """True if lib_dir has a library.properties declaring a name."""
    return get_library_info(lib_dir) is not None
