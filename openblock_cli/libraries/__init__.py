"""
Arduino library handling: index queries, library.properties parsing and
classification of bundled libraries.
"""

from openblock_cli.libraries.arduino_index import (
    ARDUINO_LIBRARY_INDEX_URL,
    ArduinoLibraryIndex,
    version_key,
)
from openblock_cli.libraries.processor import (
    LibraryClassification,
    LibraryProcessingResult,
    LibraryType,
    classify_library,
    process_libraries,
    scan_libraries,
)
from openblock_cli.libraries.properties import (
    LibraryInfo,
    get_library_info,
    is_arduino_library,
    parse_library_properties,
)

__all__ = [
    "ARDUINO_LIBRARY_INDEX_URL",
    "ArduinoLibraryIndex",
    "version_key",
    "LibraryClassification",
    "LibraryProcessingResult",
    "LibraryType",
    "classify_library",
    "process_libraries",
    "scan_libraries",
    "LibraryInfo",
    "get_library_info",
    "is_arduino_library",
    "parse_library_properties",
]
