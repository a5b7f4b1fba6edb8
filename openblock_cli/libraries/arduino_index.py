"""
Arduino Library Index queries.

Used to tell whether a library dependency refers to an official Arduino
library and to look up its published versions and download URLs.

Index URL: https://downloads.arduino.cc/libraries/library_index.json
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import RequestException

from openblock_cli.core.cache import DEFAULT_TTL_SECONDS, TtlCache
from openblock_cli.core.exceptions import LibraryIndexError

logger = logging.getLogger(__name__)

ARDUINO_LIBRARY_INDEX_URL = "https://downloads.arduino.cc/libraries/library_index.json"

INDEX_TIMEOUT = 30


def version_key(version: str) -> tuple:
    """
    Convert a version string to a sortable tuple.

    Non-numeric parts sort as 0.

    Example:
        >>> version_key("1.10.2") > version_key("1.9.0")
        True
    """
    return tuple(int(p) if p.isdigit() else 0 for p in str(version).split("."))


class ArduinoLibraryIndex:
    """
    Client for the Arduino Library Index.

    The index is large (tens of MB), so it is fetched once and kept for an
    hour.

    Example:
        >>> index = ArduinoLibraryIndex()
        >>> index.is_official_library("Servo")
        True
        >>> index.get_library_versions("Servo")[:2]
        ['1.2.2', '1.2.1']
    """

    def __init__(
        self,
        url: str = ARDUINO_LIBRARY_INDEX_URL,
        cache: Optional[TtlCache] = None,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.cache = cache if cache is not None else TtlCache(DEFAULT_TTL_SECONDS)
        self.session = session or requests.Session()

    def fetch_index(self, force_refresh: bool = False) -> Dict[str, Any]:
        """
        Fetch the library index, using the cache unless force_refresh.

        Raises:
            LibraryIndexError: If the index cannot be fetched or parsed
        """
        if not force_refresh:
            cached = self.cache.get()
            if cached is not None:
                return cached

        logger.info("Fetching Arduino Library Index...")

        try:
            response = self.session.get(self.url, timeout=INDEX_TIMEOUT)
        except RequestException as e:
            raise LibraryIndexError(f"Failed to fetch Arduino Library Index: {e}") from e

        if not response.ok:
            raise LibraryIndexError(
                f"Failed to fetch Arduino Library Index: {response.status_code}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise LibraryIndexError(f"Invalid Arduino Library Index: {e}") from e

        if not isinstance(data, dict):
            raise LibraryIndexError("Invalid Arduino Library Index: expected an object")

        libraries = data.get("libraries")
        count = len(libraries) if isinstance(libraries, list) else 0
        logger.info(f"Loaded {count} libraries from Arduino Index")

        self.cache.set(data)
        return data

    def _releases(self, name: str) -> List[Dict[str, Any]]:
        libraries = self.fetch_index().get("libraries")
        if not isinstance(libraries, list):
            return []
        return [
            lib for lib in libraries if isinstance(lib, dict) and lib.get("name") == name
        ]

    def find_library(
        self, name: str, version: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Find a library release.

        Args:
            name: Exact library name
            version: Specific version (default: the newest release)

        Returns:
            Release entry, or None if not found
        """
        releases = self._releases(name)
        if not releases:
            return None

        if version:
            return next((r for r in releases if r.get("version") == version), None)

        return max(releases, key=lambda r: version_key(r.get("version", "")))

    def is_official_library(self, name: str) -> bool:
        return self.find_library(name) is not None

    def get_library_versions(self, name: str) -> List[str]:
        """All published versions of a library, newest first."""
        versions = [r["version"] for r in self._releases(name) if r.get("version")]
        return sorted(versions, key=version_key, reverse=True)

    def get_download_url(self, name: str, version: str) -> Optional[str]:
        release = self.find_library(name, version)
        return release.get("url") if release else None
