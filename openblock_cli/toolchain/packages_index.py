"""
Packages index access.

The packages index lists every device, extension, library and toolchain
published by the enabled registries. It is read from the local Resource
Service when possible, or fetched directly from a registry URL. If both
fail an empty index is returned: a missing toolchain is a per-item
failure for the caller, not a reason to abort.

Successful results are kept in a TTL cache owned by the client.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import RequestException

from openblock_cli.core.cache import DEFAULT_TTL_SECONDS, TtlCache
from openblock_cli.toolchain.companion import CompanionServiceClient

logger = logging.getLogger(__name__)

REGISTRY_TIMEOUT = 30

PACKAGE_CATEGORIES = ("devices", "extensions", "libraries", "toolchains")


def empty_index() -> Dict[str, List[Any]]:
    """Default index used when no source is reachable."""
    return {category: [] for category in PACKAGE_CATEGORIES}


class PackagesIndexClient:
    """
    Fetches and caches the packages index.

    Example:
        >>> client = PackagesIndexClient()
        >>> index = client.get_packages_index()
        >>> toolchain = find_toolchain(index, "avr-gcc")
    """

    def __init__(
        self,
        service: Optional[CompanionServiceClient] = None,
        cache: Optional[TtlCache] = None,
        session: Optional[requests.Session] = None,
        fallback_registry_url: Optional[str] = None,
    ):
        """
        Initialize client.

        Args:
            service: Resource Service client (default: localhost defaults)
            cache: Cache for fetched indexes (default: 1 hour TTL)
            session: HTTP session used for direct registry fetches
            fallback_registry_url: Registry packages.json URL tried only when
                the Resource Service cannot supply the index
        """
        self.service = service or CompanionServiceClient()
        self.cache = cache if cache is not None else TtlCache(DEFAULT_TTL_SECONDS)
        self.session = session or requests.Session()
        self.fallback_registry_url = fallback_registry_url

    def get_packages_index(
        self, registry_url: Optional[str] = None, force_refresh: bool = False
    ) -> Dict[str, Any]:
        """
        Get the packages index.

        Resolution order: cached value (unless force_refresh), Resource
        Service (only when no registry_url is given), the registry URL or
        else the fallback registry URL, then the empty default.

        Args:
            registry_url: Optional URL of a registry packages.json used
                instead of the Resource Service
            force_refresh: Ignore any cached index

        Returns:
            Index with devices, extensions, libraries and toolchains lists
        """
        if not force_refresh:
            cached = self.cache.get()
            if cached is not None:
                return cached

        packages = None

        if not registry_url:
            packages = self.service.get_packages()
            if packages is not None:
                logger.debug("Loaded packages index from Resource Service")
            registry_url = self.fallback_registry_url

        if packages is None and registry_url:
            data = self.fetch_from_registry(registry_url)
            if isinstance(data, dict) and isinstance(data.get("packages"), dict):
                packages = data["packages"]
                logger.debug(f"Loaded packages index from {registry_url}")

        if packages is None:
            logger.warning(
                "Packages index unavailable (Resource Service and registry unreachable)"
            )
            return empty_index()

        self.cache.set(packages)
        return packages

    def fetch_from_registry(self, registry_url: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a registry's packages.json directly.

        Returns:
            Parsed JSON document, or None on any network/HTTP/JSON error
        """
        try:
            response = self.session.get(
                registry_url,
                timeout=REGISTRY_TIMEOUT,
                headers={
                    "Accept": "application/json",
                    "User-Agent": "openblock-cli",
                },
            )
            response.raise_for_status()
            return response.json()
        except (RequestException, ValueError) as e:
            logger.debug(f"Failed to fetch registry {registry_url}: {e}")
            return None

    def clear_cache(self) -> None:
        """Invalidate the cached index."""
        self.cache.clear()


def _find(index: Dict[str, Any], category: str, name: str) -> Optional[Dict[str, Any]]:
    entries = index.get(category)
    if not isinstance(entries, list):
        return None

    for entry in entries:
        if isinstance(entry, dict) and (
            entry.get("id") == name or entry.get("name") == name
        ):
            return entry

    return None


def find_toolchain(index: Dict[str, Any], name: str) -> Optional[Dict[str, Any]]:
    """Find a toolchain by exact ``id`` or ``name``."""
    return _find(index, "toolchains", name)


def find_library(index: Dict[str, Any], name: str) -> Optional[Dict[str, Any]]:
    """Find a library by exact ``id`` or ``name``."""
    return _find(index, "libraries", name)
