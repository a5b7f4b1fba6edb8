"""
HTTP client for the local OpenBlock Resource Service.

The Resource Service is a helper process running on the developer's
machine. The CLI uses it to:
- read the combined packages index of all enabled repositories
  (``GET /api/repositories/packages`` on the index port)
- check that the service is up (``GET /`` on the dev port)
- merge an extracted toolchain into the unified toolchain tree
  (``POST /api/dev/merge-toolchain`` on the dev port)

None of these calls raise on network failure; they report it in their
return value so callers can fall back or collect errors.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from openblock_cli.config.settings import (
    DEFAULT_DEV_SERVICE_PORT,
    DEFAULT_SERVICE_HOST,
    DEFAULT_SERVICE_PORT,
    ServiceSettings,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "openblock-resource-server"

PACKAGES_TIMEOUT = 10
STATUS_TIMEOUT = 3
# Merging copies files on the service side and may take a while.
MERGE_TIMEOUT = 300


@dataclass
class ServiceStatus:
    running: bool
    message: str


@dataclass
class MergeResult:
    """Outcome of merging one extracted toolchain."""

    success: bool
    merged: int
    skipped: int
    message: str


class CompanionServiceClient:
    """
    Client for the local Resource Service.

    Example:
        >>> client = CompanionServiceClient()
        >>> status = client.check()
        >>> if status.running:
        ...     client.merge_toolchain("arduino", "/path/to/.openblock/toolchains/avr-gcc")
    """

    def __init__(
        self,
        host: str = DEFAULT_SERVICE_HOST,
        port: int = DEFAULT_SERVICE_PORT,
        dev_port: int = DEFAULT_DEV_SERVICE_PORT,
        session: Optional[requests.Session] = None,
    ):
        self.host = host
        self.port = port
        self.dev_port = dev_port
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: ServiceSettings) -> "CompanionServiceClient":
        return cls(host=settings.host, port=settings.port, dev_port=settings.dev_port)

    @property
    def index_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def dev_url(self) -> str:
        return f"http://{self.host}:{self.dev_port}"

    def _not_running(self, port: int) -> str:
        return f"Resource Service not running at {self.host}:{port}"

    def get_packages(self) -> Optional[Dict[str, Any]]:
        """
        Fetch the combined packages index.

        Returns:
            The ``data`` object of a successful response, or None if the
            service is unreachable or answers with anything else
        """
        url = f"{self.index_url}/api/repositories/packages"

        try:
            response = self.session.get(url, timeout=PACKAGES_TIMEOUT)
        except Timeout:
            logger.debug(f"Packages request to Resource Service timed out: {url}")
            return None
        except ConnectionError:
            logger.debug(self._not_running(self.port))
            return None
        except RequestException as e:
            logger.debug(f"Packages request to Resource Service failed: {e}")
            return None

        if response.status_code != 200:
            logger.debug(f"Resource Service returned {response.status_code} for {url}")
            return None

        try:
            result = response.json()
        except ValueError:
            logger.debug("Resource Service returned invalid JSON for packages index")
            return None

        if isinstance(result, dict) and result.get("success") and result.get("data"):
            return result["data"]

        return None

    def check(self) -> ServiceStatus:
        """Check whether the Resource Service is running on the dev port."""
        try:
            response = self.session.get(f"{self.dev_url}/", timeout=STATUS_TIMEOUT)
        except Timeout:
            return ServiceStatus(False, "Connection to Resource Service timed out")
        except ConnectionError:
            return ServiceStatus(False, self._not_running(self.dev_port))
        except RequestException as e:
            return ServiceStatus(False, f"Cannot connect to Resource Service: {e}")

        try:
            name = response.json().get("name")
        except (ValueError, AttributeError):
            return ServiceStatus(
                False, f"Invalid response from port {self.dev_port}"
            )

        if name == SERVICE_NAME:
            return ServiceStatus(True, "Resource Service is running")

        return ServiceStatus(
            False,
            f"Port {self.dev_port} is in use by another service ({name or 'unknown'})",
        )

    def merge_toolchain(self, platform: str, source_path: str) -> MergeResult:
        """
        Ask the service to merge an extracted toolchain directory.

        Args:
            platform: Platform family ('arduino' or 'micropython')
            source_path: Absolute path of the extracted toolchain

        Returns:
            MergeResult with merged/skipped counts
        """
        url = f"{self.dev_url}/api/dev/merge-toolchain"

        try:
            response = self.session.post(
                url,
                json={"platform": platform, "sourcePath": source_path},
                timeout=MERGE_TIMEOUT,
            )
        except ConnectionError:
            return MergeResult(False, 0, 0, self._not_running(self.dev_port))
        except RequestException as e:
            return MergeResult(False, 0, 0, f"Toolchain merge error: {e}")

        if response.status_code != 200:
            return MergeResult(
                False,
                0,
                0,
                f"Failed to merge toolchain: {response.status_code} {response.text}",
            )

        message = f"Merged toolchain from {source_path}"
        try:
            body = response.json()
        except ValueError:
            return MergeResult(True, 0, 0, message)

        if not isinstance(body, dict):
            return MergeResult(True, 0, 0, message)

        return MergeResult(
            True, int(body.get("merged") or 0), int(body.get("skipped") or 0), message
        )
