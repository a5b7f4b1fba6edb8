"""
Shared utilities for CLI commands.

Provides common functionality used across multiple CLI commands to
eliminate duplication and ensure consistent behavior.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from openblock_cli.config.settings import load_service_settings
from openblock_cli.toolchain.companion import CompanionServiceClient
from openblock_cli.toolchain.fetcher import (
    BatchResult,
    DownloadProgressed,
    FetchEvent,
    FetchStatus,
    StatusChanged,
    ToolchainFinished,
    ToolchainStarted,
)
from openblock_cli.toolchain.packages_index import PackagesIndexClient

logger = logging.getLogger(__name__)


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def print_warning(message: str):
    """Print warning message to stderr."""
    print(f"WARNING: {message}", file=sys.stderr)


def print_section(title: str, width: int = 50):
    print()
    print(title)
    print("-" * width)


def mask_token(token: Optional[str]) -> str:
    """
    Mask a secret for display.

    Example:
        >>> mask_token("ghp_1234567890abcd")
        'ghp_...abcd'
    """
    if not token or len(token) < 8:
        return "****"
    return f"{token[:4]}...{token[-4:]}"


class FetchProgressPrinter:
    """
    Renders fetch events as a single, continuously rewritten status line.

    On a non-interactive stream only the per-toolchain outcome lines are
    printed.
    """

    _STATUS_LABELS = {
        FetchStatus.VERIFYING: "Verifying",
        FetchStatus.DOWNLOADING: "Downloading",
        FetchStatus.EXTRACTING: "Extracting",
    }

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self.interactive = hasattr(self.stream, "isatty") and self.stream.isatty()

    def _rewrite(self, text: str):
        if self.interactive:
            self.stream.write(f"\r{text}\x1b[K")
            self.stream.flush()

    def _clear(self):
        if self.interactive:
            self.stream.write("\r\x1b[K")
            self.stream.flush()

    def __call__(self, event: FetchEvent):
        if isinstance(event, ToolchainStarted):
            self._rewrite(f"  Resolving toolchain: {event.name}...")
        elif isinstance(event, StatusChanged):
            label = self._STATUS_LABELS.get(event.status, event.status.value)
            self._rewrite(f"  {label} toolchain: {event.name}...")
        elif isinstance(event, DownloadProgressed):
            self._rewrite(f"  Downloading toolchain: {event.name}... {event.progress}")
        elif isinstance(event, ToolchainFinished):
            self._clear()
            result = event.result
            if not result.success:
                line = f"  [ERROR] {result.name}: {result.error}"
            elif result.skipped:
                line = f"  [SKIP] {result.name} (already exists)"
            else:
                line = f"  [OK] {result.name}@{result.version}"
            print(line, file=self.stream)


def print_batch_summary(batch: BatchResult):
    """Print download counts, or the failures if any fetch failed."""
    if batch.success:
        print(
            f"Toolchains: {batch.downloaded_count} downloaded, "
            f"{batch.skipped_count} already exist"
        )
        return

    print_error("Some toolchains failed to download")
    for result in batch.failures:
        print(f"  [ERROR] {result.name}: {result.error}", file=sys.stderr)


# ============================================================================
# Client construction
# ============================================================================


def build_clients(registry_url: Optional[str] = None):
    """
    Build the companion-service client and packages index client from settings.

    Only a registry given on the command line replaces the Resource Service
    as the index source. A registry from settings or OPENBLOCK_REGISTRY is
    used only when the Resource Service cannot supply the index.

    Args:
        registry_url: Registry URL from the command line

    Returns:
        Tuple of (CompanionServiceClient, PackagesIndexClient, registry_url)
    """
    settings = load_service_settings()
    service = CompanionServiceClient.from_settings(settings)
    index_client = PackagesIndexClient(
        service=service, fallback_registry_url=settings.registry_url
    )
    return service, index_client, registry_url


# ============================================================================
# Path Utilities
# ============================================================================


def resolve_project_root(path: Optional[Path] = None) -> Path:
    """
    Resolve project root directory.

    Args:
        path: Optional path (defaults to current directory)

    Returns:
        Resolved absolute path
    """
    if path is None:
        path = Path.cwd()
    return path.resolve()
