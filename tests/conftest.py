"""
Pytest configuration and shared fixtures for openblock-cli tests.
"""

import io
import json
import zipfile
from pathlib import Path
from typing import Dict, Optional

import pytest

from openblock_cli.core.platform import clear_platform_cache


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_platform_cache():
    """Platform detection is cached per process; reset between tests."""
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture
def make_project(tmp_path: Path):
    """
    Factory creating a plugin project with a package.json.

    Example:
        project = make_project(toolchains={"avr-gcc": "latest"})
    """

    def _make(
        libraries: Optional[Dict] = None,
        toolchains: Optional[Dict] = None,
        openblock: Optional[Dict] = None,
        name: str = "plugin",
    ) -> Path:
        project = tmp_path / name
        project.mkdir(parents=True, exist_ok=True)

        if openblock is None:
            dependencies = {}
            if libraries is not None:
                dependencies["libraries"] = libraries
            if toolchains is not None:
                dependencies["toolchains"] = toolchains
            openblock = {"dependencies": dependencies}

        package = {"name": f"openblock-{name}", "version": "1.0.0", "openblock": openblock}
        (project / "package.json").write_text(json.dumps(package, indent=2))
        return project

    return _make


@pytest.fixture
def make_zip():
    """Factory building an in-memory zip archive from {path: content}."""

    def _make(files: Dict[str, str]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            for name, content in files.items():
                zf.writestr(name, content)
        return buffer.getvalue()

    return _make


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Create isolated home directory for tests."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: fake_home))
    monkeypatch.delenv("OPENBLOCK_REGISTRY", raising=False)
    monkeypatch.delenv("OPENBLOCK_SERVICE_HOST", raising=False)

    return fake_home
