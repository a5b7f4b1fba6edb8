"""
Unit tests for host platform detection.
"""

from unittest.mock import patch

import pytest

from openblock_cli.core.platform import (
    PlatformInfo,
    clear_platform_cache,
    detect_platform,
    get_host_string,
)


class TestPlatformInfo:
    def test_host_string(self):
        assert PlatformInfo("darwin", "arm64").host_string() == "darwin-arm64"

    def test_str(self):
        assert str(PlatformInfo("win32", "x64")) == "win32-x64"

    def test_frozen(self):
        info = PlatformInfo("linux", "x64")
        with pytest.raises(AttributeError):
            info.os = "darwin"


class TestDetectPlatform:
    @pytest.mark.parametrize(
        "sys_platform,machine,expected",
        [
            ("linux", "x86_64", "linux-x64"),
            ("linux", "aarch64", "linux-arm64"),
            ("linux", "armv7l", "linux-arm"),
            ("darwin", "arm64", "darwin-arm64"),
            ("darwin", "x86_64", "darwin-x64"),
            ("win32", "AMD64", "win32-x64"),
            ("win32", "x86", "win32-ia32"),
            ("cygwin", "i686", "win32-ia32"),
        ],
    )
    def test_host_identifier(self, sys_platform, machine, expected):
        with patch("openblock_cli.core.platform.sys.platform", sys_platform), patch(
            "openblock_cli.core.platform.platform.machine", return_value=machine
        ):
            clear_platform_cache()
            assert get_host_string() == expected

    def test_detection_is_cached(self):
        with patch(
            "openblock_cli.core.platform.platform.machine", return_value="x86_64"
        ) as machine:
            clear_platform_cache()
            detect_platform()
            detect_platform()

        assert machine.call_count == 1
