"""
Tests for merging fetched toolchains through the Resource Service.
"""

from pathlib import Path
from unittest.mock import Mock

import pytest

from openblock_cli.toolchain.companion import MergeResult
from openblock_cli.toolchain.fetcher import FetchResult
from openblock_cli.toolchain.merger import (
    ToolchainMergeCoordinator,
    platform_for_toolchain,
)


@pytest.mark.parametrize(
    "name,family",
    [
        ("micropython-esp32", "micropython"),
        ("micropython", "micropython"),
        ("avr-gcc", "arduino"),
        ("arduino-arduino-avr", "arduino"),
        ("esp-micropython", "arduino"),
    ],
)
def test_platform_for_toolchain(name, family):
    assert platform_for_toolchain(name) == family


def make_service(*results):
    service = Mock()
    service.merge_toolchain.side_effect = list(results)
    return service


def test_merges_only_results_with_extract_path(tmp_path):
    service = make_service(MergeResult(True, 10, 2, "ok"))
    results = [
        FetchResult(name="avr-gcc", success=True, extract_path=tmp_path / "avr-gcc"),
        FetchResult(name="cached", success=True, skipped=True),
        FetchResult(name="broken", success=False, error="boom"),
    ]

    summary = ToolchainMergeCoordinator(service).merge_all(results)

    assert summary.success is True
    assert summary.merged == 10
    assert summary.errors == []
    service.merge_toolchain.assert_called_once_with(
        "arduino", str((tmp_path / "avr-gcc").resolve())
    )


def test_failures_collected_and_processing_continues(tmp_path):
    service = make_service(
        MergeResult(False, 0, 0, "Resource Service not running at localhost:20112"),
        MergeResult(True, 4, 0, "ok"),
    )
    results = [
        FetchResult(name="avr-gcc", success=True, extract_path=tmp_path / "a"),
        FetchResult(
            name="micropython-esp32", success=True, extract_path=tmp_path / "m"
        ),
    ]

    summary = ToolchainMergeCoordinator(service).merge_all(results)

    assert summary.success is False
    assert summary.merged == 4
    assert summary.errors == [
        "avr-gcc: Resource Service not running at localhost:20112"
    ]
    assert service.merge_toolchain.call_args_list[1].args[0] == "micropython"


def test_nothing_to_merge():
    service = make_service()

    summary = ToolchainMergeCoordinator(service).merge_all([])

    assert summary.success is True
    assert summary.merged == 0
    service.merge_toolchain.assert_not_called()


def test_extract_path_as_given_is_resolved(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    service = make_service(MergeResult(True, 1, 0, "ok"))

    ToolchainMergeCoordinator(service).merge_all(
        [FetchResult(name="avr-gcc", success=True, extract_path=Path("rel/avr-gcc"))]
    )

    assert service.merge_toolchain.call_args.args[1] == str(
        (tmp_path / "rel" / "avr-gcc").resolve()
    )
