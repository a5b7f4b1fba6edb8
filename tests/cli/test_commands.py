"""
End-to-end tests for CLI commands with mocked HTTP.
"""

import hashlib
import json
from unittest.mock import patch

import pytest
import responses

from openblock_cli.cli.parser import CLI
from openblock_cli.core.platform import PlatformInfo
from openblock_cli.libraries.arduino_index import ARDUINO_LIBRARY_INDEX_URL
from openblock_cli.toolchain.companion import SERVICE_NAME

REGISTRY_URL = "https://registry.example.com/packages.json"
ARCHIVE_URL = "https://downloads.example.com/avr-gcc.zip"
DEV_URL = "http://localhost:20112"
SERVICE_PACKAGES_URL = "http://localhost:20111/api/repositories/packages"


@pytest.fixture(autouse=True)
def _host_platform(isolated_home):
    with patch(
        "openblock_cli.toolchain.fetcher.detect_platform",
        return_value=PlatformInfo("darwin", "arm64"),
    ):
        yield


@pytest.fixture
def archive(make_zip):
    return make_zip({"avr/bin/avr-gcc": "#!/bin/sh\n"})


def registry_document(archive: bytes):
    return {
        "packages": {
            "toolchains": [
                {
                    "id": "avr-gcc",
                    "version": "7.3.0",
                    "systems": [
                        {
                            "host": "darwin-arm64",
                            "url": ARCHIVE_URL,
                            "checksum": "SHA-256:"
                            + hashlib.sha256(archive).hexdigest(),
                            "archiveFileName": "avr-gcc.zip",
                            "size": str(len(archive)),
                        }
                    ],
                }
            ],
            "libraries": [{"id": "servo", "version": "1.2.0"}],
        }
    }


class TestDepsCommand:
    def test_missing_package_json(self, tmp_path, capsys):
        result = CLI().run(["--project-root", str(tmp_path), "deps"])

        assert result == 1
        assert "package.json" in capsys.readouterr().err

    def test_local_dependency_errors(self, make_project, capsys):
        project = make_project(libraries={"mylib": "./libraries/mylib"})

        result = CLI().run(["--project-root", str(project), "deps"])

        assert result == 1
        out = capsys.readouterr().out
        assert "Local dependency errors:" in out
        assert 'Local library "mylib" not found at: ./libraries/mylib' in out

    def test_warnings_then_nothing_remote(self, make_project, capsys):
        project = make_project(toolchains={"avr-gcc": "^7.0.0"})

        result = CLI().run(["--project-root", str(project), "deps"])

        assert result == 0
        out = capsys.readouterr().out
        assert "Dependency warnings:" in out
        assert "[WARN]" in out

    @responses.activate
    def test_fetch_and_merge(self, make_project, archive, capsys):
        project = make_project(toolchains={"avr-gcc": "latest"})
        responses.add(responses.GET, REGISTRY_URL, json=registry_document(archive))
        responses.add(responses.GET, ARCHIVE_URL, body=archive)
        responses.add(responses.GET, f"{DEV_URL}/", json={"name": SERVICE_NAME})
        responses.add(
            responses.POST,
            f"{DEV_URL}/api/dev/merge-toolchain",
            json={"merged": 7, "skipped": 0},
        )

        result = CLI().run(
            ["--project-root", str(project), "deps", "--registry", REGISTRY_URL]
        )

        assert result == 0
        out = capsys.readouterr().out
        assert "[OK] avr-gcc@7.3.0" in out
        assert "Toolchains: 1 downloaded, 0 already exist" in out
        assert "[OK] Merged 7 components" in out

        extracted = project / ".openblock" / "toolchains" / "avr-gcc"
        assert (extracted / "avr" / "bin" / "avr-gcc").is_file()
        body = json.loads(responses.calls[-1].request.body)
        assert body == {"platform": "arduino", "sourcePath": str(extracted.resolve())}

    @responses.activate
    def test_no_merge(self, make_project, archive):
        project = make_project(toolchains={"avr-gcc": "latest"})
        responses.add(responses.GET, REGISTRY_URL, json=registry_document(archive))
        responses.add(responses.GET, ARCHIVE_URL, body=archive)

        result = CLI().run(
            [
                "--project-root",
                str(project),
                "deps",
                "--registry",
                REGISTRY_URL,
                "--no-merge",
            ]
        )

        assert result == 0
        assert len(responses.calls) == 2

    @responses.activate
    def test_unknown_toolchain_fails_without_merge(self, make_project, archive, capsys):
        project = make_project(toolchains={"avr-gcc": "latest", "ghost": "latest"})
        responses.add(responses.GET, REGISTRY_URL, json=registry_document(archive))
        responses.add(responses.GET, ARCHIVE_URL, body=archive)

        result = CLI().run(
            ["--project-root", str(project), "deps", "--registry", REGISTRY_URL]
        )

        assert result == 1
        captured = capsys.readouterr()
        assert "[OK] avr-gcc@7.3.0" in captured.out
        assert 'Toolchain "ghost" not found in packages.json' in captured.out
        assert "Dependency resolution failed" in captured.err
        assert not any("merge-toolchain" in c.request.url for c in responses.calls)

    @responses.activate
    def test_service_not_running_skips_merge(self, make_project, archive, capsys):
        project = make_project(toolchains={"avr-gcc": "latest"})
        responses.add(responses.GET, REGISTRY_URL, json=registry_document(archive))
        responses.add(responses.GET, ARCHIVE_URL, body=archive)
        responses.add(responses.GET, f"{DEV_URL}/", json={"name": "other"})

        result = CLI().run(
            ["--project-root", str(project), "deps", "--registry", REGISTRY_URL]
        )

        assert result == 0
        assert "were not merged" in capsys.readouterr().err

    @responses.activate
    def test_saved_registry_does_not_replace_service(
        self, make_project, archive, monkeypatch
    ):
        saved_registry = "https://registry.example.com/down.json"
        monkeypatch.setenv("OPENBLOCK_REGISTRY", saved_registry)
        project = make_project(toolchains={"avr-gcc": "latest"})
        responses.add(responses.GET, saved_registry, status=503)
        responses.add(
            responses.GET,
            SERVICE_PACKAGES_URL,
            json={"success": True, "data": registry_document(archive)["packages"]},
        )
        responses.add(responses.GET, ARCHIVE_URL, body=archive)

        result = CLI().run(["--project-root", str(project), "deps", "--no-merge"])

        assert result == 0
        urls = [c.request.url for c in responses.calls]
        assert urls == [SERVICE_PACKAGES_URL, ARCHIVE_URL]

    @responses.activate
    def test_saved_registry_used_when_service_down(
        self, make_project, archive, monkeypatch
    ):
        monkeypatch.setenv("OPENBLOCK_REGISTRY", REGISTRY_URL)
        project = make_project(toolchains={"avr-gcc": "latest"})
        responses.add(responses.GET, SERVICE_PACKAGES_URL, status=503)
        responses.add(responses.GET, REGISTRY_URL, json=registry_document(archive))
        responses.add(responses.GET, ARCHIVE_URL, body=archive)

        result = CLI().run(["--project-root", str(project), "deps", "--no-merge"])

        assert result == 0
        assert (project / ".openblock" / "toolchains" / "avr-gcc").is_dir()


class TestFetchCommand:
    @responses.activate
    def test_fetch_then_skip(self, tmp_path, archive, capsys):
        responses.add(responses.GET, REGISTRY_URL, json=registry_document(archive))
        responses.add(responses.GET, ARCHIVE_URL, body=archive)
        argv = ["--project-root", str(tmp_path), "fetch", "avr-gcc", "--registry", REGISTRY_URL]

        assert CLI().run(argv) == 0
        assert CLI().run(argv) == 0

        out = capsys.readouterr().out
        assert "[SKIP] avr-gcc (already exists)" in out
        assert "Toolchains: 0 downloaded, 1 already exist" in out

    @responses.activate
    def test_fetch_failure_exit_code(self, tmp_path, capsys):
        responses.add(responses.GET, REGISTRY_URL, status=503)

        result = CLI().run(
            ["--project-root", str(tmp_path), "fetch", "avr-gcc", "--registry", REGISTRY_URL]
        )

        assert result == 1
        assert "Some toolchains failed to download" in capsys.readouterr().err


class TestIndexCommand:
    @responses.activate
    def test_lists_toolchains_and_libraries(self, archive, capsys):
        responses.add(responses.GET, REGISTRY_URL, json=registry_document(archive))

        assert CLI().run(["index", "--registry", REGISTRY_URL]) == 0

        out = capsys.readouterr().out
        assert "avr-gcc" in out
        assert "7.3.0" in out
        assert "servo" in out

    @responses.activate
    def test_empty_index(self, capsys):
        responses.add(responses.GET, REGISTRY_URL, status=404)

        assert CLI().run(["index", "--registry", REGISTRY_URL]) == 0


class TestLibrariesCommand:
    @staticmethod
    def add_library(project, dir_name, properties=None):
        lib_dir = project / "libraries" / dir_name
        lib_dir.mkdir(parents=True)
        if properties:
            (lib_dir / "library.properties").write_text(properties)

    @responses.activate
    def test_reports_shared_and_kept_libraries(self, make_project, capsys):
        project = make_project()
        self.add_library(project, "Servo", "name=Servo\nversion=1.2.1\n")
        self.add_library(project, "Wire", "name=Wire\nversion=0.5.0\n")
        self.add_library(project, "secret")
        responses.add(
            responses.GET,
            ARDUINO_LIBRARY_INDEX_URL,
            json={
                "libraries": [
                    {"name": "Servo", "version": "1.2.1"},
                    {"name": "Wire", "version": "1.0.0"},
                ]
            },
        )

        result = CLI().run(["--project-root", str(project), "libraries"])

        assert result == 0
        captured = capsys.readouterr()
        assert "[OFFICIAL] Servo@1.2.1 -> dependencies.libraries" in captured.out
        assert "[KEEP] Wire@0.5.0 (official-version-mismatch)" in captured.out
        assert "[KEEP] secret (private)" in captured.out
        assert '"Servo": "1.2.1"' in captured.out
        assert "Wire@0.5.0 is not published" in captured.err

    def test_no_libraries(self, make_project, capsys):
        project = make_project()

        assert CLI().run(["--project-root", str(project), "libraries"]) == 0
        assert "No libraries found" in capsys.readouterr().out

    @responses.activate
    def test_index_unavailable(self, make_project, capsys):
        project = make_project()
        self.add_library(project, "Servo", "name=Servo\nversion=1.2.1\n")
        responses.add(responses.GET, ARDUINO_LIBRARY_INDEX_URL, status=503)

        assert CLI().run(["--project-root", str(project), "libraries"]) == 1
        assert "Failed to fetch Arduino Library Index" in capsys.readouterr().err


class TestConfigCommand:
    def test_set_get_masks_token(self, capsys):
        assert CLI().run(["config", "set", "github-token", "ghp_1234567890abcd"]) == 0
        assert CLI().run(["config", "get", "github-token"]) == 0

        out = capsys.readouterr().out
        assert "github-token has been set" in out
        assert "github-token: ghp_...abcd" in out
        assert "1234567890" not in out

    def test_get_unset(self, capsys):
        assert CLI().run(["config", "get", "registry"]) == 0
        assert "registry: (not set)" in capsys.readouterr().out

    def test_delete(self, isolated_home, capsys):
        CLI().run(["config", "set", "registry", "https://r"])
        assert CLI().run(["config", "delete", "registry"]) == 0

        assert CLI().run(["config", "list"]) == 0
        assert "(no configuration set)" in capsys.readouterr().out

    def test_list(self, capsys):
        CLI().run(["config", "set", "registry", "https://r"])
        CLI().run(["config", "set", "github-token", "short"])
        capsys.readouterr()

        assert CLI().run(["config", "list"]) == 0

        out = capsys.readouterr().out
        assert "registry: https://r" in out
        assert "github-token: ****" in out

    def test_unknown_key(self, capsys):
        assert CLI().run(["config", "set", "colour", "blue"]) == 1
        assert "Unknown configuration key: colour" in capsys.readouterr().err

    def test_set_requires_value(self, capsys):
        assert CLI().run(["config", "set", "registry"]) == 1
        assert "value is required" in capsys.readouterr().err

    def test_key_required(self, capsys):
        assert CLI().run(["config", "get"]) == 1
        assert "key is required" in capsys.readouterr().err
