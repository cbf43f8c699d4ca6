"""
Tests for CLI commands — install, list, uninstall, use, available, menu.
"""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from jlinstall.adapters.archive import TarfileExtractor
from jlinstall.adapters.mock import MockFetcher
from jlinstall.adapters.registry import Toolchain
from jlinstall.main import cli

from tests.conftest import PAGE_URL, asset_url, make_installed


@pytest.fixture
def run(config_file, toolchain, linux_x64, monkeypatch):
    """Invoke the CLI against the temp layout with mocked network."""
    for var in ("JLINSTALL_CONFIG", "JLINSTALL_INSTALL_ROOT", "JLINSTALL_BIN_DIR", "JLINSTALL_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)

    def _run(*args, input=None, toolchain=toolchain):
        with patch("jlinstall.core.use_cases.runtime.build_toolchain", return_value=toolchain), \
             patch("jlinstall.core.use_cases.runtime.host_platform", return_value=linux_x64):
            return CliRunner().invoke(cli, ["--config", str(config_file), *args], input=input)

    return _run


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    @pytest.mark.parametrize("args", [["--help"], ["-h"], ["help"], ["h"]])
    def test_help(self, args):
        result = CliRunner().invoke(cli, args)
        assert result.exit_code == 0
        assert "install" in result.output
        assert "uninstall" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_invalid_command(self):
        result = CliRunner().invoke(cli, ["frobnicate"])
        assert result.exit_code == 1

    def test_extra_arguments(self, run):
        assert run("list", "extra").exit_code == 1

    def test_unknown_option(self):
        assert CliRunner().invoke(cli, ["--bogus"]).exit_code == 1

    def test_missing_config_file(self, tmp_path):
        result = CliRunner().invoke(cli, ["--config", str(tmp_path / "nope.yml"), "list"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_invalid_config_json(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("downloader: wget\n")
        result = CliRunner().invoke(cli, ["-q", "--config", str(path), "list", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["type"] == "ConfigError"


class TestInstallCommand:
    def test_install_latest_and_confirm_default(self, run, layout):
        result = run("install", "latest", input="y\n")
        assert result.exit_code == 0, result.output
        assert "Installation completed successfully" in result.output

        assert layout.binary_path("julia-1.11.0").is_file()
        assert Path(os.readlink(layout.launcher_path("julia-1.11.0"))) == layout.binary_path("julia-1.11.0")
        assert Path(os.readlink(layout.default_path)) == layout.binary_path("julia-1.11.0")

    def test_defaults_to_latest(self, run, layout):
        result = run("install", "--no-default")
        assert result.exit_code == 0, result.output
        assert layout.version_dir("julia-1.11.0").is_dir()
        assert not layout.default_path.is_symlink()

    def test_decline_default(self, run, layout):
        result = run("install", "lts", input="n\n")
        assert result.exit_code == 0
        assert layout.version_dir("julia-1.10.5").is_dir()
        assert not layout.default_path.is_symlink()

    def test_json(self, run, layout):
        result = run("-q", "install", "lts", "--default", "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["identifier"] == "julia-1.10.5-linux-x86_64"
        assert data["status"] == "installed"
        assert data["became_default"] is True

    def test_already_installed_exits_zero(self, run, layout):
        make_installed(layout, "julia-1.11.0")
        layout.default_path.symlink_to(layout.binary_path("julia-1.10.5"))

        result = run("install", "latest")

        assert result.exit_code == 0
        assert "already installed" in result.output
        assert Path(os.readlink(layout.default_path)) == layout.binary_path("julia-1.10.5")

    def test_no_anchors_unknown_alias(self, run, layout, fetcher):
        fetcher.set_document(PAGE_URL, "<html><body>Under maintenance</body></html>")
        result = run("install", "latest")
        assert result.exit_code == 1
        assert "latest" in result.output
        assert list(layout.install_root.iterdir()) == []
        assert list(layout.bin_dir.iterdir()) == []

    def test_no_anchors_json_kind(self, run, fetcher):
        fetcher.set_document(PAGE_URL, "<html></html>")
        result = run("-q", "install", "--json")
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["kind"] == "unknown_alias"

    def test_malformed_version(self, run):
        assert run("install", "1.11").exit_code == 1

    def test_not_found(self, run, layout):
        result = run("install", "1.2.3", "--no-default")
        assert result.exit_code == 1
        assert "No download found" in result.output

    def test_download_failure(self, run, fetcher, layout):
        fetcher.set_failure(asset_url("1.11.0"), "HTTP Error 404")
        result = run("install", "--no-default")
        assert result.exit_code == 1
        assert not [p for p in layout.install_root.iterdir() if p.name != ".jlinstall.lock"]

    def test_network_failure(self, run, fetcher):
        fetcher.set_failure(PAGE_URL, "connection refused")
        result = run("install")
        assert result.exit_code == 1
        assert "connection refused" in result.output

    def test_installed_version_without_download_page(self, run, layout, fetcher):
        make_installed(layout, "julia-1.10.5")
        fetcher.set_failure(PAGE_URL, "connection refused")

        for token in ("1.10.5", "julia-1.10.5-linux-x86_64"):
            result = run("install", token)
            assert result.exit_code == 0, result.output
            assert "already installed" in result.output
        assert ("fetch_document", PAGE_URL) not in fetcher.call_log

    def test_role_still_needs_download_page(self, run, layout, fetcher):
        make_installed(layout, "julia-1.11.0")
        fetcher.set_failure(PAGE_URL, "connection refused")
        result = run("install", "latest")
        assert result.exit_code == 1
        assert "connection refused" in result.output

    def test_install_root_is_a_regular_file(self, run, config_file, tmp_path):
        blocked = tmp_path / "blocked"
        blocked.write_text("not a directory")
        config_file.write_text(config_file.read_text().replace(
            f"install_root: {tmp_path / 'opt'}", f"install_root: {blocked}",
        ))

        result = run("install", "latest", "--no-default")

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Cannot open lock file" in result.output
        assert blocked.read_text() == "not a directory"

    def test_relative_paths_in_config(self, run, config_file, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config_file.write_text("install_root: opt\nbin_dir: bin\nrequire_privileges: false\nlock_timeout: 1\n")

        result = run("install", "1.11.0", "--default")
        assert result.exit_code == 0, result.output

        default = tmp_path / "bin" / "julia"
        target = Path(os.readlink(default))
        assert target.is_absolute()
        assert target == (tmp_path / "opt").resolve() / "julia-1.11.0" / "bin" / "julia"
        assert default.resolve(strict=True).is_file()

        assert run("uninstall", "1.11.0").exit_code == 0
        assert not default.is_symlink()
        assert not (tmp_path / "opt" / "julia-1.11.0").exists()

    def test_short_alias(self, run, layout):
        result = run("i", "--no-default")
        assert result.exit_code == 0, result.output
        assert layout.binary_path("julia-1.11.0").is_file()

    def test_missing_dependency_exits_two(self, run):
        broken = Toolchain(fetcher=MockFetcher(available=False), extractor=TarfileExtractor())
        result = run("install", toolchain=broken)
        assert result.exit_code == 2
        assert "Missing dependency" in result.output

    def test_permission_denied(self, run, config_file):
        config_file.write_text(config_file.read_text().replace("require_privileges: false", "require_privileges: true"))
        with patch("jlinstall.core.services.guard.is_privileged_user", return_value=False):
            result = run("install", "--no-default")
        assert result.exit_code == 1
        assert "Permission denied" in result.output


class TestListCommand:
    def test_empty(self, run):
        result = run("list")
        assert result.exit_code == 0
        assert result.output == ""

    def test_sorted_one_per_line(self, run, layout):
        for name in ("julia-1.11.0", "julia-1.9.4", "julia-1.10.5"):
            make_installed(layout, name)
        first = run("list")
        assert first.exit_code == 0
        assert first.output.splitlines() == ["julia-1.9.4", "julia-1.10.5", "julia-1.11.0"]
        assert run("list").output == first.output

    def test_json_marks_default(self, run, layout):
        make_installed(layout, "julia-1.10.5")
        layout.default_path.symlink_to(layout.binary_path("julia-1.10.5"))
        data = json.loads(run("-q", "list", "--json").output)
        assert data["default"] == "julia-1.10.5"
        assert data["installed"][0]["default"] is True

    def test_unreadable_install_root(self, run, layout):
        make_installed(layout, "julia-1.10.5")
        with patch.object(Path, "iterdir", side_effect=PermissionError(13, "Permission denied")):
            result = run("-q", "list", "--json")
        assert result.exit_code == 1
        error = json.loads(result.output)["error"]
        assert error["kind"] == "filesystem"
        assert error["type"] == "PermissionError"
        assert "Permission denied" in error["message"]


class TestUninstallCommand:
    def test_uninstall_default(self, run, layout):
        make_installed(layout, "julia-1.10.0")
        layout.default_path.symlink_to(layout.binary_path("julia-1.10.0"))

        result = run("uninstall", "julia-1.10.0")

        assert result.exit_code == 0
        assert "deleted successfully" in result.output
        assert not layout.launcher_path("julia-1.10.0").is_symlink()
        assert not layout.default_path.is_symlink()
        assert not layout.version_dir("julia-1.10.0").exists()

    def test_not_installed(self, run, layout):
        make_installed(layout, "julia-1.11.0")
        result = run("uninstall", "1.10.0")
        assert result.exit_code == 1
        assert "not installed" in result.output
        assert layout.version_dir("julia-1.11.0").is_dir()

    def test_not_installed_json(self, run):
        result = run("-q", "uninstall", "1.10.0", "--json")
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["kind"] == "not_installed"

    def test_requires_version(self, run):
        assert run("uninstall").exit_code == 1


class TestUseCommand:
    def test_switch(self, run, layout):
        make_installed(layout, "julia-1.10.5")
        make_installed(layout, "julia-1.11.0")
        result = run("use", "1.10.5")
        assert result.exit_code == 0
        assert Path(os.readlink(layout.default_path)) == layout.binary_path("julia-1.10.5")

    def test_not_installed(self, run):
        assert run("use", "1.10.5").exit_code == 1


class TestAvailableCommand:
    def test_suggested(self, run):
        result = run("available")
        assert result.exit_code == 0
        assert "julia-1.11.0-linux-x86_64" in result.output
        assert "julia-1.11.0-freebsd-x86_64" not in result.output

    def test_all_json(self, run):
        data = json.loads(run("-q", "available", "--all", "--json").output)
        assert data["latest"] == "1.11.0"
        assert data["lts"] == "1.10.5"
        assert "julia-1.11.0-freebsd-x86_64" in data["options"]
        assert data["suggested_only"] is False

    def test_empty_page(self, run, fetcher):
        fetcher.set_document(PAGE_URL, "<html></html>")
        result = run("-q", "available", "--json")
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["kind"] == "parse_empty"


class TestInteractive:
    def test_quit(self, run):
        result = run(input="q\n")
        assert result.exit_code == 0
        assert "[i] Install" in result.output

    def test_install_from_menu(self, run, layout):
        result = run(input="i\n1\ny\n")
        assert result.exit_code == 0, result.output
        assert layout.version_dir("julia-1.11.0").is_dir()
        assert layout.default_path.is_symlink()

    def test_uninstall_from_menu(self, run, layout):
        make_installed(layout, "julia-1.10.0")
        result = run(input="u\n1\n")
        assert result.exit_code == 0, result.output
        assert not layout.version_dir("julia-1.10.0").exists()
