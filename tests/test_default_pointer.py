"""
Tests for the default pointer and the default switch.
"""

import os
from pathlib import Path

import pytest

from jlinstall.core.errors import InstallError, InstallErrorKind
from jlinstall.core.services.default_pointer import DefaultPointerManager, replace_symlink
from jlinstall.core.services.installed import scan_installed
from jlinstall.core.services.switch import switch_default

from tests.conftest import make_installed


class TestReplaceSymlink:
    def test_creates_link(self, tmp_path):
        link = tmp_path / "link"
        replace_symlink(link, tmp_path / "target")
        assert Path(os.readlink(link)) == tmp_path / "target"

    def test_replaces_existing_link(self, tmp_path):
        link = tmp_path / "link"
        link.symlink_to(tmp_path / "old")
        replace_symlink(link, tmp_path / "new")
        assert Path(os.readlink(link)) == tmp_path / "new"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["link"]

    def test_refuses_regular_file(self, tmp_path):
        link = tmp_path / "link"
        link.write_text("keep me")
        with pytest.raises(FileExistsError):
            replace_symlink(link, tmp_path / "new")
        assert link.read_text() == "keep me"


class TestDefaultPointerManager:
    def test_set_and_current_target(self, layout):
        make_installed(layout, "julia-1.10.0")
        make_installed(layout, "julia-1.11.0")
        installed = scan_installed(layout)
        pointer = DefaultPointerManager(layout)

        assert pointer.current_target(installed) is None
        pointer.set(installed[1])
        assert pointer.current_target(installed).name == "julia-1.11.0"
        pointer.set(installed[0])
        assert pointer.current_target(installed).name == "julia-1.10.0"

    def test_clear(self, layout):
        make_installed(layout, "julia-1.10.0")
        pointer = DefaultPointerManager(layout)
        pointer.set(scan_installed(layout)[0])
        assert pointer.clear() is True
        assert not layout.default_path.is_symlink()
        assert pointer.clear() is False

    def test_clear_leaves_regular_file(self, layout):
        layout.default_path.write_text("#!/bin/sh\n")
        assert DefaultPointerManager(layout).clear() is False
        assert layout.default_path.is_file()

    def test_set_over_regular_file_fails(self, layout):
        make_installed(layout, "julia-1.10.0")
        layout.default_path.write_text("#!/bin/sh\n")
        with pytest.raises(InstallError) as exc:
            DefaultPointerManager(layout).set(scan_installed(layout)[0])
        assert exc.value.kind == InstallErrorKind.LINK_FAILED

    def test_set_when_bin_dir_cannot_be_created(self, layout, tmp_path):
        make_installed(layout, "julia-1.10.0")
        (tmp_path / "file").write_text("x")
        blocked = layout.model_copy(update={"bin_dir": tmp_path / "file" / "bin"})
        with pytest.raises(InstallError) as exc:
            DefaultPointerManager(blocked).set(scan_installed(blocked)[0])
        assert exc.value.kind == InstallErrorKind.LINK_FAILED
        assert "julia-1.10.0" in exc.value.message

    def test_relative_link_recognised(self, layout):
        make_installed(layout, "julia-1.10.0")
        rel = os.path.relpath(layout.binary_path("julia-1.10.0"), layout.bin_dir)
        layout.default_path.symlink_to(rel)
        target = DefaultPointerManager(layout).current_target(scan_installed(layout))
        assert target is not None and target.name == "julia-1.10.0"

    def test_dangling_link_has_no_target(self, layout):
        make_installed(layout, "julia-1.10.0")
        layout.default_path.symlink_to(layout.binary_path("julia-0.7.0"))
        assert DefaultPointerManager(layout).current_target(scan_installed(layout)) is None


class TestSwitchDefault:
    def test_switch(self, guard, layout):
        make_installed(layout, "julia-1.10.0")
        make_installed(layout, "julia-1.11.0")
        layout.default_path.symlink_to(layout.binary_path("julia-1.11.0"))

        result = switch_default(guard, "1.10.0")

        assert result.changed
        assert result.previous == "julia-1.11.0"
        assert Path(os.readlink(layout.default_path)) == layout.binary_path("julia-1.10.0")

    def test_already_default(self, guard, layout):
        make_installed(layout, "julia-1.10.0")
        layout.default_path.symlink_to(layout.binary_path("julia-1.10.0"))
        result = switch_default(guard, "julia-1.10.0")
        assert not result.changed
        assert result.to_dict() == {"name": "julia-1.10.0", "previous": "julia-1.10.0", "changed": False}

    def test_not_installed(self, guard, layout):
        with pytest.raises(InstallError) as exc:
            switch_default(guard, "1.10.0")
        assert exc.value.kind == InstallErrorKind.NOT_FOUND
        assert not layout.default_path.is_symlink()
