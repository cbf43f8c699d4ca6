"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import io
import tarfile
import textwrap
from pathlib import Path

import pytest

from jlinstall.adapters.archive import TarfileExtractor
from jlinstall.adapters.mock import MockFetcher
from jlinstall.adapters.registry import Toolchain
from jlinstall.core.models.installation import InstallLayout
from jlinstall.core.models.release import Platform
from jlinstall.core.services.guard import MutationGuard

PAGE_URL = "https://julialang.org/downloads/"
S3 = "https://julialang-s3.julialang.org/bin"

_ARCH_DIRS = {"x86_64": "x64", "i686": "x86", "aarch64": "aarch64", "ppc64le": "ppc64le"}


def asset_url(version: str, slug: str = "linux", arch: str = "x86_64") -> str:
    major_minor = ".".join(version.split("-")[0].split(".")[:2])
    return f"{S3}/{slug}/{_ARCH_DIRS[arch]}/{major_minor}/julia-{version}-{slug}-{arch}.tar.gz"


DOWNLOAD_PAGE = textwrap.dedent(f"""\
    <html><body>
    <h2 id="current_stable_release"><a href="#current_stable_release">Current stable release: v1.11.0 (October 7, 2024)</a></h2>
    <table>
    <tr><td>Linux</td>
      <td><a href="{asset_url("1.11.0")}">glibc 64-bit</a></td>
      <td><a href="{asset_url("1.11.0", "musl")}">musl 64-bit</a></td>
      <td><a href="{asset_url("1.11.0", arch="aarch64")}">aarch64</a></td>
    </tr>
    <tr><td>FreeBSD</td><td><a href="{asset_url("1.11.0", "freebsd")}">64-bit</a></td></tr>
    </table>
    <p>Mirror: <a href="{asset_url("1.11.0")}">glibc 64-bit</a></p>
    <h2 id="long_term_support_release"><a href="#long_term_support_release">Long-term support (LTS) release: v1.10.5 (August 27, 2024)</a></h2>
    <table>
    <tr><td>Linux</td>
      <td><a href="{asset_url("1.10.5")}">glibc 64-bit</a></td>
      <td><a href="{asset_url("1.10.5", "musl")}">musl 64-bit</a></td>
    </tr>
    </table>
    <h2>Older releases</h2>
    <a href="{asset_url("1.9.4")}">1.9.4</a>
    </body></html>
""")


def make_tarball(top: str, name: str = "julia", extra: dict[str, bytes] | None = None) -> bytes:
    """A gzipped release archive holding ``<top>/bin/<name>``."""
    files = {f"{top}/bin/{name}": b"#!/bin/sh\necho julia\n"}
    files.update(extra or {})
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        for path, data in files.items():
            info = tarfile.TarInfo(path)
            info.size = len(data)
            info.mode = 0o755
            tf.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def make_installed(layout: InstallLayout, name: str, *, launcher: bool = True) -> Path:
    """Lay out an installation the way the engine leaves it."""
    binary = layout.binary_path(name)
    binary.parent.mkdir(parents=True)
    binary.write_text("#!/bin/sh\n")
    if launcher:
        layout.launcher_path(name).symlink_to(binary)
    return layout.version_dir(name)


class ScriptedPrompter:
    """Prompter replaying canned answers and recording output."""

    def __init__(self, answers=(), confirms=()):
        self.answers = list(answers)
        self.confirms = list(confirms)
        self.prompts: list[str] = []
        self.lines: list[str] = []

    def prompt(self, text: str, default: str = "") -> str:
        self.prompts.append(text)
        if not self.answers:
            raise AssertionError(f"unexpected prompt: {text}")
        return self.answers.pop(0)

    def confirm(self, text: str, default: bool = True) -> bool:
        self.prompts.append(text)
        return self.confirms.pop(0) if self.confirms else default

    def say(self, text: str = "", fg=None, bold: bool = False) -> None:
        self.lines.append(text)

    @property
    def output(self) -> str:
        return "\n".join(self.lines)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def layout(tmp_path: Path) -> InstallLayout:
    """An install root and bin dir under the test's temp directory."""
    lay = InstallLayout(install_root=tmp_path / "opt", bin_dir=tmp_path / "bin")
    lay.install_root.mkdir()
    lay.bin_dir.mkdir()
    return lay


@pytest.fixture
def linux_x64() -> Platform:
    return Platform(os="linux", arch="x86_64")


@pytest.fixture
def fetcher() -> MockFetcher:
    """Serves the download page and archives for the role releases."""
    f = MockFetcher()
    f.set_document(PAGE_URL, DOWNLOAD_PAGE)
    for version in ("1.11.0", "1.10.5"):
        f.set_file(asset_url(version), make_tarball(f"julia-{version}"))
        f.set_file(asset_url(version, "musl"), make_tarball(f"julia-{version}"))
    return f


@pytest.fixture
def toolchain(fetcher: MockFetcher) -> Toolchain:
    return Toolchain(fetcher=fetcher, extractor=TarfileExtractor())


@pytest.fixture
def guard(layout: InstallLayout) -> MutationGuard:
    return MutationGuard(layout=layout, lock_timeout=1.0, require_privileges=False)


@pytest.fixture
def config_file(tmp_path: Path, layout: InstallLayout) -> Path:
    """config.yml pointing the CLI at the temp layout."""
    path = tmp_path / "config.yml"
    path.write_text(textwrap.dedent(f"""\
        install_root: {layout.install_root}
        bin_dir: {layout.bin_dir}
        require_privileges: false
        lock_timeout: 1
    """))
    return path
