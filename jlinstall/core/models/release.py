"""
Release identity — versions, platforms and fully qualified identifiers.

A ReleaseIdentifier names exactly one downloadable build:

    julia-1.11.0-linux-x86_64        (glibc)
    julia-1.11.0-musl-x86_64         (musl libc)
    julia-1.11.0-alpha2-freebsd-x86_64

The unqualified form (``julia-1.11.0``) is the name of the installation
directory and of the version-specific launcher.
"""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, model_validator

OsName = Literal["linux", "freebsd"]
Arch = Literal["x86_64", "i686", "aarch64", "ppc64le"]
Libc = Literal["glibc", "musl"]

SUPPORTED_OS: tuple[str, ...] = ("linux", "freebsd")
SUPPORTED_ARCH: tuple[str, ...] = ("x86_64", "i686", "aarch64", "ppc64le")

# Platform slugs as they appear in release file names.
PLATFORM_SLUGS: tuple[str, ...] = ("linux", "musl", "freebsd")

_SEMVER_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z][0-9A-Za-z.]*))?$")

_QUALIFIED_RE = re.compile(
    r"^(?P<name>[A-Za-z][A-Za-z0-9_.]*)-v?(?P<version>\d+\.\d+\.\d+(?:-.+?)?)"
    r"-(?P<slug>linux|musl|freebsd)-(?P<arch>x86_64|i686|aarch64|ppc64le)$"
)


class SemVer(BaseModel):
    """A ``major.minor.patch[-prerelease]`` version."""

    model_config = ConfigDict(frozen=True)

    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    @classmethod
    def parse(cls, text: str) -> SemVer:
        """Parse ``1.11.0``, ``v1.11.0`` or ``1.11.0-alpha2``.

        Raises:
            ValueError: If ``text`` is not a version string.
        """
        m = _SEMVER_RE.match((text or "").strip())
        if not m:
            raise ValueError(f"invalid version: {text!r} (expected x.y.z[-pre])")
        return cls(
            major=int(m.group(1)),
            minor=int(m.group(2)),
            patch=int(m.group(3)),
            prerelease=m.group(4),
        )

    @property
    def sort_key(self) -> tuple:
        """Ordering key: a prerelease sorts before its release."""
        if self.prerelease is None:
            return (self.major, self.minor, self.patch, 1, ())
        parts = tuple(
            (0, int(p), "") if p.isdigit() else (1, 0, p)
            for p in self.prerelease.split(".")
        )
        return (self.major, self.minor, self.patch, 0, parts)

    def __lt__(self, other: SemVer) -> bool:
        return self.sort_key < other.sort_key

    def __str__(self) -> str:
        core = f"{self.major}.{self.minor}.{self.patch}"
        return f"{core}-{self.prerelease}" if self.prerelease else core


class Platform(BaseModel):
    """Operating system, CPU architecture and libc variant."""

    model_config = ConfigDict(frozen=True)

    os: OsName
    arch: Arch
    libc: Libc | None = None

    @model_validator(mode="before")
    @classmethod
    def _default_libc(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("os") == "linux" and not data.get("libc"):
            return {**data, "libc": "glibc"}
        return data

    @model_validator(mode="after")
    def _check_libc(self) -> Platform:
        if self.os != "linux" and self.libc == "musl":
            raise ValueError("musl builds exist only for linux")
        return self

    @classmethod
    def from_slug(cls, slug: str, arch: str) -> Platform:
        """Build a platform from a file-name slug (``linux``/``musl``/``freebsd``)."""
        if slug == "musl":
            return cls(os="linux", arch=arch, libc="musl")
        return cls(os=slug, arch=arch)

    @property
    def slug(self) -> str:
        return "musl" if self.libc == "musl" else self.os

    def __str__(self) -> str:
        return f"{self.slug}-{self.arch}"


class ReleaseIdentifier(BaseModel):
    """Fully qualified build name: runtime name, version and platform.

    Equality and hashing use the normalized string form.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: SemVer
    platform: Platform

    @classmethod
    def parse(cls, text: str) -> ReleaseIdentifier:
        """Parse a qualified identifier such as ``julia-1.11.0-linux-x86_64``.

        Raises:
            ValueError: If ``text`` carries no platform suffix.
        """
        m = _QUALIFIED_RE.match((text or "").strip())
        if not m:
            raise ValueError(f"not a qualified release identifier: {text!r}")
        return cls(
            name=m.group("name"),
            version=SemVer.parse(m.group("version")),
            platform=Platform.from_slug(m.group("slug"), m.group("arch")),
        )

    @staticmethod
    def is_qualified(text: str) -> bool:
        """Whether ``text`` ends in a ``-<platform>-<arch>`` suffix."""
        return _QUALIFIED_RE.match((text or "").strip()) is not None

    @property
    def unqualified(self) -> str:
        """Directory / launcher name, e.g. ``julia-1.11.0``."""
        return f"{self.name}-{self.version}"

    def __str__(self) -> str:
        return f"{self.unqualified}-{self.platform}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReleaseIdentifier):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))
