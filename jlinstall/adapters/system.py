"""
System detection — architecture, operating system, privileges.

Read-only. Unknown values are reported as ``""`` so the resolver can
raise UNSUPPORTED_PLATFORM instead of guessing.
"""

from __future__ import annotations

import os
import platform

from jlinstall.core.models.release import Platform

# Architecture name normalization to the names used in release file names.
_ARCH_MAP: dict[str, str] = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "i686": "i686",
    "i386": "i686",
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "ppc64le": "ppc64le",
}

_OS_MAP: dict[str, str] = {
    "Linux": "linux",
    "FreeBSD": "freebsd",
}


def detect_architecture() -> str:
    """Normalized CPU architecture, or ``""`` if unsupported."""
    return _ARCH_MAP.get(platform.machine().lower(), "")


def detect_operating_system() -> str:
    """Normalized OS name (``linux``/``freebsd``), or ``""`` if unsupported."""
    return _OS_MAP.get(platform.system(), "")


def host_platform() -> Platform | None:
    """The platform this process runs on, or None when unsupported.

    Linux is always reported as glibc; musl hosts are not detected.
    """
    os_name = detect_operating_system()
    arch = detect_architecture()
    if not os_name or not arch:
        return None
    return Platform(os=os_name, arch=arch)


def is_privileged_user() -> bool:
    """Whether the process runs as root."""
    return os.geteuid() == 0
