"""
Installed versions — a fresh scan of the install root.

The scan is the single source of truth for what is installed. Nothing
is cached between invocations, and engines rescan under the lock
before deciding anything.

Order: ascending version (a prerelease before its release), so "list",
the uninstall menu and the default selection agree.
"""

from __future__ import annotations

import logging

from jlinstall.core.models.installation import InstalledVersion, InstallLayout
from jlinstall.core.models.release import SemVer

logger = logging.getLogger(__name__)


def scan_installed(layout: InstallLayout) -> list[InstalledVersion]:
    """List installation directories directly under the install root.

    Args:
        layout: Install layout (root and runtime name).

    Returns:
        Installed versions sorted by version. Empty if the root is missing.

    Raises:
        OSError: If the install root cannot be listed.
    """
    root = layout.install_root
    if not root.is_dir():
        logger.debug("Install root %s does not exist", root)
        return []

    pattern = layout.directory_pattern
    found: list[InstalledVersion] = []
    for entry in root.iterdir():
        m = pattern.match(entry.name)
        if not m or not entry.is_dir():
            continue
        try:
            version = SemVer.parse(m.group(1))
        except ValueError:
            continue
        found.append(InstalledVersion(name=entry.name, version=version, path=entry))

    found.sort(key=lambda iv: (iv.version.sort_key, iv.name))
    logger.debug("Found %d installed version(s) in %s", len(found), root)
    return found


def find_installed(installed: list[InstalledVersion], name: str) -> InstalledVersion | None:
    """Entry whose directory name equals ``name``."""
    for iv in installed:
        if iv.name == name:
            return iv
    return None
