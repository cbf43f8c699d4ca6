"""
Default pointer — the single ``<bin_dir>/<name>`` symlink.

At most one installed version is the default. Setting the pointer
creates a temporary symlink next to it and renames it over the old one,
so readers see either the old or the new target and never a gap.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from jlinstall.core.errors import InstallError, InstallErrorKind
from jlinstall.core.models.installation import InstalledVersion, InstallLayout

logger = logging.getLogger(__name__)


def replace_symlink(link: Path, target: Path) -> None:
    """Point ``link`` at ``target`` with a single rename.

    Raises:
        FileExistsError: If ``link`` exists and is not a symlink.
        OSError: If the temporary link cannot be created or renamed.
    """
    if link.exists() and not link.is_symlink():
        raise FileExistsError(f"{link} exists and is not a symlink")

    tmp = link.with_name(f".{link.name}.{os.getpid()}.tmp")
    if tmp.is_symlink() or tmp.exists():
        tmp.unlink()
    os.symlink(target, tmp)
    try:
        os.replace(tmp, link)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


class DefaultPointerManager:
    """Reads and writes the default launcher symlink."""

    def __init__(self, layout: InstallLayout):
        self.layout = layout

    @property
    def path(self) -> Path:
        return self.layout.default_path

    def set(self, installed: InstalledVersion) -> None:
        """Make ``installed`` the default version.

        Raises:
            InstallError: ``LINK_FAILED`` if the pointer cannot be written.
        """
        target = self.layout.binary_path(installed.name)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            replace_symlink(self.path, target)
        except OSError as e:
            raise InstallError(
                InstallErrorKind.LINK_FAILED,
                f"Cannot set {installed.name} as default: {e}",
                link=self.path,
                target=target,
            ) from e
        logger.info("Default %s -> %s", self.path, target)

    def clear(self) -> bool:
        """Remove the pointer. Returns whether a pointer was removed.

        A regular file at the pointer path is left alone.
        """
        if not self.path.is_symlink():
            return False
        self.path.unlink()
        logger.info("Removed default pointer %s", self.path)
        return True

    def raw_target(self) -> Path | None:
        """Link text of the pointer, or None when there is no symlink."""
        if not self.path.is_symlink():
            return None
        return Path(os.readlink(self.path))

    def current_target(self, installed: list[InstalledVersion]) -> InstalledVersion | None:
        """The installed version the pointer leads to.

        Dangling links and links into unknown locations give None.
        """
        raw = self.raw_target()
        if raw is None:
            return None
        if not raw.is_absolute():
            raw = self.path.parent / raw

        for iv in installed:
            if raw == self.layout.binary_path(iv.name):
                return iv

        # Fall back to resolved paths when symlinked directories are involved.
        try:
            resolved = raw.resolve(strict=True)
        except (OSError, RuntimeError):
            return None
        for iv in installed:
            try:
                if resolved == self.layout.binary_path(iv.name).resolve(strict=True):
                    return iv
            except (OSError, RuntimeError):
                continue
        return None
