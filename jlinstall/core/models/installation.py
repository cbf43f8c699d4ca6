"""
Installation layout and installed versions.

The filesystem is the database: an installed version is a directory
``<install_root>/<name>-<version>`` and nothing else is persisted.

    <install_root>/julia-1.11.0/bin/julia      installation
    <bin_dir>/julia-1.11.0 -> …/bin/julia       version launcher
    <bin_dir>/julia        -> …/bin/julia       default pointer
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from jlinstall.core.models.release import SemVer

LOCK_FILE_NAME = ".jlinstall.lock"


class InstallLayout(BaseModel):
    """Where installations, launchers and the default pointer live."""

    model_config = ConfigDict(frozen=True)

    name: str = "julia"
    install_root: Path
    bin_dir: Path

    @property
    def directory_pattern(self) -> re.Pattern[str]:
        """Names of installation directories: ``<name>-x.y.z[-pre]``."""
        return re.compile(rf"^{re.escape(self.name)}-(\d+\.\d+\.\d+(?:-.+)?)$")

    def version_dir(self, unqualified: str) -> Path:
        return self.install_root / unqualified

    def binary_path(self, unqualified: str) -> Path:
        """The runtime executable inside an installation."""
        return self.version_dir(unqualified) / "bin" / self.name

    def launcher_path(self, unqualified: str) -> Path:
        """Version-specific launcher, e.g. ``/usr/bin/julia-1.11.0``."""
        return self.bin_dir / unqualified

    @property
    def default_path(self) -> Path:
        """The default pointer, e.g. ``/usr/bin/julia``."""
        return self.bin_dir / self.name

    @property
    def lock_path(self) -> Path:
        return self.install_root / LOCK_FILE_NAME


class InstalledVersion(BaseModel):
    """An installation directory found by scanning the install root."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: SemVer
    path: Path

    def __str__(self) -> str:
        return self.name
