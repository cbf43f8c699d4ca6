"""
Mutation guard — preconditions shared by every mutating operation.

Install, uninstall and ``use`` all check privileges before touching
anything, then hold the install root lock for their whole duration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from jlinstall.adapters.system import is_privileged_user
from jlinstall.core.config.loader import Settings
from jlinstall.core.errors import InstallerError
from jlinstall.core.models.installation import InstallLayout
from jlinstall.core.persistence.install_lock import InstallRootLock


@dataclass
class MutationGuard:
    layout: InstallLayout
    lock_timeout: float = 30.0
    require_privileges: bool = True
    is_privileged: Callable[[], bool] | None = None

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> MutationGuard:
        kwargs = {
            "layout": settings.layout,
            "lock_timeout": settings.lock_timeout,
            "require_privileges": settings.require_privileges,
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    def check_privileges(self, error_cls: type[InstallerError], kind: Enum) -> None:
        """Raise ``error_cls(kind)`` unless the process may write the layout."""
        check = self.is_privileged or is_privileged_user
        if self.require_privileges and not check():
            raise error_cls(
                kind,
                "Permission denied: run as root (e.g. with sudo)",
                install_root=self.layout.install_root,
                bin_dir=self.layout.bin_dir,
            )

    def lock(self) -> InstallRootLock:
        return InstallRootLock(self.layout.lock_path, timeout=self.lock_timeout)
