"""
Default switch — make an already installed version the default.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from jlinstall.core.errors import InstallError, InstallErrorKind
from jlinstall.core.services.default_pointer import DefaultPointerManager
from jlinstall.core.services.guard import MutationGuard
from jlinstall.core.services.installed import find_installed, scan_installed
from jlinstall.core.services.resolver import VersionResolver

logger = logging.getLogger(__name__)


@dataclass
class SwitchResult:
    name: str
    previous: str | None = None

    @property
    def changed(self) -> bool:
        return self.previous != self.name

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "previous": self.previous, "changed": self.changed}


def switch_default(
    guard: MutationGuard,
    token: str,
    resolver: VersionResolver | None = None,
) -> SwitchResult:
    """Point the default launcher at the installed version ``token``.

    Raises:
        InstallError: ``PERMISSION_DENIED``, ``NOT_FOUND`` when the version
            is not installed, or ``LINK_FAILED``.
        ResolutionError: ``MALFORMED_TOKEN``.
    """
    layout = guard.layout
    resolver = resolver or VersionResolver(layout.name)
    guard.check_privileges(InstallError, InstallErrorKind.PERMISSION_DENIED)
    name = resolver.normalize_installed_name(token)

    with guard.lock():
        installed = scan_installed(layout)
        target = find_installed(installed, name)
        if target is None:
            raise InstallError(
                InstallErrorKind.NOT_FOUND,
                f"{name} is not installed",
                name=name,
                installed=[iv.name for iv in installed],
            )

        pointer = DefaultPointerManager(layout)
        current = pointer.current_target(installed)
        previous = current.name if current else None
        if previous != name:
            pointer.set(target)
        else:
            logger.info("%s is already the default", name)

    return SwitchResult(name=name, previous=previous)
