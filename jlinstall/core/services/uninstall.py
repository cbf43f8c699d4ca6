"""
Uninstall engine — remove one installed version.

Order:
    1. clear the default pointer if it targets this version
    2. remove the version launcher
    3. remove the installation directory

The pointer goes first so nobody follows the default into a half-removed
tree. A failure after the first mutation is PARTIAL_FAILURE; re-running
the uninstall finishes the job.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jlinstall.core.errors import UninstallError, UninstallErrorKind
from jlinstall.core.services.default_pointer import DefaultPointerManager
from jlinstall.core.services.guard import MutationGuard
from jlinstall.core.services.installed import find_installed, scan_installed
from jlinstall.core.services.resolver import VersionResolver

logger = logging.getLogger(__name__)


@dataclass
class UninstallResult:
    name: str
    path: Path
    was_default: bool = False
    steps: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": str(self.path),
            "was_default": self.was_default,
            "steps": list(self.steps),
        }


class UninstallEngine:
    """Removes installations from the layout."""

    def __init__(self, guard: MutationGuard, resolver: VersionResolver | None = None):
        self.guard = guard
        self.layout = guard.layout
        self.resolver = resolver or VersionResolver(self.layout.name)
        self.pointer = DefaultPointerManager(self.layout)

    def uninstall(self, token: str) -> UninstallResult:
        """Uninstall the version named by ``token``.

        Raises:
            UninstallError: ``PERMISSION_DENIED``, ``NOT_INSTALLED`` (nothing
                touched) or ``PARTIAL_FAILURE`` (some steps done).
            ResolutionError: ``MALFORMED_TOKEN`` for unreadable tokens.
            LockError: If another process holds the install root.
        """
        self.guard.check_privileges(UninstallError, UninstallErrorKind.PERMISSION_DENIED)
        name = self.resolver.normalize_installed_name(token)

        with self.guard.lock():
            installed = scan_installed(self.layout)
            target = find_installed(installed, name)
            if target is None:
                raise UninstallError(
                    UninstallErrorKind.NOT_INSTALLED,
                    f"Invalid {self.layout.name} version: {name} is not installed",
                    name=name,
                    installed=[iv.name for iv in installed],
                )

            result = UninstallResult(name=name, path=target.path)
            current = self.pointer.current_target(installed)
            result.was_default = current is not None and current.name == name

            self._step(result, "clear_default", self._clear_default, result.was_default)
            self._step(result, "remove_launcher", self._remove_launcher, name)
            self._step(result, "remove_directory", self._remove_directory, target.path)

        logger.info("Uninstalled %s", name)
        return result

    def _step(self, result: UninstallResult, step: str, fn, *args) -> None:
        try:
            fn(*args)
        except OSError as e:
            raise UninstallError(
                UninstallErrorKind.PARTIAL_FAILURE,
                f"Uninstalling {result.name} failed at {step}: {e}. "
                "Run uninstall again to finish.",
                name=result.name,
                failed_step=step,
                completed_steps=list(result.steps),
            ) from e
        result.steps.append(step)

    def _clear_default(self, is_default: bool) -> None:
        if is_default:
            self.pointer.clear()

    def _remove_launcher(self, name: str) -> None:
        launcher = self.layout.launcher_path(name)
        if launcher.is_symlink():
            launcher.unlink()
            logger.info("Removed launcher %s", launcher)
        elif launcher.exists():
            logger.warning("%s is not a symlink, leaving it in place", launcher)
        else:
            logger.info("Launcher %s already absent", launcher)

    def _remove_directory(self, path: Path) -> None:
        if path.is_symlink():
            path.unlink()
        else:
            shutil.rmtree(path)
        logger.info("Removed %s", path)
