"""
Version use cases — what the CLI commands actually do.

Each function takes a :class:`Runtime`, performs one command and
returns a result object with ``to_dict()``. Errors propagate as
``InstallerError`` subclasses; the CLI maps them to exit codes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from jlinstall.core.errors import InstallError, InstallErrorKind
from jlinstall.core.models.catalog import ROLES, Catalog
from jlinstall.core.models.installation import InstalledVersion
from jlinstall.core.models.release import ReleaseIdentifier
from jlinstall.core.services.default_pointer import DefaultPointerManager
from jlinstall.core.services.installation import InstallResult
from jlinstall.core.services.installed import find_installed, scan_installed
from jlinstall.core.services.switch import SwitchResult, switch_default
from jlinstall.core.services.uninstall import UninstallResult
from jlinstall.core.use_cases.runtime import Runtime

logger = logging.getLogger(__name__)


# ── list ────────────────────────────────────────────────────────


@dataclass
class ListResult:
    """Installed versions plus the current default."""

    installed: list[InstalledVersion] = field(default_factory=list)
    default: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "installed": [
                {
                    "name": iv.name,
                    "version": str(iv.version),
                    "path": str(iv.path),
                    "default": iv.name == self.default,
                }
                for iv in self.installed
            ],
            "default": self.default,
        }


def list_installed(runtime: Runtime) -> ListResult:
    installed = scan_installed(runtime.layout)
    current = DefaultPointerManager(runtime.layout).current_target(installed)
    return ListResult(installed=installed, default=current.name if current else None)


# ── available ───────────────────────────────────────────────────


@dataclass
class AvailableResult:
    """Install options offered by the download page."""

    catalog: Catalog
    options: list[ReleaseIdentifier] = field(default_factory=list)
    suggested_only: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.catalog.source_url,
            "latest": str(self.catalog.latest) if self.catalog.latest else None,
            "lts": str(self.catalog.lts) if self.catalog.lts else None,
            "suggested_only": self.suggested_only,
            "options": [str(o) for o in self.options],
        }


def list_available(runtime: Runtime, *, show_all: bool = False, retries: int = 0) -> AvailableResult:
    """Install options for the role versions (host platform unless ``show_all``).

    Raises:
        FetchError: ``NETWORK`` or ``PARSE_EMPTY``.
    """
    catalog = runtime.fetch_catalog(retries=retries)
    suggested_only = not show_all and runtime.platform is not None
    platform = runtime.platform if suggested_only else None
    return AvailableResult(
        catalog=catalog,
        options=catalog.require_options(platform),
        suggested_only=suggested_only,
    )


# ── install ─────────────────────────────────────────────────────


def install_version(
    runtime: Runtime,
    token: str = "latest",
    *,
    make_default: bool | None = None,
    confirm: Callable[[str], bool] | None = None,
    retries: int = 0,
) -> InstallResult:
    """Resolve ``token`` and install it.

    The download page is fetched unless ``token`` names a version that is
    already installed.

    Raises:
        DependencyError: A configured external tool is missing.
        InstallError / ResolutionError / FetchError / LockError.
    """
    runtime.check_dependencies()
    runtime.guard.check_privileges(InstallError, InstallErrorKind.PERMISSION_DENIED)
    installer = runtime.installer(confirm=confirm)

    if token.strip() not in ROLES:
        # Version tokens resolve without the download page, so an installed
        # version is reported even when the page is unreachable.
        identifier = runtime.resolver.resolve(token, Catalog(), runtime.platform)
        if find_installed(scan_installed(runtime.layout), identifier.unqualified):
            return installer.install(identifier, Catalog(), make_default=make_default)

    catalog = runtime.fetch_catalog(retries=retries)
    identifier = runtime.resolver.resolve(token, catalog, runtime.platform)
    return installer.install(
        identifier, catalog, make_default=make_default,
    )


# ── uninstall / use ─────────────────────────────────────────────


def uninstall_version(runtime: Runtime, token: str) -> UninstallResult:
    return runtime.uninstaller().uninstall(token)


def use_version(runtime: Runtime, token: str) -> SwitchResult:
    return switch_default(runtime.guard, token, runtime.resolver)
