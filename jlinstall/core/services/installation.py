"""
Installation engine — download, extract, link, optionally make default.

Steps, strictly ordered, each its own failure point:

    1. privileges           PERMISSION_DENIED   (before the lock)
    2. already installed?   no-op result, nothing touched
    3. download URL         NOT_FOUND
    4. download archive     DOWNLOAD_FAILED     temp archive removed
    5. extract + rename     EXTRACT_FAILED      staging dir removed
    6. remove archive       best effort, logged
    7. version launcher     LINK_FAILED
    8. default pointer      only with consent

Steps 2–8 run under the install root lock. Cleanup of steps 4 and 5
also runs on timeouts and ``KeyboardInterrupt``; the interrupt is then
re-raised.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from jlinstall.adapters.registry import Toolchain
from jlinstall.core.errors import InstallError, InstallErrorKind
from jlinstall.core.models.catalog import Catalog
from jlinstall.core.models.installation import InstalledVersion
from jlinstall.core.models.release import ReleaseIdentifier
from jlinstall.core.services.default_pointer import DefaultPointerManager, replace_symlink
from jlinstall.core.services.guard import MutationGuard
from jlinstall.core.services.installed import find_installed, scan_installed

logger = logging.getLogger(__name__)

STATUS_INSTALLED = "installed"
STATUS_ALREADY_INSTALLED = "already_installed"

# Architecture directory names used in the release download tree.
_ARCH_DIRS: dict[str, str] = {
    "x86_64": "x64",
    "i686": "x86",
    "aarch64": "aarch64",
    "ppc64le": "ppc64le",
}


@dataclass
class InstallResult:
    """Outcome of one install request."""

    identifier: str
    name: str
    path: Path
    launcher: Path
    status: str = STATUS_INSTALLED
    became_default: bool = False
    url: str | None = None

    @property
    def already_installed(self) -> bool:
        return self.status == STATUS_ALREADY_INSTALLED

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "name": self.name,
            "path": str(self.path),
            "launcher": str(self.launcher),
            "status": self.status,
            "became_default": self.became_default,
            "url": self.url,
        }


def render_download_url(template: str, identifier: ReleaseIdentifier) -> str:
    """Fill a download URL template for ``identifier``.

    Placeholders: ``{name} {version} {major} {minor} {os} {arch} {arch_dir}``,
    where ``{os}`` is the file-name slug (``linux``, ``musl``, ``freebsd``).
    """
    version = identifier.version
    arch = identifier.platform.arch
    return template.format(
        name=identifier.name,
        version=str(version),
        major=version.major,
        minor=version.minor,
        os=identifier.platform.slug,
        arch=arch,
        arch_dir=_ARCH_DIRS.get(arch, arch),
    )


class InstallationEngine:
    """Installs one release identifier into the layout."""

    def __init__(
        self,
        guard: MutationGuard,
        toolchain: Toolchain,
        *,
        confirm: Callable[[str], bool] | None = None,
        url_template: str | None = None,
    ):
        self.guard = guard
        self.layout = guard.layout
        self.toolchain = toolchain
        self.confirm = confirm
        self.url_template = url_template
        self.pointer = DefaultPointerManager(self.layout)

    # ── Public API ──────────────────────────────────────────────

    def install(
        self,
        identifier: ReleaseIdentifier,
        catalog: Catalog,
        *,
        make_default: bool | None = None,
    ) -> InstallResult:
        """Install ``identifier``.

        Args:
            identifier: Qualified release to install.
            catalog: Catalog of this invocation (download URLs).
            make_default: True/False to decide without asking; None asks
                the ``confirm`` callback (no callback means "no").

        Returns:
            InstallResult; ``status == "already_installed"`` for a no-op.

        Raises:
            InstallError: On any failed step.
            LockError: If another process holds the install root.
        """
        self.guard.check_privileges(InstallError, InstallErrorKind.PERMISSION_DENIED)

        name = identifier.unqualified
        with self.guard.lock():
            existing = find_installed(scan_installed(self.layout), name)
            if existing is not None:
                logger.warning("%s is already installed in %s", name, existing.path)
                return InstallResult(
                    identifier=str(identifier),
                    name=name,
                    path=existing.path,
                    launcher=self.layout.launcher_path(name),
                    status=STATUS_ALREADY_INSTALLED,
                )

            url = self.download_url(identifier, catalog)
            archive = self._download(identifier, url)
            try:
                path = self._extract(identifier, archive)
            finally:
                self._remove_archive(archive)

            launcher = self._link_launcher(name)
            installed = InstalledVersion(name=name, version=identifier.version, path=path)

            became_default = self._want_default(name, make_default)
            if became_default:
                self.pointer.set(installed)

        logger.info("Installed %s into %s", identifier, path)
        return InstallResult(
            identifier=str(identifier),
            name=name,
            path=path,
            launcher=launcher,
            became_default=became_default,
            url=url,
        )

    def download_url(self, identifier: ReleaseIdentifier, catalog: Catalog) -> str:
        """URL of the archive for ``identifier``.

        Raises:
            InstallError: ``NOT_FOUND`` if neither the catalog nor the
                configured template provides one.
        """
        asset = catalog.find_asset(identifier)
        if asset is not None:
            return asset.url
        if self.url_template:
            url = render_download_url(self.url_template, identifier)
            logger.info("%s not listed on the download page, using %s", identifier, url)
            return url
        raise InstallError(
            InstallErrorKind.NOT_FOUND,
            f"No download found for {identifier}",
            identifier=str(identifier),
            source_url=catalog.source_url,
        )

    # ── Steps ───────────────────────────────────────────────────

    def _download(self, identifier: ReleaseIdentifier, url: str) -> Path:
        root = self.layout.install_root
        try:
            root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".jlinstall-", suffix=".tar.gz", dir=root)
        except OSError as e:
            raise InstallError(
                InstallErrorKind.DOWNLOAD_FAILED,
                f"Cannot create download file in {root}: {e}",
                url=url,
                timed_out=False,
            ) from e
        os.close(fd)
        archive = Path(tmp_name)

        logger.info("Downloading %s from %s", identifier, url)
        try:
            receipt = self.toolchain.fetcher.fetch_file(url, archive)
        except BaseException:
            archive.unlink(missing_ok=True)
            raise
        logger.debug("%s", receipt)

        if receipt.failed:
            archive.unlink(missing_ok=True)
            reason = "timed out" if receipt.timed_out else "failed"
            raise InstallError(
                InstallErrorKind.DOWNLOAD_FAILED,
                f"Download of {identifier} {reason}: {receipt.error}",
                url=url,
                timed_out=receipt.timed_out,
            )
        return archive

    def _extract(self, identifier: ReleaseIdentifier, archive: Path) -> Path:
        name = identifier.unqualified
        target = self.layout.version_dir(name)
        try:
            staging = Path(tempfile.mkdtemp(prefix=".jlinstall-staging-", dir=self.layout.install_root))
        except OSError as e:
            raise InstallError(
                InstallErrorKind.EXTRACT_FAILED,
                f"Cannot create staging directory in {self.layout.install_root}: {e}",
                archive=archive,
            ) from e

        logger.info("Extracting %s", archive.name)
        try:
            receipt = self.toolchain.extractor.extract(archive, staging)
            logger.debug("%s", receipt)
            if receipt.failed:
                raise InstallError(
                    InstallErrorKind.EXTRACT_FAILED,
                    f"Extracting {identifier} failed: {receipt.error}",
                    archive=archive,
                    timed_out=receipt.timed_out,
                )

            source = self._unpacked_root(staging)
            binary = source / "bin" / self.layout.name
            if not binary.exists():
                raise InstallError(
                    InstallErrorKind.EXTRACT_FAILED,
                    f"Archive for {identifier} has no bin/{self.layout.name}",
                    archive=archive,
                )
            if target.exists() or target.is_symlink():
                raise InstallError(
                    InstallErrorKind.EXTRACT_FAILED,
                    f"{target} already exists",
                    path=target,
                )
            try:
                if source == staging:
                    # mkdtemp creates 0700 directories
                    staging.chmod(0o755)
                os.rename(source, target)
            except OSError as e:
                raise InstallError(
                    InstallErrorKind.EXTRACT_FAILED,
                    f"Cannot move extracted files to {target}: {e}",
                    path=target,
                ) from e
        finally:
            shutil.rmtree(staging, ignore_errors=True)

        return target

    def _unpacked_root(self, staging: Path) -> Path:
        """The single top-level directory of the archive, or ``staging``."""
        if (staging / "bin" / self.layout.name).exists():
            return staging
        entries = list(staging.iterdir())
        if len(entries) == 1 and entries[0].is_dir() and not entries[0].is_symlink():
            return entries[0]
        return staging

    def _remove_archive(self, archive: Path) -> None:
        try:
            archive.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove archive %s: %s", archive, e)

    def _link_launcher(self, name: str) -> Path:
        launcher = self.layout.launcher_path(name)
        target = self.layout.binary_path(name)
        try:
            launcher.parent.mkdir(parents=True, exist_ok=True)
            replace_symlink(launcher, target)
        except OSError as e:
            raise InstallError(
                InstallErrorKind.LINK_FAILED,
                f"Installed {name} but cannot create launcher {launcher}: {e}",
                launcher=launcher,
                path=self.layout.version_dir(name),
            ) from e
        logger.info("Launcher %s -> %s", launcher, target)
        return launcher

    def _want_default(self, name: str, make_default: bool | None) -> bool:
        if make_default is not None:
            return make_default
        if self.confirm is None:
            return False
        return self.confirm(f"Set {name} as default {self.layout.name} version on this system?")
