"""
Runtime wiring — settings, adapters and services for one invocation.

Every command builds exactly one Runtime. Nothing here is global: the
catalog, the platform and the installed set are values passed on to the
services explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from jlinstall.adapters.registry import Toolchain, build_toolchain, check_dependencies
from jlinstall.adapters.system import host_platform
from jlinstall.core.config.loader import Settings, load_settings
from jlinstall.core.errors import FetchError
from jlinstall.core.models.catalog import Catalog
from jlinstall.core.models.installation import InstallLayout
from jlinstall.core.models.release import Platform
from jlinstall.core.reliability.retry import call_with_retry
from jlinstall.core.services.catalog import CatalogParser, fetch_catalog
from jlinstall.core.services.guard import MutationGuard
from jlinstall.core.services.installation import InstallationEngine
from jlinstall.core.services.resolver import VersionResolver
from jlinstall.core.services.uninstall import UninstallEngine

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    settings: Settings
    toolchain: Toolchain
    platform: Platform | None
    guard: MutationGuard
    resolver: VersionResolver
    parser: CatalogParser

    @classmethod
    def build(cls, config_path: Path | None = None) -> Runtime:
        """Load settings and instantiate adapters and services.

        Raises:
            ConfigError: If the configuration is invalid.
        """
        settings = load_settings(config_path)
        platform = host_platform()
        if platform is None:
            logger.warning("Unsupported operating system or architecture")
        return cls(
            settings=settings,
            toolchain=build_toolchain(settings),
            platform=platform,
            guard=MutationGuard.from_settings(settings),
            resolver=VersionResolver(settings.name),
            parser=CatalogParser(settings.name),
        )

    @property
    def layout(self) -> InstallLayout:
        return self.guard.layout

    def check_dependencies(self) -> None:
        check_dependencies(self.toolchain)

    def fetch_catalog(self, retries: int = 0) -> Catalog:
        """Fetch the catalog, retrying network failures ``retries`` times."""
        return call_with_retry(
            lambda: fetch_catalog(
                self.toolchain.fetcher, self.settings.download_page, self.parser,
            ),
            retries=retries,
            retry_on=(FetchError,),
        )

    def installer(self, confirm: Callable[[str], bool] | None = None) -> InstallationEngine:
        return InstallationEngine(
            self.guard,
            self.toolchain,
            confirm=confirm,
            url_template=self.settings.download_url_template,
        )

    def uninstaller(self) -> UninstallEngine:
        return UninstallEngine(self.guard, self.resolver)
