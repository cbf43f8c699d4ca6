"""
Adapter registry — picks the configured backends and checks they exist.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from jlinstall.adapters.archive import TarCommandExtractor, TarfileExtractor
from jlinstall.adapters.base import Adapter, Extractor, Fetcher
from jlinstall.adapters.http import CurlFetcher, UrllibFetcher
from jlinstall.core.config.loader import Settings
from jlinstall.core.errors import DependencyError, DependencyErrorKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Toolchain:
    """The adapters one invocation works with."""

    fetcher: Fetcher
    extractor: Extractor

    @property
    def adapters(self) -> list[Adapter]:
        return [self.fetcher, self.extractor]

    def status(self) -> dict[str, dict[str, object]]:
        """Availability of every adapter, keyed by adapter name."""
        return {
            a.name: {"available": a.is_available(), "requires": a.requirement}
            for a in self.adapters
        }


def build_toolchain(settings: Settings) -> Toolchain:
    """Instantiate the backends selected in ``settings``."""
    if settings.downloader == "curl":
        fetcher: Fetcher = CurlFetcher(timeout=settings.timeout)
    else:
        fetcher = UrllibFetcher(timeout=settings.timeout)

    if settings.extractor == "tar":
        extractor: Extractor = TarCommandExtractor()
    else:
        extractor = TarfileExtractor()

    logger.debug("Toolchain: fetcher=%s extractor=%s", fetcher.name, extractor.name)
    return Toolchain(fetcher=fetcher, extractor=extractor)


def check_dependencies(toolchain: Toolchain) -> None:
    """Fail if any configured backend is missing its executable.

    Raises:
        DependencyError: ``MISSING_TOOL`` naming the first missing tool.
    """
    for adapter in toolchain.adapters:
        if not adapter.is_available():
            tool = adapter.requirement or adapter.name
            raise DependencyError(
                DependencyErrorKind.MISSING_TOOL,
                f'Missing dependency "{tool}"',
                tool=tool,
                adapter=adapter.name,
            )
