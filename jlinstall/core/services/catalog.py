"""
Release catalog — fetch the download page and extract releases from it.

:class:`CatalogParser` is the only code that knows the page format.
Everything downstream works on the :class:`Catalog` value, so a page
redesign only touches the parser.

Extraction contract:
    role ``latest``  first ``v<maj>.<min>.<patch>`` on the line carrying
                     the ``current_stable_release`` anchor id
    role ``lts``     same for ``long_term_support_release``
    assets           every ``https://…/<name>-<version>-<platform>-<arch>.tar.gz``
"""

from __future__ import annotations

import logging
import re

from jlinstall.adapters.base import Fetcher
from jlinstall.core.errors import FetchError, FetchErrorKind
from jlinstall.core.models.catalog import ROLE_LATEST, ROLE_LTS, Catalog, ReleaseAsset
from jlinstall.core.models.release import Platform, ReleaseIdentifier, SemVer

logger = logging.getLogger(__name__)

ROLE_ANCHORS: dict[str, str] = {
    ROLE_LATEST: "current_stable_release",
    ROLE_LTS: "long_term_support_release",
}

_VERSION_TOKEN_RE = re.compile(r"v(\d+\.\d+\.\d+)\b")


class CatalogParser:
    """Turns download page text into a :class:`Catalog`."""

    def __init__(self, name: str = "julia", anchors: dict[str, str] | None = None):
        self.name = name
        self.anchors = dict(anchors or ROLE_ANCHORS)
        self._anchor_res = {
            role: re.compile(rf"""id=["']?{re.escape(anchor)}\b""")
            for role, anchor in self.anchors.items()
        }
        self._asset_re = re.compile(
            r"""(?P<url>https://[^\s"'<>]*/"""
            rf"(?P<file>{re.escape(name)}-(?P<version>\d+\.\d+\.\d+(?:-[0-9A-Za-z.]+)?)"
            r"-(?P<slug>linux|musl|freebsd)-(?P<arch>x86_64|i686|aarch64|ppc64le)\.tar\.gz)(?![\w.]))"
        )

    def parse(self, text: str, source_url: str = "") -> Catalog:
        """Parse page text. Never raises; missing pieces stay empty."""
        return Catalog(
            source_url=source_url,
            roles=self.parse_roles(text),
            assets=self.parse_assets(text),
        )

    def parse_roles(self, text: str) -> dict[str, SemVer]:
        roles: dict[str, SemVer] = {}
        lines = (text or "").splitlines()
        for role, anchor_re in self._anchor_res.items():
            for line in lines:
                if not anchor_re.search(line):
                    continue
                m = _VERSION_TOKEN_RE.search(line)
                if m:
                    roles[role] = SemVer.parse(m.group(1))
                break
            if role not in roles:
                logger.debug("No %s anchor with a version token found", role)
        return roles

    def parse_assets(self, text: str) -> list[ReleaseAsset]:
        assets: list[ReleaseAsset] = []
        seen: set[str] = set()
        for m in self._asset_re.finditer(text or ""):
            url = m.group("url")
            if url in seen:
                continue
            seen.add(url)
            identifier = ReleaseIdentifier(
                name=self.name,
                version=SemVer.parse(m.group("version")),
                platform=Platform.from_slug(m.group("slug"), m.group("arch")),
            )
            assets.append(ReleaseAsset(identifier=identifier, url=url))
        return assets


def fetch_catalog(
    fetcher: Fetcher,
    url: str,
    parser: CatalogParser | None = None,
) -> Catalog:
    """Fetch the download page and parse it.

    Args:
        fetcher: Network adapter.
        url: Download page URL.
        parser: Page parser (default: ``CatalogParser()``).

    Returns:
        The parsed Catalog. Roles are empty when the page has no anchors.

    Raises:
        FetchError: ``NETWORK`` when the page cannot be fetched.
    """
    parser = parser or CatalogParser()
    logger.info("Fetching release catalog from %s", url)

    receipt = fetcher.fetch_document(url)
    if receipt.failed:
        raise FetchError(
            FetchErrorKind.NETWORK,
            receipt.error or f"Failed to fetch {url}",
            url=url,
            timed_out=receipt.timed_out,
        )

    catalog = parser.parse(receipt.output, source_url=url)
    logger.info(
        "Catalog: latest=%s lts=%s, %d assets",
        catalog.latest, catalog.lts, len(catalog.assets),
    )
    return catalog
