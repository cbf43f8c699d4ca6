"""
Version resolver — maps a user token to a fully qualified identifier.

Accepted tokens:
    latest, lts                        role bound by the catalog
    1.11.0, v1.11.0, 1.11.0-alpha2     bare version
    julia-1.11.0                       prefixed version
    julia-1.11.0-musl-x86_64           already qualified, passed through

Bare and prefixed versions are qualified with the host platform, which
is always glibc on Linux. musl builds are only reachable with a
qualified token or from the "all options" menu.
"""

from __future__ import annotations

import logging

from jlinstall.core.errors import ResolutionError, ResolutionErrorKind
from jlinstall.core.models.catalog import ROLES, Catalog
from jlinstall.core.models.release import Platform, ReleaseIdentifier, SemVer

logger = logging.getLogger(__name__)


class VersionResolver:
    """Resolves tokens for one runtime name."""

    def __init__(self, name: str = "julia"):
        self.name = name

    def _prefixed(self, token: str) -> str:
        token = (token or "").strip()
        if not token:
            raise ResolutionError(
                ResolutionErrorKind.MALFORMED_TOKEN,
                "Empty version token",
                token=token,
            )
        if token.startswith(f"{self.name}-"):
            return token
        return f"{self.name}-{token}"

    def _parse_qualified(self, text: str, token: str) -> ReleaseIdentifier:
        try:
            ident = ReleaseIdentifier.parse(text)
        except ValueError as e:
            raise ResolutionError(
                ResolutionErrorKind.MALFORMED_TOKEN,
                f"Invalid release identifier: {token}",
                token=token,
            ) from e
        if ident.name != self.name:
            raise ResolutionError(
                ResolutionErrorKind.MALFORMED_TOKEN,
                f"{token} is not a {self.name} release",
                token=token,
            )
        return ident

    def _parse_version(self, text: str, token: str) -> SemVer:
        try:
            return SemVer.parse(text[len(self.name) + 1:])
        except ValueError as e:
            raise ResolutionError(
                ResolutionErrorKind.MALFORMED_TOKEN,
                f"Invalid version: {token} (expected latest, lts or x.y.z)",
                token=token,
            ) from e

    def resolve(
        self,
        token: str,
        catalog: Catalog,
        platform: Platform | None,
    ) -> ReleaseIdentifier:
        """Resolve ``token`` to a qualified identifier.

        Args:
            token: What the user typed.
            catalog: Catalog of this invocation (consulted for roles only).
            platform: Host platform, or None when detection failed.

        Raises:
            ResolutionError: ``UNKNOWN_ALIAS``, ``UNSUPPORTED_PLATFORM`` or
                ``MALFORMED_TOKEN``.
        """
        stripped = (token or "").strip()

        if stripped in ROLES:
            version = catalog.role(stripped)
            if version is None:
                raise ResolutionError(
                    ResolutionErrorKind.UNKNOWN_ALIAS,
                    f'Could not determine the "{stripped}" release from '
                    f"{catalog.source_url or 'the download page'}",
                    token=stripped,
                )
        else:
            text = self._prefixed(stripped)
            if ReleaseIdentifier.is_qualified(text):
                ident = self._parse_qualified(text, stripped)
                logger.debug("Resolved %s -> %s (qualified)", stripped, ident)
                return ident
            version = self._parse_version(text, stripped)

        if platform is None:
            raise ResolutionError(
                ResolutionErrorKind.UNSUPPORTED_PLATFORM,
                "Unsupported operating system or architecture",
                token=stripped,
            )

        ident = ReleaseIdentifier(name=self.name, version=version, platform=platform)
        logger.debug("Resolved %s -> %s", stripped, ident)
        return ident

    def normalize_installed_name(self, token: str) -> str:
        """Directory name for an installed-version token.

        ``1.10.0``, ``v1.10.0``, ``julia-1.10.0`` and
        ``julia-1.10.0-linux-x86_64`` all give ``julia-1.10.0``.

        Raises:
            ResolutionError: ``MALFORMED_TOKEN`` if no version can be read.
        """
        text = self._prefixed(token)
        if ReleaseIdentifier.is_qualified(text):
            return self._parse_qualified(text, token.strip()).unqualified
        version = self._parse_version(text, token.strip())
        return f"{self.name}-{version}"
