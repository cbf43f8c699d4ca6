"""
Catalog — what the download page offers, as seen by one invocation.

Built fresh on every run and never persisted. An empty catalog is a
valid value: roles stay unresolved and callers report that condition.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from jlinstall.core.errors import FetchError, FetchErrorKind
from jlinstall.core.models.release import Platform, ReleaseIdentifier, SemVer

ROLE_LATEST = "latest"
ROLE_LTS = "lts"
ROLES: tuple[str, ...] = (ROLE_LATEST, ROLE_LTS)


class ReleaseAsset(BaseModel):
    """A downloadable archive for one release identifier."""

    identifier: ReleaseIdentifier
    url: str


class Catalog(BaseModel):
    """Role bindings plus every release asset found on the download page."""

    source_url: str = ""
    roles: dict[str, SemVer] = Field(default_factory=dict)
    assets: list[ReleaseAsset] = Field(default_factory=list)

    def role(self, name: str) -> SemVer | None:
        """Version bound to ``name`` (``latest``/``lts``), or None."""
        return self.roles.get(name)

    @property
    def latest(self) -> SemVer | None:
        return self.roles.get(ROLE_LATEST)

    @property
    def lts(self) -> SemVer | None:
        return self.roles.get(ROLE_LTS)

    def find_asset(self, identifier: ReleaseIdentifier) -> ReleaseAsset | None:
        """Asset whose identifier equals ``identifier``."""
        for asset in self.assets:
            if asset.identifier == identifier:
                return asset
        return None

    def install_options(self, platform: Platform | None = None) -> list[ReleaseIdentifier]:
        """Identifiers offered for the role versions, in document order.

        With ``platform`` only builds for that architecture and OS family
        are returned (linux offers both glibc and musl builds).
        Without it every platform is listed.
        """
        role_versions = {str(v) for v in self.roles.values()}
        options: list[ReleaseIdentifier] = []
        for asset in self.assets:
            ident = asset.identifier
            if str(ident.version) not in role_versions:
                continue
            if platform is not None:
                if ident.platform.arch != platform.arch or ident.platform.os != platform.os:
                    continue
            if ident not in options:
                options.append(ident)
        return options

    def require_options(self, platform: Platform | None = None) -> list[ReleaseIdentifier]:
        """Like :meth:`install_options`, but an empty result is an error.

        Raises:
            FetchError: ``PARSE_EMPTY`` when the page offered nothing.
        """
        options = self.install_options(platform)
        if not options:
            raise FetchError(
                FetchErrorKind.PARSE_EMPTY,
                f"No install options found on {self.source_url or 'the download page'}",
                source_url=self.source_url,
            )
        return options
