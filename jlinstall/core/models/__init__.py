"""
Domain models — Pydantic types for the installer.

All models are re-exported here for convenient access:

    from jlinstall.core.models import Catalog, ReleaseIdentifier, InstallLayout
"""

from jlinstall.core.models.catalog import ROLE_LATEST, ROLE_LTS, ROLES, Catalog, ReleaseAsset
from jlinstall.core.models.installation import InstalledVersion, InstallLayout
from jlinstall.core.models.receipt import Receipt
from jlinstall.core.models.release import Platform, ReleaseIdentifier, SemVer

__all__ = [
    # catalog.py
    "Catalog",
    "ROLES",
    "ROLE_LATEST",
    "ROLE_LTS",
    "ReleaseAsset",
    # installation.py
    "InstallLayout",
    "InstalledVersion",
    # receipt.py
    "Receipt",
    # release.py
    "Platform",
    "ReleaseIdentifier",
    "SemVer",
]
