"""
Configuration loader — reads config.yml into a Settings model.

Lookup order for the file:
    --config flag  >  $JLINSTALL_CONFIG  >  $XDG_CONFIG_HOME/jlinstall/config.yml

A missing file is not an error: defaults apply. Environment overrides
(``JLINSTALL_INSTALL_ROOT``, ``JLINSTALL_BIN_DIR``) are applied last.
"""

from __future__ import annotations

import logging
import os
import platform
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from jlinstall.core.models.installation import InstallLayout

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.yml"
DEFAULT_DOWNLOAD_PAGE = "https://julialang.org/downloads/"


class ConfigError(Exception):
    """Raised when the configuration file is invalid."""


def _default_install_root() -> Path:
    if platform.system() == "FreeBSD":
        return Path("/usr/local")
    return Path("/opt")


class Settings(BaseModel):
    """Validated installer configuration."""

    name: str = "julia"
    install_root: Path = Field(default_factory=_default_install_root)
    bin_dir: Path = Path("/usr/bin")
    download_page: str = DEFAULT_DOWNLOAD_PAGE

    downloader: Literal["urllib", "curl"] = "urllib"
    extractor: Literal["tarfile", "tar"] = "tarfile"

    timeout: int = 60          # seconds, per network operation
    lock_timeout: int = 30     # seconds to wait for another process
    require_privileges: bool = True

    # Optional fallback when the download page does not list a version, e.g.
    # "https://julialang-s3.julialang.org/bin/{os}/{arch_dir}/{major}.{minor}/{name}-{version}-{os}-{arch}.tar.gz"
    download_url_template: str | None = None

    @field_validator("install_root", "bin_dir")
    @classmethod
    def _absolute_path(cls, v: Path) -> Path:
        # Symlink targets are built from these; relative text would dangle.
        return v.expanduser().resolve()

    @property
    def layout(self) -> InstallLayout:
        return InstallLayout(
            name=self.name,
            install_root=self.install_root,
            bin_dir=self.bin_dir,
        )


def default_config_path() -> Path:
    """The per-user config file location."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "jlinstall" / CONFIG_FILE


def find_config_file(explicit: Path | None = None) -> Path | None:
    """Locate the config file.

    Args:
        explicit: Path given on the command line (must exist).

    Returns:
        Path to the config file, or None when no file is present.

    Raises:
        ConfigError: If ``explicit`` does not exist.
    """
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigError(f"Config file not found: {explicit}")
        return explicit

    env_path = os.environ.get("JLINSTALL_CONFIG")
    if env_path:
        candidate = Path(env_path).expanduser()
        if not candidate.is_file():
            raise ConfigError(f"Config file not found: {candidate} (from $JLINSTALL_CONFIG)")
        return candidate

    candidate = default_config_path()
    return candidate if candidate.is_file() else None


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate the installer configuration.

    Args:
        path: Explicit path to config.yml. If None, searches the default
            locations and falls back to built-in defaults.

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If the file is unreadable or invalid.
    """
    config_file = find_config_file(path)
    data: dict = {}

    if config_file is not None:
        logger.debug("Loading config from %s", config_file)
        try:
            raw = config_file.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read {config_file}: {e}") from e

        try:
            loaded = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(
                f"Expected a YAML mapping in {config_file}, got {type(loaded).__name__}"
            )
        data = dict(loaded)

    # Environment overrides
    for key, env_var in (("install_root", "JLINSTALL_INSTALL_ROOT"), ("bin_dir", "JLINSTALL_BIN_DIR")):
        value = os.environ.get(env_var)
        if value:
            data[key] = value

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.info(
        "Install root %s, launchers in %s", settings.install_root, settings.bin_dir,
    )
    return settings
