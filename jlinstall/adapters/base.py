"""
Adapter base — the contract between the engines and external tools.

The engines only talk to the outside world (network, archives) through
adapters. Adapters return Receipts and NEVER raise for operational
failures; only interrupts (``KeyboardInterrupt``) propagate, so the
engine can clean up before re-raising.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from jlinstall.core.models.receipt import Receipt


class Adapter(ABC):
    """Abstract base class for all adapters.

    To create a new adapter:
        1. Subclass Fetcher or Extractor
        2. Implement name, is_available and the operations
        3. Select it in ``registry.build_toolchain``
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'urllib', 'curl', 'tar')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this adapter's underlying tool is available.

        Should be fast and never raise.
        """

    @property
    def requirement(self) -> str | None:
        """External executable this adapter needs, if any."""
        return None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class Fetcher(Adapter):
    """Fetches remote documents and files."""

    @abstractmethod
    def fetch_document(self, url: str) -> Receipt:
        """Fetch ``url`` as text. The body is ``Receipt.output``."""

    @abstractmethod
    def fetch_file(self, url: str, dest: Path) -> Receipt:
        """Download ``url`` into ``dest``.

        On failure ``dest`` may hold partial data; the caller removes it.
        """


class Extractor(Adapter):
    """Unpacks release archives."""

    @abstractmethod
    def extract(self, archive: Path, dest_dir: Path) -> Receipt:
        """Unpack ``archive`` into the existing directory ``dest_dir``."""
