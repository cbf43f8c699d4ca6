"""
Mock adapters — test doubles for the network and archive backends.

MockFetcher serves canned documents and files per URL; anything not
configured fails like a 404. MockExtractor either fails on demand or
delegates to the real tarfile backend.
"""

from __future__ import annotations

from pathlib import Path

from jlinstall.adapters.archive import TarfileExtractor
from jlinstall.adapters.base import Extractor, Fetcher
from jlinstall.core.models.receipt import Receipt


class MockFetcher(Fetcher):
    """Fetcher returning configured responses per URL."""

    def __init__(self, adapter_name: str = "mock", available: bool = True):
        self._name = adapter_name
        self._available = available
        self._documents: dict[str, str] = {}
        self._files: dict[str, bytes] = {}
        self._failures: dict[str, Receipt] = {}
        self._interrupts: dict[str, type[BaseException]] = {}
        self._call_log: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[tuple[str, str]]:
        """``(operation, url)`` for every call received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_document(self, url: str, text: str) -> None:
        self._documents[url] = text

    def set_file(self, url: str, data: bytes) -> None:
        self._files[url] = data

    def set_failure(self, url: str, error: str = "Mock failure", timed_out: bool = False) -> None:
        """Make every request for ``url`` fail."""
        self._failures[url] = Receipt.failure(
            adapter=self._name,
            operation="fetch",
            error=error,
            timed_out=timed_out,
        )

    def set_interrupt(self, url: str, exc: type[BaseException] = KeyboardInterrupt) -> None:
        """Raise ``exc`` mid-download of ``url`` (after writing partial data)."""
        self._interrupts[url] = exc

    def fetch_document(self, url: str) -> Receipt:
        self._call_log.append(("fetch_document", url))
        if url in self._failures:
            return self._failures[url]
        if url not in self._documents:
            return Receipt.failure(adapter=self._name, operation="fetch_document", error=f"404: {url}")
        return Receipt.success(adapter=self._name, operation="fetch_document", output=self._documents[url])

    def fetch_file(self, url: str, dest: Path) -> Receipt:
        self._call_log.append(("fetch_file", url))
        if url in self._interrupts:
            dest.write_bytes(b"partial")
            raise self._interrupts[url]()
        if url in self._failures:
            dest.write_bytes(b"partial")
            return self._failures[url]
        if url not in self._files:
            return Receipt.failure(adapter=self._name, operation="fetch_file", error=f"404: {url}")
        dest.write_bytes(self._files[url])
        return Receipt.success(
            adapter=self._name,
            operation="fetch_file",
            metadata={"url": url, "dest": str(dest), "mock": True},
        )

    def reset(self) -> None:
        """Clear call log and configured responses."""
        self._call_log.clear()
        self._documents.clear()
        self._files.clear()
        self._failures.clear()
        self._interrupts.clear()


class MockExtractor(Extractor):
    """Extractor that fails on demand, otherwise extracts with tarfile."""

    def __init__(self, fail_with: str | None = None, partial: bool = True):
        self._fail_with = fail_with
        self._partial = partial
        self._delegate = TarfileExtractor()
        self.calls: list[tuple[Path, Path]] = []

    @property
    def name(self) -> str:
        return "mock"

    def is_available(self) -> bool:
        return True

    def extract(self, archive: Path, dest_dir: Path) -> Receipt:
        self.calls.append((archive, dest_dir))
        if self._fail_with is None:
            return self._delegate.extract(archive, dest_dir)
        if self._partial:
            (dest_dir / "partial").mkdir(exist_ok=True)
        return Receipt.failure(adapter=self.name, operation="extract", error=self._fail_with)
