"""
Fetch adapters — download page and release archives.

Two backends:
    urllib  in-process, default
    curl    external ``curl`` executable (``downloader: curl`` in config)
"""

from __future__ import annotations

import logging
import shutil
import time
import urllib.error
import urllib.request
from pathlib import Path

from jlinstall import __version__
from jlinstall.adapters.base import Fetcher
from jlinstall.adapters.command import run_command
from jlinstall.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

_USER_AGENT = f"jlinstall/{__version__}"
_CHUNK_SIZE = 64 * 1024


def _fmt_size(n: int | float) -> str:
    """Format byte count to human-readable string."""
    for unit in ("B", "KB", "MB", "GB"):
        if n < 1024:
            return f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} TB"


def _is_timeout(exc: BaseException) -> bool:
    if isinstance(exc, TimeoutError):
        return True
    reason = getattr(exc, "reason", None)
    return isinstance(reason, TimeoutError)


class UrllibFetcher(Fetcher):
    """Fetch over HTTP(S) with ``urllib.request``."""

    def __init__(self, timeout: int = 60):
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "urllib"

    def is_available(self) -> bool:
        return True

    def fetch_document(self, url: str) -> Receipt:
        start = time.monotonic()
        try:
            req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                charset = resp.headers.get_content_charset() or "utf-8"
                body = resp.read().decode(charset, errors="replace")
        except (urllib.error.URLError, OSError, ValueError) as e:
            return Receipt.failure(
                adapter=self.name,
                operation="fetch_document",
                error=f"Failed to fetch {url}: {e}",
                timed_out=_is_timeout(e),
                metadata={"url": url},
            )

        return Receipt.success(
            adapter=self.name,
            operation="fetch_document",
            output=body,
            duration_ms=int((time.monotonic() - start) * 1000),
            metadata={"url": url, "size": len(body)},
        )

    def fetch_file(self, url: str, dest: Path) -> Receipt:
        start = time.monotonic()
        downloaded = 0
        try:
            req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                total = int(resp.headers.get("Content-Length") or 0)
                last_progress = -1
                with open(dest, "wb") as f:
                    while True:
                        chunk = resp.read(_CHUNK_SIZE)
                        if not chunk:
                            break
                        f.write(chunk)
                        downloaded += len(chunk)

                        # Progress tracking (log every 10%)
                        if total > 0:
                            pct = int(downloaded * 100 / total)
                            if pct >= last_progress + 10:
                                last_progress = pct
                                logger.info(
                                    "Download progress: %d%% (%s / %s)",
                                    pct, _fmt_size(downloaded), _fmt_size(total),
                                )
        except (urllib.error.URLError, OSError, ValueError) as e:
            return Receipt.failure(
                adapter=self.name,
                operation="fetch_file",
                error=f"Download failed: {e}",
                timed_out=_is_timeout(e),
                metadata={"url": url, "dest": str(dest), "size_bytes": downloaded},
            )

        return Receipt.success(
            adapter=self.name,
            operation="fetch_file",
            output=f"Downloaded {_fmt_size(downloaded)} to {dest}",
            duration_ms=int((time.monotonic() - start) * 1000),
            metadata={"url": url, "dest": str(dest), "size_bytes": downloaded},
        )


class CurlFetcher(Fetcher):
    """Fetch by shelling out to ``curl``."""

    # curl exit status for "operation timed out"
    _CURL_TIMEOUT = 28

    def __init__(self, timeout: int = 60):
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "curl"

    @property
    def requirement(self) -> str | None:
        return "curl"

    def is_available(self) -> bool:
        return shutil.which("curl") is not None

    def _mark_timeout(self, receipt: Receipt) -> Receipt:
        if receipt.failed and receipt.metadata.get("return_code") == self._CURL_TIMEOUT:
            return receipt.model_copy(update={"timed_out": True})
        return receipt

    def fetch_document(self, url: str) -> Receipt:
        receipt = run_command(
            ["curl", "-fsSL", "--max-time", str(self._timeout), url],
            adapter=self.name,
            operation="fetch_document",
        )
        return self._mark_timeout(receipt)

    def fetch_file(self, url: str, dest: Path) -> Receipt:
        receipt = run_command(
            ["curl", "-fsSL", "--max-time", str(self._timeout), "-o", str(dest), url],
            adapter=self.name,
            operation="fetch_file",
        )
        return self._mark_timeout(receipt)
