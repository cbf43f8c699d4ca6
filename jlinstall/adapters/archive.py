"""
Archive adapters — unpack ``.tar.gz`` release archives.

Two backends:
    tarfile  in-process, default
    tar      external ``tar`` executable (``extractor: tar`` in config)
"""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
import time
from pathlib import Path

from jlinstall.adapters.base import Extractor
from jlinstall.adapters.command import run_command
from jlinstall.core.models.receipt import Receipt

logger = logging.getLogger(__name__)


def _unsafe_members(tf: tarfile.TarFile, dest: Path) -> list[str]:
    """Names of members that would land outside ``dest``."""
    root = dest.resolve()
    bad: list[str] = []
    for member in tf.getmembers():
        target = (root / member.name).resolve()
        if target != root and not str(target).startswith(str(root) + os.sep):
            bad.append(member.name)
        elif member.isdev():
            bad.append(member.name)
    return bad


class TarfileExtractor(Extractor):
    """Extract with the ``tarfile`` module."""

    @property
    def name(self) -> str:
        return "tarfile"

    def is_available(self) -> bool:
        return True

    def extract(self, archive: Path, dest_dir: Path) -> Receipt:
        start = time.monotonic()
        try:
            with tarfile.open(archive, "r:*") as tf:
                bad = _unsafe_members(tf, dest_dir)
                if bad:
                    return Receipt.failure(
                        adapter=self.name,
                        operation="extract",
                        error=f"Unsafe archive member path: {bad[0]}",
                        metadata={"archive": str(archive), "unsafe": bad[:10]},
                    )
                if hasattr(tarfile, "data_filter"):
                    tf.extractall(dest_dir, filter="data")
                else:
                    tf.extractall(dest_dir)
        except (tarfile.TarError, OSError, EOFError) as e:
            return Receipt.failure(
                adapter=self.name,
                operation="extract",
                error=f"Extract failed: {e}",
                metadata={"archive": str(archive)},
            )

        return Receipt.success(
            adapter=self.name,
            operation="extract",
            output=f"Extracted {archive.name} into {dest_dir}",
            duration_ms=int((time.monotonic() - start) * 1000),
            metadata={"archive": str(archive), "dest": str(dest_dir)},
        )


class TarCommandExtractor(Extractor):
    """Extract by shelling out to ``tar``."""

    def __init__(self, timeout: int | None = None):
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "tar"

    @property
    def requirement(self) -> str | None:
        return "tar"

    def is_available(self) -> bool:
        return shutil.which("tar") is not None

    def extract(self, archive: Path, dest_dir: Path) -> Receipt:
        return run_command(
            ["tar", "-C", str(dest_dir), "-xf", str(archive)],
            adapter=self.name,
            operation="extract",
            timeout=self._timeout,
        )
