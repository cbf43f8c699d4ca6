"""
Install root lock — advisory, process-wide, exclusive.

Every mutating operation (install, uninstall, default change) holds this
lock for its whole duration so two processes never race on directory
creation/removal or on the default pointer. Read-only operations
(list, catalog fetch) do not take it.

The lock file is never deleted.
"""

from __future__ import annotations

import fcntl
import logging
import os
import time
from pathlib import Path
from types import TracebackType

from jlinstall.core.errors import LockError, LockErrorKind

logger = logging.getLogger(__name__)


class InstallRootLock:
    """``fcntl.flock`` based lock on ``<install_root>/.jlinstall.lock``.

    Usage::

        with InstallRootLock(layout.lock_path, timeout=30):
            ...  # mutate the install root
    """

    def __init__(self, path: Path, timeout: float = 30.0, poll_interval: float = 0.1):
        self._path = path
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._fd: int | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def held(self) -> bool:
        return self._fd is not None

    def acquire(self) -> None:
        """Block until the lock is held or the timeout elapses.

        Raises:
            LockError: ``TIMEOUT`` if another process keeps the lock,
                ``UNAVAILABLE`` if the lock file cannot be opened.
        """
        if self._fd is not None:
            return

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self._path, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as e:
            raise LockError(
                LockErrorKind.UNAVAILABLE,
                f"Cannot open lock file {self._path}: {e}",
                path=self._path,
            ) from e
        deadline = time.monotonic() + self._timeout

        while True:
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    os.close(fd)
                    raise LockError(
                        LockErrorKind.TIMEOUT,
                        f"Another jlinstall process holds {self._path} "
                        f"(waited {self._timeout:g}s)",
                        path=self._path,
                    )
                time.sleep(self._poll_interval)
            except BaseException:
                os.close(fd)
                raise

        self._fd = fd
        logger.debug("Acquired lock %s", self._path)

    def release(self) -> None:
        """Release the lock. Safe to call when not held."""
        if self._fd is None:
            return
        try:
            fcntl.flock(self._fd, fcntl.LOCK_UN)
        finally:
            os.close(self._fd)
            self._fd = None
        logger.debug("Released lock %s", self._path)

    def __enter__(self) -> InstallRootLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
