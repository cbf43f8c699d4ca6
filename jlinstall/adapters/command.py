"""
Command runner — the single place where subprocesses are started.

Used by the ``curl`` and ``tar`` backends. Output is captured, timing
recorded, and every failure is returned as a Receipt.
"""

from __future__ import annotations

import logging
import subprocess
import time

from jlinstall.core.models.receipt import Receipt

logger = logging.getLogger(__name__)


def run_command(
    cmd: list[str],
    *,
    adapter: str,
    operation: str,
    timeout: int | None = None,
) -> Receipt:
    """Run ``cmd`` and capture the outcome.

    Args:
        cmd: Command list for ``subprocess.run()``.
        adapter: Adapter name recorded on the receipt.
        operation: Operation name recorded on the receipt.
        timeout: Seconds before the command is killed.

    Returns:
        Success receipt with stdout as output, or a failure receipt.
    """
    logger.debug("Executing: %s", " ".join(cmd))
    start = time.monotonic()

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return Receipt.failure(
            adapter=adapter,
            operation=operation,
            error=f"Command timed out after {timeout}s",
            timed_out=True,
            metadata={"command": cmd, "timeout": timeout},
        )
    except OSError as e:
        return Receipt.failure(
            adapter=adapter,
            operation=operation,
            error=f"Command execution error: {e}",
            metadata={"command": cmd},
        )

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stderr = (result.stderr or "").strip()

    if result.returncode == 0:
        return Receipt.success(
            adapter=adapter,
            operation=operation,
            output=result.stdout or "",
            duration_ms=elapsed_ms,
            metadata={"command": cmd, "return_code": 0},
        )

    return Receipt.failure(
        adapter=adapter,
        operation=operation,
        error=stderr[-2000:] or f"Command exited with code {result.returncode}",
        duration_ms=elapsed_ms,
        metadata={"command": cmd, "return_code": result.returncode},
    )
