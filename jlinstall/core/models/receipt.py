"""
Receipt — what an adapter hands back after one external side effect.

Adapters do not raise for expected failures (network errors, bad
archives, missing executables). They return a failed Receipt and the
calling engine decides which typed error that becomes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Receipt(BaseModel):
    """Outcome of one adapter operation (``fetch_document``, ``extract``, ...)."""

    model_config = ConfigDict(frozen=True)

    adapter: str
    operation: str
    ok: bool = True
    output: str = ""
    error: str | None = None
    timed_out: bool = False
    duration_ms: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return not self.ok

    @classmethod
    def success(cls, adapter: str, operation: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, operation=operation, ok=True, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, operation: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, operation=operation, ok=False, error=error, **kwargs)

    def __str__(self) -> str:
        state = "ok" if self.ok else f"failed: {self.error}"
        return f"{self.adapter}.{self.operation} {state} ({self.duration_ms} ms)"
