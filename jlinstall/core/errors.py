"""
Error taxonomy — one exception class per operation family.

Every error carries a ``kind`` so callers can tell "nothing happened"
(precondition failures) from "partially happened" (``PARTIAL_FAILURE``),
and a process ``exit_code`` for the CLI.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class FetchErrorKind(str, Enum):
    NETWORK = "network"
    PARSE_EMPTY = "parse_empty"


class ResolutionErrorKind(str, Enum):
    UNKNOWN_ALIAS = "unknown_alias"
    UNSUPPORTED_PLATFORM = "unsupported_platform"
    MALFORMED_TOKEN = "malformed_token"


class InstallErrorKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    DOWNLOAD_FAILED = "download_failed"
    EXTRACT_FAILED = "extract_failed"
    LINK_FAILED = "link_failed"
    # Reported through InstallResult.status, never raised.
    ALREADY_INSTALLED = "already_installed"


class UninstallErrorKind(str, Enum):
    NOT_INSTALLED = "not_installed"
    PARTIAL_FAILURE = "partial_failure"
    PERMISSION_DENIED = "permission_denied"


class DependencyErrorKind(str, Enum):
    MISSING_TOOL = "missing_tool"


class LockErrorKind(str, Enum):
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"


class InstallerError(Exception):
    """Base class for all errors surfaced to the user."""

    exit_code: int = 1

    def __init__(self, kind: Enum, message: str, **details: Any) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        result: dict[str, Any] = {
            "type": type(self).__name__,
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = {k: _jsonable(v) for k, v in self.details.items()}
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value!r}, {self.message!r})"


class FetchError(InstallerError):
    """The release catalog could not be fetched or holds no releases."""


class ResolutionError(InstallerError):
    """A version token could not be mapped to a release identifier."""


class InstallError(InstallerError):
    """An installation step failed."""


class UninstallError(InstallerError):
    """An uninstallation step failed."""


class DependencyError(InstallerError):
    """A configured external tool is missing."""

    exit_code = 2


class LockError(InstallerError):
    """The install root lock could not be acquired."""


def _jsonable(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return str(value)
