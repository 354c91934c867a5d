"""Exception hierarchy shared across artifact fetching, validation, and commit.

Resolving a Maven dependency spans HTTP retrieval of four related files,
checksum validation of the staged payloads, and promotion into the shared
local repository.  This module groups the failure modes so callers can tell
"could not fetch" apart from "fetched but untrusted" while every fatal path
still surfaces as a single :class:`ArtifactFetchError` from the fetcher.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from .artifacts import MavenJarArtifact

__all__ = [
    "MavenDownloadError",
    "DownloadFailure",
    "ValidationError",
    "ChecksumMismatchError",
    "CommitError",
    "ArtifactFetchError",
    "FetchCancelledError",
    "UserConfigError",
]


class MavenDownloadError(RuntimeError):
    """Base exception for dependency fetch, validation, or commit failures."""


class DownloadFailure(MavenDownloadError):
    """Raised when a single remote file cannot be copied to disk."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ValidationError(MavenDownloadError):
    """Raised when staged artifact files cannot be trusted."""


class ChecksumMismatchError(ValidationError):
    """Raised when a payload digest differs from its published checksum."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[Path] = None,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.expected = expected
        self.actual = actual


class CommitError(MavenDownloadError):
    """Raised when a validated file cannot be moved into the local repository."""


class ArtifactFetchError(MavenDownloadError):
    """Fatal failure of a whole ``fetch_artifact`` call.

    The artifact's files have already been purged from staging and from the
    local repository when this is raised, unless ``purge_incomplete`` is set;
    the underlying cause is chained.
    """

    def __init__(
        self,
        message: str,
        *,
        artifact: Optional["MavenJarArtifact"] = None,
        purge_incomplete: bool = False,
    ) -> None:
        if purge_incomplete:
            message = f"{message} (local repository purge incomplete)"
        super().__init__(message)
        self.artifact = artifact
        self.purge_incomplete = purge_incomplete


class FetchCancelledError(ArtifactFetchError):
    """Raised when a fetch is aborted through its cancellation token."""


class UserConfigError(RuntimeError):
    """Raised when CLI arguments, coordinates, or settings inputs are invalid."""

# === NAVMAP v1 ===
# {
#   "module": "ArtifactKit.MavenDownload.errors",
#   "purpose": "Define the exception hierarchy used across artifact fetch, validation, and commit",
#   "sections": [
#     {"id": "base", "name": "Base Exceptions", "anchor": "BAS", "kind": "api"},
#     {"id": "transport", "name": "Transport Errors", "anchor": "TRN", "kind": "api"},
#     {"id": "validation", "name": "Validation Errors", "anchor": "VAL", "kind": "api"},
#     {"id": "fetch", "name": "Fetch & Cancellation Errors", "anchor": "FET", "kind": "api"},
#     {"id": "configuration", "name": "Configuration Errors", "anchor": "CFG", "kind": "api"}
#   ]
# }
# === /NAVMAP ===
