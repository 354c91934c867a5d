# === NAVMAP v1 ===
# {
#   "module": "ArtifactKit.MavenDownload",
#   "purpose": "Package initialization for ArtifactKit.MavenDownload",
#   "sections": []
# }
# === /NAVMAP ===

"""Public API for the ArtifactKit Maven downloader.

This facade exposes the coordinate and artifact types, the fetcher that
downloads and SHA-1 verifies the four files of a Maven artifact into a local
repository, and the resolver that maps ordered dependency lists to local JAR
paths.
"""

from __future__ import annotations

from .artifacts import DependencyJar, MavenJarArtifact
from .cancellation import CancellationToken
from .errors import (
    ArtifactFetchError,
    ChecksumMismatchError,
    CommitError,
    DownloadFailure,
    FetchCancelledError,
    MavenDownloadError,
    UserConfigError,
    ValidationError,
)
from .fetcher import MavenArtifactFetcher
from .resolver import MavenDependencyResolver
from .settings import MavenDownloadSettings, get_settings, resolve_local_repository

__version__ = "0.1.0"

__all__ = [
    "ArtifactFetchError",
    "CancellationToken",
    "ChecksumMismatchError",
    "CommitError",
    "DependencyJar",
    "DownloadFailure",
    "FetchCancelledError",
    "MavenArtifactFetcher",
    "MavenDependencyResolver",
    "MavenDownloadError",
    "MavenDownloadSettings",
    "MavenJarArtifact",
    "UserConfigError",
    "ValidationError",
    "__version__",
    "get_settings",
    "resolve_local_repository",
]
