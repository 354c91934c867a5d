# === NAVMAP v1 ===
# {
#   "module": "ArtifactKit.MavenDownload.resolver",
#   "purpose": "Resolve ordered batches of dependency coordinates to local JAR paths",
#   "sections": [
#     {
#       "id": "mavendependencyresolver",
#       "name": "MavenDependencyResolver",
#       "anchor": "class-mavendependencyresolver",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Dependency resolution against a local repository backed by a remote one.

:class:`MavenDependencyResolver` wires settings, the executor, the HTTP
client, and :class:`~ArtifactKit.MavenDownload.fetcher.MavenArtifactFetcher`
together.  Batches are fetched one artifact at a time in input order, so the
returned list lines up index-for-index with the request.  The first failure
aborts the batch and propagates unchanged.
"""

from __future__ import annotations

import logging
from concurrent import futures
from pathlib import Path
from typing import Iterable, List, Optional, Union

import httpx

from ArtifactKit.concurrency import create_executor

from .artifacts import DependencyJar, MavenJarArtifact
from .cancellation import CancellationToken
from .fetcher import MavenArtifactFetcher
from .net import build_http_client
from .settings import MavenDownloadSettings, get_settings, resolve_local_repository

__all__ = ["MavenDependencyResolver"]

LOGGER = logging.getLogger("ArtifactKit.MavenDownload.resolver")

DependencyLike = Union[DependencyJar, str]


def _coerce(dependency: DependencyLike) -> DependencyJar:
    if isinstance(dependency, DependencyJar):
        return dependency
    return DependencyJar.parse(dependency)


class MavenDependencyResolver:
    """Resolves dependency coordinates to verified JARs in the local repository.

    Args:
        settings: Settings to use; the process-wide settings when omitted.
        local_repository: Explicit local repository root, overriding every
            other lookup.
        executor: Executor for transfers. When omitted the resolver creates a
            bounded pool sized by ``settings.fetch.workers`` and shuts it down
            in :meth:`close`.
        client: HTTP client for transfers; created (and closed) by the
            resolver when omitted.
        transport: Transport for the resolver-created client.

    Examples:
        >>> with MavenDependencyResolver() as resolver:  # doctest: +SKIP
        ...     jar = resolver.resolve_one(DependencyJar("junit", "junit", "4.13.2"))
    """

    def __init__(
        self,
        settings: Optional[MavenDownloadSettings] = None,
        *,
        local_repository: Optional[Path] = None,
        executor: Optional[futures.Executor] = None,
        client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._owns_executor = executor is None
        self.executor = executor if executor is not None else self.create_executor()
        self._owns_client = client is None
        self.client = client or build_http_client(
            self.settings.http, self.settings.repository, transport=transport
        )
        self.local_repository_dir = (
            Path(local_repository) if local_repository is not None else self.locate_local_repository()
        )
        username, password = self.settings.repository.credentials()
        self.fetcher = self.create_fetcher(
            self.settings.repository.url,
            username,
            password,
            self.local_repository_dir,
            self.executor,
        )
        LOGGER.debug(
            "resolver initialized",
            extra={
                "stage": "resolve",
                "repository": self.settings.repository.id,
                "local_repository": str(self.local_repository_dir),
            },
        )

    # --- overridable seams ---------------------------------------------------

    def create_executor(self) -> futures.Executor:
        return create_executor(self.settings.fetch.workers)

    def locate_local_repository(self) -> Path:
        """Locate the local repository root from settings."""
        return resolve_local_repository(self.settings)

    def create_fetcher(
        self,
        repository_url: str,
        username: Optional[str],
        password: Optional[str],
        local_repository_dir: Path,
        executor: futures.Executor,
    ) -> MavenArtifactFetcher:
        return MavenArtifactFetcher(
            repository_url,
            local_repository_dir,
            executor,
            client=self.client,
            username=username,
            password=password,
            fetch_settings=self.settings.fetch,
        )

    # --- resolution ----------------------------------------------------------

    def resolve_many(
        self,
        dependencies: Iterable[DependencyLike],
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[Path]:
        """Return local JAR paths for ``dependencies``.

        ``result[i]`` is the JAR for ``dependencies[i]``; duplicates are
        allowed and resolve to the same path.

        Raises:
            ArtifactFetchError: If any artifact cannot be fetched. No partial
                result is returned.
        """

        artifacts = [MavenJarArtifact(_coerce(dependency)) for dependency in dependencies]
        for artifact in artifacts:
            self.fetcher.fetch_artifact(artifact, cancel_token=cancel_token)
        paths = [self.local_repository_dir / artifact.jar_path for artifact in artifacts]
        LOGGER.info(
            "resolved dependencies",
            extra={"stage": "resolve", "count": len(paths)},
        )
        return paths

    def resolve_one(
        self,
        dependency: DependencyLike,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Path:
        """Return the local JAR path for a single dependency."""

        return self.resolve_many([dependency], cancel_token=cancel_token)[0]

    def local_artifact_urls(self, *dependencies: DependencyLike) -> List[str]:
        """Resolve ``dependencies`` and return ``file://`` URLs in input order."""

        return [path.absolute().as_uri() for path in self.resolve_many(dependencies)]

    # --- lifecycle -----------------------------------------------------------

    def close(self) -> None:
        """Release the executor and HTTP client if this resolver created them."""

        if self._owns_executor:
            self.executor.shutdown(wait=True)
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "MavenDependencyResolver":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
