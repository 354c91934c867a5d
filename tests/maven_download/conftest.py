"""Shared fixtures for the maven_download test suite.

Every test talks to an in-memory Maven repository served through
``httpx.MockTransport`` so no request leaves the process.  The fake records
each request path and its ``Authorization`` header, which lets tests assert
exact request counts and ordering.
"""

from __future__ import annotations

import hashlib
import logging
import os
import threading
from concurrent import futures
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from ArtifactKit.MavenDownload.artifacts import DependencyJar, MavenJarArtifact
from ArtifactKit.MavenDownload.fetcher import MavenArtifactFetcher
from ArtifactKit.MavenDownload.logging_config import LOGGER_NAME
from ArtifactKit.MavenDownload.net import build_http_client
from ArtifactKit.MavenDownload.resolver import MavenDependencyResolver
from ArtifactKit.MavenDownload.settings import (
    FetchSettings,
    MavenDownloadSettings,
    reset_settings,
)
from ArtifactKit.MavenDownload.transfer import basic_auth_header

REPOSITORY_URL = "https://repo.example.org/maven2"


def sha1_hex(payload: bytes) -> str:
    return hashlib.sha1(payload).hexdigest()


class FakeMavenRepository:
    """In-memory remote repository keyed by repository-relative path."""

    def __init__(self, base_url: str = REPOSITORY_URL) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.files: Dict[str, bytes] = {}
        self.requests: List[Tuple[str, Optional[str]]] = []
        self.status_overrides: Dict[str, int] = {}
        self.credentials: Optional[Tuple[str, str]] = None
        self._lock = threading.Lock()

    def add_artifact(self, coordinate: str) -> MavenJarArtifact:
        """Publish a JAR, POM, and matching sidecars for ``coordinate``."""

        artifact = MavenJarArtifact(DependencyJar.parse(coordinate))
        jar = f"{coordinate} jar contents".encode("utf-8")
        pom = f"{coordinate} pom contents".encode("utf-8")
        self.files[artifact.jar_path] = jar
        self.files[artifact.jar_sha1_path] = sha1_hex(jar).encode("ascii")
        self.files[artifact.pom_path] = pom
        self.files[artifact.pom_sha1_path] = sha1_hex(pom).encode("ascii")
        return artifact

    def request_paths(self) -> List[str]:
        with self._lock:
            return [path for path, _ in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        assert url.startswith(self.base_url), url
        path = url[len(self.base_url) :]
        auth = request.headers.get("Authorization")
        with self._lock:
            self.requests.append((path, auth))
        if self.credentials is not None:
            expected = basic_auth_header(*self.credentials)["Authorization"]
            if auth != expected:
                return httpx.Response(401)
        if path in self.status_overrides:
            return httpx.Response(self.status_overrides[path])
        body = self.files.get(path)
        if body is None:
            return httpx.Response(404)
        return httpx.Response(200, content=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class StalledExecutor(futures.Executor):
    """Executor whose futures never run, for deterministic cancellation tests."""

    def __init__(self) -> None:
        self.submitted: List[futures.Future] = []

    def submit(self, fn, /, *args, **kwargs):  # type: ignore[override]
        future: futures.Future = futures.Future()
        self.submitted.append(future)
        return future


@pytest.fixture(autouse=True)
def isolated_maven_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Keep the real ``~/.m2`` and ``MVNFETCH_*`` variables out of every test."""

    for name in list(os.environ):
        if name.startswith("MVNFETCH_") or name == "MAVEN_REPO_LOCAL":
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("MVNFETCH_MAVEN_HOME", str(tmp_path / "maven-home"))
    reset_settings()

    logger = logging.getLogger(LOGGER_NAME)
    level = logger.level
    yield
    for handler in list(logger.handlers):
        if getattr(handler, "_mvnfetch_managed", False):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    reset_settings()


@pytest.fixture
def fake_repo() -> FakeMavenRepository:
    return FakeMavenRepository()


@pytest.fixture
def local_repo(tmp_path: Path) -> Path:
    path = tmp_path / "local-repository"
    path.mkdir()
    return path


@pytest.fixture
def staging_root(tmp_path: Path) -> Path:
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def executor():
    pool = futures.ThreadPoolExecutor(max_workers=2, thread_name_prefix="mvnfetch-test")
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def stalled_executor() -> StalledExecutor:
    return StalledExecutor()


@pytest.fixture
def http_client(fake_repo: FakeMavenRepository):
    client = build_http_client(transport=fake_repo.transport)
    yield client
    client.close()


@pytest.fixture
def make_fetcher(
    fake_repo: FakeMavenRepository,
    local_repo: Path,
    staging_root: Path,
    executor: futures.Executor,
    http_client: httpx.Client,
) -> Callable[..., MavenArtifactFetcher]:
    """Build fetchers bound to the fake repository and temporary directories."""

    def _factory(**overrides) -> MavenArtifactFetcher:
        settings_kwargs = {"staging_dir": staging_root, "poll_interval": 0.02}
        settings_kwargs.update(overrides.pop("fetch", {}))
        params = {
            "repository_url": fake_repo.base_url,
            "local_repository_dir": local_repo,
            "executor": executor,
            "client": http_client,
            "fetch_settings": FetchSettings(**settings_kwargs),
        }
        params.update(overrides)
        return MavenArtifactFetcher(
            params.pop("repository_url"),
            params.pop("local_repository_dir"),
            params.pop("executor"),
            **params,
        )

    return _factory


@pytest.fixture
def make_resolver(
    fake_repo: FakeMavenRepository, local_repo: Path, staging_root: Path
) -> Callable[..., MavenDependencyResolver]:
    """Build resolvers that own their executor and a mock-transport client."""

    created: List[MavenDependencyResolver] = []

    def _factory(**repository) -> MavenDependencyResolver:
        repository.setdefault("url", fake_repo.base_url)
        settings = MavenDownloadSettings(
            repository=repository,
            fetch={"staging_dir": staging_root, "poll_interval": 0.02},
        )
        resolver = MavenDependencyResolver(
            settings, local_repository=local_repo, transport=fake_repo.transport
        )
        created.append(resolver)
        return resolver

    yield _factory
    for resolver in created:
        resolver.close()


def _repository_files(root: Path) -> List[str]:
    return sorted(
        path.relative_to(root).as_posix()
        for path in root.rglob("*")
        if path.is_file() and ".locks" not in path.parts
    )


@pytest.fixture
def repository_files() -> Callable[[Path], List[str]]:
    """Return a helper listing relative file paths under a directory, skipping locks."""

    return _repository_files
