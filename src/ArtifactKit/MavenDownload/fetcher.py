# === NAVMAP v1 ===
# {
#   "module": "ArtifactKit.MavenDownload.fetcher",
#   "purpose": "Stage, validate, and commit one artifact's JAR, POM, and checksum files",
#   "sections": [
#     {
#       "id": "fetchstate",
#       "name": "FetchState",
#       "anchor": "class-fetchstate",
#       "kind": "class"
#     },
#     {
#       "id": "mavenartifactfetcher",
#       "name": "MavenArtifactFetcher",
#       "anchor": "class-mavenartifactfetcher",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Fetch-validate-commit pipeline for a single Maven artifact.

Each :meth:`MavenArtifactFetcher.fetch_artifact` call works in its own
temporary staging directory:

1. the JAR, the POM, and both ``.sha1`` sidecars are downloaded concurrently
   on the shared executor;
2. once all four transfers finish, the POM and then the JAR are checked
   against their published SHA-1 digests;
3. only then are the four files renamed into the local repository.

Any failure along the way removes the artifact's files from staging and from
the local repository before a single :class:`ArtifactFetchError` is raised,
so the local repository never holds one to three of the four files after a
call returns.  When a file cannot be removed the error carries
``purge_incomplete``.  The staging directory is always removed on exit.
"""

from __future__ import annotations

import enum
import logging
import os
import tempfile
from concurrent import futures
from pathlib import Path
from typing import Iterable, List, Optional

import httpx

from .artifacts import MavenJarArtifact
from .cancellation import CancellationToken
from .checksums import verify_file_checksum
from .errors import ArtifactFetchError, CommitError, FetchCancelledError
from .locks import Timeout, commit_lock
from .settings import FetchSettings
from .transfer import FetchToFileTask

__all__ = ["FetchState", "MavenArtifactFetcher"]

LOGGER = logging.getLogger("ArtifactKit.MavenDownload.fetcher")


class FetchState(str, enum.Enum):
    """Lifecycle of one ``fetch_artifact`` call."""

    NOT_STARTED = "not_started"
    FETCHING = "fetching"
    VALIDATING = "validating"
    COMMITTING = "committing"
    DONE = "done"
    FAILED = "failed"


class MavenArtifactFetcher:
    """Fetches artifacts from a remote Maven repository into a local one.

    Transfers run on ``executor`` (two workers in the default configuration),
    which keeps several requests in flight without opening an unbounded number
    of connections.  The fetcher holds no per-call state, so concurrent calls
    on one instance are safe.
    """

    def __init__(
        self,
        repository_url: str,
        local_repository_dir: Path,
        executor: futures.Executor,
        *,
        client: httpx.Client,
        username: Optional[str] = None,
        password: Optional[str] = None,
        fetch_settings: Optional[FetchSettings] = None,
    ) -> None:
        settings = fetch_settings or FetchSettings()
        self.repository_url = repository_url if repository_url.endswith("/") else repository_url + "/"
        self.local_repository_dir = Path(local_repository_dir)
        self.executor = executor
        self.client = client
        self._username = username
        self._password = password
        self._poll_interval = settings.poll_interval
        self._lock_commits = settings.lock_commits
        self._lock_timeout = settings.lock_timeout
        self._staging_root = settings.staging_dir

    # --- public API ----------------------------------------------------------

    def fetch_artifact(
        self,
        artifact: MavenJarArtifact,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        """Ensure ``artifact`` is present and verified in the local repository.

        A JAR already present locally is trusted without further checks and
        no request is made.  With ``lock_commits`` enabled the JAR only counts
        when all four files are present under the commit lock.

        Raises:
            ArtifactFetchError: If any transfer, validation, or commit step
                fails.  The artifact's files have been purged beforehand
                unless ``purge_incomplete`` is set on the error.
            FetchCancelledError: If ``cancel_token`` is cancelled while the
                transfers are running.
        """

        if self._is_cached(artifact):
            LOGGER.debug(
                "artifact already cached",
                extra={"stage": "cache", "artifact": str(artifact)},
            )
            return

        if self._staging_root is not None:
            Path(self._staging_root).mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(
            prefix="mvnfetch-", dir=self._staging_root, ignore_cleanup_errors=True
        ) as tmp:
            staging_dir = Path(tmp)
            state = FetchState.NOT_STARTED
            try:
                state = self._transition(artifact, state, FetchState.FETCHING)
                self._create_artifact_subdirectory(artifact, staging_dir)
                transfers = self._start_transfers(artifact, staging_dir)
                self._await_transfers(artifact, transfers, cancel_token)
                self._promote(artifact, staging_dir, state)
            except KeyboardInterrupt:
                self._fail(artifact, staging_dir, reason="interrupted")
                raise
            except ArtifactFetchError as exc:
                exc.purge_incomplete = not self._fail(artifact, staging_dir, reason=str(exc))
                raise
            except Exception as exc:
                purged = self._fail(artifact, staging_dir, reason=str(exc))
                raise ArtifactFetchError(
                    f"Failed to fetch maven artifacts for {artifact}: {exc}",
                    artifact=artifact,
                    purge_incomplete=not purged,
                ) from exc

    def create_fetch_to_file_task(self, remote_url: str, destination: Path) -> FetchToFileTask:
        """Build the transfer for one file; subclasses may substitute their own."""

        return FetchToFileTask(
            remote_url,
            destination,
            client=self.client,
            username=self._username,
            password=self._password,
        )

    def remote_url(self, path: str) -> str:
        return self.repository_url + path

    # --- stages --------------------------------------------------------------

    def _start_transfers(
        self, artifact: MavenJarArtifact, staging_dir: Path
    ) -> List[futures.Future]:
        order = (
            artifact.pom_sha1_path,
            artifact.pom_path,
            artifact.jar_sha1_path,
            artifact.jar_path,
        )
        return [
            self.executor.submit(self.create_fetch_to_file_task(self.remote_url(path), staging_dir / path))
            for path in order
        ]

    def _await_transfers(
        self,
        artifact: MavenJarArtifact,
        transfers: Iterable[futures.Future],
        cancel_token: Optional[CancellationToken],
    ) -> None:
        pending = set(transfers)
        try:
            while pending:
                if cancel_token is not None and cancel_token.is_cancelled():
                    raise FetchCancelledError(
                        f"Fetch of {artifact} was cancelled", artifact=artifact
                    )
                done, pending = futures.wait(
                    pending,
                    timeout=self._poll_interval,
                    return_when=futures.FIRST_EXCEPTION,
                )
                for transfer in done:
                    error = transfer.exception()
                    if error is not None:
                        raise error
        finally:
            # Nothing may still be writing into staging once we purge it.
            running = [transfer for transfer in pending if not transfer.cancel()]
            if running:
                futures.wait(running)

    def _promote(self, artifact: MavenJarArtifact, staging_dir: Path, state: FetchState) -> None:
        if not self._lock_commits:
            self._validate_and_commit(artifact, staging_dir, state)
            return
        with commit_lock(self.local_repository_dir, artifact.directory, timeout=self._lock_timeout):
            if self._is_complete(self.local_repository_dir, artifact):
                LOGGER.info(
                    "artifact committed by another fetch; discarding staged copy",
                    extra={"stage": "commit", "artifact": str(artifact)},
                )
                return
            try:
                self._validate_and_commit(artifact, staging_dir, state)
            except BaseException:
                # Purge before releasing so no other fetch sees a partial set.
                self._remove_artifact_files(self.local_repository_dir, artifact)
                raise

    def _validate_and_commit(
        self, artifact: MavenJarArtifact, staging_dir: Path, state: FetchState
    ) -> None:
        state = self._transition(artifact, state, FetchState.VALIDATING)
        self._create_artifact_subdirectory(artifact, self.local_repository_dir)
        verify_file_checksum(
            staging_dir / artifact.pom_path, staging_dir / artifact.pom_sha1_path, label="POM"
        )
        verify_file_checksum(
            staging_dir / artifact.jar_path, staging_dir / artifact.jar_sha1_path, label="JAR"
        )

        state = self._transition(artifact, state, FetchState.COMMITTING)
        for path in (
            artifact.pom_path,
            artifact.jar_path,
            artifact.jar_sha1_path,
            artifact.pom_sha1_path,
        ):
            self._commit_from_staging(staging_dir, path)
        self._remove_artifact_files(staging_dir, artifact)
        self._transition(artifact, state, FetchState.DONE)
        LOGGER.info(
            "artifact committed",
            extra={
                "stage": "commit",
                "artifact": str(artifact),
                "path": str(self.local_repository_dir / artifact.jar_path),
            },
        )

    # --- helpers -------------------------------------------------------------

    def _commit_from_staging(self, staging_dir: Path, path: str) -> None:
        source = staging_dir / path
        destination = self.local_repository_dir / path
        try:
            os.replace(source, destination)
        except OSError as exc:
            raise CommitError(f"Unable to rename to {destination}") from exc

    def _fail(self, artifact: MavenJarArtifact, staging_dir: Path, *, reason: str) -> bool:
        """Purge staging and the local repository; return ``False`` if files remain."""

        self._remove_artifact_files(staging_dir, artifact)
        purged = self._purge_local(artifact)
        LOGGER.error(
            "artifact fetch failed",
            extra={
                "stage": FetchState.FAILED.value,
                "artifact": str(artifact),
                "error": reason,
            },
        )
        return purged

    def _purge_local(self, artifact: MavenJarArtifact) -> bool:
        if not self._lock_commits:
            return self._remove_artifact_files(self.local_repository_dir, artifact)
        try:
            with commit_lock(
                self.local_repository_dir, artifact.directory, timeout=self._lock_timeout
            ):
                # A complete set was committed by another process; keep it.
                if self._is_complete(self.local_repository_dir, artifact):
                    return True
                return self._remove_artifact_files(self.local_repository_dir, artifact)
        except Timeout:
            LOGGER.error(
                "could not lock artifact directory for purge",
                extra={"stage": "purge", "artifact": str(artifact)},
            )
            return False

    def _is_cached(self, artifact: MavenJarArtifact) -> bool:
        if not (self.local_repository_dir / artifact.jar_path).exists():
            return False
        if not self._lock_commits:
            return True
        try:
            with commit_lock(
                self.local_repository_dir, artifact.directory, timeout=self._lock_timeout
            ):
                return self._is_complete(self.local_repository_dir, artifact)
        except Timeout as exc:
            raise ArtifactFetchError(
                f"Failed to fetch maven artifacts for {artifact}: {exc}", artifact=artifact
            ) from exc

    @staticmethod
    def _is_complete(repository_dir: Path, artifact: MavenJarArtifact) -> bool:
        return all((repository_dir / path).is_file() for path in artifact.paths())

    @staticmethod
    def _remove_artifact_files(repository_dir: Path, artifact: MavenJarArtifact) -> bool:
        removed = True
        for path in artifact.paths():
            target = repository_dir / path
            try:
                target.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                removed = False
                LOGGER.error(
                    "could not remove artifact file",
                    extra={"stage": "purge", "path": str(target), "error": str(exc)},
                )
        return removed

    @staticmethod
    def _create_artifact_subdirectory(artifact: MavenJarArtifact, repository_dir: Path) -> None:
        (repository_dir / artifact.jar_path).parent.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _transition(
        artifact: MavenJarArtifact, current: FetchState, target: FetchState
    ) -> FetchState:
        LOGGER.debug(
            "fetch state %s -> %s",
            current.value,
            target.value,
            extra={"stage": target.value, "artifact": str(artifact)},
        )
        return target
