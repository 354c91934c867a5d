# === NAVMAP v1 ===
# {
#   "module": "ArtifactKit.MavenDownload.locks",
#   "purpose": "File locking helper guarding artifact commits into the local repository",
#   "sections": [
#     {"id": "lock-file-for", "name": "lock_file_for", "anchor": "function-lock-file-for", "kind": "function"},
#     {"id": "commit-lock", "name": "commit_lock", "anchor": "function-commit-lock", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""File-based commit lock for the shared local repository.

Design Notes
------------
- Locks are implemented with :mod:`filelock`; set ``MVNFETCH_LOCK_USE_SOFT``
  to use :class:`filelock.SoftFileLock` on filesystems without ``flock``.
- Lock files live under ``<local repository>/.locks`` and are named after a
  digest of the artifact directory, so they never sit next to artifact files.
"""

from __future__ import annotations

import contextlib
import hashlib
import logging
import os
import time
from pathlib import Path
from typing import Iterator

from filelock import FileLock, SoftFileLock, Timeout

__all__ = ["Timeout", "LOCK_DIR_NAME", "lock_file_for", "commit_lock"]

LOGGER = logging.getLogger("ArtifactKit.MavenDownload.locks")
logging.getLogger("filelock").setLevel(logging.INFO)

LOCK_DIR_NAME = ".locks"
_SOFT_LOCK_ENV = "MVNFETCH_LOCK_USE_SOFT"
_POLL_INTERVAL = 0.05


def _select_lock_class():
    return SoftFileLock if os.getenv(_SOFT_LOCK_ENV) else FileLock


def lock_file_for(local_repository: Path, artifact_directory: str) -> Path:
    """Return the lock file path guarding ``artifact_directory``."""

    digest = hashlib.sha256(artifact_directory.encode("utf-8")).hexdigest()[:24]
    return local_repository / LOCK_DIR_NAME / f"artifact.{digest}.lock"


@contextlib.contextmanager
def commit_lock(local_repository: Path, artifact_directory: str, *, timeout: float) -> Iterator[None]:
    """Hold an exclusive lock over one artifact directory.

    Raises:
        filelock.Timeout: If the lock cannot be acquired within ``timeout``.
    """

    lock_file = lock_file_for(local_repository, artifact_directory)
    lock_file.parent.mkdir(parents=True, exist_ok=True)
    lock = _select_lock_class()(str(lock_file), timeout=timeout, thread_local=False)
    start = time.monotonic()
    try:
        lock.acquire(timeout=timeout, poll_interval=_POLL_INTERVAL)
    except Timeout:
        LOGGER.info(
            "lock-timeout wait_ms=%.3f lock_file=%s artifact_dir=%s",
            (time.monotonic() - start) * 1000.0,
            lock_file,
            artifact_directory,
        )
        raise
    LOGGER.debug(
        "lock-acquired wait_ms=%.3f lock_file=%s",
        (time.monotonic() - start) * 1000.0,
        lock_file,
    )
    try:
        yield None
    finally:
        lock.release()
