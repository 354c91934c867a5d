"""Checksum parsing and verification helpers for staged artifacts.

Maven repositories publish a ``.sha1`` sidecar next to every JAR and POM.
The sidecar normally holds the bare lowercase hex digest, but some
repositories append the file name after whitespace.  These helpers normalise
the published value, stream the payload through :mod:`hashlib` without
materialising it in memory, and raise :class:`ChecksumMismatchError` when the
two disagree.
"""

from __future__ import annotations

import hashlib
import logging
import re
from pathlib import Path
from typing import Optional

from .errors import ChecksumMismatchError

__all__ = [
    "CHECKSUM_ALGORITHM",
    "file_digest",
    "sha1_file",
    "parse_published_checksum",
    "read_published_checksum",
    "verify_file_checksum",
]

CHECKSUM_ALGORITHM = "sha1"

_HEX_DIGEST = re.compile(r"[0-9a-f]{32,128}")
_CHUNK_SIZE = 1 << 20

LOGGER = logging.getLogger("ArtifactKit.MavenDownload.checksums")


def file_digest(path: Path, algorithm: str = CHECKSUM_ALGORITHM) -> str:
    """Return the lowercase hex digest of ``path`` using ``algorithm``."""

    hasher = hashlib.new(algorithm)
    with path.open("rb") as stream:
        for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def sha1_file(path: Path) -> str:
    """Compute the SHA-1 digest for the provided file."""

    return file_digest(path, "sha1")


def parse_published_checksum(payload: bytes) -> Optional[str]:
    """Extract the digest from a checksum sidecar body.

    Returns ``None`` when the body does not start with a hexadecimal digest.
    """

    text = payload.decode("utf-8", errors="ignore").strip()
    if not text:
        return None
    token = text.split()[0].lower()
    if not _HEX_DIGEST.fullmatch(token):
        return None
    return token


def read_published_checksum(path: Path) -> Optional[str]:
    """Read and normalise the digest stored in ``path``."""

    return parse_published_checksum(path.read_bytes())


def verify_file_checksum(payload_path: Path, checksum_path: Path, *, label: str) -> str:
    """Ensure ``payload_path`` hashes to the digest published in ``checksum_path``.

    Args:
        payload_path: Staged JAR or POM file.
        checksum_path: Staged ``.sha1`` sidecar for ``payload_path``.
        label: Short name used in the error message (``"JAR"``/``"POM"``).

    Returns:
        The verified digest.

    Raises:
        ChecksumMismatchError: If the sidecar is malformed or the digests differ.
    """

    expected = read_published_checksum(checksum_path)
    actual = sha1_file(payload_path)
    if expected != actual:
        LOGGER.error(
            "checksum mismatch detected",
            extra={
                "stage": "validate",
                "path": str(payload_path),
                "expected": expected,
                "actual": actual,
            },
        )
        raise ChecksumMismatchError(
            f"Unable to validate {label} file",
            path=payload_path,
            expected=expected,
            actual=actual,
        )
    return actual
