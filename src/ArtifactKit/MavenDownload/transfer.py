"""Single-file transfer from a remote repository into a local path."""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Dict, Optional

import httpx

from .errors import DownloadFailure

__all__ = ["FetchToFileTask", "basic_auth_header"]

LOGGER = logging.getLogger("ArtifactKit.MavenDownload.transfer")

_CHUNK_SIZE = 64 * 1024


def basic_auth_header(username: Optional[str], password: Optional[str]) -> Dict[str, str]:
    """Return an ``Authorization`` header for HTTP Basic auth.

    An empty or missing ``username`` yields no header at all.
    """

    if not username:
        return {}
    token = f"{username}:{password or ''}".encode("utf-8")
    return {"Authorization": "Basic " + base64.b64encode(token).decode("ascii")}


class FetchToFileTask:
    """Copy the body of one remote URL into one local file.

    The destination's parent directory must already exist.  The task does not
    retry; any connection, status, or I/O problem is raised as
    :class:`DownloadFailure`.
    """

    def __init__(
        self,
        url: str,
        destination: Path,
        *,
        client: httpx.Client,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        self.url = url
        self.destination = destination
        self._client = client
        self._headers = basic_auth_header(username, password)

    def __call__(self) -> Path:
        try:
            with self._client.stream("GET", self.url, headers=self._headers) as response:
                if not response.is_success:
                    raise DownloadFailure(
                        f"HTTP {response.status_code} while fetching {self.url}",
                        url=self.url,
                        status_code=response.status_code,
                    )
                with self.destination.open("wb") as handle:
                    for chunk in response.iter_bytes(_CHUNK_SIZE):
                        handle.write(chunk)
        except httpx.HTTPError as exc:
            raise DownloadFailure(f"Unable to fetch {self.url}: {exc}", url=self.url) from exc
        except OSError as exc:
            raise DownloadFailure(
                f"Unable to write {self.destination}: {exc}", url=self.url
            ) from exc
        LOGGER.debug(
            "fetched remote file",
            extra={"stage": "fetch", "url": self.url, "destination": str(self.destination)},
        )
        return self.destination

    def __repr__(self) -> str:
        return f"FetchToFileTask(url={self.url!r}, destination={str(self.destination)!r})"
