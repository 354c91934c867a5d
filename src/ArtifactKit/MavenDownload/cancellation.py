"""Cooperative cancellation for in-flight artifact fetches.

Python threads cannot be interrupted from the outside, so a caller that wants
to abandon a blocking :meth:`MavenArtifactFetcher.fetch_artifact` hands it a
:class:`CancellationToken` and cancels the token from another thread.  The
fetcher checks the token while joining its transfer tasks, purges partial
state, and raises :class:`~ArtifactKit.MavenDownload.errors.FetchCancelledError`.
The token stays cancelled afterwards so outer schedulers observe it too.
"""

from __future__ import annotations

import threading


class CancellationToken:
    """Thread-safe cancellation token for cooperative task cancellation.

    Examples:
        >>> token = CancellationToken()
        >>> token.is_cancelled()
        False
        >>> token.cancel()
        >>> token.is_cancelled()
        True
    """

    def __init__(self) -> None:
        self._is_cancelled = threading.Event()

    def cancel(self) -> None:
        """Signal that cancellation has been requested."""
        self._is_cancelled.set()

    def is_cancelled(self) -> bool:
        return self._is_cancelled.is_set()


# === NAVMAP v1 ===
# {
#   "module": "ArtifactKit.MavenDownload.cancellation",
#   "purpose": "Provide the cooperative cancellation token checked while fetches are joined",
#   "sections": [
#     {"id": "token", "name": "CancellationToken", "anchor": "TOK", "kind": "api"}
#   ]
# }
# === /NAVMAP ===
