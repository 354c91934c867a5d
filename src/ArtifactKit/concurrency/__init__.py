# === NAVMAP v1 ===
# {
#   "module": "ArtifactKit.concurrency.__init__",
#   "purpose": "Concurrency helpers shared across ArtifactKit components.",
#   "sections": []
# }
# === /NAVMAP ===

"""
Concurrency helpers shared across ArtifactKit components.

Currently exposes :func:`create_executor`, the bounded thread pool that runs
remote transfers, keeping executor construction out of the fetch pipeline so
callers and tests can inject their own.
"""

from .executors import create_executor

__all__ = ["create_executor"]
