# === NAVMAP v1 ===
# {
#   "module": "ArtifactKit.MavenDownload.artifacts",
#   "purpose": "Dependency coordinates and Maven repository path derivation",
#   "sections": [
#     {
#       "id": "dependencyjar",
#       "name": "DependencyJar",
#       "anchor": "class-dependencyjar",
#       "kind": "class"
#     },
#     {
#       "id": "mavenjarartifact",
#       "name": "MavenJarArtifact",
#       "anchor": "class-mavenjarartifact",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Dependency coordinates and repository-relative path derivation.

A dependency is identified by its ``group:artifact:version`` triple.  The
Maven repository layout turns that triple into four sibling paths: the JAR,
the POM, and a ``.sha1`` sidecar for each.  Everything here is pure so the
fetcher can check the local repository without touching the network.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from .errors import UserConfigError

__all__ = ["DependencyJar", "MavenJarArtifact"]

_SHA1_SUFFIX = ".sha1"


@dataclass(slots=True, frozen=True)
class DependencyJar:
    """A ``group:artifact:version`` coordinate requested by a caller."""

    group_id: str
    artifact_id: str
    version: str

    @classmethod
    def parse(cls, coordinate: str) -> "DependencyJar":
        """Parse ``group:artifact:version`` notation.

        Raises:
            UserConfigError: If the coordinate does not have exactly three
                non-empty, colon-separated segments.
        """

        parts = [part.strip() for part in coordinate.strip().split(":")]
        if len(parts) != 3 or not all(parts):
            raise UserConfigError(
                f"Invalid dependency coordinate '{coordinate}'; expected group:artifact:version"
            )
        return cls(*parts)

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


@dataclass(frozen=True)
class MavenJarArtifact:
    """Repository paths for a JAR dependency and its POM descriptor."""

    dependency: DependencyJar
    _base: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        dep = self.dependency
        group_path = "/".join(dep.group_id.split("."))
        directory = f"{group_path}/{dep.artifact_id}/{dep.version}"
        object.__setattr__(self, "_base", f"{directory}/{dep.artifact_id}-{dep.version}")

    @property
    def directory(self) -> str:
        """Parent directory shared by all four artifact files."""
        return self._base.rsplit("/", 1)[0]

    @property
    def jar_path(self) -> str:
        return f"{self._base}.jar"

    @property
    def jar_sha1_path(self) -> str:
        return self.jar_path + _SHA1_SUFFIX

    @property
    def pom_path(self) -> str:
        return f"{self._base}.pom"

    @property
    def pom_sha1_path(self) -> str:
        return self.pom_path + _SHA1_SUFFIX

    def paths(self) -> Tuple[str, str, str, str]:
        """Return ``(jar, jar.sha1, pom, pom.sha1)`` relative paths."""

        return (self.jar_path, self.jar_sha1_path, self.pom_path, self.pom_sha1_path)

    def __str__(self) -> str:
        return str(self.dependency)
