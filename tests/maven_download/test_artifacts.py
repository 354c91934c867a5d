# === NAVMAP v1 ===
# {
#   "module": "tests.maven_download.test_artifacts",
#   "purpose": "Coordinate parsing and repository path derivation.",
#   "sections": [
#     {"id": "tests", "name": "Test Cases", "anchor": "TST", "kind": "tests"}
#   ]
# }
# === /NAVMAP ===

"""Coordinate parsing and repository path derivation."""

from __future__ import annotations

import pytest

from ArtifactKit.MavenDownload.artifacts import DependencyJar, MavenJarArtifact
from ArtifactKit.MavenDownload.errors import UserConfigError


def test_paths_follow_maven_layout() -> None:
    artifact = MavenJarArtifact(DependencyJar("org.group2", "artifact2-name", "2.4.5"))

    base = "org/group2/artifact2-name/2.4.5/artifact2-name-2.4.5"
    assert artifact.jar_path == base + ".jar"
    assert artifact.jar_sha1_path == base + ".jar.sha1"
    assert artifact.pom_path == base + ".pom"
    assert artifact.pom_sha1_path == base + ".pom.sha1"
    assert artifact.directory == "org/group2/artifact2-name/2.4.5"
    assert artifact.paths() == (
        base + ".jar",
        base + ".jar.sha1",
        base + ".pom",
        base + ".pom.sha1",
    )


def test_single_segment_group() -> None:
    artifact = MavenJarArtifact(DependencyJar("group", "artifact", "1"))

    assert artifact.jar_path == "group/artifact/1/artifact-1.jar"


def test_version_with_dashes_is_kept_verbatim() -> None:
    artifact = MavenJarArtifact(DependencyJar.parse("org.robolectric:android-all:10-robolectric-5803371"))

    assert artifact.jar_path == (
        "org/robolectric/android-all/10-robolectric-5803371/"
        "android-all-10-robolectric-5803371.jar"
    )


def test_parse_round_trips_string_form() -> None:
    dependency = DependencyJar.parse(" junit:junit:4.13.2 ")

    assert dependency == DependencyJar("junit", "junit", "4.13.2")
    assert str(dependency) == "junit:junit:4.13.2"
    assert str(MavenJarArtifact(dependency)) == "junit:junit:4.13.2"


@pytest.mark.parametrize(
    "coordinate",
    ["junit:junit", "junit:junit:4.13.2:jar", "junit::4.13.2", "", ":::"],
)
def test_parse_rejects_malformed_coordinates(coordinate: str) -> None:
    with pytest.raises(UserConfigError, match="group:artifact:version"):
        DependencyJar.parse(coordinate)


def test_artifacts_compare_by_dependency() -> None:
    first = MavenJarArtifact(DependencyJar("g", "a", "1"))
    second = MavenJarArtifact(DependencyJar("g", "a", "1"))

    assert first == second
    assert hash(first) == hash(second)
