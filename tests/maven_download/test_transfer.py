"""Single-file transfers against the in-memory repository."""

from __future__ import annotations

import base64
from pathlib import Path

import httpx
import pytest

from ArtifactKit.MavenDownload.errors import DownloadFailure
from ArtifactKit.MavenDownload.net import build_http_client
from ArtifactKit.MavenDownload.transfer import FetchToFileTask, basic_auth_header


def test_basic_auth_header_encodes_credentials() -> None:
    header = basic_auth_header("deployer", "s3cret")

    assert header == {"Authorization": "Basic " + base64.b64encode(b"deployer:s3cret").decode()}


@pytest.mark.parametrize("username", [None, ""])
def test_basic_auth_header_absent_without_username(username) -> None:
    assert basic_auth_header(username, "ignored") == {}


def test_task_writes_body_to_destination(fake_repo, http_client, tmp_path: Path) -> None:
    artifact = fake_repo.add_artifact("group:artifact:1")
    destination = tmp_path / "artifact-1.jar"

    task = FetchToFileTask(fake_repo.base_url + artifact.jar_path, destination, client=http_client)

    assert task() == destination
    assert destination.read_text() == "group:artifact:1 jar contents"
    assert fake_repo.requests == [(artifact.jar_path, None)]


def test_task_sends_basic_auth(fake_repo, http_client, tmp_path: Path) -> None:
    artifact = fake_repo.add_artifact("group:artifact:1")
    fake_repo.credentials = ("deployer", "s3cret")

    FetchToFileTask(
        fake_repo.base_url + artifact.pom_path,
        tmp_path / "artifact-1.pom",
        client=http_client,
        username="deployer",
        password="s3cret",
    )()

    (_, auth), = fake_repo.requests
    assert auth == basic_auth_header("deployer", "s3cret")["Authorization"]


def test_missing_file_raises_download_failure(fake_repo, http_client, tmp_path: Path) -> None:
    url = fake_repo.base_url + "group/artifact/1/artifact-1.jar"

    with pytest.raises(DownloadFailure) as excinfo:
        FetchToFileTask(url, tmp_path / "artifact-1.jar", client=http_client)()

    assert excinfo.value.status_code == 404
    assert excinfo.value.url == url
    assert not (tmp_path / "artifact-1.jar").exists()


def test_connection_error_raises_download_failure(tmp_path: Path) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with build_http_client(transport=httpx.MockTransport(refuse)) as client:
        with pytest.raises(DownloadFailure) as excinfo:
            FetchToFileTask("https://repo.example.org/a.jar", tmp_path / "a.jar", client=client)()

    assert excinfo.value.status_code is None
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


def test_unwritable_destination_raises_download_failure(fake_repo, http_client, tmp_path: Path) -> None:
    artifact = fake_repo.add_artifact("group:artifact:1")

    with pytest.raises(DownloadFailure, match="Unable to write"):
        FetchToFileTask(
            fake_repo.base_url + artifact.jar_path,
            tmp_path / "missing-parent" / "artifact-1.jar",
            client=http_client,
        )()


@pytest.mark.parametrize(
    ("status", "headers"),
    [
        (302, {}),
        (304, {}),
        (301, {"Location": "https://mirror.example.org/maven2/a.jar"}),
    ],
)
def test_unfollowed_redirect_raises_download_failure(status: int, headers, tmp_path: Path) -> None:
    def respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, headers=headers, content=b"<html>moved</html>")

    with httpx.Client(transport=httpx.MockTransport(respond)) as client:
        with pytest.raises(DownloadFailure) as excinfo:
            FetchToFileTask("https://repo.example.org/a.jar", tmp_path / "a.jar", client=client)()

    assert excinfo.value.status_code == status
    assert not (tmp_path / "a.jar").exists()
