"""
test_github_client.py — Tests para GitHubReleasesClient.

Verifica:
- URLs, métodos y payloads de cada endpoint
- Headers de autenticación
- Upload a uploads.github.com con el body crudo
- HTTP >= 400 y errores de transporte → GitHubAPIError
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from kernel_release.publishing.github_client import (
    UPLOAD_TIMEOUT,
    GitHubAPIError,
    GitHubReleasesClient,
)


REQUEST = "kernel_release.publishing.github_client.requests.request"
API = "https://api.github.com/repos/octo/kernel"


def _response(status: int = 200, payload=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload if payload is not None else {}
    resp.text = ""
    return resp


@pytest.fixture
def client():
    return GitHubReleasesClient("ghp_test", "octo", "kernel")


class TestCreateRelease:
    def test_post_con_payload(self, client):
        release = {"id": 7, "html_url": "https://github.com/octo/kernel/releases/7"}
        with patch(REQUEST, return_value=_response(201, release)) as mock_req:
            data = client.create_release("last-ci-abc", "Last CI build kernel", "body")

        assert data == release
        assert mock_req.call_args.args == ("POST", f"{API}/releases")
        kwargs = mock_req.call_args.kwargs
        assert kwargs["json"] == {
            "tag_name": "last-ci-abc",
            "name": "Last CI build kernel",
            "body": "body",
            "make_latest": "true",
        }
        assert kwargs["headers"]["Authorization"] == "Bearer ghp_test"
        assert kwargs["headers"]["Accept"] == "application/vnd.github+json"

    def test_make_latest_false(self, client):
        with patch(REQUEST, return_value=_response(201, {"id": 1})) as mock_req:
            client.create_release("t", "n", "b", make_latest=False)
        assert mock_req.call_args.kwargs["json"]["make_latest"] == "false"


class TestUploadReleaseAsset:
    def test_usa_upload_url_sin_plantilla(self, client):
        release = {
            "id": 42,
            "upload_url": "https://uploads.github.com/repos/octo/kernel/releases/42/assets{?name,label}",
        }
        with patch(REQUEST, return_value=_response(201, {"name": "Image.gz"})) as mock_req:
            client.upload_release_asset(release, "Image.gz", b"\x1f\x8b")

        method, url = mock_req.call_args.args
        assert method == "POST"
        assert url == "https://uploads.github.com/repos/octo/kernel/releases/42/assets"
        kwargs = mock_req.call_args.kwargs
        assert kwargs["params"] == {"name": "Image.gz"}
        assert kwargs["data"] == b"\x1f\x8b"
        assert kwargs["headers"]["Content-Type"] == "application/octet-stream"
        assert kwargs["headers"]["Authorization"] == "Bearer ghp_test"
        assert kwargs["timeout"] == UPLOAD_TIMEOUT

    def test_sin_upload_url_construye_la_url(self, client):
        with patch(REQUEST, return_value=_response(201)) as mock_req:
            client.upload_release_asset({"id": 9}, "dtbo.img", b"x")
        assert mock_req.call_args.args[1] == (
            "https://uploads.github.com/repos/octo/kernel/releases/9/assets"
        )


class TestListAndDelete:
    def test_list_releases_una_pagina(self, client):
        releases = [{"id": 1, "tag_name": "last-ci-a"}]
        with patch(REQUEST, return_value=_response(200, releases)) as mock_req:
            assert client.list_releases() == releases
        assert mock_req.call_args.args == ("GET", f"{API}/releases")
        assert mock_req.call_args.kwargs["params"] == {"per_page": 100}

    def test_delete_release(self, client):
        with patch(REQUEST, return_value=_response(204)) as mock_req:
            assert client.delete_release(5) is None
        assert mock_req.call_args.args == ("DELETE", f"{API}/releases/5")

    def test_delete_ref(self, client):
        with patch(REQUEST, return_value=_response(204)) as mock_req:
            client.delete_ref("tags/last-ci-abc")
        assert mock_req.call_args.args == ("DELETE", f"{API}/git/refs/tags/last-ci-abc")

    def test_api_url_custom(self):
        ghe = GitHubReleasesClient("t", "o", "r", api_url="https://ghe.local/api/v3/")
        assert ghe.repo_url == "https://ghe.local/api/v3/repos/o/r"


class TestErrors:
    def test_http_error_lanza_github_api_error(self, client):
        with patch(REQUEST, return_value=_response(404, {"message": "Not Found"})):
            with pytest.raises(GitHubAPIError) as exc:
                client.delete_release(1)
        assert exc.value.status_code == 404
        assert exc.value.api_message == "Not Found"
        assert "HTTP 404" in str(exc.value)

    def test_error_sin_json(self, client):
        resp = _response(502)
        resp.json.side_effect = ValueError("no json")
        resp.text = "Bad Gateway"
        with patch(REQUEST, return_value=resp):
            with pytest.raises(GitHubAPIError, match="Bad Gateway"):
                client.list_releases()

    def test_error_de_transporte(self, client):
        with patch(REQUEST, side_effect=requests.ConnectionError("connection reset")):
            with pytest.raises(GitHubAPIError) as exc:
                client.create_release("t", "n", "b")
        assert exc.value.status_code is None
        assert isinstance(exc.value.__cause__, requests.ConnectionError)

    def test_es_runtime_error(self):
        assert issubclass(GitHubAPIError, RuntimeError)
