"""Tests for SDK archive downloads."""

from pathlib import Path

import httpx
import pytest

from devenv_ops.lib.download import download_file
from devenv_ops.lib.exceptions import DevEnvError

URL = "https://dl.google.com/android/repository/commandlinetools-mac-11076708_latest.zip"


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_download_writes_body(tmp_path: Path) -> None:
    """Test that the response body is streamed into the destination file."""
    client = _client(lambda request: httpx.Response(200, content=b"PK\x03\x04zip"))

    path = download_file(URL, tmp_path / "tools.zip", client=client)

    assert path.read_bytes() == b"PK\x03\x04zip"


def test_follows_redirects(tmp_path: Path) -> None:
    """Test that a redirect to the storage host is followed."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "dl.google.com":
            return httpx.Response(302, headers={"Location": "https://cdn.example.com/t.zip"})
        return httpx.Response(200, content=b"data")

    path = download_file(URL, tmp_path / "tools.zip", client=_client(handler))

    assert path.read_bytes() == b"data"


def test_http_error_removes_partial_file(tmp_path: Path) -> None:
    """Test that a non-200 status raises and leaves no file behind."""
    client = _client(lambda request: httpx.Response(404, content=b"missing"))
    dest = tmp_path / "flutter.zip"

    with pytest.raises(DevEnvError, match="HTTP 404"):
        download_file(URL, dest, client=client)

    assert not dest.exists()


def test_transport_error_wrapped(tmp_path: Path) -> None:
    """Test that network failures become DevEnvError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(DevEnvError, match="download failed"):
        download_file(URL, tmp_path / "tools.zip", client=_client(handler))
