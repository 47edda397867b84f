from __future__ import annotations

import asyncio

import httpx
import pytest

from app.clients.storage_client import StorageClient
from app.core.config import Settings
from app.core.errors import StorageFetchError

PDF = b"%PDF-1.4 stored"


def _config(**overrides) -> Settings:
    values = {
        "storage_url": "https://storage.example.test/",
        "storage_api_key": "service-key",
        "storage_buckets": "playlist-documents,resources",
    }
    values.update(overrides)
    return Settings(**values)


def _fetch(client: StorageClient, path: str) -> bytes:
    async def _run() -> bytes:
        try:
            return await client.fetch(path)
        finally:
            await client.close()

    return asyncio.run(_run())


def test_falls_back_to_second_bucket():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if "/object/playlist-documents/" in request.url.path:
            return httpx.Response(404, json={"error": "not_found"})
        return httpx.Response(200, content=PDF)

    client = StorageClient(_config(), transport=httpx.MockTransport(handler))
    assert _fetch(client, "user-1/athro-bio/lecture.pdf") == PDF

    assert [r.url.path for r in seen] == [
        "/storage/v1/object/playlist-documents/user-1/athro-bio/lecture.pdf",
        "/storage/v1/object/resources/user-1/athro-bio/lecture.pdf",
    ]
    assert seen[0].headers["apikey"] == "service-key"
    assert seen[0].headers["authorization"] == "Bearer service-key"


def test_network_error_counts_as_miss():
    def handler(request: httpx.Request) -> httpx.Response:
        if "/object/playlist-documents/" in request.url.path:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, content=PDF)

    client = StorageClient(_config(), transport=httpx.MockTransport(handler))
    assert _fetch(client, "lecture.pdf") == PDF


def test_all_buckets_missing_raises_with_reasons():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="Object not found")

    client = StorageClient(_config(), transport=httpx.MockTransport(handler))
    with pytest.raises(StorageFetchError) as excinfo:
        _fetch(client, "missing.pdf")
    message = str(excinfo.value)
    assert "playlist-documents: status 404" in message
    assert "resources: status 404" in message


def test_empty_object_is_returned_as_is():
    client = StorageClient(_config(), transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"")))
    assert _fetch(client, "empty.pdf") == b""


def test_unconfigured_storage_raises():
    client = StorageClient(_config(storage_url=""), transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    assert client.enabled is False
    with pytest.raises(StorageFetchError):
        _fetch(client, "lecture.pdf")


def test_no_api_key_sends_no_auth_headers():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=PDF)

    client = StorageClient(_config(storage_api_key=None, storage_buckets="resources"), transport=httpx.MockTransport(handler))
    _fetch(client, "lecture.pdf")
    assert "apikey" not in seen[0].headers
    assert "authorization" not in seen[0].headers


def test_redirect_is_treated_as_miss():
    def handler(request: httpx.Request) -> httpx.Response:
        if "/object/playlist-documents/" in request.url.path:
            return httpx.Response(302, headers={"location": "https://elsewhere.example.test/"}, text="<html>moved</html>")
        return httpx.Response(200, content=PDF)

    client = StorageClient(_config(), transport=httpx.MockTransport(handler))
    assert _fetch(client, "lecture.pdf") == PDF


def test_only_redirects_everywhere_raises():
    client = StorageClient(
        _config(),
        transport=httpx.MockTransport(lambda request: httpx.Response(301, headers={"location": "/moved"})),
    )
    with pytest.raises(StorageFetchError) as excinfo:
        _fetch(client, "lecture.pdf")
    assert "status 301" in str(excinfo.value)
