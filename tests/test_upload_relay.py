"""Tests for the upload relay HTTP surface and Pinata forwarding."""

from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from teamminter.main import app
from teamminter.services.pinata import PinataClient
from teamminter.services.upload_relay import UploadRelay, get_upload_relay, ipfs_urls
from tests.conftest import image_bytes

IPFS_HASH = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"

PINATA_OK = {"IpfsHash": IPFS_HASH, "PinSize": 1234, "Timestamp": "2025-02-27T18:30:00.000Z"}


class PinataStub:
    """Records outbound requests and answers with a canned response."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []
        self._respond = respond

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return self._respond(request)


def _client_for(stub: PinataStub, *, max_upload_bytes: int = 10 * 1024 * 1024) -> TestClient:
    pinata = PinataClient(
        api_key="test-api-key",
        secret_key="test-secret-value",
        transport=httpx.MockTransport(stub),
    )
    relay = UploadRelay(pinata, max_upload_bytes=max_upload_bytes, gateway_host="gateway.pinata.cloud")
    app.dependency_overrides[get_upload_relay] = lambda: relay
    return TestClient(app)


@pytest.fixture(autouse=True)
def _clear_overrides():
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def ok_stub() -> PinataStub:
    return PinataStub(lambda request: httpx.Response(200, json=PINATA_OK))


def _jpeg(size: int = 32) -> bytes:
    return image_bytes(size, size, fmt="JPEG")


class TestHealth:
    def test_health(self) -> None:
        resp = TestClient(app).get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "message": "Server is running"}


class TestUploadSuccess:
    def test_returns_descriptor(self, ok_stub: PinataStub) -> None:
        client = _client_for(ok_stub)

        resp = client.post("/api/upload", files={"image": ("photo.jpg", _jpeg(), "image/jpeg")})

        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "ipfsHash": IPFS_HASH,
            "ipfsUrl": f"ipfs://{IPFS_HASH}",
            "gatewayUrl": f"https://gateway.pinata.cloud/ipfs/{IPFS_HASH}",
            "size": 1234,
            "timestamp": "2025-02-27T18:30:00.000Z",
        }

    def test_forwards_file_metadata_and_credentials(self, ok_stub: PinataStub) -> None:
        client = _client_for(ok_stub)
        payload = _jpeg()

        client.post("/api/upload", files={"image": ("team.jpg", payload, "image/jpeg")})

        assert len(ok_stub.requests) == 1
        outbound = ok_stub.requests[0]
        assert outbound.url == "https://api.pinata.cloud/pinning/pinFileToIPFS"
        assert outbound.headers["pinata_api_key"] == "test-api-key"
        assert outbound.headers["pinata_secret_api_key"] == "test-secret-value"
        assert outbound.headers["content-type"].startswith("multipart/form-data")
        body = outbound.content
        assert b'name="file"; filename="team.jpg"' in body
        assert payload in body
        assert b'"type": "superfantastic-nft"' in body
        assert b'"name": "team.jpg"' in body
        assert b'"uploadedAt": ' in body
        assert json.dumps({"cidVersion": 0}).encode() in body

    def test_cors_allows_frontend(self, ok_stub: PinataStub) -> None:
        client = _client_for(ok_stub)
        resp = client.options(
            "/api/upload",
            headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
        )
        assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"


class TestUploadInputErrors:
    def test_missing_file_field(self, ok_stub: PinataStub) -> None:
        client = _client_for(ok_stub)

        resp = client.post("/api/upload", files={"other": ("photo.jpg", _jpeg(), "image/jpeg")})

        assert resp.status_code == 400
        assert resp.json() == {"error": "No image file provided"}
        assert ok_stub.requests == []

    def test_empty_file(self, ok_stub: PinataStub) -> None:
        client = _client_for(ok_stub)

        resp = client.post("/api/upload", files={"image": ("photo.jpg", b"", "image/jpeg")})

        assert resp.status_code == 400
        assert resp.json() == {"error": "No image file provided"}
        assert ok_stub.requests == []

    def test_non_image_mime_type(self, ok_stub: PinataStub) -> None:
        client = _client_for(ok_stub)

        resp = client.post("/api/upload", files={"image": ("notes.txt", b"hello", "text/plain")})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Only image files are allowed"}
        assert ok_stub.requests == []

    def test_too_large(self, ok_stub: PinataStub) -> None:
        client = _client_for(ok_stub, max_upload_bytes=1024)

        resp = client.post("/api/upload", files={"image": ("big.jpg", b"\xff" * 4096, "image/jpeg")})

        assert resp.status_code == 400
        assert resp.json()["error"].startswith("File too large")
        assert ok_stub.requests == []


class TestUploadUpstreamErrors:
    def test_auth_failure_hides_credentials(self) -> None:
        stub = PinataStub(lambda request: httpx.Response(401, json={"error": "Invalid API key"}))
        client = _client_for(stub)

        resp = client.post("/api/upload", files={"image": ("photo.jpg", _jpeg(), "image/jpeg")})

        assert resp.status_code == 500
        assert resp.json() == {"error": "Pinata authentication failed. Check API keys."}
        assert "test-secret-value" not in resp.text
        assert "test-api-key" not in resp.text

    def test_rejected_request(self) -> None:
        stub = PinataStub(lambda request: httpx.Response(400, json={"error": "bad"}))
        client = _client_for(stub)

        resp = client.post("/api/upload", files={"image": ("photo.jpg", _jpeg(), "image/jpeg")})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid file or Pinata request"}

    def test_other_status_is_generic_failure(self) -> None:
        stub = PinataStub(lambda request: httpx.Response(503, text="service unavailable"))
        client = _client_for(stub)

        resp = client.post("/api/upload", files={"image": ("photo.jpg", _jpeg(), "image/jpeg")})

        assert resp.status_code == 500
        body = resp.json()
        assert body["error"] == "Upload failed"
        assert "service unavailable" in body["message"]

    def test_unreachable_service(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = _client_for(PinataStub(refuse))

        resp = client.post("/api/upload", files={"image": ("photo.jpg", _jpeg(), "image/jpeg")})

        assert resp.status_code == 500
        assert resp.json() == {"error": "Upload failed", "message": "connection refused"}

    def test_response_without_hash(self) -> None:
        stub = PinataStub(lambda request: httpx.Response(200, json={"PinSize": 10}))
        client = _client_for(stub)

        resp = client.post("/api/upload", files={"image": ("photo.jpg", _jpeg(), "image/jpeg")})

        assert resp.status_code == 500
        assert resp.json()["error"] == "Upload failed"


def test_ipfs_urls() -> None:
    assert ipfs_urls("QmHash", "gw.example") == ("ipfs://QmHash", "https://gw.example/ipfs/QmHash")
