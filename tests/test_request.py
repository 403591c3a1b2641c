"""Tests for the signer's request representation."""

from datetime import timedelta

import pytest
from starlette.datastructures import MutableHeaders
from starlette.requests import Request

from reqsign.signing import BodyTooLargeError, HttpRequest, InvalidSignatureError


def _scope(headers: list[tuple[bytes, bytes]]) -> dict:
    return {
        "type": "http",
        "method": "POST",
        "scheme": "http",
        "server": ("testserver", 80),
        "path": "/upload",
        "query_string": b"",
        "headers": [(b"host", b"testserver"), *headers],
    }


class _Receiver:
    """ASGI receive callable that counts the chunks handed out."""

    def __init__(self, chunks: list[bytes]) -> None:
        self._chunks = chunks
        self.calls = 0

    async def __call__(self) -> dict:
        chunk = self._chunks[self.calls]
        self.calls += 1
        return {
            "type": "http.request",
            "body": chunk,
            "more_body": self.calls < len(self._chunks),
        }


class TestHeaderEncoding:
    """Header values are carried as their UTF-8 wire bytes."""

    def test_non_latin1_value(self):
        req = HttpRequest.build("GET", "http://example.com", headers={"X-Price": "5 €"})
        assert req.header_bytes("X-Price") == "5 €".encode("utf-8")
        assert req.wire_headers() == [("x-price", "5 €")]

    def test_unencodable_value(self):
        with pytest.raises(ValueError):
            HttpRequest.build("GET", "http://example.com", headers={"X-Bad": "\ud800"})

    def test_unencodable_name(self):
        with pytest.raises(ValueError):
            HttpRequest.build("GET", "http://example.com", headers={"X-€": "1"})

    def test_missing_header_bytes(self):
        req = HttpRequest.build("GET", "http://example.com")
        assert req.header_bytes("X-Missing") is None

    def test_invalid_utf8_cannot_be_sent(self):
        req = HttpRequest(method="GET", url="http://example.com")
        req.headers["X-Legacy"] = "caf\xe9"
        with pytest.raises(ValueError):
            req.wire_headers()

    def test_server_view_of_utf8_header_verifies(self, signer, clock):
        """A receiver holding the raw UTF-8 bytes computes the same digest."""
        req = HttpRequest.build("GET", "http://example.com/", headers={"X-Name": "café €"})
        signer.sign_request(req, clock() + timedelta(seconds=10), "X-Name")

        raw = [(k.lower().encode("latin-1"), v.encode("utf-8")) for k, v in req.wire_headers()]
        received = HttpRequest(method="GET", url="http://example.com/", headers=MutableHeaders(raw=raw))
        signer.verify_request(received, "X-Name")

    def test_changed_utf8_header_is_detected(self, signer, clock):
        req = HttpRequest.build("GET", "http://example.com/", headers={"X-Name": "café"})
        signer.sign_request(req, clock() + timedelta(seconds=10), "X-Name")

        req.set_header("X-Name", "cafe")
        with pytest.raises(InvalidSignatureError):
            signer.verify_request(req, "X-Name")


class TestFromStarlette:
    """Tests for snapshotting inbound starlette requests."""

    @pytest.mark.asyncio
    async def test_reads_body_and_keeps_it_for_downstream(self):
        receive = _Receiver([b"hello ", b"world"])
        request = Request(_scope([(b"x-tenant", "café".encode("utf-8"))]), receive)

        snapshot = await HttpRequest.from_starlette(request, max_body_bytes=64)

        assert snapshot.method == "POST"
        assert snapshot.url == "http://testserver/upload"
        assert snapshot.header_bytes("X-Tenant") == "café".encode("utf-8")
        assert snapshot.read_body() == b"hello world"
        assert await request.body() == b"hello world"

    @pytest.mark.asyncio
    async def test_stops_streaming_past_limit(self):
        receive = _Receiver([b"x" * 4] * 100)
        request = Request(_scope([]), receive)

        with pytest.raises(BodyTooLargeError) as exc_info:
            await HttpRequest.from_starlette(request, max_body_bytes=10)

        assert exc_info.value.limit == 10
        assert receive.calls == 3

    @pytest.mark.asyncio
    async def test_rejects_declared_content_length(self):
        receive = _Receiver([b"x" * 4])
        request = Request(_scope([(b"content-length", b"1000")]), receive)

        with pytest.raises(BodyTooLargeError):
            await HttpRequest.from_starlette(request, max_body_bytes=10)

        assert receive.calls == 0

    @pytest.mark.asyncio
    async def test_body_at_limit(self):
        receive = _Receiver([b"x" * 5, b"x" * 5])
        request = Request(_scope([(b"content-length", b"10")]), receive)

        snapshot = await HttpRequest.from_starlette(request, max_body_bytes=10)
        assert snapshot.read_body() == b"x" * 10
