"""In-memory HTTP request representation used for signing."""

from __future__ import annotations

import io
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import BinaryIO

from starlette.datastructures import MutableHeaders
from starlette.requests import Request

from reqsign.signing.errors import BodyTooLargeError

MAX_BODY_BYTES = 1 << 20


def _wire_value(value: str) -> str:
    """Starlette's latin-1 view of the UTF-8 bytes of a header value."""
    try:
        return value.encode("utf-8").decode("latin-1")
    except UnicodeEncodeError as exc:
        raise ValueError(f"header value cannot be encoded: {value!r}") from exc


@dataclass
class HttpRequest:
    """
    HTTP request as seen by the signer.

    Headers are case-insensitive; ``get`` returns the first value and item
    assignment replaces every existing value. Header values are held as the
    bytes sent on the wire (UTF-8), which starlette exposes as latin-1
    strings; use ``set_header`` for text values and ``header_bytes`` for the
    raw bytes. The body is a readable binary stream (or ``None``) that the
    signer buffers and replaces after reading.
    """

    method: str
    url: str
    headers: MutableHeaders = field(default_factory=MutableHeaders)
    body: BinaryIO | None = None

    @classmethod
    def build(
        cls,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes | str | None = None,
    ) -> HttpRequest:
        """
        Build a request from plain values.

        Raises:
            ValueError: If a header name or value cannot be encoded
        """
        stream: BinaryIO | None = None
        if body is not None:
            if isinstance(body, str):
                body = body.encode("utf-8")
            stream = io.BytesIO(body)
        request = cls(method=method, url=url, body=stream)
        for name, value in (headers or {}).items():
            request.set_header(name, value)
        return request

    @classmethod
    async def from_starlette(
        cls,
        request: Request,
        max_body_bytes: int = MAX_BODY_BYTES,
    ) -> HttpRequest:
        """
        Snapshot an inbound starlette request.

        The body is streamed and abandoned as soon as it exceeds
        ``max_body_bytes``. The bytes read are cached on the request so
        downstream handlers can still call ``request.body()``.

        Raises:
            BodyTooLargeError: If Content-Length or the streamed body exceeds the limit
        """
        content_length = request.headers.get("content-length", "")
        if content_length.isdigit() and int(content_length) > max_body_bytes:
            raise BodyTooLargeError(max_body_bytes)

        buffer = bytearray()
        async for chunk in request.stream():
            buffer += chunk
            if len(buffer) > max_body_bytes:
                raise BodyTooLargeError(max_body_bytes)

        body = bytes(buffer)
        # Request.body() and BaseHTTPMiddleware replay this cache downstream
        request._body = body
        return cls(
            method=request.method,
            url=str(request.url),
            headers=request.headers.mutablecopy(),
            body=io.BytesIO(body),
        )

    def set_header(self, name: str, value: str) -> None:
        """
        Set a header from text, replacing existing values.

        Raises:
            ValueError: If the name is not latin-1 or the value is not encodable
        """
        try:
            name.encode("latin-1")
        except UnicodeEncodeError as exc:
            raise ValueError(f"header name cannot be encoded: {name!r}") from exc
        self.headers[name] = _wire_value(value)

    def header_bytes(self, name: str) -> bytes | None:
        """Wire bytes of the first value of a header, or ``None``."""
        value = self.headers.get(name)
        if value is None:
            return None
        return value.encode("latin-1")

    def wire_headers(self) -> list[tuple[str, str]]:
        """
        Headers as text whose UTF-8 encoding is exactly the stored bytes.

        Raises:
            ValueError: If a stored value is not valid UTF-8
        """
        items = []
        for key, value in self.headers.raw:
            try:
                items.append((key.decode("latin-1"), value.decode("utf-8")))
            except UnicodeDecodeError as exc:
                raise ValueError(f"header {key!r} is not valid UTF-8") from exc
        return items

    def read_body(self) -> bytes:
        """Read the whole body and leave it re-readable."""
        if self.body is None:
            return b""
        data = self.body.read()
        self.body = io.BytesIO(data)
        return data
