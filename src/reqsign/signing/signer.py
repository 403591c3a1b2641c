"""HMAC-SHA256 request signing and verification."""

from __future__ import annotations

import base64
import hashlib
import hmac
import io
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, BinaryIO

from reqsign.common.logging import get_logger
from reqsign.signing.errors import (
    BodyReadError,
    BodyTooLargeError,
    InvalidSignatureError,
    NoExpiryError,
    NoSignatureError,
    SignatureExpiredError,
)
from reqsign.signing.request import MAX_BODY_BYTES, HttpRequest
from reqsign.signing.timestamps import format_rfc3339, parse_rfc3339, utcnow

if TYPE_CHECKING:
    from reqsign.common.settings import Settings

logger = get_logger(__name__)

SIGNATURE_HEADER = "X-Signature"
EXPIRY_HEADER = "X-Signature-Expires"


def _read_body(stream: BinaryIO, limit: int) -> bytes:
    """Read a body stream to the end, up to ``limit`` bytes."""
    buffer = bytearray()
    try:
        while True:
            chunk = stream.read(limit + 1 - len(buffer))
            if not chunk:
                break
            buffer += chunk
            if len(buffer) > limit:
                raise BodyTooLargeError(limit)
    except (OSError, ValueError) as exc:
        raise BodyReadError(str(exc)) from exc
    return bytes(buffer)


def calc_signature(
    key: str | bytes,
    request: HttpRequest,
    *header_keys: str,
    expiry_header: str = EXPIRY_HEADER,
    max_body_bytes: int = MAX_BODY_BYTES,
) -> str:
    """
    Compute the base64 HMAC-SHA256 signature of a request.

    The digest covers, in order and without separators: the URL, the method,
    the expiry header value, each selected header's name and value (skipped
    when absent or empty), and the body. Header values contribute their wire
    bytes exactly as they appear on the request.

    Args:
        key: Signing key
        request: Request to sign; its body is restored after reading
        header_keys: Ordered header names to include
        expiry_header: Header carrying the expiry timestamp
        max_body_bytes: Maximum body size to read

    Returns:
        Base64-encoded digest

    Raises:
        NoExpiryError: If the expiry header is absent
        BodyTooLargeError: If the body exceeds ``max_body_bytes``
        BodyReadError: If the body stream fails
    """
    if isinstance(key, str):
        key = key.encode("utf-8")
    mac = hmac.new(key, digestmod=hashlib.sha256)

    mac.update(request.url.encode("utf-8"))
    mac.update(request.method.encode("utf-8"))

    expires = request.header_bytes(expiry_header)
    if not expires:
        raise NoExpiryError(expiry_header)
    mac.update(expires)

    for name in header_keys:
        value = request.header_bytes(name)
        if value:
            mac.update(name.encode("utf-8"))
            mac.update(value)

    if request.body is not None:
        body = _read_body(request.body, max_body_bytes)
        request.body = io.BytesIO(body)
        mac.update(body)

    return base64.b64encode(mac.digest()).decode("ascii")


class Signer:
    """Signs and verifies requests with a fixed HMAC key."""

    def __init__(
        self,
        signing_key: str | bytes,
        *,
        signature_header: str = SIGNATURE_HEADER,
        expiry_header: str = EXPIRY_HEADER,
        max_body_bytes: int = MAX_BODY_BYTES,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """
        Initialize signer.

        Args:
            signing_key: Shared HMAC secret
            signature_header: Header carrying the signature
            expiry_header: Header carrying the expiry timestamp
            max_body_bytes: Maximum body size covered by the signature
            clock: Returns the current aware UTC time
        """
        if signature_header.lower() == expiry_header.lower():
            raise ValueError("signature and expiry headers must differ")
        self._key = signing_key.encode("utf-8") if isinstance(signing_key, str) else signing_key
        self._signature_header = signature_header
        self._expiry_header = expiry_header
        self._max_body_bytes = max_body_bytes
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> Signer:
        """Build a signer from application settings."""
        if not settings.signing_key:
            raise ValueError("signing key not configured")
        return cls(
            settings.signing_key,
            signature_header=settings.signature_header,
            expiry_header=settings.expiry_header,
            max_body_bytes=settings.max_body_bytes,
        )

    @property
    def signature_header(self) -> str:
        return self._signature_header

    @property
    def expiry_header(self) -> str:
        return self._expiry_header

    @property
    def max_body_bytes(self) -> int:
        return self._max_body_bytes

    def now(self) -> datetime:
        """Current time according to the signer's clock."""
        return self._clock()

    def calc_signature(self, request: HttpRequest, *header_keys: str) -> str:
        """Compute the signature of a request with this signer's key."""
        return calc_signature(
            self._key,
            request,
            *header_keys,
            expiry_header=self._expiry_header,
            max_body_bytes=self._max_body_bytes,
        )

    def sign_request(
        self,
        request: HttpRequest,
        expires_at: datetime,
        *header_keys: str,
    ) -> None:
        """
        Sign a request in place.

        Sets the expiry header, then the signature header. ``expires_at`` may
        already be in the past; verification will reject such signatures.
        """
        request.set_header(self._expiry_header, format_rfc3339(expires_at))
        request.set_header(self._signature_header, self.calc_signature(request, *header_keys))
        logger.debug(
            "Signed request",
            method=request.method,
            url=request.url,
            signed_headers=list(header_keys),
        )

    def verify_request(self, request: HttpRequest, *header_keys: str) -> None:
        """
        Verify a signed request.

        ``header_keys`` must match the list used when signing, in order.

        Raises:
            NoSignatureError: Signature header is absent
            NoExpiryError: Expiry header is absent
            InvalidSignatureError: Signature does not match
            MalformedExpiryError: Expiry header is not RFC 3339
            SignatureExpiredError: Current time is at or past the expiry
            BodyTooLargeError: Body exceeds the size limit
            BodyReadError: Body stream failed
        """
        signature = request.header_bytes(self._signature_header)
        if not signature:
            raise NoSignatureError(self._signature_header)

        expected = self.calc_signature(request, *header_keys)
        if not hmac.compare_digest(signature, expected.encode("ascii")):
            raise InvalidSignatureError()

        expires = request.headers[self._expiry_header]
        if self._clock() >= parse_rfc3339(expires):
            raise SignatureExpiredError(expires)

        logger.debug("Verified request", method=request.method, url=request.url)
