"""Signature error taxonomy."""

from __future__ import annotations

from enum import Enum


class SignatureErrorKind(Enum):
    """Kinds of signing and verification failures."""

    NO_SIGNATURE = "no_signature"
    NO_EXPIRY = "no_expiry"
    INVALID_SIGNATURE = "invalid_signature"
    SIGNATURE_EXPIRED = "signature_expired"
    BODY_TOO_LARGE = "body_too_large"
    MALFORMED_EXPIRY = "malformed_expiry"
    BODY_READ_FAILURE = "body_read_failure"


class SignatureError(Exception):
    """Base error for request signing and verification."""

    kind: SignatureErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NoSignatureError(SignatureError):
    kind = SignatureErrorKind.NO_SIGNATURE

    def __init__(self, header: str) -> None:
        super().__init__(f"no signature: missing {header} header")
        self.header = header


class NoExpiryError(SignatureError):
    kind = SignatureErrorKind.NO_EXPIRY

    def __init__(self, header: str) -> None:
        super().__init__(f"no signature expiry: missing {header} header")
        self.header = header


class InvalidSignatureError(SignatureError):
    kind = SignatureErrorKind.INVALID_SIGNATURE

    def __init__(self) -> None:
        super().__init__("signature mismatch")


class SignatureExpiredError(SignatureError):
    kind = SignatureErrorKind.SIGNATURE_EXPIRED

    def __init__(self, expires: str) -> None:
        super().__init__(f"signature expired at {expires}")
        self.expires = expires


class BodyTooLargeError(SignatureError):
    kind = SignatureErrorKind.BODY_TOO_LARGE

    def __init__(self, limit: int) -> None:
        super().__init__(f"request body exceeds {limit} bytes")
        self.limit = limit


class MalformedExpiryError(SignatureError):
    kind = SignatureErrorKind.MALFORMED_EXPIRY

    def __init__(self, value: str) -> None:
        super().__init__(f"malformed expiry timestamp: {value!r}")
        self.value = value


class BodyReadError(SignatureError):
    kind = SignatureErrorKind.BODY_READ_FAILURE

    def __init__(self, reason: str) -> None:
        super().__init__(f"failed to read request body: {reason}")
