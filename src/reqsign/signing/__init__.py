"""Request signing and verification."""

from reqsign.signing.errors import (
    BodyReadError,
    BodyTooLargeError,
    InvalidSignatureError,
    MalformedExpiryError,
    NoExpiryError,
    NoSignatureError,
    SignatureError,
    SignatureErrorKind,
    SignatureExpiredError,
)
from reqsign.signing.request import HttpRequest
from reqsign.signing.signer import (
    EXPIRY_HEADER,
    MAX_BODY_BYTES,
    SIGNATURE_HEADER,
    Signer,
    calc_signature,
)

__all__ = [
    "EXPIRY_HEADER",
    "MAX_BODY_BYTES",
    "SIGNATURE_HEADER",
    "BodyReadError",
    "BodyTooLargeError",
    "HttpRequest",
    "InvalidSignatureError",
    "MalformedExpiryError",
    "NoExpiryError",
    "NoSignatureError",
    "SignatureError",
    "SignatureErrorKind",
    "SignatureExpiredError",
    "Signer",
    "calc_signature",
]
