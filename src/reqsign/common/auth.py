"""Signature verification middleware for inbound requests."""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from reqsign.common.errors import ErrorCode, error_response
from reqsign.common.logging import get_logger
from reqsign.common.settings import Settings
from reqsign.signing import BodyTooLargeError, HttpRequest, SignatureError, Signer
from reqsign.signing.timestamps import parse_rfc3339

logger = get_logger(__name__)


class SignatureAuthMiddleware(BaseHTTPMiddleware):
    """Reject requests that do not carry a valid, unexpired signature."""

    def __init__(
        self,
        app: ASGIApp,
        settings: Settings,
        signer: Signer | None = None,
    ) -> None:
        super().__init__(app)
        self._settings = settings
        self._exempt_paths = set(settings.auth_exempt_paths)
        if signer is None and settings.signing_key:
            signer = Signer.from_settings(settings)
        self._signer = signer

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if self._settings.auth_mode != "signature":
            return await call_next(request)

        if request.url.path in self._exempt_paths:
            return await call_next(request)

        if self._signer is None:
            return error_response(
                ErrorCode.SERVER_MISCONFIGURED,
                "Signing key not configured",
                500,
            )

        try:
            signed = await HttpRequest.from_starlette(request, self._signer.max_body_bytes)
            self._signer.verify_request(signed, *self._settings.signed_headers)
        except BodyTooLargeError as exc:
            logger.warning("Rejected oversized request", path=request.url.path, limit=exc.limit)
            return error_response(
                ErrorCode.PAYLOAD_TOO_LARGE,
                exc.message,
                413,
                details={"kind": exc.kind.value},
            )
        except SignatureError as exc:
            logger.warning(
                "Rejected request signature",
                path=request.url.path,
                kind=exc.kind.value,
            )
            return error_response(
                ErrorCode.UNAUTHORIZED,
                exc.message,
                401,
                details={"kind": exc.kind.value},
            )

        request.state.signature_expires = parse_rfc3339(
            signed.headers[self._signer.expiry_header]
        )
        return await call_next(request)
