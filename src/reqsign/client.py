"""Outbound request signing for aiohttp sessions."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta
from types import TracebackType
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import aiohttp
from multidict import CIMultiDict

from reqsign.common.logging import get_logger
from reqsign.common.settings import Settings
from reqsign.signing import HttpRequest, Signer

logger = get_logger(__name__)


def _server_url(url: str) -> str:
    """Give bare-host URLs the root path a server reconstructs for them."""
    parts = urlsplit(url)
    if parts.path:
        return url
    return urlunsplit((parts.scheme, parts.netloc, "/", parts.query, parts.fragment))


def signed_request(
    session: aiohttp.ClientSession,
    signer: Signer,
    method: str,
    url: str,
    *,
    headers: Mapping[str, str] | None = None,
    data: bytes | str | None = None,
    signed_headers: Sequence[str] = (),
    ttl_seconds: float | None = None,
    expires_at: datetime | None = None,
) -> Any:
    """
    Sign a request and issue it on an aiohttp session.

    The expiry is ``expires_at`` when given, otherwise now plus
    ``ttl_seconds``. Header values are sent as the same UTF-8 bytes the
    signature covers.

    Returns:
        The session's request context manager

    Raises:
        ValueError: If a header value cannot be encoded
    """
    if expires_at is None:
        if ttl_seconds is None:
            raise ValueError("either expires_at or ttl_seconds is required")
        expires_at = signer.now() + timedelta(seconds=ttl_seconds)

    url = _server_url(url)
    request = HttpRequest.build(method.upper(), url, headers=headers, body=data)
    signer.sign_request(request, expires_at, *signed_headers)

    body = request.read_body() if request.body is not None else None
    return session.request(
        request.method,
        url,
        headers=CIMultiDict(request.wire_headers()),
        data=body,
    )


class SigningClient:
    """aiohttp session wrapper that signs every request."""

    def __init__(
        self,
        settings: Settings,
        session: aiohttp.ClientSession | None = None,
        signer: Signer | None = None,
    ) -> None:
        self._settings = settings
        self._signer = signer or Signer.from_settings(settings)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> SigningClient:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        data: bytes | str | None = None,
    ) -> Any:
        if self._session is None:
            raise RuntimeError("SigningClient is not open")
        logger.debug("Signing outbound request", method=method, url=url)
        return signed_request(
            self._session,
            self._signer,
            method,
            url,
            headers=headers,
            data=data,
            signed_headers=self._settings.signed_headers,
            ttl_seconds=self._settings.signature_ttl_seconds,
        )

    def get(self, url: str, **kwargs: Any) -> Any:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> Any:
        return self.request("POST", url, **kwargs)
