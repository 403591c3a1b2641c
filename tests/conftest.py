"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from reqsign.common.settings import Settings
from reqsign.signing import Signer


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, now: datetime) -> None:
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    """Clock pinned to 2024-05-01T12:00:00Z."""
    return FakeClock(datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def signer(clock: FakeClock) -> Signer:
    """Signer with a fixed key and fake clock."""
    return Signer("test", clock=clock)


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        signing_key="test-secret",
        auth_mode="signature",
        signed_headers=("Content-Type", "X-Request-ID"),
        signature_ttl_seconds=60.0,
    )
