"""
Shared Test Fixtures

This module provides the deterministic transport fake used across all test
modules, a loader for the JSON response fixtures, and ready-made clients.
"""

from __future__ import annotations

from collections import deque
from pathlib import Path

import pytest

from writefreely.core.domain.http import TransportError, TransportRequest, TransportResponse
from writefreely.core.domain.models import User
from writefreely.core.services.client import WriteFreelyClient

FIXTURES_DIR = Path(__file__).parent / "fixtures"
INSTANCE_URL = "https://write.as/"
TEST_TOKEN = "00000000-0000-0000-0000-000000000000"


def load_fixture(name: str) -> bytes:
    """Read a JSON fixture from tests/fixtures as raw bytes."""
    return (FIXTURES_DIR / f"{name}.json").read_bytes()


# =============================================================================
# Transport Fake
# =============================================================================

class FakeTransport:
    """
    Deterministic stand-in for the HTTP transport.

    Records every request it receives and answers with the programmed
    `next_body` / `next_status` / `next_error`, unless responses were queued
    with `enqueue`, which are consumed first (in order).
    """

    def __init__(self) -> None:
        self.requests: list[TransportRequest] = []
        self.next_body: bytes | None = None
        self.next_status: int = 200
        self.next_error: TransportError | None = None
        self._queue: deque[TransportResponse] = deque()

    @property
    def last_request(self) -> TransportRequest | None:
        return self.requests[-1] if self.requests else None

    def set_fixture(self, name: str, status: int = 200) -> None:
        self.next_body = load_fixture(name)
        self.next_status = status

    def enqueue(self, response: TransportResponse) -> None:
        self._queue.append(response)

    async def send(self, request: TransportRequest) -> TransportResponse:
        self.requests.append(request)
        if self._queue:
            return self._queue.popleft()
        if self.next_error is not None:
            return TransportResponse(error=self.next_error)
        return TransportResponse(body=self.next_body, status=self.next_status)


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture
def transport():
    """A fresh FakeTransport per test."""
    return FakeTransport()


@pytest.fixture
def test_user():
    return User(token=TEST_TOKEN, username="matt", email="matt@example.com")


@pytest.fixture
def anonymous_client(transport):
    """Client without a session."""
    return WriteFreelyClient(INSTANCE_URL, transport)


@pytest.fixture
def client(transport, test_user):
    """Client with `test_user` as the current session."""
    return WriteFreelyClient(INSTANCE_URL, transport, user=test_user)
