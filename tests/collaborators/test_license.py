"""Tests for the license client and heartbeat."""

from __future__ import annotations

import threading
from datetime import UTC, datetime

from designsync.collaborators import HttpLicenseClient, LicenseError, LicenseHeartbeat, LicenseSession


class FakeTransport:
    def __init__(self, responses: dict) -> None:
        self.responses = responses
        self.requests: list[tuple[str, dict, float]] = []

    def __call__(self, url: str, body: dict, timeout: float) -> dict:
        self.requests.append((url, body, timeout))
        response = self.responses.get(url.rsplit("/", 1)[-1], {})
        if isinstance(response, Exception):
            raise response
        return response


def test_acquire_returns_session() -> None:
    transport = FakeTransport(
        {"acquire": {"success": True, "sessionId": "abc", "expiresAt": "2024-05-06T07:08:09Z"}}
    )
    client = HttpLicenseClient("https://lic.example.com/", timeout=5, transport=transport)

    session = client.acquire("designsync")

    assert session is not None
    assert session.session_id == "abc"
    assert session.expires_at == datetime(2024, 5, 6, 7, 8, 9, tzinfo=UTC)
    assert transport.requests == [
        ("https://lic.example.com/license/acquire", {"toolName": "designsync"}, 5)
    ]


def test_acquire_returns_none_when_refused_or_unreachable() -> None:
    refused = HttpLicenseClient("http://x", transport=FakeTransport({"acquire": {"success": False}}))
    missing_id = HttpLicenseClient("http://x", transport=FakeTransport({"acquire": {"success": True}}))
    down = HttpLicenseClient("http://x", transport=FakeTransport({"acquire": LicenseError("refused")}))

    assert refused.acquire("designsync") is None
    assert missing_id.acquire("designsync") is None
    assert down.acquire("designsync") is None


def test_heartbeat_and_release() -> None:
    transport = FakeTransport({"heartbeat": {"success": False}, "release": LicenseError("gone")})
    client = HttpLicenseClient("http://x", transport=transport)
    session = LicenseSession(session_id="abc", tool_name="designsync")

    assert client.heartbeat(session) is False
    client.release(session)

    assert [request[1] for request in transport.requests] == [{"sessionId": "abc"}, {"sessionId": "abc"}]


class CountingClient:
    def __init__(self, beats_needed: int) -> None:
        self.calls = 0
        self.reached = threading.Event()
        self.beats_needed = beats_needed

    def heartbeat(self, session: LicenseSession) -> bool:
        self.calls += 1
        if self.calls >= self.beats_needed:
            self.reached.set()
        return True


def test_heartbeat_thread_beats_until_stopped() -> None:
    client = CountingClient(beats_needed=2)
    heartbeat = LicenseHeartbeat(client, LicenseSession("abc", "designsync"), interval=0.01)  # type: ignore[arg-type]

    heartbeat.start()
    assert client.reached.wait(2.0)
    heartbeat.stop()
    heartbeat.stop()

    assert heartbeat.running is False
    assert heartbeat.beats >= 2


def test_stop_without_start_is_safe() -> None:
    heartbeat = LicenseHeartbeat(CountingClient(1), LicenseSession("abc", "designsync"))  # type: ignore[arg-type]

    heartbeat.stop()

    assert heartbeat.running is False
    assert heartbeat.beats == 0
