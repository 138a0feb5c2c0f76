"""License server client and the background heartbeat that keeps a session alive."""

from __future__ import annotations

import json
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..logging import get_logger
from .protocols import LicenseClient, LicenseSession

HEARTBEAT_INTERVAL_SECONDS = 120.0

Transport = Callable[[str, Dict[str, Any], float], Dict[str, Any]]


class LicenseError(RuntimeError):
    """Raised by the transport when the license server cannot be reached."""


class HttpLicenseClient:
    """Talks JSON over HTTP to the license server.

    ``acquire`` never raises: an unreachable server or a refused request
    returns ``None`` and the run continues without generating artifacts.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        transport: Transport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport or self._http_transport
        self.logger = get_logger("collaborators.license")

    def acquire(self, tool_name: str) -> Optional[LicenseSession]:
        try:
            payload = self._post("/license/acquire", {"toolName": tool_name})
        except LicenseError as exc:
            self.logger.warning("License server unavailable: %s", exc)
            return None
        if not payload.get("success", True):
            self.logger.warning("License refused: %s", payload.get("message") or "no reason given")
            return None
        session_id = payload.get("sessionId")
        if not isinstance(session_id, str) or not session_id:
            self.logger.warning("License server returned no session id")
            return None
        return LicenseSession(
            session_id=session_id,
            tool_name=tool_name,
            expires_at=_parse_timestamp(payload.get("expiresAt")),
        )

    def heartbeat(self, session: LicenseSession) -> bool:
        try:
            payload = self._post("/license/heartbeat", {"sessionId": session.session_id})
        except LicenseError as exc:
            self.logger.warning("License heartbeat failed: %s", exc)
            return False
        return bool(payload.get("success", True))

    def release(self, session: LicenseSession) -> None:
        try:
            self._post("/license/release", {"sessionId": session.session_id})
        except LicenseError as exc:
            self.logger.warning("License release failed: %s", exc)
            return
        self.logger.info("Released license session %s", session.session_id)

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        return self._transport(f"{self.base_url}{path}", body, self.timeout)

    @staticmethod
    def _http_transport(url: str, body: Dict[str, Any], timeout: float) -> Dict[str, Any]:
        data = json.dumps(body).encode("utf-8")
        request = Request(url, data=data, headers={"Content-Type": "application/json"}, method="POST")
        try:
            with urlopen(request, timeout=timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            raise LicenseError(f"status {exc.code}: {detail.strip() or exc.reason}") from exc
        except (URLError, OSError) as exc:
            raise LicenseError(str(getattr(exc, "reason", exc))) from exc
        if not raw.strip():
            return {}
        try:
            payload = json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise LicenseError("license server returned invalid JSON") from exc
        return payload if isinstance(payload, dict) else {}


class LicenseHeartbeat:
    """Renews a license session on a daemon thread until stopped."""

    def __init__(
        self,
        client: LicenseClient,
        session: LicenseSession,
        *,
        interval: float = HEARTBEAT_INTERVAL_SECONDS,
    ) -> None:
        self.client = client
        self.session = session
        self.interval = interval
        self.beats = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.logger = get_logger("collaborators.heartbeat")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            return
        thread = threading.Thread(target=self._run, name="designsync-license-heartbeat", daemon=True)
        self._thread = thread
        thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the worker and wait for it; safe to call more than once."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                ok = self.client.heartbeat(self.session)
            except Exception as exc:  # pragma: no cover - background best effort
                self.logger.warning("License heartbeat raised: %s", exc)
                continue
            self.beats += 1
            if not ok:
                self.logger.warning("License heartbeat rejected for session %s", self.session.session_id)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


__all__ = ["HEARTBEAT_INTERVAL_SECONDS", "HttpLicenseClient", "LicenseError", "LicenseHeartbeat"]
