"""
Session management.

:class:`DeviceSession` owns the session id and moves through
``Unauthenticated → Challenging → Authenticated``.  Any authenticated
request that comes back as a redirect, a 401, or the lock-out page sends it
back to ``Unauthenticated``; it then logs in again and replays the request
exactly once.
"""

from enum import Enum

from ..config import LOCKOUT_MARKERS, SESSION_LOST_CODES
from ..errors import AuthError, logged
from ..logging_setup import log
from ..network.client import RawResponse, Transport
from .login import request_challenge, sid_cookie, submit_credentials


class SessionState(Enum):
    UNAUTHENTICATED = "unauthenticated"
    CHALLENGING = "challenging"
    AUTHENTICATED = "authenticated"


def is_session_invalidated(resp: RawResponse) -> bool:
    """
    Return True when the device dropped our session.

    The GUI redirects (302) or answers 401 for unknown session ids, and
    shows its ``access_lock`` page after too many attempts.
    """
    if resp.status_code in SESSION_LOST_CODES:
        return True
    return any(marker in resp.body for marker in LOCKOUT_MARKERS)


class DeviceSession:
    """Authenticated request channel to one device."""

    def __init__(self, transport: Transport, login: str, password: str) -> None:
        self.transport = transport
        self._login = login
        self._password = password
        self.session_id: str | None = None
        self.state = SessionState.UNAUTHENTICATED

    @property
    def cookie(self) -> str:
        return sid_cookie(self.session_id)

    def ensure_session(self, force: bool = False) -> None:
        """Log in unless a session id is already held (or *force* is set)."""
        if self.session_id and not force:
            return

        self.session_id = None
        self.state = SessionState.CHALLENGING
        try:
            challenge = request_challenge(self.transport)
            submit_credentials(self.transport, challenge, self._login, self._password)
        except Exception:
            self.state = SessionState.UNAUTHENTICATED
            raise
        self.session_id = challenge
        self.state = SessionState.AUTHENTICATED
        log.debug("Login successful! Session ID: %s", self.session_id)

    def invalidate(self) -> None:
        self.session_id = None
        self.state = SessionState.UNAUTHENTICATED

    def raw_request(
        self,
        path: str = "/",
        method: str = "GET",
        fields: dict | None = None,
        headers: dict | None = None,
    ) -> RawResponse:
        """Send without any session handling (public pages)."""
        return self.transport.send(path, method, fields, headers)

    def request(
        self,
        path: str = "/",
        method: str = "GET",
        fields: dict | None = None,
        headers: dict | None = None,
    ) -> RawResponse:
        """
        Send an authenticated request.

        If the answer says the session is gone, log in again and replay the
        request once.  A second invalidation raises :class:`AuthError`.
        """
        if not self.session_id:
            log.debug("No session, initializing...")
        self.ensure_session()

        res = self.transport.send(path, method, fields, headers, self.cookie)
        if not is_session_invalidated(res):
            return res

        log.debug("Session lost (HTTP %s), attempting to renew...", res.status_code)
        self.invalidate()
        self.ensure_session(force=True)

        res = self.transport.send(path, method, fields, headers, self.cookie)
        if is_session_invalidated(res):
            self.invalidate()
            raise logged(AuthError(
                f"Cannot reconnect to Neufbox (HTTP {res.status_code} after re-login). Aborting"
            ))
        return res
