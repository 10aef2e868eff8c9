"""Authentication submodule – challenge login and session lifecycle."""

from neufbox_watcher.auth.login import (
    gen_login_hash,
    request_challenge,
    sid_cookie,
    submit_credentials,
)
from neufbox_watcher.auth.session import (
    DeviceSession,
    SessionState,
    is_session_invalidated,
)

__all__ = [
    "DeviceSession",
    "SessionState",
    "gen_login_hash",
    "is_session_invalidated",
    "request_challenge",
    "sid_cookie",
    "submit_credentials",
]
