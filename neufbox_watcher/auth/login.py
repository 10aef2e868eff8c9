"""Challenge-response login against the Neufbox web GUI."""

import hashlib
import hmac

from ..config import AJAX_HEADERS, LOGIN_URL, USER_AGENT
from ..errors import AuthError, logged
from ..extraction.ajax_xml import child_text, parse_xml
from ..logging_setup import log
from ..network.client import RawResponse, Transport


def gen_login_hash(challenge: str, login: str, password: str) -> str:
    """
    Replicate the GUI's credential proof:

      HMAC-SHA256(key=challenge, msg=hex(SHA256(login)))
    ‖ HMAC-SHA256(key=challenge, msg=hex(SHA256(password)))

    Both digests are hex; the result is 128 characters long.
    """
    key = challenge.encode("utf-8")

    def _part(secret: str) -> str:
        inner = hashlib.sha256(secret.encode("utf-8")).hexdigest()
        return hmac.new(key, inner.encode("ascii"), hashlib.sha256).hexdigest()

    return _part(login) + _part(password)


def sid_cookie(session_id: str | None) -> str:
    return f"sid={session_id}" if session_id else ""


def request_challenge(transport: Transport) -> str:
    """
    POST ``action=challenge`` to /login and return the ``<challenge>`` text,
    which doubles as the new session id.
    """
    res: RawResponse = transport.send(
        LOGIN_URL, "POST", {"action": "challenge"}, AJAX_HEADERS,
    )
    if res.status_code != 200:
        raise logged(AuthError(
            f"Cannot log in: unexpected code HTTP {res.status_code} returned"
        ))
    if res.content_type != "text/xml":
        raise logged(AuthError(
            f'Cannot log in: unexpected content type "{res.content_type}" '
            "returned (text/xml expected)"
        ))
    root = parse_xml(res.body)
    if root is None:
        raise logged(AuthError("Cannot log in: challenge response is not valid XML"))
    challenge = child_text(root, "challenge").strip(" \xa0")
    if not challenge:
        raise logged(AuthError("Cannot log in: no challenge found in response body"))
    return challenge


def submit_credentials(transport: Transport, challenge: str, login: str, password: str) -> None:
    """
    Send the login hash for *challenge*.  The raw login and password fields
    are posted empty; only the hash proves the credentials.
    """
    if not login or not password:
        log.warning("Missing or empty login/password")

    res = transport.send(
        LOGIN_URL,
        "POST",
        {
            "hash": gen_login_hash(challenge, login, password),
            "login": "",
            "method": "passwd",
            "password": "",
            "zsid": challenge,
        },
        {"User-Agent": USER_AGENT},
        sid_cookie(challenge),
    )
    if res.status_code == 401:
        raise logged(AuthError("Cannot log in: invalid login/password?"))
