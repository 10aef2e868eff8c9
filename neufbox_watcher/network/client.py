"""
HTTP transport for the Neufbox administration interface.

One request in, one :class:`RawResponse` out.  The transport never encodes
form values (see :func:`encode_form`), never follows redirects and never
keeps cookies between requests: the session cookie is always passed in
explicitly by the caller.
"""

import re
import time
import urllib.parse
from dataclasses import dataclass, field
from pathlib import Path

import requests
from requests.structures import CaseInsensitiveDict

from ..config import REQUEST_TIMEOUT, USER_AGENT
from ..errors import TransportError, TransportErrorKind, logged
from ..logging_setup import log
from ..utils.files import save_file


@dataclass(frozen=True)
class RawResponse:
    """Status, headers and body of a single device response."""

    status_code: int
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    body: str = ""
    content: bytes = b""

    @property
    def content_type(self) -> str:
        """Media type of the response, without parameters, lower-cased."""
        return self.headers.get("Content-Type", "").split(";")[0].strip().lower()


def build_session() -> requests.Session:
    """Return a requests.Session with keep-alive and a browser User-Agent."""
    session = requests.Session()
    session.headers.update({
        "User-Agent": USER_AGENT,
        "Connection": "keep-alive",
    })
    return session


def base_url(host: str) -> str:
    return f"http://{host}"


def encode_form(fields: dict) -> dict[str, str]:
    """Percent-encode every value of *fields* for :meth:`Transport.send`."""
    return {
        name: urllib.parse.quote_plus(str(value))
        for name, value in fields.items()
    }


def _join_fields(fields: dict | None) -> str:
    if not fields:
        return ""
    return "&".join(f"{name}={value}" for name, value in fields.items())


class Transport:
    """
    Issues raw HTTP requests against one device.

    Args:
        host: Device IP address or hostname
        timeout: Per-request timeout in seconds
        dump_dir: When set, every response is written there for debugging
    """

    def __init__(
        self,
        host: str,
        timeout: float = REQUEST_TIMEOUT,
        dump_dir: Path | None = None,
    ) -> None:
        self.host = host
        self.base = base_url(host)
        self.timeout = timeout
        self.dump_dir = dump_dir
        self.session = build_session()

    def reset(self) -> None:
        """Drop the pooled connection and start over with a fresh session."""
        self.session.close()
        self.session = build_session()

    def send(
        self,
        path: str = "/",
        method: str = "GET",
        fields: dict | None = None,
        headers: dict | None = None,
        cookie: str = "",
    ) -> RawResponse:
        """
        Send one request and return the device answer.

        GET fields are appended to the query string and POST fields form the
        body, both joined with ``&`` exactly as given.

        Raises:
            TransportError: the host could not be reached, timed out, or the
                HTTP library failed in another way.
        """
        method = method.upper()
        url = self.base + path
        data = _join_fields(fields)

        req_headers = dict(headers or {})
        req_headers["Connection"] = "keep-alive"
        if cookie:
            req_headers["Cookie"] = cookie
        # Only the cookie passed in by the caller may reach the device.
        self.session.cookies.clear()

        if method == "GET":
            log.debug('Sending GET request to "%s" with data: %s', url, data or "(none)")
            final_url = f"{url}?{data}" if data else url
            body = None
        elif method == "POST":
            log.debug('Sending POST request to "%s" with data: %s', url, data)
            req_headers.setdefault("Content-Type", "application/x-www-form-urlencoded")
            final_url = url
            body = data
        else:
            raise ValueError(f"Unsupported method: {method}")

        try:
            resp = self.session.request(
                method,
                final_url,
                data=body,
                headers=req_headers,
                timeout=self.timeout,
                allow_redirects=False,
            )
        except requests.Timeout as exc:
            raise logged(TransportError(
                f'Cannot connect to host with IP "{self.host}". Is network up and device on?',
                TransportErrorKind.TIMEOUT,
                type(exc).__name__,
            )) from exc
        except requests.ConnectionError as exc:
            raise logged(TransportError(
                f'Cannot connect to host with IP "{self.host}". Is network up and device on?',
                TransportErrorKind.CONNECT,
                type(exc).__name__,
            )) from exc
        except requests.RequestException as exc:
            raise logged(TransportError(
                f"HTTP error {type(exc).__name__}: {exc}",
                TransportErrorKind.OTHER,
                type(exc).__name__,
            )) from exc

        raw = RawResponse(
            status_code=resp.status_code,
            headers=CaseInsensitiveDict(resp.headers),
            body=resp.text,
            content=resp.content,
        )
        log.debug("HTTP %s ← %s %s", raw.status_code, method, path)
        if self.dump_dir is not None:
            self._dump(url, raw)
        return raw

    def _dump(self, url: str, raw: RawResponse) -> None:
        stem = (
            str(time.time()).replace(".", "")
            + "_"
            + re.sub(r"[^a-z0-9\-_.]", "-", url, flags=re.IGNORECASE)
        )
        ext = {"text/html": ".html", "text/xml": ".xml"}.get(raw.content_type, "")
        header_text = "\r\n".join(f"{k}: {v}" for k, v in raw.headers.items())
        save_file(self.dump_dir / f"{stem}.header", header_text.encode("utf-8"))
        save_file(self.dump_dir / f"{stem}.body{ext}", raw.content)
