"""Exception taxonomy shared by every layer of the Neufbox client."""

from enum import Enum

from .logging_setup import log


class NeufboxError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(NeufboxError):
    """The configuration file or environment holds an unusable value."""


class TransportErrorKind(Enum):
    CONNECT = "connect"
    TIMEOUT = "timeout"
    OTHER = "other"


class TransportError(NeufboxError):
    """The HTTP exchange itself failed (no usable response)."""

    def __init__(self, message: str, kind: TransportErrorKind, code: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.code = code


class AuthError(NeufboxError):
    """Login failed or the session could not be re-established."""


class ExtractionErrorKind(Enum):
    NOT_FOUND = "not_found"
    WRONG_NODE_TYPE = "wrong_node_type"


class ExtractionError(NeufboxError):
    """The expected node is missing from the device page."""

    def __init__(self, message: str, kind: ExtractionErrorKind, selector: str = "") -> None:
        super().__init__(message)
        self.kind = kind
        self.selector = selector


class ValidationErrorKind(Enum):
    INVALID_IP = "invalid_ip"
    INVALID_PROTOCOL = "invalid_protocol"
    INVALID_PORTS = "invalid_ports"
    RANGE_MISMATCH = "range_mismatch"
    INVALID_ID = "invalid_id"
    UNKNOWN_ID = "unknown_id"


class ValidationError(NeufboxError):
    """Caller-supplied parameters were rejected before reaching the device."""

    def __init__(self, message: str, kind: ValidationErrorKind) -> None:
        super().__init__(message)
        self.kind = kind


class OperationError(NeufboxError):
    """A mutating request was not acknowledged with HTTP 200."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def logged(exc: NeufboxError) -> NeufboxError:
    """Log *exc* at error level and hand it back so it can be raised."""
    log.error("%s", exc)
    return exc
