"""Connection status indicators encoded as CSS classes on a single node."""

from enum import Enum

from .html_parser import parse_html, select_node


class StatusValue(Enum):
    CONNECTED = 0
    CONNECTING = 1
    UNUSED = 2
    NOT_CONNECTED = 3
    UNKNOWN = 4

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    StatusValue.CONNECTED: "Connected",
    StatusValue.CONNECTING: "Connecting",
    StatusValue.UNUSED: "Unused",
    StatusValue.NOT_CONNECTED: "Not Connected",
    StatusValue.UNKNOWN: "Unknown",
}

_CLASS_TO_STATUS = {
    "enabled": StatusValue.CONNECTED,
    "disabled": StatusValue.NOT_CONNECTED,
    "unused": StatusValue.UNUSED,
}


def status_at(html: str, selector: str) -> StatusValue:
    """
    Read the status shown by the node at *selector*.

    The GUI colours status cells with ``class="enabled|disabled|unused"``;
    any other class (or none) yields ``UNKNOWN`` rather than an error.
    """
    node = select_node(parse_html(html), selector)
    classes = node.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    css = " ".join(classes)     # the whole attribute must match, not its first token
    return _CLASS_TO_STATUS.get(css, StatusValue.UNKNOWN)


def status_as_string(status: StatusValue) -> str:
    return status.label
