"""
neufbox_watcher
===============
Python package for watching a Neufbox 4 ADSL router through its web
administration interface: read its status pages, toggle Wi-Fi and the
hotspot, manage NAT rules, run diagnostics, and reboot the box when the
WAN connection is down.

Package structure
-----------------
neufbox_watcher/
├── __init__.py       – package init and public API
├── config.py         – constants, endpoints, selectors, dotenv loading
├── errors.py         – exception hierarchy
├── logging_setup.py  – colorlog console logging
├── formatter.py      – human / script / CSV rendering
├── mutex.py          – single-instance file lock
├── watcher.py        – check-and-reboot logic
├── cli.py            – argparse CLI (``python -m neufbox_watcher``)
├── network/          – requests-based HTTP transport
├── auth/             – challenge login and session lifecycle
├── extraction/       – HTML/XML parsing into statuses, tables and forms
├── device/           – Neufbox4 facade, NAT rules, ping/traceroute
└── utils/            – file helpers

Quick start
-----------
    from neufbox_watcher import Neufbox4, Watcher

    box = Neufbox4("192.168.1.1", "admin", "your_password")
    print(box.get_ipv4_status())
    Watcher(box).check_and_reboot()
"""

from .config import Config, load_config
from .device import NatRule, Neufbox4
from .errors import (
    AuthError,
    ConfigError,
    ExtractionError,
    NeufboxError,
    OperationError,
    TransportError,
    ValidationError,
)
from .extraction import StatusValue, status_as_string
from .formatter import DataFormatter, OutputStyle
from .watcher import WatchOutcome, WatchResult, Watcher

__all__ = [
    "AuthError",
    "Config",
    "ConfigError",
    "DataFormatter",
    "ExtractionError",
    "NatRule",
    "Neufbox4",
    "NeufboxError",
    "OperationError",
    "OutputStyle",
    "StatusValue",
    "TransportError",
    "ValidationError",
    "WatchOutcome",
    "WatchResult",
    "Watcher",
    "load_config",
    "status_as_string",
]
