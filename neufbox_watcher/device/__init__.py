"""Device submodule – the Neufbox 4 facade and its helpers."""

from neufbox_watcher.device.diagnostics import Diagnostics
from neufbox_watcher.device.nat import NatRule, parse_ipv4
from neufbox_watcher.device.neufbox import REPORT_GETTERS, Neufbox4

__all__ = ["Diagnostics", "NatRule", "Neufbox4", "REPORT_GETTERS", "parse_ipv4"]
