"""
Neufbox 4 device facade.

Every getter fetches the live page and parses it; nothing is cached.
Mutations follow the GUI's own read-modify-write cycle: load the form,
overlay the changed fields, post everything back.  An HTTP 200 answer is
taken as success; the device is not re-read to confirm the change.
"""

from collections.abc import Callable
from pathlib import Path

from ..auth.session import DeviceSession
from ..config import (
    DEFAULT_HOST,
    HOTSPOT_CONFIG_URL,
    HOTSPOT_URL,
    MAINTENANCE_SYSTEM_URL,
    NETWORK_DNS_URL,
    NETWORK_NAT_URL,
    NETWORK_URL,
    PING_DEFAULT_COUNT,
    PING_DEFAULT_TIMEOUT,
    REBOOT_URL,
    REQUEST_TIMEOUT,
    SEL_ACCESS_POINT_FORM,
    SEL_ADSL_INFO,
    SEL_CALL_HISTORY,
    SEL_DEVICE_INFO,
    SEL_DNS_HOSTS,
    SEL_HOTSPOT_FORM,
    SEL_HOTSPOT_STATUS,
    SEL_IPV4_STATUS,
    SEL_IPV6_INFO,
    SEL_IPV6_STATUS,
    SEL_MODEM_INFO,
    SEL_NAT_CONFIG,
    SEL_NAT_FORM,
    SEL_NETWORK_CLIENTS,
    SEL_NETWORK_STATUS,
    SEL_PHONE_STATUS,
    SEL_PPP_INFO,
    SEL_TV_STATUS,
    SEL_WAN_INFO,
    SEL_WIFI_INFO,
    SEL_WIFI_STATUS,
    SEL_WLAN_ENCRYPTION_FORM,
    STATE_URL,
    STATE_VOIP_URL,
    STATE_WAN_URL,
    TRACEROUTE_MAX_WAIT,
    WIFI_CONFIG_URL,
    WIFI_SECURITY_URL,
    WIFI_URL,
)
from ..errors import OperationError, ValidationError, ValidationErrorKind, logged
from ..extraction.forms import FormSnapshot, form_snapshot
from ..extraction.html_parser import trim
from ..extraction.status import StatusValue, status_at
from ..extraction.tables import HeaderedTable, KeyValueTable, headered_table, key_value_table
from ..logging_setup import log
from ..network.client import RawResponse, Transport, encode_form
from .diagnostics import Diagnostics
from .nat import NatRule


class Neufbox4:
    """
    Access and control over a Neufbox 4 (firmware NB4-MAIN-R3.x).

    Args:
        host: Device IP on the LAN
        login: GUI administrator login
        password: GUI administrator password
        timeout: Per-request timeout in seconds
        dump_dir: Save every raw response there (debugging aid)
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        login: str = "",
        password: str = "",
        timeout: float = REQUEST_TIMEOUT,
        dump_dir: Path | None = None,
    ) -> None:
        self.transport = Transport(host, timeout=timeout, dump_dir=dump_dir)
        self.session = DeviceSession(self.transport, login, password)
        self.diagnostics = Diagnostics(self.session)
        log.debug("Initialized new connection to host %s", host)

    @property
    def host(self) -> str:
        return self.transport.host

    def login(self) -> None:
        """Open the session now rather than on the first request."""
        self.session.ensure_session()

    def logout(self) -> None:
        log.info("Logging out")
        self.session.invalidate()

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _page(self, path: str) -> str:
        return self.session.request(path).body

    def _form(self, path: str, scope: str) -> FormSnapshot:
        return form_snapshot(self._page(path), scope)

    def _submit(self, path: str, fields: dict, failure: str) -> RawResponse:
        res = self.session.request(path, "POST", encode_form(fields))
        if res.status_code != 200:
            raise logged(OperationError(
                f"{failure}: unexpected code HTTP {res.status_code} returned",
                res.status_code,
            ))
        return res

    # ------------------------------------------------------------------
    # Status getters
    # ------------------------------------------------------------------

    def get_ipv4_status(self) -> StatusValue:
        log.info("Retrieving IPv4 status...")
        return status_at(self._page(STATE_URL), SEL_IPV4_STATUS)

    def get_ipv6_status(self) -> StatusValue:
        log.info("Retrieving IPv6 status...")
        return status_at(self._page(STATE_URL), SEL_IPV6_STATUS)

    def get_phone_status(self) -> StatusValue:
        log.info("Retrieving phone status...")
        return status_at(self._page(STATE_URL), SEL_PHONE_STATUS)

    def get_wifi_status(self) -> StatusValue:
        log.info("Retrieving Wifi status...")
        return status_at(self._page(WIFI_URL), SEL_WIFI_STATUS)

    def get_hotspot_status(self) -> StatusValue:
        log.info("Retrieving hotspot status...")
        return status_at(self._page(HOTSPOT_URL), SEL_HOTSPOT_STATUS)

    def get_television_status(self) -> StatusValue:
        log.info("Retrieving TV status...")
        return status_at(self._page(STATE_URL), SEL_TV_STATUS)

    # ------------------------------------------------------------------
    # Info getters
    # ------------------------------------------------------------------

    def get_modem_info(self) -> KeyValueTable:
        log.info("Retrieving modem info...")
        return key_value_table(self._page(STATE_URL), SEL_MODEM_INFO)

    def get_ipv4_connection_info(self) -> KeyValueTable:
        log.info("Retrieving IPv4 info...")
        return key_value_table(self._page(STATE_WAN_URL), SEL_WAN_INFO)

    def get_ipv6_connection_info(self) -> KeyValueTable:
        log.info("Retrieving IPv6 info...")
        return key_value_table(self._page(STATE_WAN_URL), SEL_IPV6_INFO)

    def get_adsl_info(self) -> KeyValueTable:
        log.info("Retrieving ADSL info...")
        return key_value_table(self._page(STATE_WAN_URL), SEL_ADSL_INFO)

    def get_ppp_info(self) -> KeyValueTable:
        log.info("Retrieving PPP info...")
        return key_value_table(self._page(STATE_WAN_URL), SEL_PPP_INFO)

    def get_connected_hosts(self) -> HeaderedTable:
        log.info("Retrieving connected hosts list...")
        return headered_table(self._page(NETWORK_URL), SEL_NETWORK_CLIENTS)

    def get_device_info(self) -> KeyValueTable:
        """Home page summary; readable without logging in."""
        log.info("Retrieving device info...")
        body = self.session.raw_request("/").body
        # Values are rendered as ": value"; the separator is not data.
        return {
            label: trim(value[2:])
            for label, value in key_value_table(body, SEL_DEVICE_INFO).items()
        }

    def get_ports_info(self) -> KeyValueTable:
        log.info("Retrieving ports info...")
        return key_value_table(self._page(NETWORK_URL), SEL_NETWORK_STATUS)

    def get_wifi_info(self) -> KeyValueTable:
        log.info("Retrieving Wifi info...")
        return key_value_table(self._page(WIFI_URL), SEL_WIFI_INFO)

    def get_local_dns_info(self) -> HeaderedTable:
        log.info("Retrieving local DNS info...")
        rows = headered_table(self._page(NETWORK_DNS_URL), SEL_DNS_HOSTS)
        for row in rows:
            row.pop("", None)    # unnamed action column
        return rows

    def get_nat_config(self) -> HeaderedTable:
        log.info("Retrieving NAT configuration...")
        rows = headered_table(self._page(NETWORK_NAT_URL), SEL_NAT_CONFIG)
        # Last row is the GUI's "add a rule" line; the last two columns of
        # each row hold the toggle and delete buttons.
        return [dict(list(row.items())[:-2]) for row in rows[:-1]]

    def get_phone_call_history(self) -> HeaderedTable:
        log.info("Retrieving phone call history...")
        return headered_table(self._page(STATE_VOIP_URL), SEL_CALL_HISTORY)

    def full_report(self) -> dict:
        """Run every read-only getter of :data:`REPORT_GETTERS`."""
        return {key: getter(self) for key, getter in REPORT_GETTERS}

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def reboot(self) -> None:
        log.info("Rebooting device...")
        self._submit(REBOOT_URL, {"submit": ""}, "Reboot may have failed")
        log.info("Reboot command sent successfully")

    def set_wifi_enabled(self, enable: bool = True) -> None:
        verb = "activation" if enable else "deactivation"
        form = self._form(WIFI_CONFIG_URL, SEL_ACCESS_POINT_FORM)
        log.info("%s Wifi...", "Enabling" if enable else "Disabling")
        form["ap_active"] = "on" if enable else "off"
        self._submit(WIFI_CONFIG_URL, form, f"Wifi {verb} may have failed")
        log.info("Wifi %s command sent successfully", verb)

    def enable_wifi(self) -> None:
        self.set_wifi_enabled(True)

    def disable_wifi(self) -> None:
        self.set_wifi_enabled(False)

    def set_wifi_config(self, config: dict) -> None:
        """
        Overlay *config* on the access point form and submit it.

        Known keys: ``ap_ssid``, ``ap_closed`` (0/1), ``ap_channel``
        (auto/1..13), ``ap_mode`` (auto/11b/11g).  Use
        :meth:`set_wifi_enabled` for ``ap_active``.
        """
        form = self._form(WIFI_CONFIG_URL, SEL_ACCESS_POINT_FORM)
        log.info("Setting Wifi configuration...")
        form.update(config)
        self._submit(WIFI_CONFIG_URL, form, "Wifi configuration may have failed")
        log.info("Wifi configuration set successfully")

    def set_wifi_security(self, config: dict) -> None:
        """
        Overlay *config* on the Wi-Fi security form and submit it.

        Known keys: ``wlan_encryptiontype`` (OPEN/WEP/WPA-PSK/WPA2-PSK/
        WPA-WPA2-PSK), ``wlan_keytype`` (ascii/hexa), ``wlan_wepkey``,
        ``wlan_wpakey``.
        """
        form = self._form(WIFI_SECURITY_URL, SEL_WLAN_ENCRYPTION_FORM)
        log.info("Setting Wifi security configuration...")
        form.update(config)
        self._submit(WIFI_SECURITY_URL, form, "Wifi security configuration may have failed")
        log.info("Wifi security configuration set successfully")

    def set_hotspot_enabled(self, enable: bool = True, mode: str = "sfr") -> None:
        """Toggle the public hotspot; *mode* is ``sfr`` or ``sfr_fon``."""
        verb = "activation" if enable else "deactivation"
        form = self._form(HOTSPOT_CONFIG_URL, SEL_HOTSPOT_FORM)
        if enable:
            log.info("Enabling hotspot...")
            form["hotspot_active"] = "on"
            form["hotspot_mode"] = mode
            form["hotspot_conditions"] = "accept"
        else:
            log.info("Disabling hotspot...")
            form["hotspot_active"] = "off"
        self._submit(HOTSPOT_CONFIG_URL, form, f"Hotspot {verb} may have failed")
        log.info("Hotspot %s command sent successfully", verb)

        if enable and self.get_wifi_status() != StatusValue.CONNECTED:
            log.warning("Hotspot cannot be active if Wifi is off")

    def enable_hotspot(self, mode: str = "sfr") -> None:
        self.set_hotspot_enabled(True, mode)

    def disable_hotspot(self) -> None:
        self.set_hotspot_enabled(False)

    def add_nat_rule(self, rule: NatRule) -> None:
        fields = rule.form_fields()
        log.info("Adding NAT rule: %s", rule.summary())

        form = self._form(NETWORK_NAT_URL, SEL_NAT_FORM)
        fields["action_add.x"] = "0"
        fields["action_add.y"] = "0"
        fields["port_list_tcp"] = form.get("port_list_tcp", "")
        fields["port_list_udp"] = form.get("port_list_udp", "")

        self._submit(NETWORK_NAT_URL, fields, "NAT rule configuration may have failed")
        log.info("Rule added successfully")

    def remove_nat_rule(self, rule_id: int) -> None:
        """Remove the NAT rule whose row carries ``action_remove.<rule_id>``."""
        try:
            rule_id = int(rule_id)
        except (TypeError, ValueError):
            rule_id = 0
        if rule_id <= 0:
            raise logged(ValidationError(
                f"Cannot remove NAT rule, invalid ID: {rule_id}",
                ValidationErrorKind.INVALID_ID,
            ))
        log.info("Removing NAT rule with ID: %d", rule_id)

        form = self._form(NETWORK_NAT_URL, SEL_NAT_FORM)
        if f"action_remove.{rule_id}" not in form:
            raise logged(ValidationError(
                f"Cannot remove NAT rule, no such ID: {rule_id}",
                ValidationErrorKind.UNKNOWN_ID,
            ))
        fields = {
            f"action_remove.{rule_id}.x": "0",
            f"action_remove.{rule_id}.y": "0",
            "port_list_tcp": form.get("port_list_tcp", ""),
            "port_list_udp": form.get("port_list_udp", ""),
        }
        self._submit(NETWORK_NAT_URL, fields, "NAT rule configuration may have failed")
        log.info("Rule removed successfully")

    def export_user_config(self, path: str | Path) -> Path:
        """Download the user configuration backup to *path*."""
        log.info("Exporting user config...")
        res = self._submit(
            MAINTENANCE_SYSTEM_URL,
            {"action": "config_user_export"},
            "Cannot export user config",
        )
        path = Path(path)
        try:
            path.write_bytes(res.content)
        except OSError as exc:
            raise logged(OperationError(
                f"Cannot export user config: unable to write data to {path} ({exc})"
            )) from exc
        log.info("User config exported successfully to %s", path)
        return path

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def ping(
        self,
        hostname: str,
        count: int = PING_DEFAULT_COUNT,
        timeout: float = PING_DEFAULT_TIMEOUT,
    ) -> dict:
        return self.diagnostics.ping(hostname, count, timeout)

    def traceroute(self, hostname: str, max_wait: float = TRACEROUTE_MAX_WAIT) -> list[dict]:
        return self.diagnostics.traceroute(hostname, max_wait)


# Read-only getters collected by Neufbox4.full_report(), keyed by report name.
REPORT_GETTERS: tuple[tuple[str, Callable[[Neufbox4], object]], ...] = (
    ("adsl_info", Neufbox4.get_adsl_info),
    ("connected_hosts", Neufbox4.get_connected_hosts),
    ("device_info", Neufbox4.get_device_info),
    ("hotspot_status", Neufbox4.get_hotspot_status),
    ("ipv4_connection_info", Neufbox4.get_ipv4_connection_info),
    ("ipv4_status", Neufbox4.get_ipv4_status),
    ("ipv6_connection_info", Neufbox4.get_ipv6_connection_info),
    ("ipv6_status", Neufbox4.get_ipv6_status),
    ("local_dns_info", Neufbox4.get_local_dns_info),
    ("modem_info", Neufbox4.get_modem_info),
    ("nat_config", Neufbox4.get_nat_config),
    ("phone_call_history", Neufbox4.get_phone_call_history),
    ("phone_status", Neufbox4.get_phone_status),
    ("ports_info", Neufbox4.get_ports_info),
    ("ppp_info", Neufbox4.get_ppp_info),
    ("television_status", Neufbox4.get_television_status),
    ("wifi_info", Neufbox4.get_wifi_info),
    ("wifi_status", Neufbox4.get_wifi_status),
)
