"""Configuration constants and config-file loading for the Neufbox watcher."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

from .errors import ConfigError, logged

DEFAULT_HOST = "192.168.1.1"
DEFAULT_LOGIN = "admin"
DEFAULT_CONFIG_FILE = "neufbox.env"
DEFAULT_REBOOT_WAIT_DELAY = 120           # seconds between reboot order and re-check
DEFAULT_FAIL_COUNT_BEFORE_REBOOT = 3

REQUEST_TIMEOUT = 5                       # seconds per HTTP request

# Sent with every request, the login POST included.
USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64; rv:30.0) Gecko/20100101 Firefox/30.0"
)

# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------
LOGIN_URL = "/login"
STATE_URL = "/state"
STATE_WAN_URL = "/state/wan"
STATE_VOIP_URL = "/state/voip"
NETWORK_URL = "/network"
NETWORK_DNS_URL = "/network/dns"
NETWORK_NAT_URL = "/network/nat"
WIFI_URL = "/wifi"
WIFI_CONFIG_URL = "/wifi/config"
WIFI_SECURITY_URL = "/wifi/security"
HOTSPOT_URL = "/hotspot"
HOTSPOT_CONFIG_URL = "/hotspot/config"
REBOOT_URL = "/reboot"
MAINTENANCE_SYSTEM_URL = "/maintenance/system"
MAINTENANCE_TESTS_URL = "/maintenance/tests"

AJAX_HEADERS = {
    "X-Requested-With": "XMLHttpRequest",
    "X-Requested-Handler": "ajax",
}

# A body containing one of these means the GUI locked us out: the session
# is gone even though the status code says otherwise.
LOCKOUT_MARKERS = ("access_lock",)
SESSION_LOST_CODES = frozenset({302, 401})

# ---------------------------------------------------------------------------
# Selectors (firmware NB4-MAIN-R3.1.x markup)
# ---------------------------------------------------------------------------
SEL_IPV4_STATUS = "td#internet_status"
SEL_IPV6_STATUS = "td#internet_status_v6"
SEL_PHONE_STATUS = "td#voip_status"
SEL_TV_STATUS = "td#tv_status"
SEL_HOTSPOT_STATUS = "td#hotspot_status"
SEL_WIFI_STATUS = "table#wifi_info > * > td"

SEL_MODEM_INFO = "table#modem_infos"
SEL_WAN_INFO = "table#wan_info"
SEL_IPV6_INFO = "table#ipv6_info"
SEL_ADSL_INFO = "table#adsl_info"
SEL_PPP_INFO = "table#ppp_info"
SEL_NETWORK_CLIENTS = "table#network_clients"
SEL_NETWORK_STATUS = "table#network_status"
SEL_DEVICE_INFO = "div#infos table"
SEL_WIFI_INFO = "table#wifi_info"
SEL_DNS_HOSTS = "table#dnshosts_config"
SEL_NAT_CONFIG = "table#nat_config"
SEL_CALL_HISTORY = "table#call_history_list"

SEL_NAT_FORM = "form#form_nat"
SEL_ACCESS_POINT_FORM = "table#access_point_config"
SEL_WLAN_ENCRYPTION_FORM = "table#wlan_encryption"
SEL_HOTSPOT_FORM = "table#hotspot_config"

# ---------------------------------------------------------------------------
# Diagnostics polling
# ---------------------------------------------------------------------------
PING_POLL_INTERVAL = 0.8         # seconds between two ping status requests
PING_MIN_SPACING = 2.0           # minimum delay between two ping runs
PING_DEFAULT_COUNT = 10
PING_DEFAULT_TIMEOUT = 1.5       # max seconds allowed per echo request
TRACEROUTE_POLL_INTERVAL = 1.0
TRACEROUTE_MAX_WAIT = 120


@dataclass(frozen=True)
class Config:
    """Settings loaded once at startup."""

    host: str = DEFAULT_HOST
    login: str = DEFAULT_LOGIN
    password: str = ""
    reboot_wait_delay: int = DEFAULT_REBOOT_WAIT_DELAY


def load_config(path: "str | Path | None" = None) -> Config:
    """
    Build the runtime :class:`Config`.

    Values are read from a dotenv-style file (``NEUFBOX_HOST``,
    ``NEUFBOX_LOGIN``, ``NEUFBOX_PASSWORD``, ``REBOOT_WAIT_DELAY``) and then
    overridden by environment variables of the same name.  Without *path*
    the file ``neufbox.env`` in the working directory is used when present.
    """
    if path is None:
        candidate = Path(DEFAULT_CONFIG_FILE)
        values = dotenv_values(candidate) if candidate.is_file() else {}
    else:
        candidate = Path(path)
        if not candidate.is_file():
            raise logged(ConfigError(f"Missing config file: {candidate}"))
        values = dotenv_values(candidate)

    def _get(key: str, default: str) -> str:
        env = os.environ.get(key)
        if env is not None:
            return env
        value = values.get(key)
        return default if value is None else value

    password = _get("NEUFBOX_PASSWORD", "")
    if not password:
        raise logged(ConfigError(
            "Missing password in configuration. "
            "Fill NEUFBOX_PASSWORD in neufbox.env or the environment."
        ))

    raw_delay = _get("REBOOT_WAIT_DELAY", str(DEFAULT_REBOOT_WAIT_DELAY))
    try:
        delay = int(raw_delay)
    except ValueError:
        raise logged(ConfigError(f"Invalid REBOOT_WAIT_DELAY: {raw_delay!r}")) from None
    if delay <= 0:
        raise logged(ConfigError(f"REBOOT_WAIT_DELAY must be positive, got {delay}"))

    return Config(
        host=_get("NEUFBOX_HOST", DEFAULT_HOST),
        login=_get("NEUFBOX_LOGIN", DEFAULT_LOGIN),
        password=password,
        reboot_wait_delay=delay,
    )
