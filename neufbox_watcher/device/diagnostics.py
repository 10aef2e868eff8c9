"""
Ping and traceroute jobs run by the device itself.

Both follow the same AJAX protocol on /maintenance/tests:

1. ``run=start`` returns ``<id>`` of a new job;
2. ``run=status`` is polled until ``<status val="finished"/>``;
3. ping jobs are told ``run=stop`` once enough echo requests were sent.
"""

import time

from lxml import etree

from ..auth.session import DeviceSession
from ..config import (
    AJAX_HEADERS,
    MAINTENANCE_TESTS_URL,
    PING_DEFAULT_COUNT,
    PING_DEFAULT_TIMEOUT,
    PING_MIN_SPACING,
    PING_POLL_INTERVAL,
    TRACEROUTE_MAX_WAIT,
    TRACEROUTE_POLL_INTERVAL,
)
from ..errors import OperationError, logged
from ..extraction.ajax_xml import child_attr, child_int, child_text, parse_xml
from ..logging_setup import log
from ..network.client import encode_form


class Diagnostics:
    """Runs diagnostic jobs; remembers when the last ping ended."""

    def __init__(self, session: DeviceSession) -> None:
        self.session = session
        self._last_ping_time: float | None = None

    def _job_request(self, fields: dict, failure: str) -> etree._Element:
        res = self.session.request(
            MAINTENANCE_TESTS_URL, "POST", encode_form(fields), AJAX_HEADERS,
        )
        if res.status_code != 200:
            raise logged(OperationError(
                f"{failure}: unexpected code HTTP {res.status_code} returned",
                res.status_code,
            ))
        root = parse_xml(res.body)
        if root is None:
            raise logged(OperationError(f"{failure}: response is not valid XML", res.status_code))
        return root

    def _start(self, action: str, hostname: str) -> str:
        root = self._job_request(
            {"action": action, f"{action}_dest_hostname": hostname, "run": "start"},
            f"Cannot start {action}",
        )
        job_id = child_text(root, "id")
        if not job_id:
            raise logged(OperationError(f"Cannot {action}: no ID found in response body"))
        log.debug("Got %s id: %s", action, job_id)
        return job_id

    def _throttle(self) -> None:
        if self._last_ping_time is None:
            return
        elapsed = time.monotonic() - self._last_ping_time
        if elapsed < PING_MIN_SPACING:
            log.debug("Last ping is too recent, delaying request...")
            time.sleep(PING_MIN_SPACING - elapsed)

    def ping(
        self,
        hostname: str,
        count: int = PING_DEFAULT_COUNT,
        timeout: float = PING_DEFAULT_TIMEOUT,
    ) -> dict:
        """
        Ping *hostname* from the device.

        Polls until the device finished and every sent packet is accounted
        for, or until ``count * timeout`` seconds have elapsed.

        Returns:
            ``{"hostname", "status", "sent", "received", "avgrtt"}``
        """
        self._throttle()
        self.session.transport.reset()

        log.info("Sending %d ping requests to %s...", count, hostname)
        job_id = self._start("ping", hostname)
        start = time.monotonic()
        deadline = start + count * timeout

        stats: dict = {"hostname": hostname}
        stopped = False
        while True:
            time.sleep(PING_POLL_INTERVAL)
            root = self._job_request(
                {"action": "ping", "id": job_id, "run": "status"},
                "Cannot get ping status",
            )
            sent = child_int(root, "sent")
            received = child_int(root, "received")
            status = child_attr(root, "status", "val")

            stats["status"] = status
            if not stopped:
                stats["sent"] = sent
            stats["received"] = received
            stats["avgrtt"] = child_int(root, "avgrtt")
            log.debug("Ping stats updated: %s", stats)

            if not stopped and sent >= count:
                self._job_request(
                    {"action": "ping", "id": job_id, "run": "stop"},
                    "Failed to stop ping",
                )
                stopped = True
            elif status == "finished":
                stopped = True

            done = stopped and status == "finished" and received >= stats["sent"]
            if done or time.monotonic() >= deadline:
                break

        self._last_ping_time = time.monotonic()
        return stats

    def traceroute(self, hostname: str, max_wait: float = TRACEROUTE_MAX_WAIT) -> list[dict]:
        """
        Trace the route to *hostname*.

        Returns one mapping per hop (child element name -> text).  If the
        job is still running after *max_wait* seconds the hops known so far
        are returned.
        """
        log.info("Performing traceroute to %s...", hostname)
        job_id = self._start("traceroute", hostname)
        deadline = time.monotonic() + max_wait

        while True:
            time.sleep(TRACEROUTE_POLL_INTERVAL)
            root = self._job_request(
                {"action": "traceroute", "id": job_id, "run": "status"},
                "Cannot get traceroute status",
            )
            if child_attr(root, "status", "val") == "finished":
                break
            if time.monotonic() >= deadline:
                log.warning(
                    "Traceroute to %s not finished after %ss, returning partial result",
                    hostname, max_wait,
                )
                break

        hops: list[dict] = []
        for hops_node in root.iter("hops"):
            for hop in hops_node:
                if not isinstance(hop.tag, str):
                    continue
                hops.append({
                    node.tag: (node.text or "").strip()
                    for node in hop
                    if isinstance(node.tag, str)
                })
        return hops
