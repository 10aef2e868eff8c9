"""
Tests for the connection watcher – reboot decisions and failure counter.
"""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from neufbox_watcher.errors import OperationError
from neufbox_watcher.extraction.status import StatusValue
from neufbox_watcher.watcher import WatchOutcome, Watcher

from tests import pages
from tests.fakes import html_response, make_box


def _device(statuses, host="192.168.1.1"):
    device = MagicMock()
    device.host = host
    device.get_ipv4_status.side_effect = list(statuses)
    device.full_report.return_value = {"ipv4_status": StatusValue.CONNECTED}
    return device


class TestCheckAndReboot(unittest.TestCase):
    def setUp(self):
        patcher = patch("neufbox_watcher.watcher.time")
        self.time = patcher.start()
        self.addCleanup(patcher.stop)

    def test_line_up_does_nothing(self):
        device = _device([StatusValue.CONNECTED])
        result = Watcher(device, show_progress=False).check_and_reboot()

        self.assertEqual(result.outcome, WatchOutcome.LINE_UP)
        device.reboot.assert_not_called()

    def test_reboot_and_recover(self):
        device = _device([StatusValue.NOT_CONNECTED, StatusValue.CONNECTED])
        result = Watcher(device, reboot_wait_delay=5, show_progress=False).check_and_reboot()

        self.assertEqual(result.outcome, WatchOutcome.RECOVERED)
        self.assertEqual(result.report, {"ipv4_status": StatusValue.CONNECTED})
        device.reboot.assert_called_once_with()
        self.assertEqual(self.time.sleep.call_count, 5)

    def test_still_down_after_reboot(self):
        device = _device([StatusValue.NOT_CONNECTED, StatusValue.CONNECTING])
        with self.assertLogs("neufbox-watcher", level="ERROR"):
            result = Watcher(device, show_progress=False).check_and_reboot()

        self.assertEqual(result.outcome, WatchOutcome.STILL_DOWN)
        self.assertEqual(result.report, {})
        device.full_report.assert_not_called()

    def test_unknown_status_counts_as_down(self):
        device = _device([StatusValue.UNKNOWN, StatusValue.CONNECTED])
        result = Watcher(device, show_progress=False).check_and_reboot()
        self.assertEqual(result.outcome, WatchOutcome.RECOVERED)

    def test_invalid_delay_falls_back_to_default(self):
        self.assertEqual(Watcher(MagicMock(), reboot_wait_delay=0).reboot_wait_delay, 120)
        self.assertEqual(Watcher(MagicMock(), reboot_wait_delay=-3).reboot_wait_delay, 120)


class TestCheckAndRebootOnMultipleFail(unittest.TestCase):
    def setUp(self):
        patcher = patch("neufbox_watcher.watcher.time")
        patcher.start()
        self.addCleanup(patcher.stop)
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.counter = Path(tmp.name) / "fail_count"

    def _check(self, device, threshold=3):
        return Watcher(device, show_progress=False).check_and_reboot_on_multiple_fail(
            threshold, self.counter,
        )

    def test_postponed_below_threshold(self):
        device = _device([StatusValue.NOT_CONNECTED])
        result = self._check(device)

        self.assertEqual(result.outcome, WatchOutcome.POSTPONED)
        self.assertEqual(self.counter.read_text(), "1")
        device.reboot.assert_not_called()

    def test_reboot_at_threshold_then_reset(self):
        self.counter.write_text("2")
        device = _device([StatusValue.NOT_CONNECTED, StatusValue.CONNECTED])

        result = self._check(device)

        self.assertEqual(result.outcome, WatchOutcome.RECOVERED)
        device.reboot.assert_called_once_with()
        self.assertEqual(self.counter.read_text(), "0")

    def test_counter_kept_when_still_down(self):
        self.counter.write_text("2")
        device = _device([StatusValue.NOT_CONNECTED, StatusValue.NOT_CONNECTED])

        result = self._check(device)

        self.assertEqual(result.outcome, WatchOutcome.STILL_DOWN)
        self.assertEqual(self.counter.read_text(), "3")

    def test_line_up_resets_counter(self):
        self.counter.write_text("2")
        result = self._check(_device([StatusValue.CONNECTED]))

        self.assertEqual(result.outcome, WatchOutcome.LINE_UP)
        self.assertEqual(self.counter.read_text(), "0")

    def test_garbage_counter_treated_as_zero(self):
        self.counter.write_text("not a number")
        result = self._check(_device([StatusValue.NOT_CONNECTED]))

        self.assertEqual(result.outcome, WatchOutcome.POSTPONED)
        self.assertEqual(self.counter.read_text(), "1")

    def test_unwritable_counter_raises_operation_error(self):
        self.counter = self.counter.parent / "missing" / "fail_count"
        device = _device([StatusValue.NOT_CONNECTED])

        with self.assertLogs("neufbox-watcher", level="ERROR"):
            with self.assertRaises(OperationError):
                self._check(device)
        device.reboot.assert_not_called()

    def test_unreadable_counter_raises_operation_error(self):
        self.counter.mkdir()
        device = _device([StatusValue.NOT_CONNECTED])

        with self.assertLogs("neufbox-watcher", level="ERROR"):
            with self.assertRaises(OperationError):
                self._check(device)
        device.reboot.assert_not_called()

    def test_default_counter_path(self):
        watcher = Watcher(_device([], host="10.0.0.138"))
        self.assertEqual(watcher.counter_path(), Path("./10.0.0.138_fail_count"))


class TestWatcherEndToEnd(unittest.TestCase):
    """Real facade and parsing, fake HTTP: down, reboot, back up."""

    def test_disabled_reboot_enabled(self):
        box, transport = make_box({
            ("GET", "/"): [html_response(pages.HOME)],
            ("GET", "/state"): [
                html_response(pages.STATE.format(ipv4="disabled")),
                html_response(pages.STATE.format(ipv4="enabled")),
            ],
            ("GET", "/state/wan"): [html_response(pages.STATE_WAN)],
            ("GET", "/state/voip"): [html_response(pages.STATE_VOIP)],
            ("GET", "/network"): [html_response(pages.NETWORK)],
            ("GET", "/network/dns"): [html_response(pages.NETWORK_DNS)],
            ("GET", "/network/nat"): [html_response(pages.NETWORK_NAT)],
            ("GET", "/wifi"): [html_response(pages.WIFI.format(wifi="enabled"))],
            ("GET", "/hotspot"): [html_response(pages.HOTSPOT)],
            ("POST", "/reboot"): [html_response("")],
        })

        with patch("neufbox_watcher.watcher.time"):
            result = Watcher(box, reboot_wait_delay=2, show_progress=False).check_and_reboot()

        self.assertEqual(result.outcome, WatchOutcome.RECOVERED)
        self.assertEqual(result.report["ipv4_status"], StatusValue.CONNECTED)
        self.assertIn("adsl_info", result.report)
        self.assertEqual(len(transport.calls_to("POST", "/reboot")), 1)


if __name__ == "__main__":
    unittest.main()
