"""
Connection watcher: check the WAN link and reboot the device when it is down.

Two strategies are offered:

* :meth:`Watcher.check_and_reboot` reboots as soon as one check fails;
* :meth:`Watcher.check_and_reboot_on_multiple_fail` keeps a counter file and
  reboots only after several consecutive failed checks (one per run).
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from tqdm import tqdm

from .config import DEFAULT_FAIL_COUNT_BEFORE_REBOOT, DEFAULT_REBOOT_WAIT_DELAY
from .device.neufbox import Neufbox4
from .errors import OperationError, logged
from .extraction.status import StatusValue
from .logging_setup import log


class WatchOutcome(Enum):
    LINE_UP = "line_up"              # nothing to do
    POSTPONED = "postponed"          # down, but below the failure threshold
    RECOVERED = "recovered"          # rebooted and the line came back
    STILL_DOWN = "still_down"        # rebooted, line still down


@dataclass
class WatchResult:
    outcome: WatchOutcome
    report: dict = field(default_factory=dict)


class Watcher:
    """Drives a :class:`Neufbox4` to keep its WAN connection alive."""

    def __init__(
        self,
        device: Neufbox4,
        reboot_wait_delay: int = DEFAULT_REBOOT_WAIT_DELAY,
        show_progress: bool = True,
    ) -> None:
        self.device = device
        delay = int(reboot_wait_delay or 0)
        self.reboot_wait_delay = delay if delay > 0 else DEFAULT_REBOOT_WAIT_DELAY
        self.show_progress = show_progress

    def _is_up(self) -> bool:
        return self.device.get_ipv4_status() == StatusValue.CONNECTED

    def _wait_for_reboot(self) -> None:
        for _ in tqdm(
            range(self.reboot_wait_delay),
            desc="Waiting for reboot",
            unit="s",
            disable=not self.show_progress,
            leave=False,
        ):
            time.sleep(1)

    def _reboot_and_recheck(self) -> WatchResult:
        self.device.reboot()
        self._wait_for_reboot()

        if not self._is_up():
            log.error("ADSL *still* down, aborting.")
            return WatchResult(WatchOutcome.STILL_DOWN)

        log.info("ADSL back up, retrieving system info...")
        report = self.device.full_report()
        log.info("System report: %s", report)
        return WatchResult(WatchOutcome.RECOVERED, report)

    def check_and_reboot(self) -> WatchResult:
        """Check the ADSL status and reboot immediately if the line is down."""
        log.info("Checking ADSL status...")
        if self._is_up():
            log.info("ADSL up, no action needed.")
            return WatchResult(WatchOutcome.LINE_UP)

        log.warning("ADSL down, rebooting Neufbox...")
        return self._reboot_and_recheck()

    def counter_path(self) -> Path:
        return Path(f"./{self.device.host}_fail_count")

    def check_and_reboot_on_multiple_fail(
        self,
        fail_count_before_reboot: int = DEFAULT_FAIL_COUNT_BEFORE_REBOOT,
        counter_file: Path | None = None,
    ) -> WatchResult:
        """
        Reboot only after *fail_count_before_reboot* consecutive failures.

        The count survives between runs in *counter_file*
        (``./<host>_fail_count`` by default).  It is reset when the line is
        up or comes back after a reboot, and kept when it stays down so the
        next run reboots again right away.
        """
        counter = Path(counter_file) if counter_file else self.counter_path()

        log.info("Checking ADSL status...")
        if self._is_up():
            log.info("ADSL up, no action needed.")
            _write_counter(counter, 0)
            return WatchResult(WatchOutcome.LINE_UP)

        fail_count = _read_counter(counter) + 1
        _write_counter(counter, fail_count)

        if fail_count < fail_count_before_reboot:
            log.info(
                "ADSL down, postponing reboot after %d fails (%d so far).",
                fail_count_before_reboot, fail_count,
            )
            return WatchResult(WatchOutcome.POSTPONED)

        log.warning("ADSL down for %d checks, rebooting Neufbox...", fail_count)
        result = self._reboot_and_recheck()
        if result.outcome is WatchOutcome.RECOVERED:
            _write_counter(counter, 0)
        return result


def _read_counter(path: Path) -> int:
    try:
        return int(path.read_text(encoding="utf-8").strip() or 0)
    except FileNotFoundError:
        return 0
    except ValueError:
        log.warning("Ignoring unreadable failure counter in %s", path)
        return 0
    except OSError as exc:
        raise logged(OperationError(f"Cannot read failure counter {path}: {exc}")) from exc


def _write_counter(path: Path, value: int) -> None:
    try:
        path.write_text(str(value), encoding="utf-8")
    except OSError as exc:
        raise logged(OperationError(f"Cannot write failure counter {path}: {exc}")) from exc
