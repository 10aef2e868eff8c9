"""
Command-line interface for the Neufbox watcher.

Provides argument parsing and main execution flow.
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from .config import DEFAULT_FAIL_COUNT_BEFORE_REBOOT, PING_DEFAULT_COUNT, load_config
from .device.neufbox import Neufbox4
from .errors import NeufboxError
from .extraction.status import StatusValue, status_as_string
from .formatter import DataFormatter, OutputStyle
from .logging_setup import log, setup_logging
from .mutex import InstanceLock, lock_id_for
from .watcher import WatchOutcome, Watcher

ACTIONS = (
    "fullreport",
    "checkandreboot",
    "reboot",
    "exportuserconfig",
    "wifistatus",
    "enablewifi",
    "disablewifi",
    "hotspotstatus",
    "enablehotspot",
    "disablehotspot",
    "adslinfo",
    "ping",
    "traceroute",
)

OUTPUT_STYLES = {
    "human": OutputStyle.HUMAN,
    "script": OutputStyle.SCRIPT,
    "csv": OutputStyle.CSV,
}

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_LOCKED = 3


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="neufbox-watcher",
        description="Check the ADSL connection of a Neufbox 4 and reboot it "
                    "to force reconnecting if needed.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Credentials are read from neufbox.env (see neufbox.env.sample)\n"
            "or from the NEUFBOX_HOST, NEUFBOX_LOGIN, NEUFBOX_PASSWORD and\n"
            "REBOOT_WAIT_DELAY environment variables."
        ),
    )
    parser.add_argument(
        "-a", "--action", required=True, choices=ACTIONS, metavar="ACTION",
        help="One of: " + ", ".join(ACTIONS),
    )
    parser.add_argument(
        "-o", "--output", default="human", choices=sorted(OUTPUT_STYLES),
        help="Output style (default: human)",
    )
    parser.add_argument(
        "-s", "--silent-success", action="store_true",
        help="Only log warnings and errors",
    )
    parser.add_argument(
        "-m", "--mutex", action="store_true",
        help="Refuse to run while another instance is running",
    )
    parser.add_argument(
        "-d", "--debug", action="store_true",
        help="Enable verbose debug logging",
    )
    parser.add_argument(
        "-c", "--config", default=None,
        help="Path to the dotenv configuration file (default: ./neufbox.env)",
    )
    parser.add_argument(
        "--fail-count", type=int, default=1, metavar="N",
        help="checkandreboot: reboot only after N consecutive failed checks "
             f"(the usual value is {DEFAULT_FAIL_COUNT_BEFORE_REBOOT})",
    )
    parser.add_argument(
        "--target", default=None, metavar="HOST",
        help="ping/traceroute: host to probe from the device",
    )
    parser.add_argument(
        "--count", type=int, default=PING_DEFAULT_COUNT,
        help=f"ping: number of echo requests (default: {PING_DEFAULT_COUNT})",
    )
    parser.add_argument(
        "--export-file", default=None, metavar="PATH",
        help="exportuserconfig: destination (default: nb4_userconfig_<time>.conf)",
    )
    parser.add_argument(
        "--dump-responses", default=None, metavar="DIR",
        help="Save every raw device response to DIR",
    )
    args = parser.parse_args(argv)
    if args.action in ("ping", "traceroute") and not args.target:
        parser.error(f"--target is required for action {args.action}")
    return args


def _print_status(status: StatusValue) -> None:
    print(status_as_string(status))


def _print_full_report(device: Neufbox4, formatter: DataFormatter) -> None:
    for key, data in device.full_report().items():
        if key.endswith("status"):
            data = status_as_string(data)
        print(formatter.format(data, key) + "\n")


def _check_and_reboot(device: Neufbox4, args: argparse.Namespace, reboot_wait_delay: int) -> int:
    watcher = Watcher(device, reboot_wait_delay, show_progress=not args.silent_success)
    if args.fail_count > 1:
        result = watcher.check_and_reboot_on_multiple_fail(args.fail_count)
    else:
        result = watcher.check_and_reboot()
    return EXIT_FAILURE if result.outcome is WatchOutcome.STILL_DOWN else EXIT_OK


def run_action(device: Neufbox4, args: argparse.Namespace, reboot_wait_delay: int) -> int:
    """Run the requested action against *device* and return the exit code."""
    formatter = DataFormatter(OUTPUT_STYLES[args.output])
    action = args.action

    if action == "fullreport":
        _print_full_report(device, formatter)
    elif action == "checkandreboot":
        return _check_and_reboot(device, args, reboot_wait_delay)
    elif action == "reboot":
        device.reboot()
    elif action == "exportuserconfig":
        device.export_user_config(args.export_file or f"nb4_userconfig_{int(time.time())}.conf")
    elif action == "adslinfo":
        print(formatter.format(device.get_adsl_info()))
    elif action == "wifistatus":
        _print_status(device.get_wifi_status())
    elif action == "enablewifi":
        device.enable_wifi()
    elif action == "disablewifi":
        device.disable_wifi()
    elif action == "hotspotstatus":
        _print_status(device.get_hotspot_status())
    elif action == "enablehotspot":
        device.enable_hotspot()
    elif action == "disablehotspot":
        device.disable_hotspot()
    elif action == "ping":
        print(formatter.format(device.ping(args.target, args.count), "ping"))
    elif action == "traceroute":
        print(formatter.format(device.traceroute(args.target), "traceroute"))
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the watcher CLI.
    """
    args = parse_args(argv)

    if args.debug:
        setup_logging(logging.DEBUG)
        logging.getLogger("urllib3").setLevel(logging.DEBUG)
    elif args.silent_success:
        setup_logging(logging.WARNING)
    else:
        setup_logging(logging.INFO)

    lock = None
    if args.mutex:
        lock = InstanceLock(lock_id_for(Path(__file__).resolve()))
        if not lock.acquire():
            log.error("It seems like another instance of the script is already running. Exiting.")
            return EXIT_LOCKED

    try:
        config = load_config(args.config)
        dump_dir = Path(args.dump_responses) if args.dump_responses else None
        device = Neufbox4(config.host, config.login, config.password, dump_dir=dump_dir)
        device.login()
        return run_action(device, args, config.reboot_wait_delay)
    except NeufboxError:
        # Already logged where it was raised.
        return EXIT_FAILURE
    finally:
        if lock is not None:
            lock.release()


if __name__ == "__main__":
    sys.exit(main())
