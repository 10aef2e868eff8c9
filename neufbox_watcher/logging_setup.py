"""Logging configuration for the Neufbox watcher."""

import logging

import colorlog

log = logging.getLogger("neufbox-watcher")


def setup_logging(level: int = logging.INFO) -> None:
    """
    Attach a coloured console handler to the package logger.

    Args:
        level: ``WARNING`` for silent runs, ``DEBUG`` for --debug
    """
    log.setLevel(level)
    log.handlers.clear()

    handler = colorlog.StreamHandler()
    handler.setFormatter(colorlog.ColoredFormatter(
        "%(log_color)s%(asctime)s [%(levelname)s]%(reset)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        log_colors={
            "DEBUG":    "cyan",
            "INFO":     "green",
            "WARNING":  "yellow",
            "ERROR":    "red",
            "CRITICAL": "bold_red",
        },
    ))
    log.addHandler(handler)
