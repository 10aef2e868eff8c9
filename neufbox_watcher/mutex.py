"""Single-instance lock so that two scheduled runs never overlap."""

import hashlib
import os
import re
import sys
import tempfile
from pathlib import Path

from .logging_setup import log

if sys.platform == "win32":
    import msvcrt
else:
    import fcntl


def lock_id_for(path: str | Path) -> str:
    """Digits of the MD5 of *path*: a stable, path-dependent lock name."""
    digest = hashlib.md5(str(path).encode("utf-8")).hexdigest()
    return re.sub(r"[^0-9]", "", digest)


class InstanceLock:
    """
    Non-blocking exclusive lock on ``<tmpdir>/neufbox-watcher-<id>.lock``.

    Usable as a context manager; :meth:`acquire` returns False when another
    process holds the lock.
    """

    def __init__(self, lock_id: str, directory: Path | None = None) -> None:
        self.lock_id = lock_id
        base = Path(directory) if directory else Path(tempfile.gettempdir())
        self.path = base / f"neufbox-watcher-{lock_id}.lock"
        self._fd: int | None = None

    @property
    def acquired(self) -> bool:
        return self._fd is not None

    def acquire(self) -> bool:
        if self._fd is not None:
            return True
        fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o644)
        try:
            if sys.platform == "win32":
                msvcrt.locking(fd, msvcrt.LK_NBLCK, 1)
            else:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            os.close(fd)
            log.debug("Lock %s is held by another process", self.path)
            return False
        self._fd = fd
        log.debug("Acquired lock %s", self.path)
        return True

    def release(self) -> None:
        if self._fd is None:
            return
        try:
            if sys.platform == "win32":
                msvcrt.locking(self._fd, msvcrt.LK_UNLCK, 1)
            else:
                fcntl.flock(self._fd, fcntl.LOCK_UN)
        finally:
            os.close(self._fd)
            self._fd = None
        log.debug("Released lock %s", self.path)

    def __enter__(self) -> "InstanceLock":
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()
