"""Exclusive lock held for a whole init or rotation run."""

from __future__ import annotations

import fcntl
import logging
import os
from pathlib import Path

from clawsecrets.errors import LockHeld
from clawsecrets.store import FILE_MODE

logger = logging.getLogger(__name__)


class RotationLock:
    """Non-blocking advisory flock on secrets/.rotation.lock.

    Usage:
        with RotationLock(cfg.lock_file):
            ...
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._fd: int | None = None

    def acquire(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_RDWR | os.O_CREAT, FILE_MODE)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            raise LockHeld(
                f"Another clawsecrets run holds {self.path}. Wait for it to finish."
            ) from None
        os.ftruncate(fd, 0)
        os.write(fd, str(os.getpid()).encode())
        self._fd = fd
        logger.debug("Acquired rotation lock %s", self.path)

    def release(self) -> None:
        if self._fd is None:
            return
        try:
            fcntl.flock(self._fd, fcntl.LOCK_UN)
        finally:
            os.close(self._fd)
            self._fd = None
        logger.debug("Released rotation lock %s", self.path)

    @property
    def held(self) -> bool:
        return self._fd is not None

    def __enter__(self) -> RotationLock:
        self.acquire()
        return self

    def __exit__(self, *exc: object) -> None:
        self.release()
