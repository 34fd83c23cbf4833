"""Non-blocking per-key advisory lock."""

from __future__ import annotations

import fcntl
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path


class KeyLock:
    """Exclusive ``flock`` on a lock file inside the key directory.

    The file is never deleted, only unlocked, so every opener locks the
    same inode.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._fd: int | None = None

    @property
    def acquired(self) -> bool:
        return self._fd is not None

    def acquire(self) -> bool:
        """Try to take the lock; return ``False`` at once if it is held."""

        if self._fd is not None:
            return True
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            return False
        except BaseException:
            os.close(fd)
            raise
        self._fd = fd
        return True

    def release(self) -> None:
        if self._fd is None:
            return
        fd, self._fd = self._fd, None
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)


@contextmanager
def held(path: Path) -> Iterator[bool]:
    """Yield whether the lock was acquired; release on every exit path."""

    lock = KeyLock(path)
    acquired = lock.acquire()
    try:
        yield acquired
    finally:
        lock.release()
