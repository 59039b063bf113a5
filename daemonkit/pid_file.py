"""Exclusively locked PID files."""

from __future__ import annotations

import fcntl
import os

from .utils import errno_would_block, robust_close, robust_write


class PidFileAlreadyAcquired(Exception):
    """Raised when another holder already has the PID file locked."""

    def __init__(self, filename: str) -> None:
        super().__init__(f"PID file '{filename}' is already acquired")
        self.filename = filename


class PidFile:
    """A locked PID file; release it to unlink and unlock."""

    def __init__(self, filename: str, fd: int, pid: int) -> None:
        self.filename = filename
        self.fd = fd
        self.pid = pid

    def release(self) -> None:
        """Remove the PID file and drop the lock."""
        if self.fd < 0:
            return
        try:
            os.unlink(self.filename)
        except OSError:
            pass
        robust_close(self.fd)
        self.fd = -1

    def __enter__(self) -> PidFile:
        return self

    def __exit__(self, *args: object) -> None:
        self.release()


def acquire_pid_file(filename: str | os.PathLike[str], pid: int | None = None) -> PidFile:
    """Open, lock and write pid (default: this process) to filename.

    Raises PidFileAlreadyAcquired if the file is locked elsewhere and
    OSError for any other failure.
    """
    path = os.fspath(filename)
    if pid is None:
        pid = os.getpid()

    while True:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT, 0o644)

        try:
            opened = os.fstat(fd)
        except OSError:
            robust_close(fd)
            raise

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as error:
            robust_close(fd)
            if errno_would_block(error):
                raise PidFileAlreadyAcquired(path) from None
            raise

        try:
            current = os.stat(path)
        except OSError:
            robust_close(fd)
            continue

        # the locked file was replaced after opening it, try again
        if opened.st_ino != current.st_ino:
            robust_close(fd)
            continue

        break

    try:
        robust_write(fd, str(pid).encode("ascii"))
    except OSError:
        robust_close(fd)
        raise

    return PidFile(path, fd, pid)