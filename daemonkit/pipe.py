"""Pipes used to inject events into a poll based event loop."""

from __future__ import annotations

import enum
import os

from .utils import robust_close, robust_read, robust_write


class PipeFlag(enum.IntFlag):
    NONE = 0
    NON_BLOCKING_READ = 0x0001
    NON_BLOCKING_WRITE = 0x0002


class Pipe:
    """An OS pipe with optionally non-blocking read and write ends."""

    def __init__(self, flags: PipeFlag | int = PipeFlag.NONE) -> None:
        flags = PipeFlag(flags)
        self.read_handle, self.write_handle = os.pipe()
        try:
            if flags & PipeFlag.NON_BLOCKING_READ:
                os.set_blocking(self.read_handle, False)
            if flags & PipeFlag.NON_BLOCKING_WRITE:
                os.set_blocking(self.write_handle, False)
        except OSError:
            self.close()
            raise

    def read(self, length: int) -> bytes:
        """Read up to length bytes from the read end."""
        return robust_read(self.read_handle, length)

    def write(self, data: bytes) -> int:
        """Write data to the write end and return the number of bytes written."""
        return robust_write(self.write_handle, data)

    def fileno(self) -> int:
        """Return the read end, for use with select and poll."""
        return self.read_handle

    def close(self) -> None:
        """Close both ends of the pipe."""
        robust_close(self.read_handle)
        robust_close(self.write_handle)
        self.read_handle = -1
        self.write_handle = -1

    def __enter__(self) -> Pipe:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()