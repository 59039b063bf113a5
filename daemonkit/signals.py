"""Forward process signals into an event loop through a pipe.

Signal handlers only write the signal number to a pipe. The owner's event
loop watches ``SignalHandler.fileno()`` and calls ``SignalHandler.handle()``
to act on the signal outside of the signal handler.
"""

from __future__ import annotations

import logging
import signal
import struct
from collections.abc import Callable
from typing import Any

from .pipe import Pipe, PipeFlag

_log = logging.getLogger(__name__)

_SIGNAL_NUMBER = struct.Struct("=i")

Callback = Callable[[], None]


class SignalHandler:
    """Install handlers for SIGINT, SIGTERM, SIGHUP and SIGUSR1 and ignore SIGPIPE.

    SIGINT and SIGTERM call stop, SIGHUP calls sighup and SIGUSR1 calls
    sigusr1; each callback is optional. Closing restores the handlers that
    were installed before.
    """

    def __init__(
        self,
        sighup: Callback | None = None,
        sigusr1: Callback | None = None,
        stop: Callback | None = None,
    ) -> None:
        self.sighup = sighup
        self.sigusr1 = sigusr1
        self.stop = stop
        self._previous: list[tuple[int, Any]] = []
        self._pipe = Pipe(PipeFlag.NON_BLOCKING_READ)

        try:
            for signal_number, handler in (
                (signal.SIGINT, self._forward),
                (signal.SIGTERM, self._forward),
                (signal.SIGPIPE, signal.SIG_IGN),
                (signal.SIGHUP, self._forward),
                (signal.SIGUSR1, self._forward),
            ):
                previous = signal.signal(signal_number, handler)
                self._previous.append((signal_number, previous))
        except (OSError, ValueError):
            self._restore()
            self._pipe.close()
            raise

    def _forward(self, signal_number: int, frame: object) -> None:
        try:
            self._pipe.write(_SIGNAL_NUMBER.pack(signal_number))
        except OSError:
            pass

    def _restore(self) -> None:
        while self._previous:
            signal_number, previous = self._previous.pop()
            signal.signal(
                signal_number, signal.SIG_DFL if previous is None else previous
            )

    def fileno(self) -> int:
        """Return the descriptor that becomes readable when a signal arrives."""
        return self._pipe.read_handle

    def handle(self) -> signal.Signals | int | None:
        """Act on one forwarded signal and return its number, or None if none is pending."""
        try:
            data = self._pipe.read(_SIGNAL_NUMBER.size)
        except OSError as error:
            _log.error("Could not read from signal pipe: %s", error)
            return None

        if len(data) != _SIGNAL_NUMBER.size:
            return None

        (signal_number,) = _SIGNAL_NUMBER.unpack(data)

        if signal_number in (signal.SIGINT, signal.SIGTERM):
            _log.info("Received %s", signal.Signals(signal_number).name)
            if self.stop is not None:
                self.stop()
        elif signal_number == signal.SIGHUP:
            _log.info("Received SIGHUP")
            if self.sighup is not None:
                self.sighup()
        elif signal_number == signal.SIGUSR1:
            _log.info("Received SIGUSR1")
            if self.sigusr1 is not None:
                self.sigusr1()
        else:
            _log.warning("Received unexpected signal %d", signal_number)
            return signal_number

        return signal.Signals(signal_number)

    def close(self) -> None:
        """Restore the previous signal handlers and close the pipe."""
        self._restore()
        self._pipe.close()

    def __enter__(self) -> SignalHandler:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()