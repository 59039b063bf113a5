"""Buffered packet writer for non-blocking I/O objects.

Packets that cannot be written at once are kept in a backlog. The owner's
event loop is told through ``set_write_interest`` when the backlog starts
and stops holding packets. While it holds packets, the owner calls
``Writer.handle_write()`` each time the I/O object becomes writable.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from .queue import Queue
from .utils import errno_would_block, get_errno_name, millitime

_log = logging.getLogger(__name__)

MAX_QUEUED_WRITES = 32768
DROPPED_PACKETS_WARNING_INTERVAL = 5000  # milliseconds

PacketSignatureFunction = Callable[[bytes], str]
RecipientSignatureFunction = Callable[[bool, Any], str]
RecipientDisconnectFunction = Callable[[Any], None]
WriteInterestFunction = Callable[[bool], None]


class WritableIO(Protocol):
    def write(self, data: bytes) -> int: ...


class WriteResult(enum.IntEnum):
    WRITTEN = 0  # the packet was written completely
    QUEUED = 1  # the packet was completely or partly pushed to the backlog


class WriterError(Exception):
    """Raised when a packet can neither be written nor queued."""


@dataclass
class PartialPacket:
    packet: bytes
    written: int = 0

    @property
    def remaining(self) -> bytes:
        return self.packet[self.written:]


def _default_packet_signature(packet: bytes) -> str:
    return f"length: {len(packet)}"


def _default_recipient_signature(upper: bool, opaque: Any) -> str:
    return "Recipient" if upper else "recipient"


class Writer:
    """Writes packets to an I/O object, queueing what would block."""

    def __init__(
        self,
        io: WritableIO,
        packet_type: str = "packet",
        packet_signature: PacketSignatureFunction | None = None,
        recipient_name: str = "recipient",
        recipient_signature: RecipientSignatureFunction | None = None,
        recipient_disconnect: RecipientDisconnectFunction | None = None,
        opaque: Any = None,
        *,
        set_write_interest: WriteInterestFunction | None = None,
        max_queued_writes: int = MAX_QUEUED_WRITES,
    ) -> None:
        if max_queued_writes < 1:
            raise ValueError(
                f"max_queued_writes must be at least 1, got {max_queued_writes}"
            )
        self.io = io
        self.packet_type = packet_type
        self.packet_signature = packet_signature or _default_packet_signature
        self.recipient_name = recipient_name
        self.recipient_signature = recipient_signature or _default_recipient_signature
        self.recipient_disconnect = recipient_disconnect
        self.opaque = opaque
        self.set_write_interest = set_write_interest
        self.max_queued_writes = max_queued_writes
        self.dropped_packets = 0
        self.last_dropped_packets_warning = 0
        self.backlog = Queue()

    def _recipient(self, upper: bool = False) -> str:
        return self.recipient_signature(upper, self.opaque)

    def _disconnect(self) -> None:
        if self.recipient_disconnect is not None:
            self.recipient_disconnect(self.opaque)

    def _set_interest(self, interested: bool) -> None:
        if self.set_write_interest is not None:
            self.set_write_interest(interested)

    def handle_write(self) -> None:
        """Continue writing the oldest queued packet."""
        partial = self.backlog.peek()
        if partial is None:
            return

        remaining = partial.remaining
        if remaining:
            try:
                written = self.io.write(remaining)
            except OSError as error:
                _log.error(
                    "Could not send queued %s (%s) to %s, disconnecting %s: %s (%d)",
                    self.packet_type, self.packet_signature(partial.packet),
                    self._recipient(), self.recipient_name,
                    get_errno_name(error), error.errno or 0,
                )
                self._disconnect()
                return
            partial.written += written

        # keep a partly written packet in the backlog
        if partial.written < len(partial.packet):
            return

        _log.debug(
            "Sent queued %s (%s) to %s, %d %s(s) left in write backlog",
            self.packet_type, self.packet_signature(partial.packet),
            self._recipient(), len(self.backlog) - 1, self.packet_type,
        )

        self.backlog.pop()

        if len(self.backlog) == 0:
            self._set_interest(False)

    def _push_to_backlog(self, packet: bytes, written: int) -> None:
        _log.debug(
            "%s is not ready to receive, pushing %s to write backlog (count: %d + 1)",
            self._recipient(True), self.packet_type, len(self.backlog),
        )

        if len(self.backlog) >= self.max_queued_writes:
            to_drop = len(self.backlog) - self.max_queued_writes + 1
            now = millitime()
            level = logging.DEBUG
            if self.last_dropped_packets_warning + DROPPED_PACKETS_WARNING_INTERVAL < now:
                self.last_dropped_packets_warning = now
                level = logging.WARNING
            _log.log(
                level,
                "Write backlog for %s is full, dropping %u queued %s(s), "
                "%u + %u dropped in total",
                self._recipient(), to_drop, self.packet_type,
                self.dropped_packets, to_drop,
            )
            self.dropped_packets += to_drop
            while len(self.backlog) >= self.max_queued_writes:
                self.backlog.pop()

        self.backlog.push(PartialPacket(packet, written))

        if len(self.backlog) == 1:
            # first queued packet, ask for write events
            try:
                self._set_interest(True)
            except OSError as error:
                raise WriterError(
                    f"Could not register for write events for {self._recipient()}: {error}"
                ) from error

    def write(self, packet: bytes) -> WriteResult:
        """Write packet, queueing all or the rest of it if the I/O would block.

        Raises WriterError if writing fails for another reason; the
        recipient is disconnected in that case.
        """
        packet = bytes(packet)

        if len(self.backlog) > 0:
            self._push_to_backlog(packet, 0)
            return WriteResult.QUEUED

        try:
            written = self.io.write(packet)
        except OSError as error:
            if errno_would_block(error):
                self._push_to_backlog(packet, 0)
                return WriteResult.QUEUED

            _log.error(
                "Could not send %s (%s) to %s, disconnecting %s: %s (%d)",
                self.packet_type, self.packet_signature(packet), self._recipient(),
                self.recipient_name, get_errno_name(error), error.errno or 0,
            )
            self._disconnect()
            raise WriterError(
                f"Could not send {self.packet_type} to {self._recipient()}: {error}"
            ) from error

        if written < len(packet):
            self._push_to_backlog(packet, written)
            return WriteResult.QUEUED

        return WriteResult.WRITTEN

    def close(self) -> None:
        """Discard the backlog and stop asking for write events."""
        if len(self.backlog) > 0:
            _log.warning(
                "Destroying writer for %s while %d %s(s) have not been send",
                self._recipient(), len(self.backlog), self.packet_type,
            )
            self._set_interest(False)
        self.backlog.clear()