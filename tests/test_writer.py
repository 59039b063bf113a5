import errno

import pytest

from daemonkit.writer import WriteResult, Writer, WriterError


class FakeIO:
    def __init__(self, limit=None, error=None):
        self.data = bytearray()
        self.limit = limit
        self.error = error
        self.calls = 0

    def write(self, data):
        self.calls += 1
        if self.error is not None:
            raise self.error
        count = len(data) if self.limit is None else min(self.limit, len(data))
        self.data += data[:count]
        return count


def make_writer(io, **kwargs):
    interest = []
    disconnects = []
    writer = Writer(
        io,
        "request",
        recipient_name="client",
        recipient_disconnect=disconnects.append,
        opaque="client-1",
        set_write_interest=interest.append,
        **kwargs,
    )
    return writer, interest, disconnects


def would_block():
    return BlockingIOError(errno.EAGAIN, "would block")


def test_complete_write():
    io = FakeIO()
    writer, interest, _ = make_writer(io)
    assert writer.write(b"hello") is WriteResult.WRITTEN
    assert bytes(io.data) == b"hello"
    assert len(writer.backlog) == 0
    assert interest == []


def test_would_block_queues_packet():
    io = FakeIO(error=would_block())
    writer, interest, disconnects = make_writer(io)
    assert writer.write(b"abc") is WriteResult.QUEUED
    assert len(writer.backlog) == 1
    assert interest == [True]
    assert disconnects == []


def test_partial_write_then_handle_write_completes():
    io = FakeIO(limit=3)
    writer, interest, _ = make_writer(io)
    assert writer.write(b"abcdefgh") is WriteResult.QUEUED
    assert writer.backlog.peek().written == 3
    writer.handle_write()
    assert len(writer.backlog) == 1
    writer.handle_write()
    assert bytes(io.data) == b"abcdefgh"
    assert len(writer.backlog) == 0
    assert interest == [True, False]


def test_existing_backlog_queues_without_writing():
    io = FakeIO(error=would_block())
    writer, interest, _ = make_writer(io)
    writer.write(b"first")
    calls = io.calls
    assert writer.write(b"second") is WriteResult.QUEUED
    assert io.calls == calls
    assert [p.packet for p in writer.backlog] == [b"first", b"second"]
    assert interest == [True]


def test_backlog_drains_in_order():
    io = FakeIO(error=would_block())
    writer, interest, _ = make_writer(io)
    for packet in (b"one", b"two", b"three"):
        writer.write(packet)
    io.error = None
    while len(writer.backlog):
        writer.handle_write()
    assert bytes(io.data) == b"onetwothree"
    assert interest == [True, False]


def test_write_error_disconnects_and_raises():
    io = FakeIO(error=OSError(errno.EPIPE, "broken pipe"))
    writer, _, disconnects = make_writer(io)
    with pytest.raises(WriterError):
        writer.write(b"data")
    assert disconnects == ["client-1"]
    assert len(writer.backlog) == 0


def test_handle_write_error_disconnects_and_keeps_backlog():
    io = FakeIO(error=would_block())
    writer, _, disconnects = make_writer(io)
    writer.write(b"data")
    io.error = OSError(errno.ECONNRESET, "reset")
    writer.handle_write()
    assert disconnects == ["client-1"]
    assert len(writer.backlog) == 1


def test_handle_write_with_empty_backlog_does_nothing():
    io = FakeIO()
    writer, interest, _ = make_writer(io)
    writer.handle_write()
    assert io.calls == 0
    assert interest == []


def test_full_backlog_drops_oldest():
    io = FakeIO(error=would_block())
    writer, _, _ = make_writer(io, max_queued_writes=2)
    for packet in (b"a", b"b", b"c", b"d"):
        assert writer.write(packet) is WriteResult.QUEUED
    assert writer.dropped_packets == 2
    assert [p.packet for p in writer.backlog] == [b"c", b"d"]


def test_close_discards_backlog():
    io = FakeIO(error=would_block())
    writer, interest, _ = make_writer(io)
    writer.write(b"x")
    writer.write(b"y")
    writer.close()
    assert len(writer.backlog) == 0
    assert interest == [True, False]


def test_close_without_backlog_leaves_interest_alone():
    writer, interest, _ = make_writer(FakeIO())
    writer.close()
    assert interest == []


def test_invalid_max_queued_writes():
    with pytest.raises(ValueError):
        Writer(FakeIO(), max_queued_writes=0)


def test_interest_registration_failure_raises():
    def fail(interested):
        raise OSError(errno.EBADF, "bad descriptor")

    writer = Writer(FakeIO(error=would_block()), set_write_interest=fail)
    with pytest.raises(WriterError):
        writer.write(b"z")
    assert len(writer.backlog) == 1