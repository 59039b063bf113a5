import os
import select

import pytest

from daemonkit.pipe import Pipe, PipeFlag


def test_write_then_read_round_trip():
    with Pipe() as pipe:
        assert pipe.write(b"hello") == 5
        assert pipe.read(5) == b"hello"


def test_fileno_is_read_end_and_becomes_readable():
    with Pipe() as pipe:
        assert pipe.fileno() == pipe.read_handle
        pipe.write(b"\x01")
        readable, _, _ = select.select([pipe], [], [], 1.0)
        assert readable == [pipe]


def test_non_blocking_read_on_empty_pipe_raises():
    with Pipe(PipeFlag.NON_BLOCKING_READ) as pipe:
        assert os.get_blocking(pipe.read_handle) is False
        assert os.get_blocking(pipe.write_handle) is True
        with pytest.raises(BlockingIOError):
            pipe.read(4)


def test_non_blocking_write_flag():
    with Pipe(PipeFlag.NON_BLOCKING_WRITE) as pipe:
        assert os.get_blocking(pipe.write_handle) is False
        assert os.get_blocking(pipe.read_handle) is True


def test_both_flags():
    flags = PipeFlag.NON_BLOCKING_READ | PipeFlag.NON_BLOCKING_WRITE
    with Pipe(flags) as pipe:
        assert os.get_blocking(pipe.read_handle) is False
        assert os.get_blocking(pipe.write_handle) is False


def test_close_resets_handles():
    pipe = Pipe()
    with pipe:
        pass
    assert pipe.read_handle == -1
    assert pipe.write_handle == -1
    pipe.close()
    assert pipe.fileno() == -1


def test_reads_preserve_order():
    with Pipe() as pipe:
        pipe.write(b"ab")
        pipe.write(b"cd")
        assert pipe.read(1) == b"a"
        assert pipe.read(3) == b"bcd"