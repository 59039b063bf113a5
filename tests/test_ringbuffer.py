import pytest

from daemonkit.ringbuffer import Ringbuffer


def test_new_buffer_is_empty():
    rb = Ringbuffer(8)
    assert rb.is_empty()
    assert rb.used() == 0
    assert rb.free() == rb.size
    assert rb.get() is None


def test_capacity_is_size_minus_one():
    rb = Ringbuffer(4)
    results = [rb.add(value) for value in (10, 20, 30, 40)]
    assert results == [True, True, True, False]
    assert rb.used() == rb.size - 1
    assert rb.overflows == 1
    assert rb.is_full()


def test_fifo_with_wraparound():
    rb = Ringbuffer(4)
    for value in (1, 2, 3):
        assert rb.add(value)
    assert rb.get() == 1
    assert rb.add(4)
    assert [rb.get(), rb.get(), rb.get()] == [2, 3, 4]
    assert rb.get() is None
    assert rb.is_empty()


def test_overflow_keeps_existing_data():
    rb = Ringbuffer(3)
    rb.add(7)
    rb.add(8)
    assert not rb.add(9)
    assert [rb.get(), rb.get()] == [7, 8]


def test_add_masks_to_byte():
    rb = Ringbuffer(4)
    rb.add(0x1FF)
    assert rb.get() == 0xFF


def test_remove_clamps_to_used():
    rb = Ringbuffer(8)
    for value in range(5):
        rb.add(value)
    rb.remove(2)
    assert rb.get() == 2
    rb.remove(100)
    assert rb.is_empty()


def test_low_watermark_tracks_minimum_free():
    rb = Ringbuffer(8)
    for value in range(5):
        rb.add(value)
    lowest = rb.free()
    assert rb.low_watermark == lowest
    rb.remove(5)
    assert rb.free() == rb.size
    assert rb.low_watermark == lowest


def test_dump_empty():
    rb = Ringbuffer(4)
    assert rb.dump() == "Ringbuffer (start 0, end 0, size 4, low 4, overflows 0): [\n]\n"


def test_dump_contains_hex_items():
    rb = Ringbuffer(4)
    rb.add(0xAB)
    text = rb.dump()
    assert "    ab, " in text
    assert text.endswith("]\n")


@pytest.mark.parametrize("size", [0, -1, 70000])
def test_invalid_size(size):
    with pytest.raises(ValueError):
        Ringbuffer(size)