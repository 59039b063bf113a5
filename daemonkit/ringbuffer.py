"""A byte ring buffer that keeps one slot free to tell full from empty."""

from __future__ import annotations


class Ringbuffer:
    """Fixed size byte ring buffer with overflow and low-watermark tracking."""

    def __init__(self, size: int, buffer: bytearray | None = None) -> None:
        if not 1 <= size <= 0xFFFF:
            raise ValueError(f"size must be in [1, 65535], got {size}")
        if buffer is None:
            buffer = bytearray(size)
        elif len(buffer) < size:
            raise ValueError("buffer is smaller than size")
        self.buffer = buffer
        self.size = size
        self.start = 0
        self.end = 0
        self.overflows = 0
        self.low_watermark = size

    def used(self) -> int:
        """Return the number of bytes stored."""
        if self.end < self.start:
            return self.size + self.end - self.start
        return self.end - self.start

    def free(self) -> int:
        """Return the number of free slots and update the low watermark."""
        free = self.size - self.used()
        if free < self.low_watermark:
            self.low_watermark = free
        return free

    def is_empty(self) -> bool:
        return self.start == self.end

    def is_full(self) -> bool:
        return self.free() < 2

    def add(self, data: int) -> bool:
        """Append a byte; return False and count an overflow if full."""
        self.buffer[self.end] = data & 0xFF
        self.end += 1
        if self.end >= self.size:
            self.end = 0

        if self.end == self.start:
            self.overflows += 1
            if self.end == 0:
                self.end = self.size - 1
            else:
                self.end -= 1
            return False

        return True

    def remove(self, num: int) -> None:
        """Discard up to num bytes from the head."""
        incr = min(self.used(), num)
        self.start += incr
        if self.start >= self.size:
            self.start -= self.size

    def get(self) -> int | None:
        """Remove and return the head byte, or None if empty."""
        if self.is_empty():
            return None
        data = self.buffer[self.start]
        self.start += 1
        if self.start >= self.size:
            self.start = 0
        return data

    def dump(self) -> str:
        """Return a human readable description of the state and contents."""
        count = self.used()
        parts = [
            f"Ringbuffer (start {self.start}, end {self.end}, size {self.size}, "
            f"low {self.low_watermark}, overflows {self.overflows}): [\n"
        ]
        for i in range(count):
            if i % 16 == 0:
                parts.append("    ")
            parts.append(f"{self.buffer[(self.start + i) % self.size]:x}, ")
            if i % 16 == 15:
                parts.append("\n")
        parts.append("]\n")
        return "".join(parts)