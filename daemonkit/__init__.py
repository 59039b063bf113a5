"""Building blocks for small event-driven daemons: utilities, Pearson hashing,
queues, ring buffers, PID files, pipes, RED Brick LEDs, signal forwarding,
sockets and buffered packet writers."""

__version__ = "0.1.0"