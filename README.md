# daemonkit

Small, dependency-free building blocks for event-driven daemons on POSIX
systems. Each piece is meant to be driven by an event loop that you own:
the objects that need attention expose a file descriptor through
`fileno()` and a method to call when it becomes ready.

## Installation

```
pip install daemonkit
```

Install with the `test` extra to run the test suite with pytest.

## Modules

### `daemonkit.utils`

- `errno_interrupted`, `errno_would_block`, `errno_connection_reset`:
  classify an error given as an errno number or an `OSError`.
- `get_errno_name`: the symbolic name of an errno (`"EAGAIN"`, ...) or of
  an address resolution error offset by `ERRNO_ADDRINFO_OFFSET`
  (`"EAI_NONAME"`, ...); `"<unknown>"` otherwise.
- `parse_int(string, base=10)`: parses the whole string as a 32-bit
  integer in `strtol` style (leading whitespace, sign, `0x` prefix, base 0
  for auto-detection). Raises `ValueError` on missing digits or trailing
  characters and `OverflowError` outside the 32-bit range.
  `parse_int_prefix` returns `(value, rest)` instead of rejecting trailing
  text.
- `string_ends_with(string, suffix, case_sensitive=True)`,
  `strcasestr(haystack, needle)` (index of the first case-insensitive
  match, or `None`), `grow_allocation(size)` (round up to a multiple of 16).
- `uint16_to_le`, `uint32_to_le`, `uint32_from_le`: byte order helpers.
- `microtime`, `millitime`: monotonic timestamps; `microsleep`,
  `millisleep`: sleep for microseconds or milliseconds.
- `robust_read`, `robust_write`: `os.read` / `os.write` retried on
  interruption; `robust_close` ignores negative descriptors.
- `uid_from_sid(data)` derives a RED Brick UID from the 16-byte chip SID;
  `red_brick_uid(path)` reads the SID from a file (by default the sunxi
  nvmem device) and does the same.

### `daemonkit.pearson_hash`

`PEARSON_PERMUTATION` is the 256-byte table from Pearson's paper.
`pearson(cur, next_byte)` advances the hash by one byte and
`pearson_hash(data, seed=0)` hashes a whole byte sequence to one byte.

### `daemonkit.queue.Queue`

A FIFO with `push(item)`, `pop(destroy=None)` (removes and returns the head,
or `None` when empty), `peek()`, `clear(destroy=None)`, `len()` and
iteration. `pop` and `clear` call `destroy` on each removed item.

### `daemonkit.ringbuffer.Ringbuffer`

A fixed-size byte ring buffer (`Ringbuffer(size)`, size up to 65535). One
slot is always kept free, so it holds at most `size - 1` bytes. `add`
returns `False` and counts an overflow when full; `get` returns the head
byte or `None`; `remove(num)` discards up to `num` bytes. `used()`,
`free()` (which also lowers `low_watermark`), `is_empty()`, `is_full()`
and `dump()` (a text rendering of state and contents) report on it.

### `daemonkit.pid_file`

`acquire_pid_file(filename, pid=None)` creates the file, takes an
exclusive `flock` on it and writes the PID (this process by default). It
returns a `PidFile`, usable as a context manager; `release()` unlinks the
file and drops the lock. If another holder has the lock,
`PidFileAlreadyAcquired` is raised; other failures raise `OSError`.

### `daemonkit.pipe.Pipe`

An OS pipe with optionally non-blocking ends chosen by `PipeFlag`
(`NON_BLOCKING_READ`, `NON_BLOCKING_WRITE`). `read(length)`,
`write(data)`, `fileno()` (the read end), `close()`, and context manager
support.

### `daemonkit.red_led`

`get_trigger(led, root="/")` and `set_trigger(led, trigger, root="/")`
read and write the sysfs trigger files of the RED Brick LEDs (`RedLed.GREEN`,
`RedLed.RED`). Triggers are `RedLedTrigger` values; `get_trigger` returns
`RedLedTrigger.UNKNOWN` when the active trigger is not one it knows.
Invalid LEDs or triggers raise `ValueError`; I/O failures raise
`RedLedError`. `root` lets you point at a different filesystem tree.

### `daemonkit.signals.SignalHandler`

`SignalHandler(sighup=None, sigusr1=None, stop=None)` installs handlers
for SIGINT, SIGTERM, SIGHUP and SIGUSR1 and ignores SIGPIPE. A signal only
writes its number to a pipe; when `fileno()` becomes readable, call
`handle()`, which runs `stop` for SIGINT/SIGTERM, `sighup` or `sigusr1`,
and returns the signal (or `None` if nothing was pending). `close()`
restores the previous handlers. Like any Python signal handler it must be
created in the main thread.

### `daemonkit.sockets`

`Socket` wraps a stream socket: `open`, `bind`, `listen`, `accept`
(returns `(Socket, address)`), `connect`, `receive`, `send`,
`set_address_reuse`, `set_dual_stack`, `fileno`, `close`. After `bind`,
`connect` or `accept` the socket is non-blocking with TCP_NODELAY set.
`hostname_to_address`, `address_to_hostname` and `address_family_name`
help with addresses; resolution errors are raised as `OSError` whose errno
`get_errno_name` turns into the `EAI_*` name. `open_server(address, port,
dual_stack=False)` listens on every address the name resolves to, logs
the ones that fail, and returns the list of listening sockets.

### `daemonkit.writer`

`Writer(io, ...)` sends packets (`bytes`) to any object with a
`write(data) -> int` method. `write(packet)` returns
`WriteResult.WRITTEN`, or `WriteResult.QUEUED` when all or part of it was
put in the backlog because the I/O would block. Other write errors call
the `recipient_disconnect` callback and raise `WriterError`. The
`set_write_interest(bool)` callback tells your loop when to watch for
writability; call `handle_write()` each time it is writable. The backlog
holds at most `max_queued_writes` packets (32768 by default); older ones
are dropped and counted in `dropped_packets`. `close()` discards the
backlog.

## Example

```python
import selectors

from daemonkit.pid_file import PidFileAlreadyAcquired, acquire_pid_file
from daemonkit.signals import SignalHandler

running = True


def stop():
    global running
    running = False


try:
    with acquire_pid_file("/tmp/mydaemon.pid"), SignalHandler(stop=stop) as signals:
        selector = selectors.DefaultSelector()
        selector.register(signals, selectors.EVENT_READ)
        while running:
            for _key, _events in selector.select():
                signals.handle()
except PidFileAlreadyAcquired:
    print("already running")
```

## What it does not do

daemonkit has no event loop and no timers of its own. `SignalHandler`,
`Pipe`, `Socket` and `Writer` only hand you descriptors and callbacks;
waiting on them (with `selectors`, `select` or similar) and scheduling
periodic work is up to your program. There is no command-line tool.