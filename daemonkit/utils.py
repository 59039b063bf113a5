"""Utility helpers: errno classification, string and integer parsing,
byte order conversion, monotonic time, sleeping and robust fd I/O."""

from __future__ import annotations

import errno
import os
import re
import socket
import sys
import time

ERRNO_WINAPI_OFFSET = 71000000
ERRNO_ADDRINFO_OFFSET = 72000000

DEFAULT_SID_PATH = "/sys/bus/nvmem/devices/sunxi-sid0/nvmem"

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1

_WHITESPACE = " \t\n\v\f\r"
_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _code(error: int | OSError | None) -> int | None:
    if isinstance(error, OSError):
        return error.errno
    return error


def _winapi_codes(*names: str) -> set[int]:
    return {
        ERRNO_WINAPI_OFFSET + getattr(errno, name)
        for name in names
        if hasattr(errno, name)
    }


def errno_interrupted(error: int | OSError | None) -> bool:
    """Return True if the error means the call was interrupted."""
    code = _code(error)
    return code == errno.EINTR or code in _winapi_codes("WSAEINTR")


def errno_would_block(error: int | OSError | None) -> bool:
    """Return True if the error means the operation would block."""
    code = _code(error)
    return code in (errno.EWOULDBLOCK, errno.EAGAIN) or code in _winapi_codes(
        "WSAEWOULDBLOCK"
    )


def errno_connection_reset(error: int | OSError | None) -> bool:
    """Return True if the error means the connection was reset by the peer."""
    code = _code(error)
    return code == errno.ECONNRESET or code in _winapi_codes("WSAECONNRESET")


_ERRNO_NAMES = (
    "EPERM", "ENOENT", "ESRCH", "EINTR", "EIO", "ENXIO", "E2BIG", "ENOEXEC",
    "EBADF", "ECHILD", "EAGAIN", "ENOMEM", "EACCES", "EFAULT", "ENOTBLK",
    "EBUSY", "EEXIST", "EXDEV", "ENODEV", "ENOTDIR", "EISDIR", "EINVAL",
    "ENFILE", "EMFILE", "ENOTTY", "ETXTBSY", "EFBIG", "ENOSPC", "ESPIPE",
    "EROFS", "EMLINK", "EPIPE", "EDOM", "ERANGE", "EDEADLK", "ENAMETOOLONG",
    "ENOLCK", "ENOSYS", "ENOTEMPTY",
)

_POSIX_ERRNO_NAMES = (
    "ENOTSUP", "ELOOP", "EWOULDBLOCK", "ENOMSG", "EIDRM", "ENOSTR", "ENODATA",
    "ETIME", "ENOSR", "EREMOTE", "ENOLINK", "EPROTO", "EMULTIHOP", "EBADMSG",
    "EOVERFLOW", "EUSERS", "ENOTSOCK", "EDESTADDRREQ", "EMSGSIZE",
    "EPROTOTYPE", "ENOPROTOOPT", "EPROTONOSUPPORT", "ESOCKTNOSUPPORT",
    "EOPNOTSUPP", "EPFNOSUPPORT", "EAFNOSUPPORT", "EADDRINUSE",
    "EADDRNOTAVAIL", "ENETDOWN", "ENETUNREACH", "ENETRESET", "ECONNABORTED",
    "ECONNRESET", "ENOBUFS", "EISCONN", "ENOTCONN", "ESHUTDOWN",
    "ETOOMANYREFS", "ETIMEDOUT", "ECONNREFUSED", "EHOSTDOWN", "EHOSTUNREACH",
    "EALREADY", "EINPROGRESS", "ESTALE", "EDQUOT", "ECANCELED", "EOWNERDEAD",
    "ENOTRECOVERABLE",
)

_LINUX_ERRNO_NAMES = (
    "ECHRNG", "EL2NSYNC", "EL3HLT", "EL3RST", "ELNRNG", "EUNATCH", "ENOCSI",
    "EL2HLT", "EBADE", "EBADR", "EXFULL", "ENOANO", "EBADRQC", "EBADSLT",
    "EDEADLOCK", "EBFONT", "ENONET", "ENOPKG", "EADV", "ESRMNT", "ECOMM",
    "EDOTDOT", "ENOTUNIQ", "EBADFD", "EREMCHG", "ELIBACC", "ELIBBAD",
    "ELIBSCN", "ELIBMAX", "ELIBEXEC", "EILSEQ", "ERESTART", "ESTRPIPE",
    "EUCLEAN", "ENOTNAM", "ENAVAIL", "EISNAM", "EREMOTEIO", "ENOMEDIUM",
    "EMEDIUMTYPE", "ENOKEY", "EKEYEXPIRED", "EKEYREVOKED", "EKEYREJECTED",
    "ERFKILL",
)

_ADDRINFO_NAMES = (
    "EAI_AGAIN", "EAI_BADFLAGS", "EAI_FAIL", "EAI_FAMILY", "EAI_MEMORY",
    "EAI_NONAME", "EAI_OVERFLOW", "EAI_SYSTEM", "EAI_ADDRFAMILY",
)


def _build_name_table() -> dict[int, str]:
    table: dict[int, str] = {}
    windows = sys.platform == "win32"
    groups = [_ERRNO_NAMES]
    if not windows:
        groups.append(_POSIX_ERRNO_NAMES)
        if sys.platform != "darwin":
            groups.append(_LINUX_ERRNO_NAMES)
    for group in groups:
        for name in group:
            if hasattr(errno, name):
                # the first name registered for a code wins, as with
                # aliases like EWOULDBLOCK == EAGAIN
                table.setdefault(getattr(errno, name), name)

    eai_again = getattr(socket, "EAI_AGAIN", None)
    if not windows and eai_again is not None:
        negative = eai_again < 0
        for name in _ADDRINFO_NAMES:
            value = getattr(socket, name, None)
            if value is None and name == "EAI_ADDRFAMILY":
                value = -9 if negative else 9
            if value is None:
                continue
            key = ERRNO_ADDRINFO_OFFSET - value if negative else ERRNO_ADDRINFO_OFFSET + value
            table.setdefault(key, name)
    return table


_NAME_TABLE = _build_name_table()


def get_errno_name(error_code: int | OSError | None) -> str:
    """Return the symbolic name of an error code, or '<unknown>'."""
    return _NAME_TABLE.get(_code(error_code), "<unknown>")


def grow_allocation(size: int) -> int:
    """Round size up to the next multiple of 16; 0 gives 16."""
    n = int(size) - 1
    quotient = -((-n) // 16) if n < 0 else n // 16  # truncate toward zero
    return (quotient + 1) * 16


def string_ends_with(string: str, suffix: str, case_sensitive: bool = True) -> bool:
    """Return True if string ends with suffix, optionally ignoring case."""
    if len(suffix) > len(string):
        return False
    tail = string[len(string) - len(suffix):]
    if case_sensitive:
        return tail == suffix
    return tail.lower() == suffix.lower()


def strcasestr(haystack: str, needle: str) -> int | None:
    """Return the index of the first case-insensitive match, or None."""
    match = re.search(re.escape(needle), haystack, re.IGNORECASE)
    return match.start() if match else None


def _digit_value(char: str) -> int:
    lowered = char.lower()
    if len(lowered) == 1 and lowered in _DIGITS:
        return _DIGITS.index(lowered)
    return 99


def _strtol(string: str, base: int) -> tuple[int, int]:
    if base != 0 and not 2 <= base <= 36:
        raise ValueError(f"invalid base {base}")

    pos = 0
    length = len(string)
    while pos < length and string[pos] in _WHITESPACE:
        pos += 1

    negative = False
    if pos < length and string[pos] in "+-":
        negative = string[pos] == "-"
        pos += 1

    if (
        base in (0, 16)
        and string[pos:pos + 2].lower() == "0x"
        and pos + 2 < length
        and _digit_value(string[pos + 2]) < 16
    ):
        pos += 2
        base = 16
    elif base == 0:
        base = 8 if string[pos:pos + 1] == "0" else 10

    start = pos
    value = 0
    while pos < length and _digit_value(string[pos]) < base:
        value = value * base + _digit_value(string[pos])
        pos += 1

    if pos == start:
        raise ValueError(f"no digits in {string!r}")

    value = -value if negative else value
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise OverflowError(f"{value} is out of the 32-bit integer range")
    return value, pos


def parse_int(string: str, base: int = 10) -> int:
    """Parse a whole string as a 32-bit integer in strtol style."""
    value, end = _strtol(string, base)
    if end != len(string):
        raise ValueError(f"trailing characters in {string!r}")
    return value


def parse_int_prefix(string: str, base: int = 10) -> tuple[int, str]:
    """Parse a leading 32-bit integer and return it with the unparsed rest."""
    value, end = _strtol(string, base)
    return value, string[end:]


def uint16_to_le(native: int) -> int:
    """Convert a host-order uint16 to the value whose memory layout is little endian."""
    return int.from_bytes((native & 0xFFFF).to_bytes(2, "little"), sys.byteorder)


def uint32_to_le(native: int) -> int:
    """Convert a host-order uint32 to the value whose memory layout is little endian."""
    return int.from_bytes((native & 0xFFFFFFFF).to_bytes(4, "little"), sys.byteorder)


def uint32_from_le(value: int) -> int:
    """Convert a uint32 stored in little endian layout to host order."""
    return int.from_bytes((value & 0xFFFFFFFF).to_bytes(4, sys.byteorder), "little")


def microsleep(duration: int) -> None:
    """Sleep for the given number of microseconds."""
    time.sleep(max(0, duration) / 1_000_000)


def millisleep(duration: int) -> None:
    """Sleep for the given number of milliseconds."""
    microsleep(duration * 1000)


def microtime() -> int:
    """Return a monotonic timestamp in microseconds."""
    return time.monotonic_ns() // 1000


def millitime() -> int:
    """Return a monotonic timestamp in milliseconds."""
    return microtime() // 1000


def uid_from_sid(data: bytes) -> int:
    """Derive the RED Brick UID from the 16 bytes of the chip SID."""
    if len(data) != 16:
        raise ValueError(f"SID must be 16 bytes, got {len(data)}")
    sid = [int.from_bytes(data[i:i + 2], "big") for i in range(0, 16, 2)]
    uid = ((sid[1] & 0xFF) << 24) | ((sid[6] & 0xFF) << 16) | sid[7]
    # clear bit 31 to avoid Brick UIDs, set bit 30 to avoid Bricklet UIDs
    return (uid & ~(1 << 31)) | (1 << 30)


def red_brick_uid(path: str | os.PathLike[str] = DEFAULT_SID_PATH) -> int:
    """Read the chip SID from path and return the RED Brick UID."""
    with open(path, "rb") as fp:
        data = fp.read(16)
    return uid_from_sid(data)


def robust_read(fd: int, length: int) -> bytes:
    """Read up to length bytes from fd, retrying on interruption."""
    while True:
        try:
            return os.read(fd, length)
        except InterruptedError:
            continue


def robust_write(fd: int, data: bytes) -> int:
    """Write data to fd, retrying on interruption; return bytes written."""
    while True:
        try:
            return os.write(fd, data)
        except InterruptedError:
            continue


def robust_close(fd: int) -> None:
    """Close fd; negative descriptors are ignored."""
    if fd < 0:
        return
    os.close(fd)