"""Plain TCP sockets for a non-blocking event loop.

Sockets are switched to non-blocking mode with TCP_NODELAY enabled once they
are bound, connected or accepted. Errors are raised as OSError; failures to
resolve or format addresses carry an errno offset by ERRNO_ADDRINFO_OFFSET,
so ``get_errno_name`` reports the EAI_* name.
"""

from __future__ import annotations

import errno
import logging
import socket
import sys
from typing import Any

from .utils import ERRNO_ADDRINFO_OFFSET, get_errno_name

_log = logging.getLogger(__name__)

_SERVER_BACKLOG = 10

AddrInfo = tuple[int, int, int, str, Any]


def _addrinfo_error(error: socket.gaierror) -> OSError:
    code = error.errno if error.errno is not None else 0
    eai_again = getattr(socket, "EAI_AGAIN", 0)
    if eai_again < 0:
        mapped = ERRNO_ADDRINFO_OFFSET - code
    else:
        mapped = ERRNO_ADDRINFO_OFFSET + code
    return OSError(mapped, error.strerror or str(error))


def address_family_name(family: int, dual_stack: bool = False) -> str:
    """Return a display name for an address family."""
    if family == socket.AF_INET:
        return "IPv4"
    if family == socket.AF_INET6:
        return "IPv6 dual-stack" if dual_stack else "IPv6"
    return "<unknown>"


def hostname_to_address(hostname: str | None, port: int) -> list[AddrInfo]:
    """Resolve hostname and port into passive stream socket addresses."""
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port must be in [0, 65535], got {port}")
    try:
        return socket.getaddrinfo(
            hostname, str(port), socket.AF_UNSPEC, socket.SOCK_STREAM, 0,
            socket.AI_PASSIVE,
        )
    except socket.gaierror as error:
        raise _addrinfo_error(error) from error


def address_to_hostname(address: tuple[Any, ...]) -> tuple[str, str]:
    """Format a socket address numerically as (host, port)."""
    try:
        return socket.getnameinfo(
            address, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
        )
    except socket.gaierror as error:
        raise _addrinfo_error(error) from error


class Socket:
    """A stream socket that is created closed and opened with open()."""

    def __init__(self) -> None:
        self.handle: socket.socket | None = None
        self.family: int = socket.AF_UNSPEC

    def _require_handle(self) -> socket.socket:
        if self.handle is None:
            raise OSError(errno.EBADF, "socket is not open")
        return self.handle

    def _prepare(self) -> None:
        handle = self._require_handle()
        if self.family in (socket.AF_INET, socket.AF_INET6):
            handle.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        handle.setblocking(False)

    def open(self, family: int, type_: int, protocol: int = 0) -> None:
        """Create the underlying socket."""
        self.handle = socket.socket(family, type_, protocol)
        self.family = family

    def bind(self, address: Any) -> None:
        """Bind to address, then enable no-delay and non-blocking mode."""
        self._require_handle().bind(address)
        self._prepare()

    def listen(self, backlog: int) -> None:
        """Start listening for connections."""
        self._require_handle().listen(backlog)

    def accept(self) -> tuple[Socket, Any]:
        """Accept a pending connection and return (socket, peer address)."""
        connection, address = self._require_handle().accept()
        accepted = type(self)()
        accepted.handle = connection
        accepted.family = connection.family
        try:
            accepted._prepare()
        except OSError:
            connection.close()
            raise
        return accepted, address

    def connect(self, address: Any) -> None:
        """Connect to address, then enable no-delay and non-blocking mode."""
        self._require_handle().connect(address)
        self._prepare()

    def receive(self, length: int) -> bytes:
        """Receive up to length bytes; b'' means the peer closed."""
        return self._require_handle().recv(length)

    def send(self, data: bytes) -> int:
        """Send data and return the number of bytes sent."""
        flags = getattr(socket, "MSG_NOSIGNAL", 0)
        return self._require_handle().send(data, flags)

    def set_address_reuse(self, address_reuse: bool) -> None:
        """Enable or disable SO_REUSEADDR."""
        self._require_handle().setsockopt(
            socket.SOL_SOCKET, socket.SO_REUSEADDR, 1 if address_reuse else 0
        )

    def set_dual_stack(self, dual_stack: bool) -> None:
        """Allow or forbid IPv4 connections on an IPv6 socket."""
        self._require_handle().setsockopt(
            socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 0 if dual_stack else 1
        )

    def fileno(self) -> int:
        """Return the descriptor, or -1 if the socket is not open."""
        if self.handle is None:
            return -1
        return self.handle.fileno()

    def close(self) -> None:
        """Shut down and close the socket if it is open."""
        if self.handle is None:
            return
        try:
            self.handle.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.handle.close()
        self.handle = None

    def __enter__(self) -> Socket:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def open_server(address: str | None, port: int, dual_stack: bool = False) -> list[Socket]:
    """Open a listening socket for every address address resolves to.

    Failures are logged and the affected address is skipped; the sockets
    that could be opened are returned.
    """
    _log.debug("Opening server socket(s) for address '%s' on port %u", address, port)

    try:
        resolved = hostname_to_address(address, port)
    except OSError as error:
        _log.error(
            "Could not resolve address '%s' (port: %u): %s (%d)",
            address, port, get_errno_name(error), error.errno,
        )
        return []

    sockets: list[Socket] = []

    for family, type_, protocol, _canonname, sockaddr in resolved:
        try:
            hostname, _ = address_to_hostname(sockaddr)
        except OSError as error:
            _log.warning(
                "Could not reformat address '%s': %s (%d)",
                address, get_errno_name(error), error.errno,
            )
            hostname = "<unknown>"

        server = Socket()

        try:
            server.open(family, type_, protocol)
        except OSError as error:
            _log.error(
                "Could not open %s server socket: %s (%d)",
                address_family_name(family, False), get_errno_name(error), error.errno,
            )
            continue

        try:
            if family == socket.AF_INET6:
                try:
                    server.set_dual_stack(dual_stack)
                except OSError as error:
                    _log.error(
                        "Could not %s dual-stack mode for IPv6 server socket: %s (%d)",
                        "enable" if dual_stack else "disable",
                        get_errno_name(error), error.errno,
                    )
                    raise

            # on Windows SO_REUSEADDR allows rebinding sockets in any state
            if sys.platform != "win32":
                try:
                    server.set_address_reuse(True)
                except OSError as error:
                    _log.error(
                        "Could not enable address-reuse mode for server socket: %s (%d)",
                        get_errno_name(error), error.errno,
                    )
                    raise

            try:
                server.bind(sockaddr)
            except OSError as error:
                _log.error(
                    "Could not bind %s server socket to '%s' resolved from '%s' "
                    "on port %u: %s (%d)",
                    address_family_name(family, dual_stack), hostname, address, port,
                    get_errno_name(error), error.errno,
                )
                raise

            try:
                server.listen(_SERVER_BACKLOG)
            except OSError as error:
                _log.error(
                    "Could not listen to %s server socket bound to '%s' resolved "
                    "from '%s' on port %u: %s (%d)",
                    address_family_name(family, dual_stack), hostname, address, port,
                    get_errno_name(error), error.errno,
                )
                raise
        except OSError:
            server.close()
            continue

        _log.debug(
            "Started listening to '%s' (%s) resolved from '%s' on port %u",
            hostname, address_family_name(family, dual_stack), address, port,
        )
        sockets.append(server)

    return sockets