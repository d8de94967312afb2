"""TCP connection to the local adb daemon.

The connection knows nothing about the protocols spoken over it. It only
guarantees that reads are exact, so a short read can never silently
truncate a frame, and that its lifecycle follows a strict state machine::

    UNCONNECTED --connect()--> CONNECTED --close()--> CLOSED

``close()`` is legal (and a no-op when repeated) from any state.
"""

from __future__ import annotations

import contextlib
import logging
import socket
from enum import Enum
from typing import TYPE_CHECKING
from typing import BinaryIO
from typing import Protocol

from dumpapp.adb.framing import read_exact
from dumpapp.config import DEFAULT_ADB_PORT
from dumpapp.config import DEFAULT_HOST
from dumpapp.errors import AdbConnectionError
from dumpapp.errors import ConnectionStateError
from dumpapp.errors import TruncatedStreamError

if TYPE_CHECKING:
    import types
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

TRANSPORT_PREFIX = "host:transport"


class ConnectionState(Enum):
    UNCONNECTED = "unconnected"
    CONNECTED = "connected"
    CLOSED = "closed"


class Connector(Protocol):
    def connect_tcp(self, host: str, port: int) -> socket.socket: ...


class SocketConnector:
    """Opens TCP sockets; swapped out in tests for in-memory socket pairs."""

    def connect_tcp(self, host: str, port: int) -> socket.socket:
        return socket.create_connection((host, port))


# Default instance
default_connector = SocketConnector()


class AdbConnection:
    """A bidirectional byte stream to the adb daemon."""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_ADB_PORT,
        *,
        connector: Connector | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self._connector = connector or default_connector
        self._state = ConnectionState.UNCONNECTED
        self._sock: socket.socket | None = None
        self._rfile: BinaryIO | None = None
        # Services selected so far, in order. Once a non-host service is
        # selected the connection is a raw stream to that service.
        self.services: list[str] = []

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def is_streaming(self) -> bool:
        """True once the connection was handed over to a device-side service."""
        return any(not service.startswith("host:") for service in self.services)

    @property
    def is_bound(self) -> bool:
        """True once a device transport was selected on this connection."""
        return any(service.startswith(TRANSPORT_PREFIX) for service in self.services)

    def _require(self, expected: ConnectionState, operation: str) -> None:
        if self._state is not expected:
            raise ConnectionStateError(operation, self._state.value)

    def connect(self) -> None:
        """Open the TCP connection to ``host:port``."""
        self._require(ConnectionState.UNCONNECTED, "connect")
        logger.debug("Connecting to adb daemon at %s:%s", self.host, self.port)
        try:
            sock = self._connector.connect_tcp(self.host, self.port)
        except OSError as exc:
            raise AdbConnectionError(
                f"Unable to connect to adb daemon at {self.host}:{self.port}",
                host=self.host,
                port=self.port,
                operation="connect",
                cause=exc,
            ) from exc
        self._sock = sock
        self._rfile = sock.makefile("rb")
        self._state = ConnectionState.CONNECTED

    def read_exact(self, n: int, tag: str) -> bytes:
        """Read exactly ``n`` bytes; ``tag`` names what is being read for errors."""
        self._require(ConnectionState.CONNECTED, "read from")
        assert self._rfile is not None  # mypy guard
        try:
            data = read_exact(self._rfile, n)
        except OSError as exc:
            raise AdbConnectionError(
                f"Error while reading {tag}",
                host=self.host,
                port=self.port,
                operation="read",
                cause=exc,
            ) from exc
        if len(data) != n:
            raise TruncatedStreamError(expected=n, received=len(data), context=tag)
        return data

    def write(self, data: bytes) -> None:
        """Write all of ``data`` to the daemon."""
        self._require(ConnectionState.CONNECTED, "write to")
        assert self._sock is not None  # mypy guard
        try:
            self._sock.sendall(data)
        except OSError as exc:
            raise AdbConnectionError(
                "Error while writing to adb daemon",
                host=self.host,
                port=self.port,
                operation="write",
                cause=exc,
            ) from exc

    def iter_lines(self) -> Iterator[bytes]:
        """Yield raw lines until the peer closes its end of the stream."""
        self._require(ConnectionState.CONNECTED, "read from")
        assert self._rfile is not None  # mypy guard
        try:
            yield from self._rfile
        except OSError as exc:
            raise AdbConnectionError(
                "Error while reading lines",
                host=self.host,
                port=self.port,
                operation="read",
                cause=exc,
            ) from exc

    def close(self) -> None:
        """Release the socket. Safe to call more than once."""
        if self._state is ConnectionState.CLOSED:
            return
        if self._rfile is not None:
            with contextlib.suppress(OSError):
                self._rfile.close()
        if self._sock is not None:
            with contextlib.suppress(OSError):
                self._sock.close()
        self._rfile = None
        self._sock = None
        self._state = ConnectionState.CLOSED
        logger.debug("Closed adb connection to %s:%s", self.host, self.port)

    def __enter__(self) -> AdbConnection:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"AdbConnection({self.host!r}, {self.port}, state={self._state.value})"
