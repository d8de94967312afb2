"""Locate the device and the stetho-enabled process to talk to.

Stetho-enabled apps listen on an abstract unix socket named
``stetho_<process>_devtools_remote``. When the caller names the process the
socket name is derived directly. Otherwise the device's ``/proc/net/unix``
table is scanned for listening sockets following that convention, and
discovery succeeds only when exactly one is found.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dumpapp.adb.connection import AdbConnection
from dumpapp.adb.smart_socket import select_service
from dumpapp.config import DEFAULT_ADB_PORT
from dumpapp.config import DEFAULT_HOST
from dumpapp.config import get_adb_server_port
from dumpapp.errors import DiscoveryAmbiguityError
from dumpapp.errors import DiscoveryEmptyError
from dumpapp.errors import HumanReadableError
from dumpapp.errors import ProtocolViolationError
from dumpapp.errors import ServiceSelectionError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from dumpapp.adb.connection import Connector

logger = logging.getLogger(__name__)

SOCKET_TABLE_SERVICE = "shell:cat /proc/net/unix"
ABSTRACT_SOCKET_PREFIX = "@stetho_"
# /proc/net/unix columns: Num RefCount Protocol Flags Type St Inode Path
LISTENING_FLAGS = 10000
UNCONNECTED_STATE = 1
MIN_FIELDS = 8

_SOCKET_NAME_RE = re.compile(r"^@?stetho_(.+)_devtools_remote$")


@dataclass(frozen=True)
class SocketTableRow:
    """One listening stetho socket from the device's unix socket table."""

    flags: int
    state: int
    path: str

    @property
    def socket_name(self) -> str:
        """The bindable name, without the ``@`` abstract namespace marker."""
        return self.path[1:]

    @property
    def process(self) -> str:
        return extract_process(self.socket_name)


def format_process_as_socket_name(process: str) -> str:
    return f"stetho_{process}_devtools_remote"


def extract_process(socket_name: str) -> str:
    """Return the process name embedded in a stetho socket name."""
    match = _SOCKET_NAME_RE.match(socket_name)
    if match is None:
        raise ProtocolViolationError(f"Unexpected Stetho socket formatting: {socket_name}")
    return match.group(1)


def parse_socket_table_line(line: str) -> SocketTableRow | None:
    """Parse one ``/proc/net/unix`` line, or return None if it is not a stetho listener."""
    row = line.split()
    if len(row) < MIN_FIELDS:
        return None
    path = row[7]
    if not path.startswith(ABSTRACT_SOCKET_PREFIX):
        return None
    # Filter out entries that are not server sockets
    try:
        flags = int(row[3])
        state = int(row[5])
    except ValueError:
        return None
    if flags != LISTENING_FLAGS or state != UNCONNECTED_STATE:
        return None
    return SocketTableRow(flags=flags, state=state, path=path)


def parse_socket_table(lines: Iterable[str]) -> list[SocketTableRow]:
    rows = []
    for line in lines:
        row = parse_socket_table_line(line)
        if row is not None:
            rows.append(row)
    return rows


def list_listening_abstract_sockets(connection: AdbConnection) -> list[SocketTableRow]:
    """Read the device's socket table over ``connection`` and return stetho listeners.

    ``connection`` must already be bound to a device transport; it is consumed
    by the shell service and cannot be reused afterwards.
    """
    select_service(connection, SOCKET_TABLE_SERVICE)
    lines = (raw.decode("utf-8", errors="replace") for raw in connection.iter_lines())
    return parse_socket_table(lines)


def connect_to_device(
    device: str | None = None,
    port: int = DEFAULT_ADB_PORT,
    *,
    host: str = DEFAULT_HOST,
    connector: Connector | None = None,
) -> AdbConnection:
    """Open a connection to the daemon and bind it to ``device`` (or any device)."""
    adb = AdbConnection(host, port, connector=connector)
    adb.connect()
    service = "host:transport-any" if device is None else f"host:transport:{device}"
    try:
        select_service(adb, service)
    except ServiceSelectionError as e:
        adb.close()
        target = device if device is not None else "any"
        raise HumanReadableError(f"Failure to target device {target}: {e.reason}", cause=e) from e
    except BaseException:
        adb.close()
        raise
    return adb


def find_only_stetho_socket(
    device: str | None = None,
    port: int = DEFAULT_ADB_PORT,
    *,
    host: str = DEFAULT_HOST,
    connector: Connector | None = None,
) -> str:
    """Discover the one stetho-enabled process on the device and return its socket name."""
    with connect_to_device(device, port, host=host, connector=connector) as adb:
        try:
            rows = list_listening_abstract_sockets(adb)
        except ServiceSelectionError as e:
            target = device if device is not None else "any"
            raise HumanReadableError(
                f"Failure to list sockets on device {target}: {e.reason}", cause=e
            ) from e
        processes = [row.process for row in rows]
        logger.debug("Discovered stetho processes: %s", processes)
        if len(rows) > 1:
            raise DiscoveryAmbiguityError(processes)
        if not rows:
            raise DiscoveryEmptyError()
        return rows[0].socket_name


def resolve_target_socket_name(
    device: str | None = None,
    process: str | None = None,
    port: int = DEFAULT_ADB_PORT,
    *,
    host: str = DEFAULT_HOST,
    connector: Connector | None = None,
) -> str:
    if process is not None:
        return format_process_as_socket_name(process)
    return find_only_stetho_socket(device, port, host=host, connector=connector)


def stetho_open(
    device: str | None = None,
    process: str | None = None,
    port: int | None = None,
    *,
    host: str = DEFAULT_HOST,
    connector: Connector | None = None,
) -> AdbConnection:
    """Return a connection forwarded to the target process's stetho socket.

    The socket name is resolved before the session connection is opened, so
    a failed discovery never leaves a second connection behind.
    """
    if port is None:
        port = get_adb_server_port()
    socket_name = resolve_target_socket_name(device, process, port, host=host, connector=connector)
    adb = connect_to_device(device, port, host=host, connector=connector)
    try:
        select_service(adb, f"localabstract:{socket_name}")
    except ServiceSelectionError as e:
        adb.close()
        raise HumanReadableError(
            f"Failure to target process {socket_name}: {e.reason} (is it running?)", cause=e
        ) from e
    except BaseException:
        adb.close()
        raise
    logger.info("Connected to %s", socket_name)
    return adb
