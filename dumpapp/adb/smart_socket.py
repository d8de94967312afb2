"""adb "smart socket" service selection.

A client asks the daemon to repurpose its connection by sending the length
of a service string as four lowercase hex digits followed by the string
itself. The daemon answers ``OKAY`` or ``FAIL`` plus a length-prefixed
reason. After ``OKAY`` the connection carries whatever the service
provides (a device transport, a shell command's output, a forwarded local
socket).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dumpapp.adb.connection import TRANSPORT_PREFIX
from dumpapp.errors import ConnectionStateError
from dumpapp.errors import ProtocolViolationError
from dumpapp.errors import ServiceSelectionError

if TYPE_CHECKING:
    from dumpapp.adb.connection import AdbConnection

logger = logging.getLogger(__name__)

STATUS_OKAY = b"OKAY"
STATUS_FAIL = b"FAIL"
STATUS_SIZE = 4
LENGTH_SIZE = 4
MAX_SERVICE_LENGTH = 0xFFFF


def encode_service_request(service: str) -> bytes:
    """Return the wire form of a service request: ``%04x`` length + ASCII service."""
    encoded = service.encode("ascii")
    if len(encoded) > MAX_SERVICE_LENGTH:
        msg = f"service string too long: {len(encoded)} bytes"
        raise ValueError(msg)
    return b"%04x" % len(encoded) + encoded


def read_fail_reason(connection: AdbConnection) -> str:
    """Read the length-prefixed reason that follows a ``FAIL`` status."""
    size = connection.read_exact(LENGTH_SIZE, "fail reason")
    # The length is exactly four ASCII decimal digits.
    if not size.isdigit():
        raise ProtocolViolationError(f"Unparseable fail reason length {size!r}", received=size)
    reason_len = int(size, 10)
    return connection.read_exact(reason_len, "fail reason").decode("ascii", errors="replace")


def select_service(connection: AdbConnection, service: str) -> None:
    """Ask the daemon to switch ``connection`` over to ``service``.

    Raises:
        ServiceSelectionError: the daemon answered ``FAIL``.
        ProtocolViolationError: the daemon answered something else entirely.
    """
    if connection.is_streaming:
        raise ConnectionStateError(f"select {service!r} on", "streaming")
    # A connection is bound to at most one device transport.
    if service.startswith(TRANSPORT_PREFIX) and connection.is_bound:
        raise ConnectionStateError(f"select {service!r} on", "bound")
    logger.debug("Selecting service %r", service)
    connection.write(encode_service_request(service))
    status = connection.read_exact(STATUS_SIZE, "status")
    if status == STATUS_OKAY:
        connection.services.append(service)
        return
    if status == STATUS_FAIL:
        reason = read_fail_reason(connection)
        logger.debug("Service %r rejected: %s", service, reason)
        raise ServiceSelectionError(reason, service=service)
    raise ProtocolViolationError(f"Unrecognized status={status!r}", received=status)
