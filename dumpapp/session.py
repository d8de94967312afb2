"""Dumpapp session: invoke a command inside a stetho-enabled process.

After the hello and the command frame, the remote side drives the session.
Every frame it sends is a one byte code followed by a signed 32-bit
big-endian integer:

    ``1`` <len> <bytes>   write to stdout
    ``2`` <len> <bytes>   write to stderr
    ``_`` <len>           request up to <len> bytes of stdin
    ``x`` <code>          the command finished with exit status <code>

Stdin requests are answered with ``-`` <count> <bytes>, or ``-`` ``-1`` once
local input is exhausted.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING
from typing import BinaryIO

from dumpapp.adb.framing import pack_big_endian
from dumpapp.adb.framing import pack_int32
from dumpapp.adb.framing import unpack_int32
from dumpapp.errors import ProtocolViolationError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dumpapp.adb.connection import AdbConnection

logger = logging.getLogger(__name__)

HELLO_MAGIC = b"DUMP"
PROTOCOL_VERSION = 1
ENTER_FRAME = b"!"
STDIN_REPLY = b"-"
END_OF_INPUT = -1
MAX_ARGUMENT_LENGTH = 0xFFFF


class FrameCode(bytes, Enum):
    STDOUT = b"1"
    STDERR = b"2"
    STDIN_REQUEST = b"_"
    EXIT = b"x"


@dataclass(frozen=True)
class Frame:
    """Header of one frame from the remote process."""

    code: bytes
    value: int

    @property
    def length(self) -> int:
        return abs(self.value)


def encode_hello() -> bytes:
    return HELLO_MAGIC + pack_int32(PROTOCOL_VERSION)


def encode_command(args: Sequence[str]) -> bytes:
    """Encode the ``!`` frame carrying the command line for the remote process."""
    frame = bytearray(ENTER_FRAME)
    frame += pack_int32(len(args))
    for arg in args:
        encoded = arg.encode("utf-8")
        if len(encoded) > MAX_ARGUMENT_LENGTH:
            msg = f"argument too long: {len(encoded)} bytes"
            raise ValueError(msg)
        frame += pack_big_endian(2, len(encoded))
        frame += encoded
    return bytes(frame)


def encode_stdin_reply(data: bytes) -> bytes:
    if not data:
        return STDIN_REPLY + pack_int32(END_OF_INPUT)
    return STDIN_REPLY + pack_int32(len(data)) + data


class DumpappSession:
    """Relays one dumpapp command between a connection and local stdio."""

    def __init__(
        self,
        connection: AdbConnection,
        *,
        stdin: BinaryIO | None = None,
        stdout: BinaryIO | None = None,
        stderr: BinaryIO | None = None,
    ) -> None:
        self.connection = connection
        self.stdin = stdin if stdin is not None else sys.stdin.buffer
        self.stdout = stdout if stdout is not None else sys.stdout.buffer
        self.stderr = stderr if stderr is not None else sys.stderr.buffer

    def hello(self) -> None:
        self.connection.write(encode_hello())

    def send_command(self, args: Sequence[str]) -> None:
        logger.debug("Sending command %s", list(args))
        self.connection.write(encode_command(args))

    def read_frame(self) -> Frame:
        code = self.connection.read_exact(1, "code")
        value = unpack_int32(self.connection.read_exact(4, "int4"))
        return Frame(code, value)

    def _relay_output(self, stream: BinaryIO, length: int, tag: str) -> None:
        if length > 0:
            stream.write(self.connection.read_exact(length, tag))
            stream.flush()

    def _answer_stdin_request(self, length: int) -> None:
        if length > 0:
            # A single read: hand over whatever input is available right now.
            data = self.stdin.read1(length)  # type: ignore[attr-defined]
            self.connection.write(encode_stdin_reply(data))

    def relay(self) -> int:
        """Process frames until the remote command exits; return its exit status."""
        while True:
            frame = self.read_frame()
            length = frame.length
            if frame.code == FrameCode.STDOUT:
                self._relay_output(self.stdout, length, "stdout blob")
            elif frame.code == FrameCode.STDERR:
                self._relay_output(self.stderr, length, "stderr blob")
            elif frame.code == FrameCode.STDIN_REQUEST:
                self._answer_stdin_request(length)
            elif frame.code == FrameCode.EXIT:
                logger.debug("Remote command exited with %d", length)
                return length
            else:
                raise ProtocolViolationError(
                    f"Unexpected header: {frame.code!r}", received=frame.code
                )

    def run(self, args: Sequence[str]) -> int:
        """Say hello, send ``args`` and relay until the command exits."""
        self.hello()
        self.send_command(args)
        return self.relay()
