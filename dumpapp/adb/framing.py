from __future__ import annotations

import struct
from typing import BinaryIO

_FORMATS: dict[tuple[int, bool], str] = {
    (1, False): ">B",
    (1, True): ">b",
    (2, False): ">H",
    (2, True): ">h",
    (4, False): ">I",
    (4, True): ">i",
}


def _format_for(width: int, signed: bool) -> str:
    try:
        return _FORMATS[(width, signed)]
    except KeyError:
        msg = f"unsupported width {width}"
        raise ValueError(msg) from None


def pack_big_endian(width: int, value: int, *, signed: bool = False) -> bytes:
    """Encode ``value`` as a ``width`` byte big-endian integer (width 1, 2 or 4)."""
    return struct.pack(_format_for(width, signed), value)


def unpack_big_endian(width: int, data: bytes, *, signed: bool = False) -> int:
    """Decode a ``width`` byte big-endian integer; inverse of :func:`pack_big_endian`."""
    fmt = _format_for(width, signed)
    if len(data) != width:
        msg = "invalid integer size"
        raise ValueError(msg)
    return int(struct.unpack(fmt, data)[0])


def pack_int32(value: int) -> bytes:
    """Pack a signed 32-bit big-endian integer, the dumpapp length field."""
    return pack_big_endian(4, value, signed=True)


def unpack_int32(data: bytes) -> int:
    return unpack_big_endian(4, data, signed=True)


def read_exact(stream: BinaryIO, n: int) -> bytes:
    """Read up to n bytes from a buffered stream, stopping early only at EOF.

    The result is shorter than ``n`` when the stream ended first; callers
    decide whether that is an error.
    """
    chunks = bytearray()
    while len(chunks) < n:
        chunk = stream.read(n - len(chunks))
        if not chunk:
            break
        chunks.extend(chunk)
    return bytes(chunks)
