from __future__ import annotations

"""
Length-prefixed binary framing shared by both protocol dialects.

Batch frame (getMulti responses)
--------------------------------
    u32le length || length bytes             repeated, no padding

Stream record (scan / query responses)
--------------------------------------
    u32le length || u64le offset || length bytes     repeated until EOF

A batch buffer must end exactly on a frame boundary. A record stream may only
end cleanly at a header boundary; a partial header or a short payload is
reported as DecodeError and never handed to the caller as a short record.
"""

import struct
from typing import Iterable, Iterator, List, Optional, Tuple

from ..errors import DecodeError, ValidationError
from ..types import Record
from ..utils.bytes import BytesLike, U32_MAX, U64_MAX

_LEN = struct.Struct("<I")
_HDR = struct.Struct("<IQ")

FRAME_HEADER_SIZE = _LEN.size  # 4
RECORD_HEADER_SIZE = _HDR.size  # 12


def decode_offset(value: object, *, endpoint: Optional[str] = None) -> int:
    """Validate an offset taken from a decoded reply. 0 is a valid offset."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"offset must be an integer, got {value!r}", endpoint=endpoint)
    if not 0 <= value <= U64_MAX:
        raise DecodeError(f"offset {value} out of u64 range", endpoint=endpoint)
    return value


# --- Batch frames ------------------------------------------------------------


def encode_frames(items: Iterable[BytesLike]) -> bytes:
    out = bytearray()
    for item in items:
        b = bytes(item)
        if len(b) > U32_MAX:
            raise ValidationError(f"frame of {len(b)} bytes exceeds u32 length", field="data")
        out += _LEN.pack(len(b))
        out += b
    return bytes(out)


def decode_frames(
    buf: BytesLike, *, expected: Optional[int] = None, endpoint: Optional[str] = None
) -> List[bytes]:
    """
    Split a batch buffer into its frames, in order.

    If `expected` is given the frame count must match it exactly; a server
    returning fewer frames than requested offsets is a protocol error, not a
    shorter result.
    """
    view = memoryview(buf)
    total = len(view)
    pos = 0
    out: List[bytes] = []
    while pos < total:
        if total - pos < FRAME_HEADER_SIZE:
            raise DecodeError(
                f"truncated length prefix at byte {pos}: {total - pos} of "
                f"{FRAME_HEADER_SIZE} bytes",
                endpoint=endpoint,
            )
        (length,) = _LEN.unpack_from(view, pos)
        start = pos + FRAME_HEADER_SIZE
        end = start + length
        if end > total:
            raise DecodeError(
                f"frame at byte {pos} declares {length} bytes but only "
                f"{total - start} remain",
                endpoint=endpoint,
            )
        out.append(view[start:end].tobytes())
        pos = end
    if expected is not None and len(out) != expected:
        raise DecodeError(
            f"expected {expected} frames, got {len(out)}", endpoint=endpoint
        )
    return out


# --- Stream records ----------------------------------------------------------


def encode_records(records: Iterable[Tuple[int, BytesLike]]) -> bytes:
    out = bytearray()
    for offset, data in records:
        b = bytes(data)
        if len(b) > U32_MAX or not 0 <= offset <= U64_MAX:
            raise ValidationError("record does not fit the stream header", field="data")
        out += _HDR.pack(len(b), offset)
        out += b
    return bytes(out)


class ChunkReader:
    """
    Exact-size reads over an iterator of arbitrarily sized byte chunks.

    Holds at most one pending chunk plus the bytes of the read in progress, so
    memory is bounded by the largest single read, not by the stream.
    """

    def __init__(self, chunks: Iterable[bytes]) -> None:
        self._chunks = iter(chunks)
        self._pending = b""
        self._pos = 0
        self._eof = False

    def read(self, n: int) -> bytes:
        """Read exactly `n` bytes; fewer are returned only at end of stream."""
        parts = []
        need = n
        while need > 0:
            avail = len(self._pending) - self._pos
            if avail == 0:
                if not self._fill():
                    break
                continue
            take = min(avail, need)
            parts.append(self._pending[self._pos : self._pos + take])
            self._pos += take
            need -= take
        return b"".join(parts)

    def _fill(self) -> bool:
        if self._eof:
            return False
        for chunk in self._chunks:
            if chunk:
                self._pending = bytes(chunk)
                self._pos = 0
                return True
        self._eof = True
        self._pending = b""
        self._pos = 0
        return False


def iter_records(
    chunks: Iterable[bytes], *, endpoint: Optional[str] = None
) -> Iterator[Record]:
    """
    Lazily decode a scan/query stream into `Record(offset, data)` pairs.

    Each record is yielded before the next header is read. Works for any
    chunking of the input, one byte at a time included.
    """
    reader = ChunkReader(chunks)
    while True:
        header = reader.read(RECORD_HEADER_SIZE)
        if not header:
            return
        if len(header) < RECORD_HEADER_SIZE:
            raise DecodeError(
                f"truncated record header: got {len(header)} of {RECORD_HEADER_SIZE} bytes",
                endpoint=endpoint,
            )
        length, offset = _HDR.unpack(header)
        data = reader.read(length)
        if len(data) < length:
            raise DecodeError(
                f"expected at least {length} bytes for offset {offset}, but got EOF "
                f"after {len(data)}",
                endpoint=endpoint,
            )
        yield Record(offset, data)


__all__ = [
    "FRAME_HEADER_SIZE",
    "RECORD_HEADER_SIZE",
    "decode_offset",
    "encode_frames",
    "decode_frames",
    "encode_records",
    "ChunkReader",
    "iter_records",
]
