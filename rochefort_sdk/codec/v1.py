"""
Legacy (v1) wire dialect.

- append:   raw body, JSON `{"Offset": n}` reply
- get:      raw bytes reply
- getMulti: body is packed u64le offsets, reply is a batch of u32le-length frames
- scan:     record stream (see `framing.iter_records`)
"""

from __future__ import annotations

import json
import struct
from typing import List, Sequence

from ..errors import DecodeError, ValidationError
from ..utils.bytes import BytesLike, check_uint
from .framing import decode_frames, decode_offset

CONTENT_TYPE = "application/octet-stream"

_OFFSET = struct.Struct("<Q")


def encode_offsets(offsets: Sequence[int]) -> bytes:
    """Pack offsets as fixed-width u64le values, purely positional."""
    if not offsets:
        raise ValidationError("getMulti needs at least one offset", field="offsets")
    out = bytearray(len(offsets) * _OFFSET.size)
    for i, off in enumerate(offsets):
        _OFFSET.pack_into(out, i * _OFFSET.size, check_uint(off, 64, field="offsets"))
    return bytes(out)


def decode_append_response(body: BytesLike) -> int:
    """`{"Offset": n}` -> n. Offset 0 is a valid result."""
    try:
        payload = json.loads(bytes(body))
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(f"expected JSON append reply: {e}", endpoint="append") from e
    if not isinstance(payload, dict) or "Offset" not in payload:
        raise DecodeError(f"append reply missing 'Offset': {payload!r}", endpoint="append")
    return decode_offset(payload["Offset"], endpoint="append")


def decode_get_multi(body: BytesLike, expected: int) -> List[bytes]:
    return decode_frames(body, expected=expected, endpoint="getMulti")


__all__ = [
    "CONTENT_TYPE",
    "encode_offsets",
    "decode_append_response",
    "decode_get_multi",
]
