from __future__ import annotations

from typing import Union

from ..errors import ValidationError

BytesLike = Union[bytes, bytearray, memoryview]

U32_MAX = 0xFFFFFFFF
U64_MAX = 0xFFFFFFFFFFFFFFFF


def ensure_bytes(data: BytesLike, *, field: str = "data") -> bytes:
    """
    Ensure input is bytes whose length fits the store's 32-bit length field.

    Accepts bytes / bytearray / memoryview. `str` is rejected on purpose: the
    store holds raw bytes and guessing an encoding here hides bugs.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise ValidationError(f"expected bytes, got {type(data).__name__}", field=field)
    out = bytes(data)
    if len(out) > U32_MAX:
        raise ValidationError(
            f"length {len(out)} exceeds the 32-bit size limit", field=field
        )
    return out


def check_uint(value: int, bits: int, *, field: str) -> int:
    """Reject values that would wrap in an unsigned `bits`-wide wire field."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"expected int, got {type(value).__name__}", field=field)
    limit = U32_MAX if bits == 32 else U64_MAX
    if value < 0 or value > limit:
        raise ValidationError(f"{value} does not fit in u{bits}", field=field)
    return value


def to_hex(b: BytesLike, prefix: bool = True) -> str:
    """
    Bytes -> hex string (lowercase). Prefix with '0x' by default.
    """
    s = bytes(b).hex()
    return f"0x{s}" if prefix else s


__all__ = [
    "BytesLike",
    "U32_MAX",
    "U64_MAX",
    "ensure_bytes",
    "check_uint",
    "to_hex",
]
