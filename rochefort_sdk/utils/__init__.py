"""
Utility helpers for the rochefort SDK.

Re-exports:
- bytes: hex helpers and wire-width checks
"""

from .bytes import U32_MAX, U64_MAX, check_uint, ensure_bytes, to_hex

__all__ = [
    "U32_MAX",
    "U64_MAX",
    "check_uint",
    "ensure_bytes",
    "to_hex",
]
