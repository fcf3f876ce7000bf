"""
Wire codecs.

`v1` and `v2` are independent dialects of the store protocol; `framing` holds
the length-prefixed batch and stream formats both of them use.
"""

from . import framing, v1, v2
from .framing import decode_frames, encode_frames, encode_records, iter_records

__all__ = [
    "framing",
    "v1",
    "v2",
    "decode_frames",
    "encode_frames",
    "encode_records",
    "iter_records",
]
