import os
import random
import struct

import pytest

from rochefort_sdk.codec.framing import (
    ChunkReader,
    decode_frames,
    encode_frames,
    encode_records,
    iter_records,
)
from rochefort_sdk.errors import DecodeError


def _split(buf: bytes, sizes):
    """Cut `buf` into chunks using a repeating list of chunk sizes."""
    out, i, k = [], 0, 0
    while i < len(buf):
        n = sizes[k % len(sizes)]
        out.append(buf[i : i + n])
        i += n
        k += 1
    return out


RECORDS = [(0, b""), (12, b"a"), (25, os.urandom(300)), (2**64 - 1, b"\x00" * 7), (7, b"tail")]


# --- batch frames (getMulti) ----------------------------------------------


def test_batch_frames_preserve_order_and_empty_records():
    items = [b"one", b"", b"three", os.urandom(10000)]
    buf = encode_frames(items)
    assert buf[:4] == struct.pack("<I", 3)
    assert decode_frames(buf, expected=4) == items


def test_batch_frames_empty_buffer_is_zero_frames():
    assert decode_frames(b"") == []


def test_batch_payload_past_end_is_decode_error():
    buf = encode_frames([b"abc", b"defgh"])[:-1]
    with pytest.raises(DecodeError) as ei:
        decode_frames(buf)
    assert "declares 5 bytes" in str(ei.value)


def test_batch_partial_length_prefix_is_decode_error():
    buf = encode_frames([b"abc"]) + b"\x01\x00"
    with pytest.raises(DecodeError):
        decode_frames(buf)


def test_batch_fewer_frames_than_requested_is_decode_error():
    buf = encode_frames([b"a", b"b"])
    with pytest.raises(DecodeError) as ei:
        decode_frames(buf, expected=3, endpoint="getMulti")
    assert ei.value.endpoint == "getMulti"


# --- stream records (scan / query) ------------------------------------------


def test_stream_header_layout():
    buf = encode_records([(258, b"xy")])
    assert buf == struct.pack("<IQ", 2, 258) + b"xy"


@pytest.mark.parametrize(
    "sizes",
    [[1], [len(encode_records(RECORDS))], [5, 12, 1, 300], [11], [13, 7]],
    ids=["bytewise", "whole", "mixed", "short-of-header", "straddling"],
)
def test_stream_decode_is_independent_of_chunking(sizes):
    buf = encode_records(RECORDS)
    assert list(iter_records(_split(buf, sizes))) == RECORDS


def test_stream_decode_random_chunking():
    rng = random.Random(7)
    buf = encode_records(RECORDS)
    for _ in range(25):
        sizes = [rng.randint(1, 40) for _ in range(8)]
        assert [tuple(r) for r in iter_records(_split(buf, sizes))] == RECORDS


def test_stream_empty_is_clean_end():
    assert list(iter_records([])) == []
    assert list(iter_records([b"", b""])) == []


def test_stream_partial_header_is_decode_error():
    buf = encode_records([(1, b"ok")]) + b"\x05\x00\x00"
    it = iter_records([buf])
    assert next(it) == (1, b"ok")
    with pytest.raises(DecodeError) as ei:
        next(it)
    assert "truncated record header" in str(ei.value)


@pytest.mark.parametrize("cut", [1, 5])
def test_stream_truncated_payload_never_yields_short_record(cut):
    buf = encode_records([(0, b"first"), (17, b"second-record")])[:-cut]
    seen = []
    with pytest.raises(DecodeError):
        for rec in iter_records(_split(buf, [3])):
            seen.append(rec)
    assert seen == [(0, b"first")]


def test_stream_is_lazy():
    pulled = []

    def chunks():
        for rec in RECORDS:
            pulled.append(rec[0])
            yield encode_records([rec])

    it = iter_records(chunks())
    first = next(it)
    assert first.offset == 0 and first.data == b""
    assert pulled == [0]


def test_chunk_reader_exact_reads():
    r = ChunkReader([b"ab", b"", b"cdef", b"g"])
    assert r.read(3) == b"abc"
    assert r.read(0) == b""
    assert r.read(3) == b"def"
    assert r.read(5) == b"g"
    assert r.read(1) == b""
