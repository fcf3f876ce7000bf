from __future__ import annotations

"""
Single-pass record stream over an open scan/query response.

The response is closed on every exit path: exhaustion, decode error,
transport error, an exception raised by a callback, or an explicit
`close()` / leaving a `with` block before the end.
"""

import logging
from typing import Callable, Iterator, Optional

import httpx

from ..codec.framing import iter_records
from ..rpc.http import iter_body
from ..types import Record

_LOG = logging.getLogger(__name__)

RecordCallback = Callable[[int, bytes], None]


class RecordStream:
    """
    Iterator of `Record(offset, data)` in the order the store sends them.

    Usage:
        with client.scan("ns") as records:
            for offset, data in records:
                ...
    """

    def __init__(self, response: httpx.Response, *, endpoint: str) -> None:
        self.endpoint = endpoint
        self._response = response
        self._records: Iterator[Record] = iter_records(
            iter_body(response, endpoint=endpoint), endpoint=endpoint
        )
        self._closed = False

    def __iter__(self) -> "RecordStream":
        return self

    def __next__(self) -> Record:
        if self._closed:
            raise StopIteration
        try:
            return next(self._records)
        except StopIteration:
            self.close()
            raise
        except Exception as e:
            _LOG.debug("closing %s stream after error: %s", self.endpoint, e)
            self.close()
            raise

    def __enter__(self) -> "RecordStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._response.close()

    def for_each(self, callback: RecordCallback) -> int:
        """Call `callback(offset, data)` per record; return how many were seen."""
        count = 0
        try:
            for offset, data in self:
                callback(offset, data)
                count += 1
        finally:
            self.close()
        return count


def consume(stream: RecordStream, callback: Optional[RecordCallback]):
    """Return the stream itself, or drive it through `callback` if given."""
    if callback is None:
        return stream
    return stream.for_each(callback)


__all__ = ["RecordStream", "RecordCallback", "consume"]
