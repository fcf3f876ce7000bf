"""
rochefort_sdk.client.v1
=======================

Client for the legacy (v1) store endpoints:

- **POST append?id=&namespace=**   raw body, replies `{"Offset": n}`
- **GET  get?offset=&namespace=**  replies with the raw record
- **POST getMulti?namespace=**     packed u64le offsets in, length-framed records out
- **GET  scan?namespace=**         record stream

Typical usage
-------------
    from rochefort_sdk import LegacyClient

    with LegacyClient("http://127.0.0.1:8000") as r:
        off = r.append("events", b"hello")
        assert r.get("events", off) == b"hello"
        for offset, data in r.scan("events"):
            ...

Offset 0 is a valid offset; failures are always raised, never signaled with a
sentinel value.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from ..codec import v1
from ..utils.bytes import BytesLike, check_uint, ensure_bytes
from ..types import check_namespace
from .base import BaseClient
from .stream import RecordCallback, RecordStream, consume

_LOG = logging.getLogger(__name__)


class LegacyClient(BaseClient):
    """Synchronous client speaking the v1 dialect."""

    protocol = "v1"

    def append(self, namespace: str, data: BytesLike, *, id: str = "") -> int:
        """Append one record and return its offset."""
        body = ensure_bytes(data)
        resp = self._transport.request(
            "POST",
            "append",
            params={"id": id, "namespace": check_namespace(namespace)},
            content=body,
            content_type=v1.CONTENT_TYPE,
        )
        offset = v1.decode_append_response(resp.content)
        _LOG.debug("appended %d bytes to %r at offset %d", len(body), namespace, offset)
        return offset

    def get(self, namespace: str, offset: int) -> bytes:
        resp = self._transport.request(
            "GET",
            "get",
            params={
                "offset": check_uint(offset, 64, field="offset"),
                "namespace": check_namespace(namespace),
            },
        )
        return resp.content

    def get_multi(self, namespace: str, offsets: Sequence[int]) -> List[bytes]:
        """Fetch several records in one round trip, in request order."""
        body = v1.encode_offsets(offsets)
        resp = self._transport.request(
            "POST",
            "getMulti",
            params={"namespace": check_namespace(namespace)},
            content=body,
            content_type=v1.CONTENT_TYPE,
        )
        return v1.decode_get_multi(resp.content, expected=len(offsets))

    def scan(
        self, namespace: str, callback: Optional[RecordCallback] = None
    ) -> Union[RecordStream, int]:
        """
        Stream every record in `namespace`.

        Without `callback` returns a `RecordStream` (close it, or use it as a
        context manager). With `callback(offset, data)` consumes the whole
        stream and returns the number of records seen.
        """
        resp = self._transport.stream(
            "GET", "scan", params={"namespace": check_namespace(namespace)}
        )
        return consume(RecordStream(resp, endpoint="scan"), callback)


__all__ = ["LegacyClient"]
