"""
rochefort_sdk.client.v2
=======================

Client for the current (v2) store endpoints. Batch calls carry CBOR messages
(see `rochefort_sdk.codec.v2`); scan and query replies are record streams.

- **POST set**              append and/or modify records in one call
- **POST get**              fetch a batch of `(namespace, offset)` records
- **GET  scan?namespace=**  stream a whole namespace
- **POST query?namespace=** stream records matching a tag query (JSON body)
- **POST compact**          compact a namespace
- **POST delete**           delete a namespace

Typical usage
-------------
    from rochefort_sdk import Client, any_of

    with Client("http://127.0.0.1:8000") as r:
        off = r.append("ns", b"abc", tags=["a"], alloc_size=5)
        r.modify("ns", off, 1, b"zxcv")
        assert r.get_one("ns", off) == b"azxcv"

        with r.search("ns", any_of("a", "b")) as hits:
            for offset, data in hits:
                ...

Design notes
------------
* Results of batch calls are positionally aligned with the request entries;
  a reply with a different entry count is a DecodeError.
* Offset 0 is a valid offset.
* Nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Union

from ..codec import v2
from ..errors import OperationFailed
from ..types import (
    AppendEntry,
    GetEntry,
    ModifyEntry,
    Query,
    as_append_entries,
    as_get_entries,
    as_modify_entries,
    check_namespace,
)
from ..utils.bytes import BytesLike
from .base import BaseClient
from .stream import RecordCallback, RecordStream, consume

_LOG = logging.getLogger(__name__)


class Client(BaseClient):
    """Synchronous client speaking the v2 dialect."""

    protocol = "v2"

    # ---- Writes --------------------------------------------------------------

    def set(
        self,
        append: Sequence[AppendEntry] = (),
        modify: Sequence[ModifyEntry] = (),
    ) -> List[int]:
        """
        Append and modify in a single request.

        Returns the offsets assigned to `append`, in order. Modifications are
        applied by the store and have no per-entry result.
        """
        appends = as_append_entries(append)
        modifies = as_modify_entries(modify)
        body = v2.encode_set(appends, modifies)
        resp = self._transport.request(
            "POST", "set", content=body, content_type=v2.CONTENT_TYPE
        )
        offsets = v2.decode_set_ack(
            resp.content, resp.headers.get("Content-Type"), expected=len(appends)
        )
        _LOG.debug("set: %d appended, %d modified", len(appends), len(modifies))
        return offsets

    def append(
        self,
        namespace: str,
        data: BytesLike,
        *,
        tags: Iterable[str] = (),
        alloc_size: int = 0,
    ) -> int:
        """Append one record and return its offset."""
        if isinstance(tags, str):
            tags = (tags,)
        entry = AppendEntry(namespace, data, tuple(tags), alloc_size)
        return self.set(append=[entry])[0]

    def modify(self, namespace: str, offset: int, pos: int, data: BytesLike) -> None:
        """Overwrite `data` at byte `pos` of an existing record."""
        self.set(modify=[ModifyEntry(namespace, offset, pos, data)])

    # ---- Reads ---------------------------------------------------------------

    def get(self, entries: Sequence[Union[GetEntry, tuple]]) -> List[bytes]:
        """
        Fetch records; element i of the result belongs to entry i, duplicates
        included.
        """
        items = as_get_entries(entries)
        body = v2.encode_get(items)
        resp = self._transport.request(
            "POST", "get", content=body, content_type=v2.CONTENT_TYPE
        )
        return v2.decode_get_ack(
            resp.content, resp.headers.get("Content-Type"), expected=len(items)
        )

    def get_one(self, namespace: str, offset: int) -> bytes:
        return self.get([GetEntry(namespace, offset)])[0]

    def scan(
        self, namespace: str, callback: Optional[RecordCallback] = None
    ) -> Union[RecordStream, int]:
        """
        Stream every record in `namespace` in store order.

        Returns a `RecordStream`, or with `callback(offset, data)` consumes it
        and returns the record count.
        """
        resp = self._transport.stream(
            "GET", "scan", params={"namespace": check_namespace(namespace)}
        )
        return consume(RecordStream(resp, endpoint="scan"), callback)

    def search(
        self, namespace: str, query: Query, callback: Optional[RecordCallback] = None
    ) -> Union[RecordStream, int]:
        """Stream the records of `namespace` matching `query`."""
        body = v2.encode_query(query)
        resp = self._transport.stream(
            "POST",
            "query",
            params={"namespace": check_namespace(namespace)},
            content=body,
            content_type=v2.JSON_CONTENT_TYPE,
        )
        return consume(RecordStream(resp, endpoint="query"), callback)

    # ---- Admin ---------------------------------------------------------------

    def compact(self, namespace: str) -> None:
        self._namespace_op("compact", namespace)

    def delete(self, namespace: str) -> None:
        """Delete a namespace and every record in it."""
        self._namespace_op("delete", namespace)

    def _namespace_op(self, op: str, namespace: str) -> None:
        body = v2.encode_namespace(check_namespace(namespace))
        resp = self._transport.request(
            "POST", op, content=body, content_type=v2.CONTENT_TYPE
        )
        if not v2.decode_success_ack(
            resp.content, resp.headers.get("Content-Type"), endpoint=op
        ):
            raise OperationFailed(operation=op, namespace=namespace)
        _LOG.info("%s of namespace %r done", op, namespace)


__all__ = ["Client"]
