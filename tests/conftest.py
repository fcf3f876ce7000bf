from __future__ import annotations

import base64
import json
from typing import Dict, Iterable, List, Optional, Tuple

import cbor2
import httpx
import pytest
import respx

from rochefort_sdk.codec.framing import encode_frames, encode_records

BASE_URL = "http://store.test"


class FakeStore:
    """
    In-memory stand-in for the store, mounted on a respx router.

    Offsets are byte positions inside a namespace, so the first record of a
    namespace lives at offset 0. Only the behavior the client relies on is
    modelled: alloc-size reservation, in-place modify, tag OR/AND queries.
    """

    def __init__(self, *, json_acks: bool = False) -> None:
        self.json_acks = json_acks
        # namespace -> offset -> (data, alloc, tags)
        self.ns: Dict[str, Dict[int, Tuple[bytearray, int, Tuple[str, ...]]]] = {}
        self.next_offset: Dict[str, int] = {}
        self.requests: List[httpx.Request] = []

    # --- helpers -----------------------------------------------------------

    def _put(self, namespace: str, data: bytes, alloc: int, tags: Iterable[str]) -> int:
        records = self.ns.setdefault(namespace, {})
        off = self.next_offset.get(namespace, 0)
        size = max(alloc, len(data))
        records[off] = (bytearray(data), size, tuple(tags))
        self.next_offset[namespace] = off + size + 12
        return off

    def _ack(self, obj: dict) -> httpx.Response:
        if self.json_acks:
            conv = {
                k: [base64.b64encode(x).decode() if isinstance(x, bytes) else x for x in v]
                if isinstance(v, list)
                else v
                for k, v in obj.items()
            }
            return httpx.Response(200, json=conv)
        return httpx.Response(
            200, content=cbor2.dumps(obj), headers={"Content-Type": "application/cbor"}
        )

    def _matches(self, query: dict, tags: Tuple[str, ...]) -> bool:
        if "tag" in query:
            return query["tag"] in tags
        if "or" in query:
            return any(self._matches(q, tags) for q in query["or"])
        return all(self._matches(q, tags) for q in query["and"])

    # --- v1 handlers -------------------------------------------------------

    def v1_append(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        ns = request.url.params["namespace"]
        off = self._put(ns, request.content, 0, ())
        return httpx.Response(200, json={"Offset": off})

    def v1_get(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        ns = request.url.params["namespace"]
        off = int(request.url.params["offset"])
        rec = self.ns.get(ns, {}).get(off)
        if rec is None:
            return httpx.Response(404, text=f"offset {off} not found")
        return httpx.Response(200, content=bytes(rec[0]))

    def v1_get_multi(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        ns = request.url.params["namespace"]
        body = request.content
        offsets = [int.from_bytes(body[i : i + 8], "little") for i in range(0, len(body), 8)]
        return httpx.Response(
            200, content=encode_frames(bytes(self.ns[ns][o][0]) for o in offsets)
        )

    # --- v2 handlers -------------------------------------------------------

    def set(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        msg = cbor2.loads(request.content)
        offsets = [
            self._put(p["namespace"], p["data"], p["allocSize"], p["tags"])
            for p in msg["appendPayload"]
        ]
        for m in msg["modifyPayload"]:
            data, alloc, tags = self.ns[m["namespace"]][m["offset"]]
            end = m["pos"] + len(m["data"])
            if end > alloc:
                return httpx.Response(400, text="modify exceeds allocated size")
            if len(data) < end:
                data.extend(b"\x00" * (end - len(data)))
            data[m["pos"] : end] = m["data"]
        return self._ack({"offset": offsets})

    def get(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        msg = cbor2.loads(request.content)
        out = []
        for p in msg["getPayload"]:
            rec = self.ns.get(p["namespace"], {}).get(p["offset"])
            if rec is None:
                return httpx.Response(404, text=f"offset {p['offset']} not found")
            out.append(bytes(rec[0]))
        return self._ack({"data": out})

    def scan(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        ns = request.url.params["namespace"]
        recs = sorted(self.ns.get(ns, {}).items())
        return httpx.Response(200, content=encode_records((o, bytes(r[0])) for o, r in recs))

    def query(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        ns = request.url.params["namespace"]
        q = json.loads(request.content)
        recs = [
            (o, bytes(r[0]))
            for o, r in sorted(self.ns.get(ns, {}).items())
            if self._matches(q, r[2])
        ]
        return httpx.Response(200, content=encode_records(recs))

    def compact(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._ack({"success": True})

    def delete(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        ns = cbor2.loads(request.content)["namespace"]
        self.ns.pop(ns, None)
        self.next_offset.pop(ns, None)
        return self._ack({"success": True})

    def mount(self, router: respx.MockRouter) -> "FakeStore":
        router.post("/append").mock(side_effect=self.v1_append)
        router.get("/get").mock(side_effect=self.v1_get)
        router.post("/getMulti").mock(side_effect=self.v1_get_multi)
        router.get("/scan").mock(side_effect=self.scan)
        router.post("/set").mock(side_effect=self.set)
        router.post("/get").mock(side_effect=self.get)
        router.post("/query").mock(side_effect=self.query)
        router.post("/compact").mock(side_effect=self.compact)
        router.post("/delete").mock(side_effect=self.delete)
        return self


@pytest.fixture
def store_router():
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as router:
        yield router


@pytest.fixture
def fake_store(store_router) -> FakeStore:
    return FakeStore().mount(store_router)


class TrackingStream(httpx.SyncByteStream):
    """Response body that records whether it was closed."""

    def __init__(self, chunks: Iterable[bytes], fail_after: Optional[int] = None) -> None:
        self.chunks = list(chunks)
        self.fail_after = fail_after
        self.closed = False

    def __iter__(self):
        for i, chunk in enumerate(self.chunks):
            if self.fail_after is not None and i >= self.fail_after:
                raise httpx.ReadTimeout("read timed out")
            yield chunk

    def close(self) -> None:
        self.closed = True


def mock_client(handler) -> httpx.Client:
    """An httpx.Client whose every request is answered by `handler`."""
    return httpx.Client(transport=httpx.MockTransport(handler))
