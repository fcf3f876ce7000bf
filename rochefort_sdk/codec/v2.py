"""
Current (v2) wire dialect.

Batch requests (set / get / compact / delete) are canonical CBOR maps:

    AppendInput    {"appendPayload": [{"namespace", "tags", "allocSize", "data"}],
                    "modifyPayload": [{"namespace", "offset", "pos", "data"}]}
    GetInput       {"getPayload": [{"namespace", "offset"}]}
    NamespaceInput {"namespace"}

Replies carry the matching output message, one entry per request entry in
request order:

    AppendOutput   {"offset": [u64, ...]}
    GetOutput      {"data": [bytes, ...]}
    SuccessOutput  {"success": bool}

Replies are decoded by content type: `application/json` is JSON with bytes as
base64 strings, anything else is CBOR. Search queries are sent as JSON.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any, Dict, List, Optional, Sequence

import cbor2

from ..errors import DecodeError, ValidationError
from ..types import AppendEntry, GetEntry, ModifyEntry, Query, query_to_dict
from ..utils.bytes import BytesLike
from .framing import decode_offset

CONTENT_TYPE = "application/cbor"
JSON_CONTENT_TYPE = "application/json"


def _dumps(obj: Any) -> bytes:
    return cbor2.dumps(obj, canonical=True)


# --- Encoders ----------------------------------------------------------------


def encode_set(append: Sequence[AppendEntry], modify: Sequence[ModifyEntry] = ()) -> bytes:
    if not append and not modify:
        raise ValidationError("set needs at least one append or modify entry", field="set")
    return _dumps(
        {
            "appendPayload": [
                {
                    "namespace": e.namespace,
                    "tags": list(e.tags),
                    "allocSize": e.alloc_size,
                    "data": e.data,
                }
                for e in append
            ],
            "modifyPayload": [
                {"namespace": m.namespace, "offset": m.offset, "pos": m.pos, "data": m.data}
                for m in modify
            ],
        }
    )


def encode_get(entries: Sequence[GetEntry]) -> bytes:
    if not entries:
        raise ValidationError("get needs at least one entry", field="get")
    return _dumps(
        {"getPayload": [{"namespace": e.namespace, "offset": e.offset} for e in entries]}
    )


def encode_namespace(namespace: str) -> bytes:
    if not isinstance(namespace, str):
        raise ValidationError("namespace must be str", field="namespace")
    return _dumps({"namespace": namespace})


def encode_query(query: Query) -> bytes:
    return json.dumps(query_to_dict(query), separators=(",", ":")).encode("utf-8")


# --- Decoders ----------------------------------------------------------------


def _is_json(content_type: Optional[str]) -> bool:
    return bool(content_type) and JSON_CONTENT_TYPE in content_type.lower()


def decode_ack(body: BytesLike, content_type: Optional[str], *, endpoint: str) -> Dict[str, Any]:
    """Decode an acknowledgement body into its top-level map."""
    raw = bytes(body)
    try:
        if _is_json(content_type):
            payload = json.loads(raw)
        else:
            payload = cbor2.loads(raw)
    except (cbor2.CBORDecodeError, UnicodeDecodeError, ValueError, TypeError) as e:
        raise DecodeError(f"malformed reply: {e}", endpoint=endpoint) from e
    if not isinstance(payload, dict):
        raise DecodeError(
            f"expected an object reply, got {type(payload).__name__}", endpoint=endpoint
        )
    return payload


def _field_list(payload: Dict[str, Any], key: str, expected: int, endpoint: str) -> List[Any]:
    items = payload.get(key)
    # Empty repeated fields may be omitted entirely.
    if items is None and expected == 0:
        return []
    if not isinstance(items, list):
        raise DecodeError(f"reply missing list field {key!r}", endpoint=endpoint)
    if len(items) != expected:
        raise DecodeError(
            f"expected {expected} entries in {key!r}, got {len(items)}", endpoint=endpoint
        )
    return items


def decode_set_ack(body: BytesLike, content_type: Optional[str], *, expected: int) -> List[int]:
    """Offsets assigned to the append entries, in request order."""
    payload = decode_ack(body, content_type, endpoint="set")
    items = _field_list(payload, "offset", expected, "set")
    return [decode_offset(v, endpoint="set") for v in items]


def _as_bytes(value: Any, json_form: bool) -> bytes:
    if json_form:
        if not isinstance(value, str):
            raise DecodeError(f"expected base64 string, got {value!r}", endpoint="get")
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise DecodeError(f"invalid base64: {e}", endpoint="get") from e
    if not isinstance(value, bytes):
        raise DecodeError(f"expected bytes, got {type(value).__name__}", endpoint="get")
    return value


def decode_get_ack(body: BytesLike, content_type: Optional[str], *, expected: int) -> List[bytes]:
    """Record bodies, positionally aligned with the request entries."""
    payload = decode_ack(body, content_type, endpoint="get")
    items = _field_list(payload, "data", expected, "get")
    return [_as_bytes(v, _is_json(content_type)) for v in items]


def decode_success_ack(body: BytesLike, content_type: Optional[str], *, endpoint: str) -> bool:
    payload = decode_ack(body, content_type, endpoint=endpoint)
    success = payload.get("success", False)
    if not isinstance(success, bool):
        raise DecodeError(f"'success' must be a boolean, got {success!r}", endpoint=endpoint)
    return success


__all__ = [
    "CONTENT_TYPE",
    "JSON_CONTENT_TYPE",
    "encode_set",
    "encode_get",
    "encode_namespace",
    "encode_query",
    "decode_ack",
    "decode_set_ack",
    "decode_get_ack",
    "decode_success_ack",
]
