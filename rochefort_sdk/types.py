from __future__ import annotations

"""
Value types exchanged with the store.

Nothing here performs network I/O. Request entries validate their wire widths
on construction so a bad request fails before a connection is opened; the
query tree is a small sum type that is only turned into JSON by the codec.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, NamedTuple, Sequence, Tuple, Union

from .errors import ValidationError
from .utils.bytes import BytesLike, check_uint, ensure_bytes

Namespace = str
Offset = int


class Record(NamedTuple):
    """One stored record as yielded by scan/search: `(offset, data)`."""

    offset: Offset
    data: bytes


def check_namespace(namespace: Any) -> str:
    if not isinstance(namespace, str):
        raise ValidationError(
            f"namespace must be str, got {type(namespace).__name__}", field="namespace"
        )
    return namespace


# --- Request entries ---------------------------------------------------------


@dataclass(frozen=True)
class AppendEntry:
    """
    A record to append.

    `alloc_size` reserves room for later in-place modification; 0 allocates
    exactly `len(data)`.
    """

    namespace: Namespace
    data: bytes
    tags: Tuple[str, ...] = ()
    alloc_size: int = 0

    def __post_init__(self) -> None:
        check_namespace(self.namespace)
        object.__setattr__(self, "data", ensure_bytes(self.data))
        tags = tuple(self.tags)
        for t in tags:
            if not isinstance(t, str):
                raise ValidationError(f"tag must be str, got {type(t).__name__}", field="tags")
        object.__setattr__(self, "tags", tags)
        check_uint(self.alloc_size, 32, field="alloc_size")


@dataclass(frozen=True)
class ModifyEntry:
    """Overwrite `data` at byte `pos` inside the record at `offset`."""

    namespace: Namespace
    offset: Offset
    pos: int
    data: bytes

    def __post_init__(self) -> None:
        check_namespace(self.namespace)
        check_uint(self.offset, 64, field="offset")
        check_uint(self.pos, 32, field="pos")
        object.__setattr__(self, "data", ensure_bytes(self.data))


@dataclass(frozen=True)
class GetEntry:
    namespace: Namespace
    offset: Offset

    def __post_init__(self) -> None:
        check_namespace(self.namespace)
        check_uint(self.offset, 64, field="offset")


# --- Query tree --------------------------------------------------------------


@dataclass(frozen=True)
class Tag:
    """Leaf: records carrying `tag`."""

    tag: str

    def __post_init__(self) -> None:
        if not isinstance(self.tag, str):
            raise ValidationError("tag must be str", field="query")


@dataclass(frozen=True)
class Or:
    """Records matching any of `queries`."""

    queries: Tuple["Query", ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "queries", _check_children(self.queries, "or"))


@dataclass(frozen=True)
class And:
    """Records matching all of `queries`."""

    queries: Tuple["Query", ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "queries", _check_children(self.queries, "and"))


Query = Union[Tag, Or, And]


def _check_children(queries: Iterable[Any], op: str) -> Tuple[Query, ...]:
    out = tuple(queries)
    if not out:
        raise ValidationError(f"'{op}' needs at least one sub-query", field="query")
    for q in out:
        if not isinstance(q, (Tag, Or, And)):
            raise ValidationError(
                f"'{op}' children must be queries, got {type(q).__name__}", field="query"
            )
    return out


def any_of(*queries: Union[Query, str]) -> Or:
    """`any_of("a", "b")` is `Or((Tag("a"), Tag("b")))`; plain strings become tags."""
    return Or(tuple(Tag(q) if isinstance(q, str) else q for q in queries))


def all_of(*queries: Union[Query, str]) -> And:
    return And(tuple(Tag(q) if isinstance(q, str) else q for q in queries))


def query_to_dict(query: Query) -> Dict[str, Any]:
    """Query tree -> the JSON object shape the store parses."""
    if isinstance(query, Tag):
        return {"tag": query.tag}
    if isinstance(query, Or):
        return {"or": [query_to_dict(q) for q in query.queries]}
    if isinstance(query, And):
        return {"and": [query_to_dict(q) for q in query.queries]}
    raise ValidationError(f"not a query: {type(query).__name__}", field="query")


def query_from_dict(obj: Any) -> Query:
    """
    Parse the JSON object shape back into a query tree.

    Each node must have exactly one of the keys "tag", "or", "and".
    """
    if not isinstance(obj, dict) or len(obj) != 1:
        raise ValidationError(
            'query node must be an object with exactly one of "tag", "or", "and"',
            field="query",
        )
    (key, val), = obj.items()
    if key == "tag":
        return Tag(val)
    if key in ("or", "and"):
        if not isinstance(val, list):
            raise ValidationError(f'"{key}" expects a list', field="query")
        children = tuple(query_from_dict(v) for v in val)
        return Or(children) if key == "or" else And(children)
    raise ValidationError(f"unknown query key {key!r}", field="query")


def as_append_entries(entries: Sequence[Any]) -> Tuple[AppendEntry, ...]:
    return tuple(_as(e, AppendEntry, "append") for e in entries)


def as_modify_entries(entries: Sequence[Any]) -> Tuple[ModifyEntry, ...]:
    return tuple(_as(e, ModifyEntry, "modify") for e in entries)


def as_get_entries(entries: Sequence[Any]) -> Tuple[GetEntry, ...]:
    """Accept GetEntry objects or `(namespace, offset)` pairs."""
    out = []
    for e in entries:
        if isinstance(e, GetEntry):
            out.append(e)
        elif isinstance(e, (tuple, list)) and len(e) == 2:
            out.append(GetEntry(e[0], e[1]))
        else:
            raise ValidationError(
                f"expected GetEntry or (namespace, offset), got {type(e).__name__}",
                field="get",
            )
    return tuple(out)


def _as(entry: Any, cls: type, field_name: str) -> Any:
    if not isinstance(entry, cls):
        raise ValidationError(
            f"expected {cls.__name__}, got {type(entry).__name__}", field=field_name
        )
    return entry


__all__ = [
    "Namespace",
    "Offset",
    "BytesLike",
    "Record",
    "check_namespace",
    "AppendEntry",
    "ModifyEntry",
    "GetEntry",
    "Tag",
    "Or",
    "And",
    "Query",
    "any_of",
    "all_of",
    "query_to_dict",
    "query_from_dict",
    "as_append_entries",
    "as_modify_entries",
    "as_get_entries",
]
