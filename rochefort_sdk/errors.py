"""
Typed error classes for the rochefort SDK.

Every failure a client call can hit is raised as one of these, so callers can
catch a specific failure mode or the base `RochefortError`:

- TransportError       connection refused, DNS, timeouts, dropped streams
- ProtocolStatusError  the store answered with a non-200 status
- DecodeError          malformed JSON/CBOR or corrupt binary framing
- ValidationError      a request rejected locally before any network call
- OperationFailed      the store acknowledged a request with success=false
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

__all__ = [
    "RochefortError",
    "TransportError",
    "ProtocolStatusError",
    "DecodeError",
    "ValidationError",
    "OperationFailed",
]


class RochefortError(Exception):
    """Base class for all SDK errors."""


@dataclass(slots=True)
class TransportError(RochefortError):
    """Raised when the HTTP exchange itself fails (no usable response)."""

    message: str
    method: Optional[str] = None
    url: Optional[str] = None

    def __str__(self) -> str:
        where = f"{self.method} {self.url}: " if self.method and self.url else ""
        return f"transport error: {where}{self.message}"


@dataclass(slots=True)
class ProtocolStatusError(RochefortError):
    """Raised for any non-200 response; the whole body is the error detail."""

    status_code: int
    body: str
    method: Optional[str] = None
    url: Optional[str] = None

    def __str__(self) -> str:
        return f"expected status code 200, but got: {self.status_code}, body: {self.body}"


@dataclass(slots=True)
class DecodeError(RochefortError):
    """
    Raised when a response body cannot be decoded.

    Covers malformed JSON/CBOR acknowledgements and corrupt binary framing:
    truncated headers, truncated payloads and frame-count mismatches.
    """

    message: str
    endpoint: Optional[str] = None

    def __str__(self) -> str:
        prefix = f"{self.endpoint}: " if self.endpoint else ""
        return f"decode error: {prefix}{self.message}"


@dataclass(slots=True)
class ValidationError(RochefortError):
    """Raised before any network call when a request cannot be encoded."""

    message: str
    field: Optional[str] = None

    def __str__(self) -> str:
        where = f" [{self.field}]" if self.field else ""
        return f"invalid request{where}: {self.message}"


@dataclass(slots=True)
class OperationFailed(RochefortError):
    """The store accepted the request but reported success=false."""

    operation: str
    namespace: str

    def __str__(self) -> str:
        return f"{self.operation} failed for namespace {self.namespace!r}"
