from __future__ import annotations

"""
HTTP transport for the rochefort store (sync, httpx).

The transport owns the connection pool and the request/response exchange and
nothing else: no retries, no decoding. It maps failures onto the SDK error
kinds so every client call surfaces them uniformly:

- httpx request failures (connect, timeout, dropped stream, redirects) -> TransportError
- a body whose Content-Encoding cannot be decoded -> DecodeError
- any status other than 200 -> ProtocolStatusError carrying the body text

Example:
    from rochefort_sdk.rpc.http import HttpTransport
    with HttpTransport("http://localhost:8000") as t:
        resp = t.request("GET", "get", params={"namespace": "", "offset": 0})
        print(resp.content)
"""

import logging
from typing import Any, Iterator, Mapping, Optional

import httpx

from ..errors import DecodeError, ProtocolStatusError, RochefortError, TransportError

_LOG = logging.getLogger(__name__)


def join_url(base_url: str, endpoint: str) -> str:
    """Join with exactly one '/' between base and endpoint."""
    return base_url.rstrip("/") + "/" + endpoint.lstrip("/")


class HttpTransport:
    """
    Request/response exchange over one `httpx.Client`.

    Parameters
    ----------
    base_url : str
        Store root, with or without a trailing slash.
    timeout : float
        Per-request timeout in seconds (connect, read and write).
    max_keepalive : int
        Idle keep-alive connections kept in the pool.
    headers : Mapping[str, str] | None
        Extra default headers.
    client : httpx.Client | None
        Use an existing client instead of creating one. A passed-in client is
        not closed by `close()`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 1.0,
        max_keepalive: int = 64,
        headers: Optional[Mapping[str, str]] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self._own_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout,
            headers=dict(headers or {}),
            limits=httpx.Limits(max_keepalive_connections=max_keepalive),
        )

    # --- context manager -------------------------------------------------

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def close(self) -> None:
        if self._own_client:
            self._client.close()

    # --- public API ------------------------------------------------------

    def url(self, endpoint: str) -> str:
        return join_url(self.base_url, endpoint)

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        content: Optional[bytes] = None,
        content_type: Optional[str] = None,
    ) -> httpx.Response:
        """Perform one exchange and return the fully read 200 response."""
        req = self._build(method, endpoint, params, content, content_type)
        try:
            resp = self._client.send(req)
        except httpx.RequestError as e:
            raise _request_error(e, method, str(req.url), endpoint) from e
        _LOG.debug("%s %s -> %s (%d bytes)", method, endpoint, resp.status_code, len(resp.content))
        self._check_status(resp, method, req)
        return resp

    def stream(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        content: Optional[bytes] = None,
        content_type: Optional[str] = None,
    ) -> httpx.Response:
        """
        Open a streaming exchange. The body is not read; the caller must
        close the returned response (see `client.stream.RecordStream`).
        """
        req = self._build(method, endpoint, params, content, content_type)
        try:
            resp = self._client.send(req, stream=True)
        except httpx.RequestError as e:
            raise _request_error(e, method, str(req.url), endpoint) from e
        _LOG.debug("%s %s -> %s (streaming)", method, endpoint, resp.status_code)
        if resp.status_code != 200:
            try:
                resp.read()
            except httpx.RequestError as e:
                raise _request_error(e, method, str(req.url), endpoint) from e
            finally:
                resp.close()
            self._check_status(resp, method, req)
        return resp

    # --- internals -------------------------------------------------------

    def _build(
        self,
        method: str,
        endpoint: str,
        params: Optional[Mapping[str, Any]],
        content: Optional[bytes],
        content_type: Optional[str],
    ) -> httpx.Request:
        headers = {"Content-Type": content_type} if content_type else None
        return self._client.build_request(
            method, self.url(endpoint), params=params, content=content, headers=headers
        )

    @staticmethod
    def _check_status(resp: httpx.Response, method: str, req: httpx.Request) -> None:
        if resp.status_code == 200:
            return
        _LOG.warning("%s %s returned HTTP %s", method, req.url, resp.status_code)
        raise ProtocolStatusError(
            status_code=resp.status_code, body=resp.text, method=method, url=str(req.url)
        )


def _request_error(e: httpx.RequestError, method: str, url: str, endpoint: str) -> RochefortError:
    message = str(e) or type(e).__name__
    if isinstance(e, httpx.DecodingError):
        return DecodeError(message, endpoint=endpoint)
    return TransportError(message, method=method, url=url)


def iter_body(resp: httpx.Response, *, endpoint: str) -> Iterator[bytes]:
    """Raw body chunks of a streaming response, request failures mapped."""
    try:
        yield from resp.iter_bytes()
    except httpx.RequestError as e:
        raise _request_error(e, resp.request.method, str(resp.request.url), endpoint) from e


__all__ = ["HttpTransport", "iter_body", "join_url"]
