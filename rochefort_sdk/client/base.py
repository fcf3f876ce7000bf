from __future__ import annotations

from typing import Optional, Union

import httpx

from ..config import ClientConfig
from ..rpc.http import HttpTransport


def resolve_config(
    url_or_config: Union[str, ClientConfig, None], timeout: Optional[float]
) -> ClientConfig:
    if isinstance(url_or_config, ClientConfig):
        cfg = url_or_config
    elif isinstance(url_or_config, str):
        cfg = ClientConfig(url=url_or_config)
    elif url_or_config is None:
        cfg = ClientConfig.from_env()
    else:
        raise TypeError("expected a URL string or ClientConfig")
    if timeout is not None:
        cfg = ClientConfig.with_overrides(cfg, timeout=timeout)
    return cfg


class BaseClient:
    """Shared construction and lifecycle for the dialect clients."""

    protocol = ""

    def __init__(
        self,
        url_or_config: Union[str, ClientConfig, None] = None,
        *,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.config = resolve_config(url_or_config, timeout)
        self._transport = HttpTransport(
            self.config.url,
            timeout=self.config.timeout,
            max_keepalive=self.config.max_keepalive,
            headers=self.config.http_headers(),
            client=client,
        )

    @property
    def base_url(self) -> str:
        return self._transport.base_url

    def close(self) -> None:
        self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.base_url!r})"
