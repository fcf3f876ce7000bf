"""
Store clients, one per protocol dialect.

`connect()` picks the dialect named by the config (`ROCHEFORT_PROTOCOL`).
"""

from __future__ import annotations

from typing import Optional, Union

import httpx

from ..config import ClientConfig
from .base import resolve_config
from .stream import RecordStream
from .v1 import LegacyClient
from .v2 import Client


def connect(
    url_or_config: Union[str, ClientConfig, None] = None,
    *,
    timeout: Optional[float] = None,
    client: Optional[httpx.Client] = None,
) -> Union[Client, LegacyClient]:
    cfg = resolve_config(url_or_config, timeout)
    cls = LegacyClient if cfg.protocol == "v1" else Client
    return cls(cfg, client=client)


__all__ = ["Client", "LegacyClient", "RecordStream", "connect"]
