"""
SDK configuration: store URL, protocol dialect, timeouts and pool size.

- Loads defaults and supports overrides via environment variables (ROCHEFORT_*).
- Provides helpers for building HTTP headers and validating the base URL.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .version import __version__

_DEFAULT_URL = "http://127.0.0.1:8000"
_PROTOCOLS = ("v1", "v2")


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None and v != "" else default


def _ensure_scheme(url: str, allowed: tuple[str, ...] = ("http", "https")) -> str:
    lower = url.lower()
    if not any(lower.startswith(f"{sch}://") for sch in allowed):
        raise ValueError(f"URL must start with {allowed}, got: {url!r}")
    return url


def _parse_protocol(val: Optional[str]) -> str:
    p = (val or "v2").strip().lower()
    if p not in _PROTOCOLS:
        raise ValueError(f"protocol must be one of {_PROTOCOLS}, got: {val!r}")
    return p


@dataclass(slots=True)
class ClientConfig:
    url: str = field(default_factory=lambda: _DEFAULT_URL)
    timeout: float = 1.0
    max_keepalive: int = 64
    protocol: str = "v2"
    user_agent: str = field(default_factory=lambda: f"rochefort-sdk-py/{__version__}")

    def __post_init__(self) -> None:
        _ensure_scheme(self.url)
        self.protocol = _parse_protocol(self.protocol)
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_keepalive < 1:
            raise ValueError("max_keepalive must be at least 1")

    @classmethod
    def from_env(cls, prefix: str = "ROCHEFORT_") -> "ClientConfig":
        """
        Create config from environment variables:

        ROCHEFORT_URL              (http/https)
        ROCHEFORT_TIMEOUT          (float seconds)
        ROCHEFORT_MAX_CONNECTIONS  (int, keep-alive pool size)
        ROCHEFORT_PROTOCOL         (v1 | v2)
        ROCHEFORT_USER_AGENT       (str)
        """
        return cls(
            url=_env(f"{prefix}URL", _DEFAULT_URL) or _DEFAULT_URL,
            timeout=float(_env(f"{prefix}TIMEOUT", "1.0") or "1.0"),
            max_keepalive=int(_env(f"{prefix}MAX_CONNECTIONS", "64") or "64"),
            protocol=_parse_protocol(_env(f"{prefix}PROTOCOL")),
            user_agent=_env(f"{prefix}USER_AGENT") or f"rochefort-sdk-py/{__version__}",
        )

    @classmethod
    def with_overrides(
        cls, base: Optional["ClientConfig"] = None, **overrides: Any
    ) -> "ClientConfig":
        """
        Build from an existing config plus keyword overrides.
        Unknown keys and None values are ignored.
        """
        base = base or cls.from_env()
        data = base.to_dict()
        data.update({k: v for k, v in overrides.items() if k in data and v is not None})
        return cls(**data)

    def http_headers(self) -> Dict[str, str]:
        return {
            "Accept": "*/*",
            "User-Agent": self.user_agent,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "timeout": float(self.timeout),
            "max_keepalive": int(self.max_keepalive),
            "protocol": self.protocol,
            "user_agent": self.user_agent,
        }


__all__ = ["ClientConfig"]
