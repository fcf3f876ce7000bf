"""Version of the rochefort Python SDK."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _dist_version

try:
    __version__ = _dist_version("rochefort-sdk")
except PackageNotFoundError:  # running from a source tree without install
    __version__ = "0.2.0"

__all__ = ["__version__"]
