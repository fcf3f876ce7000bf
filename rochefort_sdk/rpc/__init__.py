"""Transport layer: the HTTP exchange with the store."""

from .http import HttpTransport, iter_body, join_url

__all__ = ["HttpTransport", "iter_body", "join_url"]
