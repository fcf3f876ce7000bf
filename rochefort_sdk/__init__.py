"""
rochefort SDK for Python
Client library for the rochefort append-only, offset-addressed store.
"""

from .version import __version__  # noqa: F401

# Core config & errors
from .config import ClientConfig  # noqa: F401
from .errors import (  # noqa: F401
    DecodeError,
    OperationFailed,
    ProtocolStatusError,
    RochefortError,
    TransportError,
    ValidationError,
)

# Types
from .types import (  # noqa: F401
    And,
    AppendEntry,
    GetEntry,
    ModifyEntry,
    Or,
    Query,
    Record,
    Tag,
    all_of,
    any_of,
)

# Clients
from .client import Client, LegacyClient, RecordStream, connect  # noqa: F401

__all__ = [
    "__version__",
    # Core
    "ClientConfig",
    "RochefortError", "TransportError", "ProtocolStatusError",
    "DecodeError", "ValidationError", "OperationFailed",
    # Types
    "AppendEntry", "ModifyEntry", "GetEntry", "Record",
    "Query", "Tag", "Or", "And", "any_of", "all_of",
    # Clients
    "Client", "LegacyClient", "RecordStream", "connect",
]
