from .client import MetadataClient
from .config import MetadataConfig
from .exceptions import (
    ClientClosed,
    MetadataError,
    NotOnGce,
    PathNotFound,
    TransportFailure,
)

__all__ = [
    "MetadataClient",
    "MetadataConfig",
    "MetadataError",
    "NotOnGce",
    "PathNotFound",
    "TransportFailure",
    "ClientClosed",
]
