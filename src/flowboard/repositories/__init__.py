"""Repository layer for authoritative board storage."""

from .filesystem import FilesystemRepository
from .http import HttpRepository
from .protocol import PersistenceGateway

__all__ = [
    "FilesystemRepository",
    "HttpRepository",
    "PersistenceGateway",
]
