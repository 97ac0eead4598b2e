"""Remote store implementations for survey response uploads."""

from .base import RemoteStore, StoreError, StoreTransportError, StoreUpdateError
from .factory import create_store

__all__ = [
    "RemoteStore",
    "StoreError",
    "StoreTransportError",
    "StoreUpdateError",
    "create_store",
]
