from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

"""Remote store interface consumed by the reconciliation engine.

A store exposes keyed lookups, an unfiltered existence probe and partial
updates. All calls are coroutines; the engine awaits each one before issuing
the next, so implementations need no locking of their own.
"""

__all__ = [
    "RemoteStore",
    "StoreError",
    "StoreTransportError",
    "StoreUpdateError",
]

Entity = dict[str, Any]


class StoreError(Exception):
    """Base class for remote store failures."""


class StoreTransportError(StoreError):
    """Query could not be executed (unreachable service, unknown collection)."""


class StoreUpdateError(StoreError):
    """Update rejected by the store (validation, permission, missing entity)."""


class RemoteStore(ABC):
    """Abstract remote datastore."""

    @abstractmethod
    async def query_by_key(self, collection: str, key_field: str, key_value: str) -> list[Entity]:
        """Return entities of collection whose key_field equals key_value.

        Raises:
            StoreTransportError: collection unreachable or invalid
        """

    @abstractmethod
    async def probe(self, collection: str) -> None:
        """Issue an unfiltered query against collection.

        Raises:
            StoreTransportError: collection unreachable or invalid
        """

    @abstractmethod
    async def update(self, collection: str, entity_id: str, payload: Mapping[str, Any]) -> None:
        """Apply a partial update to one entity.

        Raises:
            StoreUpdateError: update rejected
        """

    async def aclose(self) -> None:  # noqa: B027 - optional hook
        return None

    async def __aenter__(self) -> RemoteStore:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()
