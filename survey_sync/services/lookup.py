from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from ..models.config_models import CollectionMapping
from ..models.outcome import LookupResult, LookupStatus
from ..store.base import RemoteStore, StoreError

"""Layered key lookup.

Strategies are tried in order and the first result that is not a transport
error wins:

    1. key filter on the primary collection
    2. key filter on the alternate collection (schema drift fallback)
    3. unfiltered probe of the primary collection: reachable -> NOT_FOUND,
       unreachable -> ACCESS_ERROR

A query that succeeds with zero rows is NOT_FOUND straight away; the next
strategy only runs after a transport failure.
"""

__all__ = [
    "KeyLookup",
    "LookupStrategy",
    "probe_collection",
    "query_collection",
]

logger = logging.getLogger(__name__)

LookupStrategy = Callable[[str], Awaitable[LookupResult]]


def _describe(e: Exception) -> str:
    return str(e) or type(e).__name__


async def query_collection(store: RemoteStore, collection: str, key_field: str, key_value: str) -> LookupResult:
    try:
        entities = await store.query_by_key(collection, key_field, key_value)
    except StoreError as e:
        return LookupResult.transport_error(_describe(e), collection)
    except Exception as e:
        logger.warning("unexpected lookup failure collection=%s key=%s", collection, key_value, exc_info=True)
        return LookupResult.transport_error(_describe(e), collection)

    if not entities:
        return LookupResult.not_found(collection)
    return LookupResult.resolved(entities[0], collection, match_count=len(entities))


async def probe_collection(store: RemoteStore, collection: str) -> LookupResult:
    try:
        await store.probe(collection)
    except Exception as e:
        return LookupResult.access_error(f"collection '{collection}' is not accessible: {_describe(e)}", collection)
    return LookupResult.not_found(collection)


class KeyLookup:
    """Resolve a natural key to one remote entity using ordered strategies."""

    def __init__(self, store: RemoteStore, mapping: CollectionMapping) -> None:
        self.store = store
        self.mapping = mapping
        self.strategies: list[tuple[str, LookupStrategy]] = self._build_strategies()

    def _build_strategies(self) -> list[tuple[str, LookupStrategy]]:
        m = self.mapping
        strategies: list[tuple[str, LookupStrategy]] = [
            ("primary", lambda key: query_collection(self.store, m.primary_collection, m.key_field, key)),
        ]
        if m.alternate_collection and m.alternate_collection != m.primary_collection:
            alternate = m.alternate_collection
            strategies.append(
                ("alternate", lambda key: query_collection(self.store, alternate, m.key_field, key))
            )
        strategies.append(("probe", lambda _key: probe_collection(self.store, m.primary_collection)))
        return strategies

    async def resolve(self, key: str) -> LookupResult:
        result = LookupResult.transport_error("no lookup strategy configured")
        for name, strategy in self.strategies:
            result = await strategy(key)
            if result.status is not LookupStatus.TRANSPORT_ERROR:
                logger.debug("lookup key=%s strategy=%s status=%s", key, name, result.status.value)
                return result
            logger.debug("lookup key=%s strategy=%s transport error: %s", key, name, result.detail)
        return result
