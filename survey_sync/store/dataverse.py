from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from .base import Entity, RemoteStore, StoreTransportError, StoreUpdateError

"""Dataverse Web API store.

Collections are Web API entity set names. Lookups use OData $filter on the key
field, updates are PATCH requests against the entity's primary id.
"""

__all__ = [
    "DataverseStore",
]

logger = logging.getLogger(__name__)

ODATA_HEADERS = {
    "Accept": "application/json",
    "OData-MaxVersion": "4.0",
    "OData-Version": "4.0",
}


def _odata_literal(value: str) -> str:
    # OData string literals escape a single quote by doubling it
    return "'" + value.replace("'", "''") + "'"


def _error_message(response: httpx.Response) -> str:
    """Extract the OData error message, falling back to status + body prefix."""
    try:
        data = response.json()
        message = data.get("error", {}).get("message")
        if message:
            return f"HTTP {response.status_code}: {message}"
    except Exception:
        pass
    return f"HTTP {response.status_code}: {response.text[:200]}"


class DataverseStore(RemoteStore):
    """Remote store backed by the Dataverse Web API (httpx.AsyncClient)."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        headers = dict(ODATA_HEADERS)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
        )

    async def _get(self, collection: str, params: dict[str, str]) -> list[Entity]:
        try:
            response = await self._client.get(f"/{collection}", params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreTransportError(_error_message(e.response)) from e
        except httpx.RequestError as e:
            raise StoreTransportError(f"Network error: {e!s}") from e

        try:
            return list(response.json().get("value", []))
        except ValueError as e:
            raise StoreTransportError(f"invalid JSON from {collection}: {e}") from e

    async def query_by_key(self, collection: str, key_field: str, key_value: str) -> list[Entity]:
        params = {"$filter": f"{key_field} eq {_odata_literal(key_value)}"}
        entities = await self._get(collection, params)
        logger.debug("dataverse query collection=%s key=%s matches=%d", collection, key_value, len(entities))
        return entities

    async def probe(self, collection: str) -> None:
        await self._get(collection, {"$top": "1"})

    async def update(self, collection: str, entity_id: str, payload: Mapping[str, Any]) -> None:
        try:
            response = await self._client.patch(
                f"/{collection}({entity_id})",
                json=dict(payload),
                # Update only; never upsert a new row
                headers={"If-Match": "*"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreUpdateError(_error_message(e.response)) from e
        except httpx.RequestError as e:
            raise StoreUpdateError(f"Network error: {e!s}") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
