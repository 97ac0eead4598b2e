from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Mapping
from typing import Any

import psycopg2
import psycopg2.extras
from psycopg2 import sql

from ..models.config_models import DatabaseConfig
from .base import Entity, RemoteStore, StoreTransportError, StoreUpdateError

"""PostgreSQL store.

Collections are table names. psycopg2 is blocking, so every call runs in a
worker thread via asyncio.to_thread; the engine still awaits one call at a time,
so the single connection is never used concurrently.
"""

__all__ = [
    "PostgresStore",
    "resolve_dsn",
]

logger = logging.getLogger(__name__)


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Resolve connection parameters.

    Priority:
        1. DATABASE_URL / PGDSN (full DSN), then the config dsn
        2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
        3. config database section, then libpq defaults
    """
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


class PostgresStore(RemoteStore):
    """Remote store backed by a PostgreSQL database (psycopg2)."""

    def __init__(self, connection: Any, *, id_field: str) -> None:
        self._conn = connection
        self.id_field = id_field

    @classmethod
    def connect(cls, db_cfg: DatabaseConfig, *, id_field: str) -> PostgresStore:
        try:
            conn = psycopg2.connect(resolve_dsn(db_cfg))
        except psycopg2.Error as e:
            raise StoreTransportError(f"connection failed: {e}") from e
        conn.autocommit = False
        return cls(conn, id_field=id_field)

    def _rollback_quietly(self) -> None:
        try:
            self._conn.rollback()
        except psycopg2.Error:  # pragma: no cover
            logger.debug("rollback failed", exc_info=True)

    def _select(self, query: sql.Composed, params: tuple[Any, ...]) -> list[Entity]:
        try:
            with self._conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                cur.execute(query, params)
                rows = [dict(r) for r in cur.fetchall()]
            self._conn.commit()
            return rows
        except psycopg2.Error as e:
            self._rollback_quietly()
            raise StoreTransportError(str(e).strip()) from e

    def _query_by_key_sync(self, collection: str, key_field: str, key_value: str) -> list[Entity]:
        query = sql.SQL("SELECT * FROM {} WHERE {} = %s").format(
            sql.Identifier(collection), sql.Identifier(key_field)
        )
        return self._select(query, (key_value,))

    def _probe_sync(self, collection: str) -> None:
        query = sql.SQL("SELECT 1 FROM {} LIMIT 1").format(sql.Identifier(collection))
        self._select(query, ())

    def _update_sync(self, collection: str, entity_id: str, payload: Mapping[str, Any]) -> None:
        if not payload:
            raise StoreUpdateError("empty payload")
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(col)) for col in payload
        )
        query = sql.SQL("UPDATE {} SET {} WHERE {} = %s").format(
            sql.Identifier(collection), assignments, sql.Identifier(self.id_field)
        )
        params = (*payload.values(), entity_id)
        try:
            with self._conn.cursor() as cur:
                cur.execute(query, params)
                updated = cur.rowcount
            if updated == 0:
                self._rollback_quietly()
                raise StoreUpdateError(f"record not found: {self.id_field}={entity_id}")
            self._conn.commit()
        except psycopg2.Error as e:
            self._rollback_quietly()
            raise StoreUpdateError(str(e).strip()) from e

    async def query_by_key(self, collection: str, key_field: str, key_value: str) -> list[Entity]:
        return await asyncio.to_thread(self._query_by_key_sync, collection, key_field, key_value)

    async def probe(self, collection: str) -> None:
        await asyncio.to_thread(self._probe_sync, collection)

    async def update(self, collection: str, entity_id: str, payload: Mapping[str, Any]) -> None:
        await asyncio.to_thread(self._update_sync, collection, entity_id, payload)

    async def aclose(self) -> None:
        if not self._conn.closed:
            self._conn.close()
