from __future__ import annotations

import os

from ..models.config_models import UploadConfig
from .base import RemoteStore, StoreError

"""Build the configured RemoteStore.

Environment variables win over config values:
    dataverse: DATAVERSE_URL, DATAVERSE_TOKEN
    postgres:  DATABASE_URL / PGDSN / PG* (see postgres.resolve_dsn)
"""


def create_store(config: UploadConfig) -> RemoteStore:
    """Instantiate the store for config.backend.

    Raises:
        StoreError: backend misconfigured or connection failed
    """
    if config.backend == "dataverse":
        from .dataverse import DataverseStore

        base_url = os.getenv("DATAVERSE_URL") or config.dataverse.base_url
        if not base_url:
            raise StoreError("dataverse base_url is not set (config dataverse.base_url or DATAVERSE_URL)")
        token = os.getenv("DATAVERSE_TOKEN") or config.dataverse.token
        return DataverseStore(base_url, token, timeout=config.dataverse.timeout_seconds)

    if config.backend == "postgres":
        from .postgres import PostgresStore

        return PostgresStore.connect(config.database, id_field=config.mapping.id_field)

    raise StoreError(f"unknown backend: {config.backend}")
