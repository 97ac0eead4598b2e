# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from survey_sync.logging.init import reset_logging
from survey_sync.models.config_models import (
    DEFAULT_ALTERNATE_COLLECTION,
    DEFAULT_ID_FIELD,
    DEFAULT_KEY_FIELD,
    DEFAULT_PRIMARY_COLLECTION,
    CollectionMapping,
)
from survey_sync.store.base import RemoteStore, StoreTransportError, StoreUpdateError

PRIMARY = DEFAULT_PRIMARY_COLLECTION
ALTERNATE = DEFAULT_ALTERNATE_COLLECTION


class FakeStore(RemoteStore):
    """In-memory RemoteStore that records every call in order."""

    def __init__(
        self,
        entities: dict[str, list[dict[str, Any]]] | None = None,
        failing_collections: set[str] | None = None,
        probe_fails: bool = False,
        update_errors: dict[str, str] | None = None,
    ) -> None:
        self.entities = entities or {}
        self.failing_collections = failing_collections or set()
        self.probe_fails = probe_fails
        self.update_errors = update_errors or {}
        self.calls: list[tuple[Any, ...]] = []
        self.closed = False

    async def query_by_key(self, collection: str, key_field: str, key_value: str) -> list[dict[str, Any]]:
        self.calls.append(("query", collection, key_value))
        if collection in self.failing_collections:
            raise StoreTransportError(f"collection '{collection}' does not exist")
        return [e for e in self.entities.get(collection, []) if e.get(key_field) == key_value]

    async def probe(self, collection: str) -> None:
        self.calls.append(("probe", collection))
        if self.probe_fails:
            raise StoreTransportError("service unavailable")

    async def update(self, collection: str, entity_id: str, payload: Mapping[str, Any]) -> None:
        self.calls.append(("update", collection, entity_id, dict(payload)))
        if entity_id in self.update_errors:
            raise StoreUpdateError(self.update_errors[entity_id])

    async def aclose(self) -> None:
        self.closed = True

    @property
    def updates(self) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == "update"]


def entity(key: str, entity_id: str) -> dict[str, Any]:
    return {DEFAULT_KEY_FIELD: key, DEFAULT_ID_FIELD: entity_id}


@pytest.fixture()
def make_store():
    def _make(**kwargs: Any) -> FakeStore:
        return FakeStore(**kwargs)
    return _make


@pytest.fixture()
def make_entity():
    return entity


@pytest.fixture()
def mapping() -> CollectionMapping:
    return CollectionMapping()


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """backend: dataverse
primary_collection: afsdc_questionresponseinstance
alternate_collection: afsdc_questionresponseinstances
key_field: afsdc_name
id_field: afsdc_questionresponseinstanceid
response_field: afsdc_response
notes_field: afsdc_comments
dataverse:
  base_url: https://org.example.com/api/data/v9.2
  token: test-token
  timeout_seconds: 5
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "upload.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def make_excel():
    """Write a real .xlsx file; sheets maps sheet name -> rows (first row = header)."""
    def _make(path: Path, sheets: dict[str, list[list[object]]], hidden: set[str] | None = None) -> Path:
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for sheet_name, rows in sheets.items():
                pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
            for sheet_name in hidden or set():
                writer.book[sheet_name].sheet_state = "hidden"
        return path
    return _make


@pytest.fixture()
def survey_grid() -> list[list[object]]:
    return [
        ["ID", "Resp", "Notes"],
        ["R1", "Yes", "ok"],
        ["R2", "", "comment"],
        ["", "ignored", "ignored"],
    ]
