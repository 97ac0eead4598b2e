from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from enum import Enum
from typing import Any

from ..models.config_models import CollectionMapping
from ..models.outcome import BatchSummary, LookupStatus, OutcomeKind, UpdateOutcome
from ..models.processing_result import LatencyAccumulator
from ..models.record import NormalizedRecord
from ..store.base import RemoteStore, StoreError
from .lookup import KeyLookup

"""Reconciliation engine.

Processes records strictly in order, one remote round trip at a time:

    lookup (KeyLookup) -> payload -> partial update

Every record ends in an UpdateOutcome; no record-level failure escapes
reconcile_one, so one bad row never stops the batch. After each record the
listener receives a status line and the running progress percentage, and once
the batch is done it receives the BatchSummary.
"""

__all__ = [
    "ReconciliationEngine",
    "ReconciliationListener",
    "Severity",
    "progress_percent",
]

logger = logging.getLogger(__name__)

NOT_FOUND_DETAIL = "Record not found"
NO_OP_DETAIL = "Nothing to update"


class Severity(Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class ReconciliationListener:
    """Sink for engine events. Default implementation ignores everything."""

    def on_status(self, message: str, severity: Severity) -> None:
        pass

    def on_progress(self, percent: int) -> None:
        pass

    def on_complete(self, summary: BatchSummary) -> None:
        pass


def progress_percent(done: int, total: int) -> int:
    """round(done / total * 100) with halves rounded up."""
    if total <= 0:
        return 100
    return (200 * done + total) // (2 * total)


class ReconciliationEngine:
    """Reconcile NormalizedRecords against a RemoteStore."""

    def __init__(
        self,
        store: RemoteStore,
        mapping: CollectionMapping,
        listener: ReconciliationListener | None = None,
    ) -> None:
        self.store = store
        self.mapping = mapping
        self.listener = listener or ReconciliationListener()
        self.lookup = KeyLookup(store, mapping)
        self.latency = LatencyAccumulator()

    def build_payload(self, record: NormalizedRecord) -> dict[str, str]:
        """Map non-empty record values onto remote field names."""
        payload: dict[str, str] = {}
        response = record.response.strip()
        notes = record.notes.strip()
        if response:
            payload[self.mapping.response_field] = response
        if notes:
            payload[self.mapping.notes_field] = notes
        return payload

    async def reconcile_one(self, record: NormalizedRecord) -> UpdateOutcome:
        rid = record.id
        row = record.row_number

        found = await self.lookup.resolve(rid)
        if found.status is LookupStatus.ACCESS_ERROR:
            return UpdateOutcome.failed(rid, OutcomeKind.ACCESS_ERROR, found.detail or "access error", row)
        if found.status is not LookupStatus.RESOLVED or found.entity is None:
            return UpdateOutcome.failed(rid, OutcomeKind.NOT_FOUND, NOT_FOUND_DETAIL, row)

        if found.match_count > 1:
            # Tie-break is the store's default ordering
            logger.warning("key=%s matched %d entities, updating the first", rid, found.match_count)

        if not record.has_changes:
            return UpdateOutcome.failed(rid, OutcomeKind.NO_OP, NO_OP_DETAIL, row)
        payload = self.build_payload(record)

        entity_id = _entity_id(found.entity, self.mapping.id_field)
        if entity_id is None:
            return UpdateOutcome.failed(
                rid, OutcomeKind.UPDATE_FAILED, f"matched entity has no '{self.mapping.id_field}'", row
            )

        collection = found.collection or self.mapping.primary_collection
        try:
            await self.store.update(collection, entity_id, payload)
        except StoreError as e:
            return UpdateOutcome.failed(rid, OutcomeKind.UPDATE_FAILED, str(e) or "Update failed", row)
        except Exception as e:
            logger.warning("unexpected update failure key=%s", rid, exc_info=True)
            return UpdateOutcome.failed(rid, OutcomeKind.UPDATE_FAILED, str(e) or type(e).__name__, row)

        return UpdateOutcome.updated(rid, row)

    async def run(self, records: Sequence[NormalizedRecord]) -> BatchSummary:
        """Reconcile every record in order and return the batch summary."""
        total = len(records)
        outcomes: list[UpdateOutcome] = []
        self.listener.on_status(f"Updating {total} records...", Severity.INFO)

        for index, record in enumerate(records):
            started = time.perf_counter()
            outcome = await self.reconcile_one(record)
            self.latency.add(time.perf_counter() - started)
            outcomes.append(outcome)

            if outcome.success:
                self.listener.on_status(f"Updated {outcome.record_id}", Severity.SUCCESS)
            else:
                self.listener.on_status(f"{outcome.record_id}: {outcome.error_detail}", Severity.ERROR)
            self.listener.on_progress(progress_percent(index + 1, total))

        summary = BatchSummary.from_outcomes(outcomes)
        if summary.success_count > 0:
            self.listener.on_status(f"Successfully updated {summary.success_count} records", Severity.SUCCESS)
        else:
            self.listener.on_status("No records were updated", Severity.ERROR)
        self.listener.on_complete(summary)
        return summary


def _entity_id(entity: dict[str, Any], id_field: str) -> str | None:
    value = entity.get(id_field)
    if value is None or str(value).strip() == "":
        return None
    return str(value)
