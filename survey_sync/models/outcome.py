from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Outcome and lookup result models for the reconciliation engine.

Every record processed by the engine ends in exactly one OutcomeKind. Only
UPDATED counts as success; every other kind is reported as a failure in the
BatchSummary.

Record state transitions:
    pending -> looking up -> (not_found | access_error | resolved)
    resolved -> (no_op | applying)
    applying -> (updated | update_failed)
"""

__all__ = [
    "OutcomeKind",
    "UpdateOutcome",
    "BatchSummary",
    "LookupStatus",
    "LookupResult",
]


class OutcomeKind(Enum):
    """Terminal state of a single record reconciliation."""
    UPDATED = "updated"
    NOT_FOUND = "not_found"
    ACCESS_ERROR = "access_error"
    NO_OP = "no_op"
    UPDATE_FAILED = "update_failed"

    @property
    def error_type(self) -> str:
        """UPPER_SNAKE label used in failure logs."""
        return self.name


@dataclass(frozen=True)
class UpdateOutcome:
    """Result of reconciling one record. Never mutated after creation."""
    record_id: str
    kind: OutcomeKind
    error_detail: str | None = None
    row_number: int = field(default=-1, compare=False)

    @property
    def success(self) -> bool:
        return self.kind is OutcomeKind.UPDATED

    @staticmethod
    def updated(record_id: str, row_number: int = -1) -> UpdateOutcome:
        return UpdateOutcome(record_id=record_id, kind=OutcomeKind.UPDATED, row_number=row_number)

    @staticmethod
    def failed(record_id: str, kind: OutcomeKind, detail: str, row_number: int = -1) -> UpdateOutcome:
        if kind is OutcomeKind.UPDATED:
            raise ValueError("failed() requires a failure kind")
        return UpdateOutcome(record_id=record_id, kind=kind, error_detail=detail, row_number=row_number)


@dataclass(frozen=True)
class BatchSummary:
    """Aggregate of a complete batch, computed once after the last record.

    failures keeps the input order of the failed outcomes.
    """
    success_count: int
    failure_count: int
    failures: list[UpdateOutcome]
    outcomes: list[UpdateOutcome]

    @property
    def total(self) -> int:
        return self.success_count + self.failure_count

    def counts_by_kind(self) -> dict[OutcomeKind, int]:
        """Count outcomes per kind, including kinds that never occurred (0)."""
        counter = Counter(o.kind for o in self.outcomes)
        return {kind: counter.get(kind, 0) for kind in OutcomeKind}

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[UpdateOutcome]) -> BatchSummary:
        ordered = list(outcomes)
        failures = [o for o in ordered if not o.success]
        return cls(
            success_count=len(ordered) - len(failures),
            failure_count=len(failures),
            failures=failures,
            outcomes=ordered,
        )


class LookupStatus(Enum):
    """Tagged result of a single lookup strategy."""
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    TRANSPORT_ERROR = "transport_error"
    ACCESS_ERROR = "access_error"


@dataclass(frozen=True)
class LookupResult:
    status: LookupStatus
    entity: dict[str, Any] | None = None
    collection: str | None = None  # Collection the entity was resolved from
    detail: str | None = None
    match_count: int = 0

    @staticmethod
    def resolved(entity: dict[str, Any], collection: str, match_count: int = 1) -> LookupResult:
        return LookupResult(
            status=LookupStatus.RESOLVED,
            entity=entity,
            collection=collection,
            match_count=match_count,
        )

    @staticmethod
    def not_found(collection: str | None = None, detail: str | None = None) -> LookupResult:
        return LookupResult(status=LookupStatus.NOT_FOUND, collection=collection, detail=detail)

    @staticmethod
    def transport_error(detail: str, collection: str | None = None) -> LookupResult:
        return LookupResult(status=LookupStatus.TRANSPORT_ERROR, collection=collection, detail=detail)

    @staticmethod
    def access_error(detail: str, collection: str | None = None) -> LookupResult:
        return LookupResult(status=LookupStatus.ACCESS_ERROR, collection=collection, detail=detail)
