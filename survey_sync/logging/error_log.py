from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from survey_sync.models.error_record import ErrorRecord
from survey_sync.models.outcome import UpdateOutcome

"""Failure log buffering.

- JSON Lines, fixed key set (see ErrorRecord)
- One file per run: logs/failures-YYYYMMDD-HHMMSS.log (UTC), created on first flush
- Records are buffered in memory and written in one go at the end of a batch
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for failure records. flush() appends JSON Lines.

    Single-threaded use only (the engine is strictly sequential).
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir or LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"failures-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def extend_from_outcomes(self, file_name: str, outcomes: Iterable[UpdateOutcome]) -> int:
        """Buffer one ErrorRecord per failed outcome. Returns the number added."""
        added = 0
        for outcome in outcomes:
            if outcome.success:
                continue
            self.append(
                ErrorRecord.create(
                    file=file_name,
                    row=outcome.row_number,
                    record_id=outcome.record_id,
                    error_type=outcome.kind.error_type,
                    detail=outcome.error_detail or "",
                )
            )
            added += 1
        return added

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records. Returns the log path, or None when nothing was written."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
