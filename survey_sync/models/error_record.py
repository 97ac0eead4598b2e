from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for failure logging.

One ErrorRecord is written per failed record outcome. row=-1 marks failures
whose spreadsheet row is unknown (e.g. records built in code rather than read
from a file).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured failure record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Spreadsheet filename being uploaded
        row: Row number (1-based). -1 when unknown
        record_id: Natural key of the failed record
        error_type: Outcome classification in UPPER_SNAKE_CASE format
        detail: Remote error message or reason
    """
    timestamp: str
    file: str
    row: int
    record_id: str
    error_type: str
    detail: str

    @staticmethod
    def create(file: str, row: int, record_id: str, error_type: str, detail: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            record_id=record_id,
            error_type=error_type,
            detail=detail,
        )

    def to_json_line(self) -> str:
        # dataclass -> dict keeps the key set fixed
        return json.dumps(asdict(self), ensure_ascii=False)
