from __future__ import annotations

from dataclasses import dataclass, field

"""NormalizedRecord model for survey response uploads.

A NormalizedRecord is one spreadsheet row reduced to the (id, response, notes)
triple that the reconciliation engine pushes to the remote store.
"""

__all__ = [
    "NormalizedRecord",
]


@dataclass(frozen=True)
class NormalizedRecord:
    """Keyed record extracted from a single spreadsheet data row.

    Only rows with a non-empty id become records; response and notes are
    trimmed and may be empty.
    """
    id: str  # Natural key matched against the remote store (trimmed, non-empty)
    response: str = ""
    notes: str = ""
    row_number: int = field(default=-1, compare=False)  # 1-based sheet row, -1 if unknown

    @property
    def has_changes(self) -> bool:
        """True when at least one of response/notes carries a value."""
        return bool(self.response.strip() or self.notes.strip())
