from __future__ import annotations

from collections.abc import Sequence

from ..models.outcome import BatchSummary, OutcomeKind
from ..models.processing_result import RunResult
from ..models.record import NormalizedRecord

"""SUMMARY line and failure table rendering.

Format:
    SUMMARY records={total} success={s} failed={f} not_found={n}
    access_error={a} no_op={o} update_failed={u} elapsed_sec={e}
    throughput_rps={r} avg_record_sec={avg} p95_record_sec={p95}

avg/p95 are per-record round trips (lookup + update) measured by the engine.
"""

PREVIEW_ROWS = 5


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a finished run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> from survey_sync.models.outcome import BatchSummary, UpdateOutcome
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> s = BatchSummary.from_outcomes([UpdateOutcome.updated("R1")])
        >>> r = RunResult("a.xlsx", s, t, t, 2.0, 0.5, 0.25, 0.25)
        >>> render_summary_line(r)  # doctest: +ELLIPSIS
        'SUMMARY records=1 success=1 failed=0 not_found=0 ... elapsed_sec=2 throughput_rps=0.5 avg_record_sec=0.25 p95_record_sec=0.25'
    """
    summary = result.summary
    counts = summary.counts_by_kind()
    return (
        f"SUMMARY records={summary.total} "
        f"success={summary.success_count} "
        f"failed={summary.failure_count} "
        f"not_found={counts[OutcomeKind.NOT_FOUND]} "
        f"access_error={counts[OutcomeKind.ACCESS_ERROR]} "
        f"no_op={counts[OutcomeKind.NO_OP]} "
        f"update_failed={counts[OutcomeKind.UPDATE_FAILED]} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)} "
        f"throughput_rps={_format_number(result.records_per_sec)} "
        f"avg_record_sec={_format_number(result.avg_record_seconds)} "
        f"p95_record_sec={_format_number(result.p95_record_seconds)}"
    )


def render_preview(records: Sequence[NormalizedRecord], limit: int = PREVIEW_ROWS) -> list[str]:
    """Tabular preview of the first records, plus a remainder line."""
    lines = ["ID\tResponse\tNotes"]
    for record in records[:limit]:
        lines.append(f"{record.id}\t{record.response}\t{record.notes}")
    if len(records) > limit:
        lines.append(f"... and {len(records) - limit} more rows")
    return lines


def render_failure_table(summary: BatchSummary) -> list[str]:
    """One 'ID<TAB>reason' line per failed record, in input order."""
    if not summary.failures:
        return []
    lines = ["ID\tError"]
    for failure in summary.failures:
        lines.append(f"{failure.record_id}\t{failure.error_detail or 'Unknown error'}")
    return lines
