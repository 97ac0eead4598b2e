from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..excel.extractor import EmptyInputError, extract_records
from ..excel.reader import SpreadsheetReadError, read_grid
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import SUCCESS_LEVEL
from ..models.config_models import UploadConfig
from ..models.processing_result import RunResult
from ..models.record import NormalizedRecord
from ..store import RemoteStore, StoreError, create_store
from .reconciler import ReconciliationEngine, ReconciliationListener

"""Upload orchestration.

process_file() runs one complete upload:
1. Decode the worksheet into a grid and extract records (batch-fatal on failure)
2. Open the configured remote store
3. Reconcile records sequentially through the engine
4. Flush failed outcomes to the JSON Lines failure log
5. Return RunResult with the BatchSummary and timing data
"""

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal error that prevents a batch from starting."""


def load_records(path: Path, sheet_name: str | None = None) -> list[NormalizedRecord]:
    """Decode and extract records from a spreadsheet file.

    Raises:
        ProcessingError: unreadable workbook or no data rows
    """
    try:
        grid = read_grid(path, sheet_name=sheet_name)
        records = extract_records(grid)
    except SpreadsheetReadError as e:
        raise ProcessingError(f"read failed: {e}") from e
    except EmptyInputError as e:
        raise ProcessingError(f"{path.name}: {e}") from e
    logger.log(SUCCESS_LEVEL, "Successfully parsed %d records from %s", len(records), path.name)
    return records


async def process_records(
    records: Sequence[NormalizedRecord],
    store: RemoteStore,
    config: UploadConfig,
    *,
    file_name: str = "<memory>",
    listener: ReconciliationListener | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> RunResult:
    """Run the engine over already extracted records."""
    start_time = datetime.now(UTC)
    engine = ReconciliationEngine(store, config.mapping, listener)
    summary = await engine.run(records)
    end_time = datetime.now(UTC)
    elapsed = (end_time - start_time).total_seconds()

    log_path: Path | None = None
    if error_log is None:
        error_log = ErrorLogBuffer()
    error_log.extend_from_outcomes(file_name, summary.outcomes)
    try:
        log_path = error_log.flush()
    except OSError as e:
        # Failure details are still in the summary
        logger.warning("could not write failure log: %s", e)

    _, avg_seconds, p95_seconds = engine.latency.get_stats()
    return RunResult(
        file_name=file_name,
        summary=summary,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed,
        records_per_sec=(summary.total / elapsed) if elapsed > 0 else 0.0,
        avg_record_seconds=avg_seconds,
        p95_record_seconds=p95_seconds,
        error_log_path=str(log_path) if log_path is not None else None,
    )


async def _upload_async(
    records: Sequence[NormalizedRecord],
    config: UploadConfig,
    file_name: str,
    store: RemoteStore | None,
    listener: ReconciliationListener | None,
    error_log: ErrorLogBuffer | None,
) -> RunResult:
    if store is not None:
        return await process_records(
            records, store, config, file_name=file_name, listener=listener, error_log=error_log
        )

    try:
        owned = create_store(config)
    except StoreError as e:
        raise ProcessingError(f"store: {e}") from e
    async with owned:
        return await process_records(
            records, owned, config, file_name=file_name, listener=listener, error_log=error_log
        )


def upload_records(
    records: Sequence[NormalizedRecord],
    config: UploadConfig,
    *,
    file_name: str = "<memory>",
    store: RemoteStore | None = None,
    listener: ReconciliationListener | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> RunResult:
    """Reconcile records in a fresh event loop.

    When store is None the configured backend is created and closed here.

    Raises:
        ProcessingError: store unavailable
    """
    return asyncio.run(_upload_async(records, config, file_name, store, listener, error_log))


def process_file(
    path: Path,
    config: UploadConfig,
    *,
    store: RemoteStore | None = None,
    listener: ReconciliationListener | None = None,
    error_log: ErrorLogBuffer | None = None,
    sheet_name: str | None = None,
) -> RunResult:
    """Upload one spreadsheet file.

    Raises:
        ProcessingError: unreadable file, empty input, or store unavailable
    """
    records = load_records(path, sheet_name=sheet_name or config.sheet_name)
    return upload_records(
        records, config, file_name=path.name, store=store, listener=listener, error_log=error_log
    )
