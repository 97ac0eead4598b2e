from __future__ import annotations

import statistics
from dataclasses import dataclass
from datetime import datetime

from .outcome import BatchSummary

"""Run-level result models for survey response uploads.

RunResult wraps the BatchSummary produced by the engine with timing data for
the SUMMARY output line.
"""


@dataclass(frozen=True)
class RunResult:
    """Aggregated result of one upload run (one spreadsheet file)."""
    file_name: str
    summary: BatchSummary
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    records_per_sec: float
    avg_record_seconds: float = 0.0
    p95_record_seconds: float = 0.0
    error_log_path: str | None = None  # Set when failures were flushed to disk


class LatencyAccumulator:
    """Collects per-record round-trip times and summarises them."""

    def __init__(self) -> None:
        self.samples: list[float] = []

    def add(self, elapsed_seconds: float) -> None:
        self.samples.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Return (count, average seconds, p95 seconds)."""
        if not self.samples:
            return (0, 0.0, 0.0)

        count = len(self.samples)
        avg = statistics.mean(self.samples)
        if count == 1:
            p95 = self.samples[0]
        else:
            # 19th of 20 inclusive quantiles
            p95 = statistics.quantiles(self.samples, n=20, method="inclusive")[18]
        return (count, avg, p95)
