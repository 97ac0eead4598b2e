from __future__ import annotations

import logging
import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..logging.init import get_logger, log_success
from ..models.outcome import BatchSummary
from .reconciler import ReconciliationListener, Severity

"""Progress display with tqdm (TTY only) and the console event listener.

The bar counts percent (0-100) rather than records so that it shows exactly the
value the engine reports. In non-TTY environments (CI, pipes) no bar is drawn
and only the labeled log lines are written.
"""

__all__ = [
    "ConsoleListener",
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Percent progress bar. Updates never move the bar backwards."""

    def __init__(self, *, description: str = "Updating records") -> None:
        self.description = description
        self.percent = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=100,
                desc=description,
                unit="%",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def update_percent(self, percent: int) -> None:
        percent = max(0, min(100, percent))
        if percent <= self.percent:
            return
        delta = percent - self.percent
        self.percent = percent
        if self.enabled and self.pbar is not None:
            self.pbar.update(delta)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


class ConsoleListener(ReconciliationListener):
    """Routes engine events to the labeled logger and a ProgressTracker."""

    def __init__(self, tracker: ProgressTracker | None = None, logger: logging.Logger | None = None) -> None:
        self.tracker = tracker
        self.logger = logger or get_logger()

    def on_status(self, message: str, severity: Severity) -> None:
        if severity is Severity.SUCCESS:
            log_success(message)
        elif severity is Severity.ERROR:
            self.logger.error(message)
        else:
            self.logger.info(message)

    def on_progress(self, percent: int) -> None:
        if self.tracker is not None:
            self.tracker.update_percent(percent)

    def on_complete(self, summary: BatchSummary) -> None:
        if self.tracker is not None:
            self.tracker.set_postfix(success=summary.success_count, failed=summary.failure_count)
            self.tracker.close()
