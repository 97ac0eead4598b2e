from __future__ import annotations

import logging
from unittest.mock import Mock, patch

from survey_sync.models.outcome import BatchSummary, OutcomeKind, UpdateOutcome
from survey_sync.services.progress import ConsoleListener, ProgressTracker, is_tty_enabled
from survey_sync.services.reconciler import Severity


def test_is_tty_enabled_returns_stdout_isatty():
    """Test that is_tty_enabled returns sys.stdout.isatty()."""
    with patch('sys.stdout.isatty', return_value=True):
        assert is_tty_enabled() is True

    with patch('sys.stdout.isatty', return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:
    """Test cases for ProgressTracker class."""

    def test_init_with_tty_enabled(self):
        """Bar counts percent, not records."""
        with patch('survey_sync.services.progress.is_tty_enabled', return_value=True), \
             patch('survey_sync.services.progress.tqdm') as mock_tqdm:

            tracker = ProgressTracker(description="Updating")

            assert tracker.enabled is True
            assert tracker.percent == 0
            mock_tqdm.assert_called_once_with(
                total=100,
                desc="Updating",
                unit="%",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch('survey_sync.services.progress.is_tty_enabled', return_value=False):
            tracker = ProgressTracker()
            assert tracker.enabled is False
            assert tracker.pbar is None

    def test_update_percent_sends_deltas(self):
        mock_pbar = Mock()
        with patch('survey_sync.services.progress.is_tty_enabled', return_value=True), \
             patch('survey_sync.services.progress.tqdm', return_value=mock_pbar):
            tracker = ProgressTracker()
            tracker.update_percent(33)
            tracker.update_percent(67)
            tracker.update_percent(100)

        assert [c.args[0] for c in mock_pbar.update.call_args_list] == [33, 34, 33]
        assert tracker.percent == 100

    def test_update_percent_never_moves_backwards(self):
        mock_pbar = Mock()
        with patch('survey_sync.services.progress.is_tty_enabled', return_value=True), \
             patch('survey_sync.services.progress.tqdm', return_value=mock_pbar):
            tracker = ProgressTracker()
            tracker.update_percent(50)
            tracker.update_percent(40)
            tracker.update_percent(50)
            tracker.update_percent(150)

        assert tracker.percent == 100
        assert [c.args[0] for c in mock_pbar.update.call_args_list] == [50, 50]

    def test_update_percent_with_tty_disabled(self):
        with patch('survey_sync.services.progress.is_tty_enabled', return_value=False):
            tracker = ProgressTracker()
            tracker.update_percent(25)
            assert tracker.percent == 25

    def test_context_manager_closes_bar(self):
        mock_pbar = Mock()
        with patch('survey_sync.services.progress.is_tty_enabled', return_value=True), \
             patch('survey_sync.services.progress.tqdm', return_value=mock_pbar):
            with ProgressTracker() as tracker:
                tracker.set_postfix(success=1)

        mock_pbar.set_postfix.assert_called_once_with(success=1)
        mock_pbar.close.assert_called_once()
        assert tracker.pbar is None


class TestConsoleListener:
    """ConsoleListener maps engine severities onto log labels."""

    def test_status_lines_are_labeled(self, capsys):
        listener = ConsoleListener()
        listener.on_status("Updating 2 records...", Severity.INFO)
        listener.on_status("Updated R1", Severity.SUCCESS)
        listener.on_status("R2: Record not found", Severity.ERROR)

        out = capsys.readouterr().out.splitlines()
        assert out == [
            "INFO Updating 2 records...",
            "OK Updated R1",
            "ERROR R2: Record not found",
        ]

    def test_progress_is_forwarded_to_tracker(self):
        tracker = Mock()
        listener = ConsoleListener(tracker=tracker, logger=logging.getLogger("test_console_listener"))
        listener.on_progress(50)
        listener.on_progress(100)
        assert [c.args[0] for c in tracker.update_percent.call_args_list] == [50, 100]

    def test_complete_closes_tracker(self):
        tracker = Mock()
        listener = ConsoleListener(tracker=tracker, logger=logging.getLogger("test_console_listener"))
        summary = BatchSummary.from_outcomes(
            [UpdateOutcome.updated("A"), UpdateOutcome.failed("B", OutcomeKind.NOT_FOUND, "Record not found")]
        )
        listener.on_complete(summary)
        tracker.set_postfix.assert_called_once_with(success=1, failed=1)
        tracker.close.assert_called_once()

    def test_listener_without_tracker_only_logs(self, capsys):
        listener = ConsoleListener()
        listener.on_progress(10)
        listener.on_complete(BatchSummary.from_outcomes([]))
        assert listener.tracker is None
        assert capsys.readouterr().out == ""

    def test_listener_keeps_no_run_state(self):
        listener = ConsoleListener(logger=logging.getLogger("test_console_listener"))
        listener.on_status("Updated R1", Severity.SUCCESS)
        listener.on_progress(100)
        assert set(vars(listener)) == {"tracker", "logger"}
