"""
Tests for run progress tracking.
"""

import logging

from dts_bundler.progress_tracker import BundlePhase, ProgressTracker


def test_counts_bundler_messages():
    tracker = ProgressTracker(echo=False)

    tracker.mark_compiling()
    tracker("Writing external dependency node.d.ts")
    tracker("Processing /proj/a.d.ts")
    tracker("Excluding internal/secret.d.ts")
    tracker("Processing /proj/b.d.ts")

    summary = tracker.get_summary()
    assert summary['phase'] == 'writing'
    assert summary['processed'] == 2
    assert summary['excluded'] == 1
    assert summary['externs'] == 1
    assert summary['messages'] == 5


def test_phases():
    tracker = ProgressTracker(echo=False)
    assert tracker.current_phase is BundlePhase.INITIALIZING

    tracker.mark_compiling()
    assert tracker.current_phase is BundlePhase.COMPILING

    tracker.mark_completed('/proj/out.d.ts')
    assert tracker.current_phase is BundlePhase.COMPLETED
    assert tracker.updates[-1].message == "Wrote /proj/out.d.ts"

    tracker.mark_failed('CompilationError')
    assert tracker.current_phase is BundlePhase.FAILED


def test_echo_logs_messages(caplog):
    tracker = ProgressTracker()
    with caplog.at_level(logging.INFO):
        tracker("Processing /proj/a.d.ts")
    assert "Processing /proj/a.d.ts" in caplog.text


def test_elapsed_time_is_non_negative():
    assert ProgressTracker(echo=False).get_elapsed_time() >= 0
