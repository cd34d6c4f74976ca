"""
Tests for ProgressTracker.

Test Coverage:
- Stage bands map linearly
- Values never decrease and are never repeated
- finish() always ends at 100
"""

import pytest

from pixert.export.progress import ProgressTracker


def test_advance_maps_into_stage_bands():
    seen = []
    tracker = ProgressTracker(seen.append)

    tracker.advance("encode", 1, 2)
    tracker.advance("encode", 2, 2)
    tracker.advance("persist", 1, 4)
    tracker.advance("attach", 1, 2)

    assert seen == [25.0, 50.0, 60.0, 95.0]


def test_custom_bands():
    seen = []
    tracker = ProgressTracker(seen.append, bands=(20.0, 80.0))

    tracker.advance("encode", 1, 1)
    tracker.advance("persist", 1, 2)

    assert seen == [20.0, 50.0]


def test_backwards_values_are_dropped():
    seen = []
    tracker = ProgressTracker(seen.append)

    tracker.advance("persist", 2, 2)
    tracker.advance("encode", 1, 2)
    tracker.advance("persist", 2, 2)

    assert seen == [90.0]
    assert tracker.value == 90.0


def test_finish_reports_100_once():
    seen = []
    tracker = ProgressTracker(seen.append)

    tracker.finish()
    tracker.finish()

    assert seen == [100.0]


def test_empty_stage_counts_as_done():
    seen = []
    ProgressTracker(seen.append).advance("encode", 0, 0)
    assert seen == [50.0]


def test_no_callback_tracks_value():
    tracker = ProgressTracker()
    tracker.advance("attach", 1, 1)
    assert tracker.value == pytest.approx(100.0)


def test_unknown_stage_raises():
    with pytest.raises(KeyError):
        ProgressTracker().advance("upload", 1, 1)
