"""Correlation of tests with the marks they exercise.

While a pytest session runs with ``--covermarks-report``, every test call is
wrapped in a MarkObserver. The observed hits feed a MarkMap that answers both
maintenance questions for the current session:

    mark_map.marks_for('tests/test_dates.py::test_short')  # what does this test exercise?
    mark_map.tests_for('short date')                        # which tests exercise this mark?

Nothing is persisted; the map lives only as long as the session.

Exports:
    MarkObserver: Records every mark hit on its thread
    MarkMap: Bidirectional test/mark mapping
    HitCollector: Builds a MarkMap from per-test observations
"""

from __future__ import annotations

from pytest_covermarks.correlation.collector import HitCollector
from pytest_covermarks.correlation.mapper import MarkMap
from pytest_covermarks.correlation.observer import MarkObserver


__all__ = ['HitCollector', 'MarkMap', 'MarkObserver']
