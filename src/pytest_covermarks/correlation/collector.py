"""HitCollector for gathering per-test mark observations.

Example:
    >>> collector = HitCollector()
    >>> collector.record_test_hits('test_fast', {'fast-path': 2})
    >>> collector.mark_map.tests_for('fast-path')
    {'test_fast'}
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pytest_covermarks.correlation.mapper import MarkMap


if TYPE_CHECKING:
    from collections.abc import Mapping


class HitCollector:
    """Collects the marks each test hit into a MarkMap.

    Attributes:
        mark_map: The MarkMap storing test/mark correlations.
        recorded_tests: Every test recorded, including those that hit nothing.
    """

    def __init__(self) -> None:
        """Create a new hit collector."""
        self.mark_map = MarkMap()
        self.recorded_tests: set[str] = set()
        self._total_hits = 0

    def record_test_hits(self, test_name: str, counts: Mapping[str, int]) -> None:
        """Record the hits observed while a single test ran.

        Args:
            test_name: pytest node id of the test.
            counts: Mark name to number of hits.
        """
        self.recorded_tests.add(test_name)
        for mark, count in counts.items():
            self.mark_map.add(test_name, mark, count)
            self._total_hits += count

    def silent_tests(self) -> list[str]:
        """Return recorded tests that hit no mark, sorted."""
        return sorted(self.recorded_tests.difference(self.mark_map.tests()))

    def get_stats(self) -> dict[str, Any]:
        """Get statistics about collected hits.

        Returns:
            Dict with keys:
                - total_tests: Number of tests recorded
                - total_marks: Number of distinct marks hit
                - total_hits: Sum of all hit counts
        """
        return {
            'total_tests': len(self.recorded_tests),
            'total_marks': len(self.mark_map),
            'total_hits': self._total_hits,
        }
