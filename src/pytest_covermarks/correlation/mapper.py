"""MarkMap: which tests hit which marks, in both directions.

Example:
    >>> mark_map = MarkMap()
    >>> mark_map.add('test_short', 'short date')
    >>> mark_map.tests_for('short date')
    {'test_short'}
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Iterator


class MarkMap:
    """Maps mark names to the tests that hit them, and tests to their marks.

    Hit counts are kept per (test, mark) pair.
    """

    def __init__(self) -> None:
        """Create an empty mark map."""
        self._tests_by_mark: dict[str, dict[str, int]] = {}
        self._marks_by_test: dict[str, dict[str, int]] = {}

    def __len__(self) -> int:
        """Return the number of distinct marks in the map."""
        return len(self._tests_by_mark)

    def __contains__(self, mark: object) -> bool:
        return mark in self._tests_by_mark

    def __iter__(self) -> Iterator[str]:
        """Iterate over mark names in sorted order."""
        return iter(sorted(self._tests_by_mark))

    def add(self, test_name: str, mark: str, count: int = 1) -> None:
        """Record that ``test_name`` hit ``mark`` ``count`` more times.

        Args:
            test_name: pytest node id of the test.
            mark: The mark name.
            count: Number of hits to add.
        """
        if count <= 0:
            return
        by_mark = self._tests_by_mark.setdefault(mark, {})
        by_mark[test_name] = by_mark.get(test_name, 0) + count
        by_test = self._marks_by_test.setdefault(test_name, {})
        by_test[mark] = by_test.get(mark, 0) + count

    def tests_for(self, mark: str) -> set[str]:
        """Return the tests that hit ``mark``."""
        return set(self._tests_by_mark.get(mark, ()))

    def marks_for(self, test_name: str) -> set[str]:
        """Return the marks hit by ``test_name``."""
        return set(self._marks_by_test.get(test_name, ()))

    def hits(self, test_name: str, mark: str) -> int:
        """Return how many times ``test_name`` hit ``mark``."""
        return self._marks_by_test.get(test_name, {}).get(mark, 0)

    def tests(self) -> list[str]:
        """Return every test that hit at least one mark, sorted."""
        return sorted(self._marks_by_test)
