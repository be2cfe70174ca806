"""Console reporter for mark correlation at the end of a session.

Produces human-readable output for terminal display listing, for every mark,
the tests that hit it, and for every test, the marks it hit.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO


if TYPE_CHECKING:
    from collections.abc import Iterable

    from pytest_covermarks.correlation.collector import HitCollector


class CorrelationReporter:
    """Reporter that writes test/mark correlation to the console.

    Produces output in the following format:

        ===================== pytest-covermarks report =====================

        Marks hit: 2 across 3 tests

        Tests by mark:
          fast-path
            tests/test_dates.py::test_fast (1 hit)
          short date
            tests/test_dates.py::test_short (2 hits)

        Marks by test:
          tests/test_dates.py::test_fast: fast-path
          tests/test_dates.py::test_short: short date

        Registered marks never hit:
          wrong dashes
        =====================================================================

    Attributes:
        output: The file-like object to write to.
    """

    BORDER_CHAR = '='
    BORDER_WIDTH = 70

    def __init__(self, output: TextIO | None = None) -> None:
        """Initialize the correlation reporter.

        Args:
            output: File-like object to write to. Defaults to sys.stdout.
        """
        self.output = output or sys.stdout

    def write_report(self, collector: HitCollector, registered: Iterable[str] = ()) -> None:
        """Write the correlation report to the output.

        Args:
            collector: The HitCollector holding the session's observations.
            registered: Every registered mark name. Names no test hit are
                        listed at the end.
        """
        self._write_header()
        self._write_blank_line()

        mark_map = collector.mark_map
        if len(mark_map) == 0:
            self._write_line('No marks hit.')
        else:
            stats = collector.get_stats()
            self._write_line(f'Marks hit: {stats["total_marks"]} across {stats["total_tests"]} tests')
            self._write_blank_line()
            self._write_tests_by_mark(collector)
            self._write_blank_line()
            self._write_marks_by_test(collector)

        never_hit = sorted(name for name in registered if name not in mark_map)
        if never_hit:
            self._write_blank_line()
            self._write_line('Registered marks never hit:')
            for name in never_hit:
                self._write_line(f'  {name}')

        self._write_footer()

    def _write_header(self) -> None:
        """Write the report header."""
        title = ' pytest-covermarks report '
        border_len = (self.BORDER_WIDTH - len(title)) // 2
        header = f'{self.BORDER_CHAR * border_len}{title}{self.BORDER_CHAR * border_len}'
        self._write_line(header)

    def _write_footer(self) -> None:
        """Write the report footer."""
        self._write_line(self.BORDER_CHAR * self.BORDER_WIDTH)

    def _write_tests_by_mark(self, collector: HitCollector) -> None:
        mark_map = collector.mark_map
        self._write_line('Tests by mark:')
        for mark in mark_map:
            self._write_line(f'  {mark}')
            for test_name in sorted(mark_map.tests_for(mark)):
                count = mark_map.hits(test_name, mark)
                noun = 'hit' if count == 1 else 'hits'
                self._write_line(f'    {test_name} ({count} {noun})')

    def _write_marks_by_test(self, collector: HitCollector) -> None:
        mark_map = collector.mark_map
        self._write_line('Marks by test:')
        for test_name in mark_map.tests():
            marks = ', '.join(sorted(mark_map.marks_for(test_name)))
            self._write_line(f'  {test_name}: {marks}')

    def _write_blank_line(self) -> None:
        """Write a blank line."""
        self.output.write('\n')

    def _write_line(self, text: str) -> None:
        """Write a line of text followed by newline."""
        self.output.write(text + '\n')
