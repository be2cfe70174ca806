"""Integration tests for the pytest-covermarks plugin.

These tests verify the end-to-end plugin behavior using pytester.
"""

from __future__ import annotations

import pytest


DATES_MODULE = """
from pytest_covermarks import hit

def parse_date(s):
    if len(s) != 10:
        hit('short date')
        return None
    if s[4] != '-' or s[7] != '-':
        hit('wrong dashes')
        return None
    return tuple(int(part) for part in s.split('-'))
"""


@pytest.fixture
def pytester_with_dates(pytester: pytest.Pytester) -> pytest.Pytester:
    """Create a pytester instance with an instrumented target module."""
    pytester.makepyfile(target_dates=DATES_MODULE)
    return pytester


@pytest.mark.medium
class TestCoversMarker:
    """Test the covers marker."""

    def test_marker_passes_when_mark_is_hit(self, pytester_with_dates: pytest.Pytester):
        pytester_with_dates.makepyfile(
            test_dates="""
import pytest
from target_dates import parse_date

@pytest.mark.covers('short date')
def test_short():
    assert parse_date('92') is None
"""
        )

        result = pytester_with_dates.runpytest()

        result.assert_outcomes(passed=1)

    def test_marker_fails_when_mark_is_not_hit(self, pytester_with_dates: pytest.Pytester):
        """The test looks like it checks wrong dashes but the string is too short."""
        pytester_with_dates.makepyfile(
            test_dates="""
import pytest
from target_dates import parse_date

@pytest.mark.covers('wrong dashes')
def test_dashes():
    assert parse_date('27.2.2013') is None
"""
        )

        result = pytester_with_dates.runpytest()

        result.assert_outcomes(failed=1)
        result.stdout.fnmatch_lines(["*MarkNeverHit*'wrong dashes' was never hit*"])

    def test_marker_exact_count_mismatch(self, pytester_with_dates: pytest.Pytester):
        pytester_with_dates.makepyfile(
            test_dates="""
import pytest
from target_dates import parse_date

@pytest.mark.covers({'short date': 1})
def test_short_twice():
    parse_date('1')
    parse_date('22')
"""
        )

        result = pytester_with_dates.runpytest()

        result.assert_outcomes(failed=1)
        result.stdout.fnmatch_lines(["*CountMismatch*'short date' was hit 2 times (expected exactly once)*"])

    def test_failing_test_reports_only_its_own_failure(self, pytester_with_dates: pytest.Pytester):
        pytester_with_dates.makepyfile(
            test_dates="""
import pytest

@pytest.mark.covers('short date')
def test_broken():
    assert 1 == 2
"""
        )

        result = pytester_with_dates.runpytest()

        result.assert_outcomes(failed=1)
        assert 'MarkNeverHit' not in result.stdout.str()

    def test_class_and_function_markers_combine(self, pytester_with_dates: pytest.Pytester):
        pytester_with_dates.makepyfile(
            test_dates="""
import pytest
from target_dates import parse_date

@pytest.mark.covers('short date')
class TestDates:
    @pytest.mark.covers({'wrong dashes': 1})
    def test_both(self):
        parse_date('92')
        parse_date('27.02.2013')

    def test_only_short(self):
        parse_date('92')
"""
        )

        result = pytester_with_dates.runpytest()

        result.assert_outcomes(passed=2)

    def test_marker_is_registered(self, pytester: pytest.Pytester):
        result = pytester.runpytest('--markers')

        result.stdout.fnmatch_lines(['@pytest.mark.covers(*names, **counts)*'])


@pytest.mark.medium
class TestCheckInTests:
    """Test check scopes used directly inside tests."""

    def test_fast_path_scenario(self, pytester: pytest.Pytester):
        pytester.makepyfile(
            test_fast="""
from pytest_covermarks import AT_LEAST_ONCE, check, hit

def compute(n):
    if n < 10:
        hit('fast-path')
        return n
    return sum(range(n))

def test_fast_input():
    with check({'fast-path': AT_LEAST_ONCE}):
        compute(3)

def test_slow_input():
    with check({'fast-path': AT_LEAST_ONCE}):
        compute(30)
"""
        )

        result = pytester.runpytest()

        result.assert_outcomes(passed=1, failed=1)
        result.stdout.fnmatch_lines(['*_ test_slow_input _*', "*MarkNeverHit: mark 'fast-path' was never hit*"])

    def test_covermarks_fixture(self, pytester: pytest.Pytester):
        pytester.makepyfile(
            test_fixture="""
import pytest_covermarks

def test_fixture_is_default_state(covermarks):
    assert covermarks is pytest_covermarks.get_state()
    with covermarks.check({'via-fixture': 2}):
        covermarks.hit('via-fixture')
        pytest_covermarks.hit('via-fixture')
"""
        )

        result = pytester.runpytest()

        result.assert_outcomes(passed=1)


@pytest.mark.medium
class TestUnbalancedScopes:
    """Test that scope misuse stops the session."""

    def test_leaked_scope_stops_session(self, pytester: pytest.Pytester):
        pytester.makepyfile(
            test_leak="""
from pytest_covermarks import begin

def test_leaks():
    begin('never-closed')

def test_never_runs():
    pass
"""
        )

        result = pytester.runpytest()

        result.assert_outcomes(failed=1)
        result.stdout.fnmatch_lines(['*UnbalancedScope*test_leaks left 1 scope(s) open*'])

    def test_out_of_order_close_stops_session(self, pytester: pytest.Pytester):
        pytester.makepyfile(
            test_order="""
from pytest_covermarks import begin, end, hit

def test_wrong_order():
    outer = begin('x')
    inner = begin('y')
    hit('x')
    hit('y')
    end(outer)

def test_never_runs():
    pass
"""
        )

        result = pytester.runpytest()

        result.assert_outcomes(failed=1)
        result.stdout.fnmatch_lines(['*UnbalancedScope*newer scope(s) were still open*'])

    def test_leak_check_can_be_disabled(self, pytester: pytest.Pytester):
        pytester.makepyfile(
            test_leak="""
from pytest_covermarks import begin, get_state

DEPTH = []

def test_leaks():
    DEPTH.append(get_state().depth())
    begin('never-closed')

def test_next_test_starts_clean():
    assert get_state().depth() == DEPTH[0]
"""
        )

        result = pytester.runpytest('--no-covermarks-leak-check')

        result.assert_outcomes(passed=2)

    def test_leak_check_disabled_from_pyproject(self, pytester: pytest.Pytester):
        pytester.makepyprojecttoml('[tool.pytest-covermarks]\nleak_check = false\n')
        pytester.makepyfile(
            test_leak="""
from pytest_covermarks import begin

def test_leaks():
    begin('never-closed')
"""
        )

        result = pytester.runpytest()

        result.assert_outcomes(passed=1)

    def test_scope_left_open_by_fixture_is_caught_at_teardown(self, pytester: pytest.Pytester):
        pytester.makepyfile(
            test_fixture_leak="""
import pytest
from pytest_covermarks import begin

@pytest.fixture
def leaky():
    begin('from-fixture')
    yield

def test_uses_leaky(leaky):
    pass
"""
        )

        result = pytester.runpytest()

        result.assert_outcomes(passed=1, errors=1)
        result.stdout.fnmatch_lines(['*UnbalancedScope*test_uses_leaky left 1 scope(s) open*'])


@pytest.mark.medium
class TestCorrelationReport:
    """Test the --covermarks-report terminal summary."""

    def test_report_lists_marks_and_tests(self, pytester_with_dates: pytest.Pytester):
        pytester_with_dates.makepyfile(
            test_dates="""
from pytest_covermarks import register
from target_dates import parse_date

register('bad month')

def test_short():
    parse_date('92')

def test_dashes():
    parse_date('27.02.2013')

def test_valid():
    parse_date('2013-02-27')
"""
        )

        result = pytester_with_dates.runpytest('--covermarks-report')

        result.assert_outcomes(passed=3)
        result.stdout.fnmatch_lines(
            [
                '*pytest-covermarks report*',
                'Tests by mark:',
                '  short date',
                '    test_dates.py::test_short (1 hit)',
                '  wrong dashes',
                '    test_dates.py::test_dashes (1 hit)',
                'Marks by test:',
                '  test_dates.py::test_dashes: wrong dashes',
                '  test_dates.py::test_short: short date',
                'Registered marks never hit:',
                '  bad month',
            ]
        )

    def test_report_enabled_from_pyproject(self, pytester_with_dates: pytest.Pytester):
        pytester_with_dates.makepyprojecttoml('[tool.pytest-covermarks]\nreport = true\n')
        pytester_with_dates.makepyfile(
            test_dates="""
from target_dates import parse_date

def test_short():
    parse_date('92')
"""
        )

        result = pytester_with_dates.runpytest()

        result.assert_outcomes(passed=1)
        result.stdout.fnmatch_lines(['*pytest-covermarks report*', '    test_dates.py::test_short (1 hit)'])

    def test_no_report_by_default(self, pytester_with_dates: pytest.Pytester):
        pytester_with_dates.makepyfile(
            test_dates="""
from target_dates import parse_date

def test_short():
    parse_date('92')
"""
        )

        result = pytester_with_dates.runpytest()

        assert 'pytest-covermarks report' not in result.stdout.str()


@pytest.mark.medium
class TestSwitchedOff:
    """Test the COVERMARKS switch in a fresh interpreter."""

    def test_checks_are_inert_when_disabled(self, pytester_with_dates: pytest.Pytester, monkeypatch):
        monkeypatch.setenv('COVERMARKS', '0')
        pytester_with_dates.makepyfile(
            test_dates="""
import pytest
from pytest_covermarks import begin, check
from target_dates import parse_date

@pytest.mark.covers('wrong dashes')
def test_marker_is_inert():
    parse_date('92')

def test_check_is_inert():
    with check('never-hit'):
        pass

def test_leak_is_impossible():
    begin('never-closed')
"""
        )

        result = pytester_with_dates.runpytest_subprocess()

        result.assert_outcomes(passed=3)
