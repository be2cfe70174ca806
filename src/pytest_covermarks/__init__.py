"""pytest-covermarks: which tests exercise this code, and which code does this test exercise?

Production code names interesting call sites with ``hit``; tests declare
which of those call sites must run with ``check``. Because the answer comes
from actual execution, a test that looks like it exercises a branch but does
not is caught.

Example:
    Instrument a code path::

        from pytest_covermarks import hit

        def parse_date(s):
            if len(s) != 10:
                hit('short date')
                return None
            ...

    Verify a test exercises it::

        from pytest_covermarks import check

        def test_short_date():
            with check('short date'):
                assert parse_date('92') is None

    Or with the pytest marker::

        @pytest.mark.covers('short date')
        def test_short_date():
            assert parse_date('92') is None

Hits only count on the thread that opened the check. A hit fired from a
worker thread started by the code under test is not seen by the test.

Set COVERMARKS=0 to make every operation a no-op.
"""

from __future__ import annotations

from pytest_covermarks.errors import (
    CheckFailure,
    CountMismatch,
    CovermarksError,
    MarkNeverHit,
    UnbalancedScope,
)
from pytest_covermarks.expectations import AT_LEAST_ONCE, AtLeastOnce, ExactCount
from pytest_covermarks.registry import MarkHandle
from pytest_covermarks.state import MarkState, get_state, make_state


__version__ = '0.1.0'

_state = get_state()

hit = _state.hit
mark = _state.hit
register = _state.register
check = _state.check
begin = _state.begin
end = _state.end
observe = _state.observe

__all__ = [
    'AT_LEAST_ONCE',
    'AtLeastOnce',
    'CheckFailure',
    'CountMismatch',
    'CovermarksError',
    'ExactCount',
    'MarkHandle',
    'MarkNeverHit',
    'MarkState',
    'UnbalancedScope',
    '__version__',
    'begin',
    'check',
    'end',
    'get_state',
    'hit',
    'make_state',
    'mark',
    'observe',
    'register',
]
