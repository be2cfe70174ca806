"""Example: catching a test that does not exercise the branch it claims to.

Run it with::

    pytest examples/parse_date.py

``parse_date`` names its early exits with ``hit``. Each test declares the
exit it means to exercise. A test whose input takes a different exit fails
with MarkNeverHit instead of passing by accident.
"""

from __future__ import annotations

import pytest

from pytest_covermarks import check, hit


def parse_date(s: str) -> tuple[int, int, int] | None:
    """Parse ``YYYY-MM-DD``, returning None for anything malformed."""
    if len(s) != 10:
        hit('short date')
        return None

    if s[4] != '-' or s[7] != '-':
        hit('wrong dashes')
        return None

    try:
        return int(s[0:4]), int(s[5:7]), int(s[8:10])
    except ValueError:
        hit('not a number')
        return None


def test_short_date():
    with check('short date'):
        assert parse_date('92') is None


def test_wrong_dashes():
    with check('wrong dashes'):
        assert parse_date('19140-8-26') is None


@pytest.mark.xfail(reason='8-26-1914 is too short, so the dash check never runs', strict=True)
def test_wrong_dashes_misleading_input():
    with check('wrong dashes'):
        assert parse_date('8-26-1914') is None


@pytest.mark.covers({'not a number': 1, 'short date': 0})
def test_letters_in_month():
    assert parse_date('1914-AB-26') is None


def test_valid_date_takes_no_early_exit():
    with check({'short date': 0, 'wrong dashes': 0, 'not a number': 0}):
        assert parse_date('1914-08-26') == (1914, 8, 26)
