"""Exceptions raised by pytest-covermarks.

Two families exist and they must never be confused:

- ``CheckFailure`` and its subclasses are assertion failures. The code under
  test did not execute a mark the way a check declared it would. They derive
  from ``AssertionError`` so pytest reports them as ordinary test failures.
- ``UnbalancedScope`` is a usage fault. Scopes were closed out of order,
  twice, from the wrong thread, or leaked past a test boundary. Results
  gathered after such a fault cannot be trusted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Iterable

    from pytest_covermarks.expectations import Expectation


class CovermarksError(Exception):
    """Base class for misuse of the covermarks API."""


class UnbalancedScope(CovermarksError):
    """A check scope was closed out of LIFO order or leaked past its region."""


class CheckFailure(AssertionError):
    """One or more expected marks were not hit as declared.

    Attributes:
        failures: The individual per-mark failures, in declaration order.
    """

    def __init__(self, failures: Iterable[CheckFailure]) -> None:
        self.failures: tuple[CheckFailure, ...] = tuple(failures)
        super().__init__(self.describe())

    def __reduce__(self) -> tuple[type[CheckFailure], tuple[tuple[CheckFailure, ...]]]:
        return type(self), (self.failures,)

    def describe(self) -> str:
        """Return the diagnostic for every failing mark."""
        lines = [f'{len(self.failures)} marks failed their check:']
        lines.extend(f'  - {failure.describe()}' for failure in self.failures)
        return '\n'.join(lines)


class MarkNeverHit(CheckFailure):
    """An expected mark was observed zero times.

    Attributes:
        name: The mark name.
        expected: The declared expectation.
        observed: Always 0.
    """

    def __init__(self, name: str, expected: Expectation) -> None:
        self.name = name
        self.expected = expected
        self.observed = 0
        super().__init__((self,))

    def __reduce__(self) -> tuple[type[MarkNeverHit], tuple[str, Expectation]]:
        return type(self), (self.name, self.expected)

    def describe(self) -> str:
        return f'mark {self.name!r} was never hit (expected {self.expected.describe()})'


class CountMismatch(CheckFailure):
    """An ``ExactCount`` mark was hit a different number of times than declared.

    Attributes:
        name: The mark name.
        expected: The declared expectation.
        observed: How many times the mark was hit while the scope was open.
    """

    def __init__(self, name: str, expected: Expectation, observed: int) -> None:
        self.name = name
        self.expected = expected
        self.observed = observed
        super().__init__((self,))

    def __reduce__(self) -> tuple[type[CountMismatch], tuple[str, Expectation, int]]:
        return type(self), (self.name, self.expected, self.observed)

    def describe(self) -> str:
        times = 'time' if self.observed == 1 else 'times'
        return f'mark {self.name!r} was hit {self.observed} {times} (expected {self.expected.describe()})'
