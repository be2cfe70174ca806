"""Expectation modes a check scope can declare for a mark.

A declaration maps mark names to one of two modes:

- ``AT_LEAST_ONCE``: the mark must be hit one or more times.
- ``ExactCount(n)``: the mark must be hit exactly ``n`` times. ``ExactCount(0)``
  asserts that a code path did not run.

Example:
    >>> normalize({'fast-path': 2, 'slow-path': ExactCount(0)})
    {'fast-path': ExactCount(count=2), 'slow-path': ExactCount(count=0)}
    >>> normalize('fast-path')
    {'fast-path': AtLeastOnce()}
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Union

from pytest_covermarks.registry import validate_name


@dataclass(frozen=True)
class AtLeastOnce:
    """The mark must be hit one or more times."""

    def satisfied_by(self, observed: int) -> bool:
        """Return True if ``observed`` hits meet this expectation."""
        return observed >= 1

    def describe(self) -> str:
        """Return a human-readable form for diagnostics."""
        return 'at least once'


@dataclass(frozen=True)
class ExactCount:
    """The mark must be hit exactly ``count`` times.

    Attributes:
        count: Required number of hits, zero or more.
    """

    count: int

    def __post_init__(self) -> None:
        if isinstance(self.count, bool) or not isinstance(self.count, int):
            raise TypeError(f'ExactCount needs an int, got {type(self.count).__name__}')
        if self.count < 0:
            raise ValueError(f'ExactCount cannot be negative, got {self.count}')

    def satisfied_by(self, observed: int) -> bool:
        """Return True if ``observed`` hits meet this expectation."""
        return observed == self.count

    def describe(self) -> str:
        """Return a human-readable form for diagnostics."""
        if self.count == 0:
            return 'never'
        if self.count == 1:
            return 'exactly once'
        return f'exactly {self.count} times'


AT_LEAST_ONCE = AtLeastOnce()

Expectation = Union[AtLeastOnce, ExactCount]

Declaration = Union[str, Iterable[str], Mapping[str, Union[Expectation, int]]]


def coerce(mode: object) -> Expectation:
    """Turn a declared mode into an Expectation.

    Args:
        mode: An ``AtLeastOnce``, an ``ExactCount``, or a plain int meaning
              ``ExactCount(int)``.

    Returns:
        The matching Expectation.

    Raises:
        TypeError: If the mode is none of the accepted forms.
    """
    if isinstance(mode, (AtLeastOnce, ExactCount)):
        return mode
    if isinstance(mode, int) and not isinstance(mode, bool):
        return ExactCount(mode)
    raise TypeError(f'Unsupported expectation {mode!r}; use AT_LEAST_ONCE, ExactCount(n) or an int')


def normalize(declared: Declaration) -> dict[str, Expectation]:
    """Turn any accepted declaration form into a name-to-Expectation dict.

    Args:
        declared: A single mark name, an iterable of names (each expected at
                  least once), or a mapping from names to modes.

    Returns:
        Dict from mark name to Expectation, in declaration order.
    """
    if isinstance(declared, str):
        declared = (declared,)
    if isinstance(declared, Mapping):
        pairs: Iterable[tuple[object, object]] = declared.items()
    else:
        pairs = ((name, AT_LEAST_ONCE) for name in declared)
    return {validate_name(name): coerce(mode) for name, mode in pairs}
