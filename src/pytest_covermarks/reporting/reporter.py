"""Comparison of observed hit counts against declared expectations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pytest_covermarks.errors import CheckFailure, CountMismatch, MarkNeverHit


if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from pytest_covermarks.expectations import Expectation


logger = logging.getLogger(__name__)


class Reporter:
    """Builds and raises check failures for a closing scope.

    Example:
        >>> from pytest_covermarks.expectations import AT_LEAST_ONCE
        >>> Reporter().compare({'fast-path': AT_LEAST_ONCE}, {'fast-path': 0})
        [MarkNeverHit("mark 'fast-path' was never hit (expected at least once)")]
    """

    def compare(
        self,
        expected: Mapping[str, Expectation],
        observed: Mapping[str, int],
    ) -> list[CheckFailure]:
        """Collect one failure per expected mark whose count does not satisfy it.

        Args:
            expected: Mark name to Expectation.
            observed: Mark name to hit count. Missing names count as zero.

        Returns:
            Failures in declaration order. Empty when every mark passed.
        """
        failures: list[CheckFailure] = []
        for name, expectation in expected.items():
            count = observed.get(name, 0)
            if expectation.satisfied_by(count):
                continue
            if count == 0:
                failures.append(MarkNeverHit(name, expectation))
            else:
                failures.append(CountMismatch(name, expectation, count))
        return failures

    def raise_for(self, failures: Sequence[CheckFailure]) -> None:
        """Raise the failures, if any.

        A single failure is raised as itself. Several are raised together as
        one CheckFailure naming every failing mark.
        """
        if not failures:
            return
        for failure in failures:
            logger.debug('Check failed: %s', failure.describe())
        if len(failures) == 1:
            raise failures[0]
        raise CheckFailure(failures)

    def validate(
        self,
        expected: Mapping[str, Expectation],
        observed: Mapping[str, int],
    ) -> None:
        """Compare and raise in one step."""
        self.raise_for(self.compare(expected, observed))
