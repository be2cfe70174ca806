"""Reporting for pytest-covermarks.

Reporter turns a scope's observed counts into check failures.
CorrelationReporter prints which marks each test exercised, and which tests
exercised each mark, at the end of a pytest session.
"""

from pytest_covermarks.reporting.console import CorrelationReporter
from pytest_covermarks.reporting.reporter import Reporter


__all__ = ['CorrelationReporter', 'Reporter']
