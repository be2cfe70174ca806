"""pytest plugin for runtime coverage marks.

This module provides the pytest hooks that integrate mark checking into the
test runner:

- the ``covers`` marker wraps a test call in a check scope;
- the ``covermarks`` fixture hands tests the process-wide MarkState;
- a scope left open by a test is dropped before the next test runs, and the
  session is stopped because later results cannot be trusted;
- ``--covermarks-report`` prints which marks every test hit.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from pytest_covermarks.config import load_config, merge_configs
from pytest_covermarks.correlation.collector import HitCollector
from pytest_covermarks.errors import UnbalancedScope
from pytest_covermarks.expectations import normalize
from pytest_covermarks.reporting.console import CorrelationReporter
from pytest_covermarks.state import get_state


if TYPE_CHECKING:
    from collections.abc import Generator, Sequence

    from pytest_covermarks.config import CovermarksConfig
    from pytest_covermarks.correlation.observer import MarkObserver
    from pytest_covermarks.expectations import Expectation
    from pytest_covermarks.recorder import ScopeEntry
    from pytest_covermarks.scope import CheckScope
    from pytest_covermarks.state import MarkState


logger = logging.getLogger(__name__)

PLUGIN_NAME = 'covermarks-session'


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add command-line options for pytest-covermarks."""
    group = parser.getgroup('covermarks', 'runtime coverage marks')
    group.addoption(
        '--covermarks-report',
        action='store_true',
        default=None,
        dest='covermarks_report',
        help='Print which marks each test hit, and which tests hit each mark',
    )
    group.addoption(
        '--no-covermarks-leak-check',
        action='store_false',
        default=None,
        dest='covermarks_leak_check',
        help='Do not stop the session when a test leaves a check scope open',
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the covers marker and the per-session plugin."""
    config.addinivalue_line(
        'markers',
        'covers(*names, **counts): fail the test unless the named marks are hit while it runs',
    )
    settings = merge_configs(
        load_config(Path(config.rootpath)),
        cli_report=config.getoption('covermarks_report'),
        cli_leak_check=config.getoption('covermarks_leak_check'),
    )
    logger.debug('covermarks settings: %s', settings)
    config.pluginmanager.register(CovermarksPlugin(settings, get_state()), PLUGIN_NAME)


@pytest.fixture
def covermarks() -> MarkState:
    """The process-wide MarkState behind ``hit`` and ``check``."""
    return get_state()


def expectations_from_item(item: pytest.Item) -> dict[str, Expectation]:
    """Collect the expectations of every ``covers`` marker on an item.

    Positional marker arguments are mark names, iterables of names or
    mappings; keyword arguments map names to exact counts. Markers closer to
    the test override outer ones for the same name.
    """
    expected: dict[str, Expectation] = {}
    for marker in reversed(list(item.iter_markers('covers'))):
        for arg in marker.args:
            expected.update(normalize(arg))
        expected.update(normalize(marker.kwargs))
    return expected


def _leak_message(nodeid: str, leaked: Sequence[ScopeEntry]) -> str:
    return f'{nodeid} left {len(leaked)} scope(s) open: {", ".join(map(repr, leaked))}'


class CovermarksPlugin:
    """Session-scoped hooks for mark checking.

    Attributes:
        settings: Resolved configuration.
        state: The MarkState the session checks against.
        collector: Per-test observations, or None when reporting is off.
    """

    def __init__(self, settings: CovermarksConfig, state: MarkState) -> None:
        self.settings = settings
        self.state = state
        self.collector = HitCollector() if settings.report else None
        self._baseline = 0

    def pytest_sessionstart(self, session: pytest.Session) -> None:  # noqa: ARG002
        self._baseline = self.state.depth()

    @pytest.hookimpl(wrapper=True)
    def pytest_runtest_call(self, item: pytest.Item) -> Generator[None, Any, Any]:
        expected = expectations_from_item(item)
        depth = self.state.depth()
        observer = self.state.observe().open() if self.collector is not None else None
        scope = self.state.check(expected).open() if expected else None
        try:
            result = yield
        except BaseException:
            self._finish_call(item, depth, observer, scope, unwinding=True)
            raise
        self._finish_call(item, depth, observer, scope, unwinding=False)
        return result

    def _finish_call(
        self,
        item: pytest.Item,
        depth: int,
        observer: MarkObserver | None,
        scope: CheckScope | None,
        *,
        unwinding: bool,
    ) -> None:
        kept = depth + sum(guard is not None and guard.is_open for guard in (observer, scope))
        leaked = self.state.release_above(kept)
        fatal = bool(leaked) and bool(self.settings.leak_check)
        try:
            if scope is not None:
                scope.close(unwinding=unwinding or fatal)
        finally:
            if observer is not None:
                observer.close(unwinding=True)
                if self.collector is not None:
                    self.collector.record_test_hits(item.nodeid, observer.counts)
        if fatal:
            message = _leak_message(item.nodeid, leaked)
            if unwinding:
                item.session.shouldfail = f'covermarks: {message}'
            else:
                raise UnbalancedScope(message)

    @pytest.hookimpl(wrapper=True)
    def pytest_runtest_teardown(self, item: pytest.Item) -> Generator[None, Any, Any]:
        try:
            result = yield
        except BaseException:
            self.state.release_above(self._baseline)
            raise
        leaked = self.state.release_above(self._baseline)
        if leaked and self.settings.leak_check:
            raise UnbalancedScope(_leak_message(item.nodeid, leaked))
        return result

    @pytest.hookimpl(wrapper=True)
    def pytest_runtest_makereport(
        self,
        item: pytest.Item,
        call: pytest.CallInfo[None],
    ) -> Generator[None, pytest.TestReport, pytest.TestReport]:
        report = yield
        if call.excinfo is not None and call.excinfo.errisinstance(UnbalancedScope):
            item.session.shouldfail = f'covermarks: {call.excinfo.value}'
        return report

    def pytest_terminal_summary(self, terminalreporter: pytest.TerminalReporter) -> None:
        if self.collector is None:
            return
        if not self.state.enabled:
            terminalreporter.write_line('covermarks: checking is switched off by the COVERMARKS variable')
        buffer = io.StringIO()
        CorrelationReporter(buffer).write_report(self.collector, self.state.registry.names())
        terminalreporter.write(buffer.getvalue())
