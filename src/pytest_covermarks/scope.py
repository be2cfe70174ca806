"""Check scopes: test-owned sessions that verify marks were hit.

A scope is opened on one thread, collects hits delivered on that thread while
it is open, and validates on close. Closing always removes the scope from
the thread's stack first, including while an exception is propagating, so a
failing test never leaks a scope into the next test on the same thread.

Example:
    >>> from pytest_covermarks import check, hit
    >>> with check('fast-path'):
    ...     hit('fast-path')
"""

from __future__ import annotations

import functools
import inspect
import logging
import threading
from typing import TYPE_CHECKING, Any, TypeVar

from pytest_covermarks.errors import UnbalancedScope


if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    from pytest_covermarks.expectations import Expectation
    from pytest_covermarks.recorder import HitRecorder
    from pytest_covermarks.reporting.reporter import Reporter
    from pytest_covermarks.state import MarkState


logger = logging.getLogger(__name__)

F = TypeVar('F', bound='Callable[..., Any]')

_UNOPENED = 'unopened'
_OPEN = 'open'
_CLOSED = 'closed'


class StackedScope:
    """Lifecycle shared by everything pushed onto a thread's scope stack.

    Subclasses implement ``record`` and ``_validate``.
    """

    def __init__(self, recorder: HitRecorder) -> None:
        self._recorder = recorder
        self._status = _UNOPENED
        self._thread_id: int | None = None

    @property
    def is_open(self) -> bool:
        """Return True between ``open`` and ``close``."""
        return self._status == _OPEN

    def record(self, name: str) -> None:
        raise NotImplementedError

    def _validate(self) -> None:
        raise NotImplementedError

    def open(self) -> StackedScope:
        """Push this scope onto the current thread's stack.

        Raises:
            UnbalancedScope: If the scope was opened before.
        """
        if self._status != _UNOPENED:
            raise UnbalancedScope(f'{self!r} cannot be opened twice')
        self._thread_id = threading.get_ident()
        self._recorder.push(self)
        self._status = _OPEN
        logger.debug('Opened %r', self)
        return self

    def close(self, *, unwinding: bool = False) -> None:
        """Pop this scope and, unless unwinding, validate what it observed.

        Args:
            unwinding: True when an exception is already propagating through
                       the guarded region. Validation is skipped so the
                       original failure is the one reported.

        Raises:
            UnbalancedScope: If the scope is not open, is closed from another
                thread, or is not the innermost scope on its thread.
            CheckFailure: If validation finds missing or miscounted marks.
        """
        if self._status != _OPEN:
            raise UnbalancedScope(f'{self!r} is {self._status}, it cannot be closed')
        if threading.get_ident() != self._thread_id:
            raise UnbalancedScope(f'{self!r} must be closed on the thread that opened it')
        self._status = _CLOSED
        self._recorder.pop(self)
        logger.debug('Closed %r', self)
        if not unwinding:
            self._validate()

    def __enter__(self) -> StackedScope:
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close(unwinding=exc_type is not None)


class CheckScope(StackedScope):
    """Assertion session for a set of expected marks.

    Use it as a context manager, as a decorator, or through the explicit
    ``begin``/``end`` functions. As a decorator every call of the wrapped
    function gets a fresh scope; for a coroutine function the scope spans
    the awaited body, and hits from other tasks on the same thread count too.

    Attributes:
        expected: Mark name to Expectation, in declaration order.
    """

    def __init__(
        self,
        state: MarkState,
        expected: Mapping[str, Expectation],
        reporter: Reporter,
    ) -> None:
        super().__init__(state.recorder)
        self._state = state
        self._reporter = reporter
        self.expected = dict(expected)
        self._counts = dict.fromkeys(self.expected, 0)

    @property
    def counts(self) -> dict[str, int]:
        """Return how often each expected mark has been hit so far."""
        return dict(self._counts)

    def open(self) -> CheckScope:
        for name in self.expected:
            self._state.registry.register(name)
        super().open()
        return self

    def __enter__(self) -> CheckScope:
        return self.open()

    def record(self, name: str) -> None:
        if name in self._counts:
            self._counts[name] += 1

    def _validate(self) -> None:
        self._reporter.validate(self.expected, self._counts)

    def __call__(self, func: F) -> F:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with self._state.check(self.expected):
                    return await func(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with self._state.check(self.expected):
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f'CheckScope({sorted(self.expected)!r})'


class InertScope:
    """Stand-in returned when checking is switched off. Every method is a no-op."""

    expected: Mapping[str, Expectation] = {}
    is_open = False

    @property
    def counts(self) -> dict[str, int]:
        return {}

    def open(self) -> InertScope:
        return self

    def close(self, *, unwinding: bool = False) -> None:
        pass

    def __enter__(self) -> InertScope:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        pass

    def __call__(self, func: F) -> F:
        return func

    def __repr__(self) -> str:
        return 'InertScope()'
