"""Process-wide mark state.

A MarkState bundles the mark registry with the per-thread scope stacks. The
default instance is created on first use, with checking switched on or off by
the COVERMARKS environment variable, and lives until the process exits.
Separate instances can be built for hermetic use; they share nothing with the
default one.

Example:
    >>> state = MarkState()
    >>> with state.check({'fast-path': 1}):
    ...     state.hit('fast-path')
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from pytest_covermarks.correlation.observer import MarkObserver
from pytest_covermarks.expectations import normalize
from pytest_covermarks.recorder import HitRecorder
from pytest_covermarks.registry import MarkRegistry
from pytest_covermarks.reporting.reporter import Reporter
from pytest_covermarks.scope import CheckScope, InertScope
from pytest_covermarks.switch import is_enabled


if TYPE_CHECKING:
    from pytest_covermarks.expectations import Declaration
    from pytest_covermarks.recorder import ScopeEntry
    from pytest_covermarks.registry import MarkHandle


class MarkState:
    """Active mark state: real bookkeeping on every call.

    Attributes:
        enabled: Always True for this class.
        registry: Known mark names.
        recorder: Per-thread scope stacks and hit routing.
        reporter: Builds check failures on scope close.
    """

    enabled = True

    def __init__(self, reporter: Reporter | None = None) -> None:
        """Create an isolated state with no marks and no open scopes.

        Args:
            reporter: Reporter used by scopes of this state. Defaults to a
                      plain Reporter.
        """
        self.recorder = HitRecorder()
        self.registry = MarkRegistry(self.recorder.hit)
        self.reporter = reporter if reporter is not None else Reporter()

    def hit(self, name: str) -> None:
        """Signal that the call site named ``name`` executed."""
        self.recorder.hit(name)

    def register(self, name: str) -> MarkHandle:
        """Register ``name`` and return its handle. Idempotent."""
        return self.registry.register(name)

    def check(self, expected: Declaration) -> CheckScope:
        """Build an unopened check scope for ``expected``.

        The scope opens on ``__enter__`` or ``open()``; used as a decorator,
        each call of the wrapped function gets its own scope.
        """
        return CheckScope(self, normalize(expected), self.reporter)

    def begin(self, expected: Declaration) -> CheckScope:
        """Open a check scope for ``expected`` on the current thread."""
        return self.check(expected).open()

    def end(self, scope: CheckScope, *, unwinding: bool = False) -> None:
        """Close a scope returned by ``begin``."""
        scope.close(unwinding=unwinding)

    def observe(self) -> MarkObserver:
        """Build an unopened observer that records every hit on its thread."""
        return MarkObserver(self.recorder)

    def depth(self) -> int:
        """Return how many scopes are open on the current thread."""
        return self.recorder.depth()

    def release_above(self, depth: int) -> list[ScopeEntry]:
        """Drop the current thread's scopes above ``depth`` and return them."""
        return self.recorder.release_above(depth)


class InertMarkState(MarkState):
    """Mark state with checking switched off.

    Every operation keeps its signature but does nothing: ``hit`` has an
    empty body, ``check`` returns an InertScope, and handles from
    ``register`` ignore their hits.
    """

    enabled = False

    def __init__(self, reporter: Reporter | None = None) -> None:
        super().__init__(reporter)
        self.registry = MarkRegistry()

    def hit(self, name: str) -> None:  # noqa: ARG002
        pass

    def check(self, expected: Declaration) -> InertScope:  # type: ignore[override]  # noqa: ARG002
        return InertScope()

    def begin(self, expected: Declaration) -> InertScope:  # type: ignore[override]  # noqa: ARG002
        return InertScope()

    def end(self, scope: CheckScope | InertScope, *, unwinding: bool = False) -> None:  # noqa: ARG002
        pass

    def observe(self) -> InertScope:  # type: ignore[override]
        return InertScope()


def make_state(*, enabled: bool = True, reporter: Reporter | None = None) -> MarkState:
    """Build an isolated state, active or inert.

    Args:
        enabled: False for a state whose operations are all no-ops.
        reporter: Reporter for scopes of this state.

    Returns:
        A new MarkState or InertMarkState.
    """
    if enabled:
        return MarkState(reporter)
    return InertMarkState(reporter)


_default_state: MarkState | None = None
_default_lock = threading.Lock()


def get_state() -> MarkState:
    """Return the process-wide default state, creating it on first use.

    Whether it is active is decided by the COVERMARKS environment variable at
    creation time.
    """
    global _default_state  # noqa: PLW0603
    if _default_state is None:
        with _default_lock:
            if _default_state is None:
                _default_state = make_state(enabled=is_enabled())
    return _default_state
