"""Routing of hits to the check scopes open on the calling thread.

Each thread owns a stack of open scopes, innermost last. A hit only ever
reaches the stack of the thread that produced it, so tests running in
parallel threads never see each other's hits. Hits from threads spawned by
the code under test are not seen by the test thread's scopes.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Protocol

from pytest_covermarks.errors import UnbalancedScope


if TYPE_CHECKING:
    from collections.abc import Sequence


logger = logging.getLogger(__name__)


class ScopeEntry(Protocol):
    """Anything that can sit on a thread's scope stack."""

    def record(self, name: str) -> None:
        """Account for one hit of ``name``."""
        ...


class HitRecorder:
    """Holds the per-thread scope stacks and delivers hits to them.

    Stacks live in a ``threading.local``, so reading the current thread's
    stack needs no lock and stacks vanish with their threads.
    """

    def __init__(self) -> None:
        """Create a recorder with no open scopes on any thread."""
        self._local = threading.local()

    def _stack(self) -> list[ScopeEntry]:
        try:
            return self._local.stack  # type: ignore[no-any-return]
        except AttributeError:
            stack: list[ScopeEntry] = []
            self._local.stack = stack
            return stack

    def hit(self, name: str) -> None:
        """Credit ``name`` to every interested scope on this thread's stack.

        Never raises. A hit with no open scope is a no-op.
        """
        stack = getattr(self._local, 'stack', None)
        if not stack:
            return
        try:
            for entry in stack:
                entry.record(name)
        except TypeError:
            # unhashable names cannot match any declared mark
            return

    def push(self, entry: ScopeEntry) -> None:
        """Open ``entry`` as the innermost scope of the current thread."""
        self._stack().append(entry)

    def pop(self, entry: ScopeEntry) -> None:
        """Remove ``entry`` from the current thread's stack.

        The entry is removed even when it is not the innermost scope, so a
        misuse never leaves a stale entry behind.

        Raises:
            UnbalancedScope: If ``entry`` was not the innermost scope, or is
                not on this thread's stack at all.
        """
        stack = self._stack()
        if stack and stack[-1] is entry:
            stack.pop()
            return
        position = next((index for index, open_entry in enumerate(stack) if open_entry is entry), None)
        if position is None:
            raise UnbalancedScope(f'{entry!r} is not open on this thread')
        newer = len(stack) - position - 1
        del stack[position]
        raise UnbalancedScope(f'{entry!r} closed while {newer} newer scope(s) were still open')

    def depth(self) -> int:
        """Return how many scopes are open on the current thread."""
        return len(getattr(self._local, 'stack', ()))

    def open_scopes(self) -> Sequence[ScopeEntry]:
        """Return a snapshot of the current thread's stack, innermost last."""
        return tuple(getattr(self._local, 'stack', ()))

    def release_above(self, depth: int) -> list[ScopeEntry]:
        """Drop every scope above ``depth`` on the current thread.

        Args:
            depth: Number of outer scopes to keep.

        Returns:
            The dropped scopes, outermost first.
        """
        stack = self._stack()
        leaked = stack[depth:]
        del stack[depth:]
        if leaked:
            logger.warning('Dropped %d leaked scope(s): %s', len(leaked), leaked)
        return leaked
