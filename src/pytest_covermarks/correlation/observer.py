"""Observer scope that records every mark hit on its thread."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pytest_covermarks.scope import StackedScope


if TYPE_CHECKING:
    from pytest_covermarks.recorder import HitRecorder


class MarkObserver(StackedScope):
    """A scope with no expectations that counts every hit it sees.

    It shares the stack discipline of check scopes (LIFO, same-thread close)
    but never fails validation.

    Example:
        >>> from pytest_covermarks import get_state
        >>> with get_state().observe() as observer:
        ...     get_state().hit('fast-path')
        >>> observer.counts
        {'fast-path': 1}
    """

    def __init__(self, recorder: HitRecorder) -> None:
        super().__init__(recorder)
        self._counts: dict[str, int] = {}

    @property
    def counts(self) -> dict[str, int]:
        """Return hits seen so far, by mark name."""
        return dict(self._counts)

    def open(self) -> MarkObserver:
        super().open()
        return self

    def __enter__(self) -> MarkObserver:
        return self.open()

    def record(self, name: str) -> None:
        if not isinstance(name, str):
            return
        self._counts[name] = self._counts.get(name, 0) + 1

    def _validate(self) -> None:
        pass

    def __repr__(self) -> str:
        return f'MarkObserver({len(self._counts)} marks)'
