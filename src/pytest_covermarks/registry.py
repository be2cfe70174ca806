"""Process-wide registry of mark names.

Marks are plain strings chosen by whoever instruments the code. The registry
only guarantees that registering a name twice yields the same logical mark,
never an alias.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import threading
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


logger = logging.getLogger(__name__)


def _ignore_hit(name: str) -> None:  # noqa: ARG001
    pass


def validate_name(name: object) -> str:
    """Check that a mark name is a non-empty string.

    Args:
        name: The candidate mark name.

    Returns:
        The name, unchanged.

    Raises:
        TypeError: If the name is not a string.
        ValueError: If the name is empty.
    """
    if not isinstance(name, str):
        raise TypeError(f'Mark names must be strings, got {type(name).__name__}')
    if not name:
        raise ValueError('Mark names must not be empty')
    return name


@dataclass(frozen=True)
class MarkHandle:
    """A registered mark.

    Handles compare and hash by name, so two handles for the same name are
    interchangeable.

    Attributes:
        name: The mark name.
    """

    name: str
    _deliver: Callable[[str], None] = field(default=_ignore_hit, compare=False, repr=False)

    def hit(self) -> None:
        """Signal that this mark's call site executed."""
        self._deliver(self.name)


class MarkRegistry:
    """Concurrently accessible table of known mark names.

    Example:
        >>> registry = MarkRegistry()
        >>> registry.register('fast-path') is registry.register('fast-path')
        True
        >>> 'fast-path' in registry
        True
    """

    def __init__(self, deliver: Callable[[str], None] | None = None) -> None:
        """Initialize an empty registry.

        Args:
            deliver: Callable that handles ``MarkHandle.hit()`` for handles
                     created by this registry. Defaults to a no-op.
        """
        self._deliver = deliver if deliver is not None else _ignore_hit
        self._handles: dict[str, MarkHandle] = {}
        self._lock = threading.Lock()

    def register(self, name: str) -> MarkHandle:
        """Register a mark name, or return the existing handle for it.

        Args:
            name: The mark name.

        Returns:
            The one handle this registry holds for ``name``.
        """
        validate_name(name)
        handle = self._handles.get(name)
        if handle is not None:
            return handle
        with self._lock:
            handle = self._handles.get(name)
            if handle is None:
                handle = MarkHandle(name, self._deliver)
                self._handles[name] = handle
                logger.debug('Registered mark %r', name)
        return handle

    def names(self) -> list[str]:
        """List all registered mark names, sorted."""
        with self._lock:
            return sorted(self._handles)

    def __contains__(self, name: object) -> bool:
        return name in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())
