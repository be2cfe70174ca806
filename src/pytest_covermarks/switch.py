"""Switch that turns mark checking on or off for the whole process.

Checking is on unless the COVERMARKS environment variable holds one of the
disabling values. The variable is read when the default state is created, so
instrumented code shipped with COVERMARKS=0 never pays for bookkeeping.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Mapping


ENABLE_ENV_VAR = 'COVERMARKS'

DISABLING_VALUES = frozenset({'0', 'false', 'no', 'off'})


def is_enabled(environ: Mapping[str, str] | None = None) -> bool:
    """Decide from the environment whether checking is active.

    Args:
        environ: Environment to consult. Defaults to ``os.environ``.

    Returns:
        False if COVERMARKS is set to a disabling value, True otherwise.
    """
    env = os.environ if environ is None else environ
    value = env.get(ENABLE_ENV_VAR)
    if value is None:
        return True
    return value.strip().lower() not in DISABLING_VALUES
