"""Configuration loading for pytest-covermarks.

This module reads configuration from pyproject.toml [tool.pytest-covermarks]
section and merges it with command-line options.
"""

from __future__ import annotations

from dataclasses import dataclass
import tomllib
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from pathlib import Path


DEFAULT_REPORT = False
DEFAULT_LEAK_CHECK = True


@dataclass
class CovermarksConfig:
    """Configuration for pytest-covermarks.

    Fields default to None, meaning "not configured here".

    Attributes:
        report: Print the test/mark correlation report after the session.
        leak_check: Stop the session when a test leaves a scope open.
    """

    report: bool | None = None
    leak_check: bool | None = None


def load_config(rootdir: Path) -> CovermarksConfig:
    """Load configuration from pyproject.toml.

    Reads the [tool.pytest-covermarks] section from pyproject.toml in the
    given directory. Returns default configuration if the file or section
    does not exist.

    Args:
        rootdir: Directory containing pyproject.toml.

    Returns:
        CovermarksConfig with values from pyproject.toml or defaults.
    """
    pyproject_path = rootdir / 'pyproject.toml'

    if not pyproject_path.exists():
        return CovermarksConfig()

    with pyproject_path.open('rb') as f:
        data = tomllib.load(f)

    tool_config = data.get('tool', {}).get('pytest-covermarks', {})

    return CovermarksConfig(
        report=tool_config.get('report'),
        leak_check=tool_config.get('leak_check'),
    )


def merge_configs(
    file_config: CovermarksConfig,
    cli_report: bool | None = None,
    cli_leak_check: bool | None = None,
) -> CovermarksConfig:
    """Merge CLI options with file configuration.

    CLI options take precedence over pyproject.toml. Anything set in neither
    place falls back to the built-in default, so every field of the result
    is a bool.

    Args:
        file_config: Configuration loaded from pyproject.toml.
        cli_report: Value of --covermarks-report, or None if not given.
        cli_leak_check: False if --no-covermarks-leak-check was given, else None.

    Returns:
        CovermarksConfig with every field resolved.
    """
    report = cli_report if cli_report is not None else file_config.report
    leak_check = cli_leak_check if cli_leak_check is not None else file_config.leak_check

    return CovermarksConfig(
        report=DEFAULT_REPORT if report is None else bool(report),
        leak_check=DEFAULT_LEAK_CHECK if leak_check is None else bool(leak_check),
    )
