"""Project name matching."""

import re

from qna_cleanup.errors import ConfigurationError


def compile_pattern(pattern: str) -> re.Pattern:
    """
    Compile the user supplied project name pattern.

    Args:
        pattern: Regular expression text

    Returns:
        The compiled expression

    Raises:
        ConfigurationError: If the expression is empty or invalid
    """
    if not pattern:
        raise ConfigurationError("--pattern must not be empty")
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigurationError(f"Invalid --pattern {pattern!r}: {exc}") from exc


def matches(name: str, pattern: re.Pattern) -> bool:
    """True if the pattern matches anywhere in the project name."""
    return pattern.search(name) is not None
