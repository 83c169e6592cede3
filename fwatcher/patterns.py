"""
Pattern filtering for fwatcher.

Glob expressions are compiled with pathspec's gitignore dialect (GitIgnoreSpec):
``*`` matches within a path segment, ``**`` matches across segments, and a
pattern without a slash matches the last segment at any depth (so the
default ``*`` matches every path).
"""

import logging
from typing import Iterable, Sequence

import pathspec

from fwatcher.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS = ("*",)


def compile_patterns(patterns: Iterable[str]) -> pathspec.PathSpec:
    """
    Compile glob expressions into a single matcher.

    Args:
        patterns: Glob expressions to compile.

    Returns:
        pathspec.PathSpec: Matcher for the given expressions.

    Raises:
        ConfigurationError: If any of the expressions is malformed.
    """
    patterns = list(patterns)
    try:
        return pathspec.GitIgnoreSpec.from_lines(patterns)
    except ValueError as e:
        raise ConfigurationError(f"Malformed pattern in {patterns}: {e}") from e


def is_relevant(path: str, includes: pathspec.PathSpec, excludes: pathspec.PathSpec) -> bool:
    """Return True if path matches an include pattern and no exclude pattern."""
    return includes.match_file(path) and not excludes.match_file(path)


class PatternFilter:
    """
    Include/exclude filter compiled once from glob expressions.

    Attributes:
        includes: Compiled include patterns.
        excludes: Compiled exclude patterns.
    """

    def __init__(self, includes: Sequence[str] = DEFAULT_PATTERNS, excludes: Sequence[str] = ()):
        self.include_patterns = tuple(includes) or DEFAULT_PATTERNS
        self.exclude_patterns = tuple(excludes)
        self.includes = compile_patterns(self.include_patterns)
        self.excludes = compile_patterns(self.exclude_patterns)
        logger.debug(
            "Compiled patterns: include=%s exclude=%s",
            self.include_patterns,
            self.exclude_patterns,
        )

    def is_relevant(self, path: str) -> bool:
        return is_relevant(path, self.includes, self.excludes)
