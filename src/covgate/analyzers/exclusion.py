"""Glob matching for coverage exclusion patterns.

Patterns follow minimatch conventions, which is what most JavaScript and
Dart coverage tooling documents for lcov exclusions:

- ``*``, ``?`` and ``[...]`` match within a single path segment
- ``**`` as a whole segment matches zero or more segments
- ``{a,b}`` expands to alternatives
- wildcards never match a leading ``.`` unless the pattern segment starts with one

Patterns are anchored to the whole path, so ``*.js`` matches ``a.js`` but not
``src/a.js``.
"""

from __future__ import annotations

import fnmatch
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

_GLOBSTAR = "**"


def parse_exclude_patterns(raw: str | Iterable[str] | None) -> list[str]:
    """Split a space-separated pattern string into a list of patterns.

    An empty string (or None) yields no patterns. Lists are passed through
    with blank entries dropped.
    """
    if raw is None:
        return []
    items = raw.split() if isinstance(raw, str) else [str(item).strip() for item in raw]
    return [item for item in items if item]


def expand_braces(pattern: str) -> list[str]:
    """Expand the first top-level ``{a,b,...}`` group, recursively.

    Patterns without a balanced brace group are returned unchanged.
    """
    start = pattern.find("{")
    if start == -1:
        return [pattern]

    depth = 0
    options: list[str] = []
    current_start = start + 1
    for index in range(start, len(pattern)):
        char = pattern[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                options.append(pattern[current_start:index])
                prefix, suffix = pattern[:start], pattern[index + 1 :]
                if len(options) == 1:
                    # "{a}" is not an alternation; keep it literal
                    literal = prefix + "{" + options[0] + "}"
                    return [literal + part for part in expand_braces(suffix)]
                expanded: list[str] = []
                for option in options:
                    expanded.extend(expand_braces(prefix + option + suffix))
                return expanded
        elif char == "," and depth == 1:
            options.append(pattern[current_start:index])
            current_start = index + 1

    return [pattern]


def _match_segment(segment: str, pattern: str) -> bool:
    if segment.startswith(".") and not pattern.startswith("."):
        return False
    return fnmatch.fnmatchcase(segment, pattern)


def _match_segments(path_segments: list[str], pattern_segments: list[str]) -> bool:
    if not pattern_segments:
        return not path_segments

    head, rest = pattern_segments[0], pattern_segments[1:]
    if head == _GLOBSTAR:
        for consumed in range(len(path_segments) + 1):
            if consumed and path_segments[consumed - 1].startswith("."):
                break
            if _match_segments(path_segments[consumed:], rest):
                return True
        return False

    if not path_segments:
        return False
    return _match_segment(path_segments[0], head) and _match_segments(path_segments[1:], rest)


def match_glob(path: str, pattern: str) -> bool:
    """Return True if *path* matches the glob *pattern* in full.

    Args:
        path: File path as recorded in the coverage report.
        pattern: Glob pattern; an empty pattern matches nothing.
    """
    if not pattern:
        return False
    path_segments = path.replace("\\", "/").split("/")
    return any(
        _match_segments(path_segments, alternative.split("/"))
        for alternative in expand_braces(pattern)
    )


def find_matching_pattern(path: str, patterns: Iterable[str]) -> str | None:
    """Return the first pattern that matches *path*, or None."""
    for pattern in patterns:
        if match_glob(path, pattern):
            return pattern
    return None


def is_excluded(path: str, patterns: Iterable[str]) -> bool:
    """Return True if *path* matches any exclusion pattern."""
    pattern = find_matching_pattern(path, patterns)
    if pattern is None:
        return False
    logger.debug("Excluding %s from coverage (matched %r)", path, pattern)
    return True
