"""Glob pattern matching for protected paths.

The protection engine only depends on the PatternMatcher protocol, so the
glob implementation can be replaced without touching protection policy.
"""

import fnmatch
from functools import lru_cache
from typing import Protocol

GLOBSTAR = "**"


class PatternMatcher(Protocol):
    """Decides whether a candidate string matches a glob pattern."""

    def match(self, candidate: str, pattern: str) -> bool:
        """Return True if candidate matches pattern."""
        ...


class GlobMatcher:
    """Case-sensitive glob matcher with brace and ``**`` support.

    Rules:
        - ``{a,b}`` alternatives are expanded first, nested groups included.
          A group without a top-level comma is literal.
        - Wildcards never cross a ``/``. A pattern without a separator
          only matches a single path segment.
        - A ``**`` segment spans zero or more path segments.
        - A segment starting with ``.`` is only matched by a pattern
          segment that starts with ``.`` as well, and ``**`` never spans
          such a segment.

    Example:
        >>> matcher = GlobMatcher()
        >>> matcher.match("src/lib/a.tmp", "**/*.tmp")
        True
        >>> matcher.match("id.pem", "*.{pem,key}")
        True
        >>> matcher.match(".git", "*")
        False
    """

    def match(self, candidate: str, pattern: str) -> bool:
        """Return True if candidate matches pattern."""
        if not pattern:
            return False
        parts = candidate.split("/")
        return any(
            _match_segments(parts, alternative.split("/"))
            for alternative in expand_braces(pattern)
        )


@lru_cache(maxsize=256)
def expand_braces(pattern: str) -> tuple[str, ...]:
    """Expand ``{a,b}`` alternatives into plain glob patterns.

    Example:
        >>> expand_braces("*.{pem,key}")
        ('*.pem', '*.key')
    """
    depth = 0
    start = -1
    for i, ch in enumerate(pattern):
        if ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                options = _split_top_level(pattern[start + 1 : i])
                if len(options) > 1:
                    prefix, suffix = pattern[:start], pattern[i + 1 :]
                    expanded: list[str] = []
                    for option in options:
                        for result in expand_braces(prefix + option + suffix):
                            if result not in expanded:
                                expanded.append(result)
                    return tuple(expanded)
    return (pattern,)


def _split_top_level(body: str) -> list[str]:
    """Split a brace body on commas that are not inside nested braces."""
    options: list[str] = []
    depth = 0
    current = ""
    for ch in body:
        if ch == "," and depth == 0:
            options.append(current)
            current = ""
            continue
        if ch == "{":
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
        current += ch
    options.append(current)
    return options


def _match_segment(name: str, pat: str) -> bool:
    if name.startswith(".") and not pat.startswith("."):
        return False
    return fnmatch.fnmatchcase(name, pat)


def _match_segments(parts: list[str], pats: list[str]) -> bool:
    """Match path segments against pattern segments."""
    if not pats:
        return not parts

    head = pats[0]
    if head == GLOBSTAR:
        # Collapse consecutive globstars
        rest = pats[1:]
        while rest and rest[0] == GLOBSTAR:
            rest = rest[1:]
        for i in range(len(parts) + 1):
            if _match_segments(parts[i:], rest):
                return True
            if i < len(parts) and parts[i].startswith("."):
                return False
        return False

    if not parts:
        return False
    return _match_segment(parts[0], head) and _match_segments(parts[1:], pats[1:])
