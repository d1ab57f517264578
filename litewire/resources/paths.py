"""
Classpath-style glob matching for mapper resource locations.

Pattern grammar (after stripping ``classpath:``/``classpath*:`` and
normalizing backslashes):

- ``**/`` matches zero or more whole path segments
- ``**`` matches any run of characters, ``/`` included
- ``*`` matches any run of characters except ``/``
- everything else is literal
"""

import re
from functools import lru_cache
from typing import Iterable, List, Pattern, Sequence

_SCHEME = re.compile(r"^classpath\*?:")


def normalize_path(path: str) -> str:
    """Strip the classpath scheme and normalize separators."""
    path = _SCHEME.sub("", path.strip()).replace("\\", "/")
    return path.lstrip("/")


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> Pattern[str]:
    """Compile one location pattern to an anchored regex."""
    text = normalize_path(pattern)
    parts: List[str] = []
    i = 0
    while i < len(text):
        if text.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif text.startswith("**", i):
            parts.append(".*")
            i += 2
        elif text[i] == "*":
            parts.append("[^/]*")
            i += 1
        else:
            parts.append(re.escape(text[i]))
            i += 1
    return re.compile("".join(parts))


class ResourcePathMatcher:
    """
    Matches candidate resource paths against location patterns.

    Args:
        patterns: Location patterns, compiled once at construction
    """

    def __init__(self, patterns: Sequence[str] = ()):
        self.patterns = list(patterns)
        self._compiled = [compile_pattern(p) for p in self.patterns]

    def matches(self, path: str) -> bool:
        candidate = normalize_path(path)
        return any(regex.fullmatch(candidate) for regex in self._compiled)

    def filter(self, candidate_paths: Iterable[str]) -> List[str]:
        return [path for path in candidate_paths if self.matches(path)]


def match(candidate_paths: Iterable[str], patterns: Sequence[str]) -> List[str]:
    """
    Return the candidates matching any pattern, in input order.

    Example:
        >>> match(["mapper/a/X.xml", "other/Y.xml"], ["classpath:mapper/**/*.xml"])
        ['mapper/a/X.xml']
    """
    return ResourcePathMatcher(patterns).filter(candidate_paths)
