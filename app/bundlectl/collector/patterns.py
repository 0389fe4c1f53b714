"""Ant-style glob patterns for include/exclude matching.

Patterns are matched against slash-separated paths relative to the
collection root. Inside a path segment, ``*`` matches any run of
characters, ``?`` matches a single character and ``[...]`` matches a
character class. A segment consisting only of ``**`` matches zero or
more whole segments.

Examples:
    ``workflow*/**``  a top-level entry named workflow* and everything below it;
                      since ``**`` may match zero segments this includes a
                      top-level file such as ``workflow.txt``
    ``*/log``         a file named ``log`` exactly one directory down
    ``**/*.xml``      every .xml file at any depth
"""

import re
from collections.abc import Iterable, Sequence

from bundlectl.collector.errors import PatternSyntaxError

_DOUBLE_STAR = "**"

# Characters that must be escaped inside a regex character class
_CLASS_SPECIALS = frozenset("\\[]^&~|")


def split_patterns(value: str | Iterable[str] | None) -> tuple[str, ...]:
    """Split a user-supplied pattern list into individual patterns.

    Accepts either a single string separated by commas and/or newlines
    (as typed into a form or a config file) or an iterable of strings,
    each of which may itself contain separators.

    Args:
        value: Raw pattern input. None or blank yields no patterns.

    Returns:
        Stripped, non-blank patterns in first-seen order, deduplicated.
    """
    if value is None:
        return ()
    raw_items = [value] if isinstance(value, str) else list(value)

    patterns: list[str] = []
    for item in raw_items:
        for chunk in re.split(r"[,\n]", item):
            pattern = chunk.strip()
            if pattern and pattern not in patterns:
                patterns.append(pattern)
    return tuple(patterns)


def _translate_segment(pattern: str, segment: str) -> str:
    """Translate a single path segment into a regular expression body."""
    parts: list[str] = []
    i = 0
    n = len(segment)
    while i < n:
        char = segment[i]
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            end = segment.find("]", i + 1)
            if end == -1:
                raise PatternSyntaxError(pattern, "unclosed character class")
            content = segment[i + 1 : end]
            negate = content[:1] in ("!", "^")
            if negate:
                content = content[1:]
            if not content:
                raise PatternSyntaxError(pattern, "empty character class")
            body = "".join("\\" + c if c in _CLASS_SPECIALS else c for c in content)
            parts.append(f"[^{body}/]" if negate else f"[{body}]")
            i = end
        else:
            parts.append(re.escape(char))
        i += 1
    return "".join(parts)


class GlobPattern:
    """A compiled Ant-style glob pattern.

    Compilation happens in the constructor so that malformed patterns
    are reported before any directory is walked.

    Attributes:
        pattern: The pattern text as supplied.
        case_sensitive: Whether matching distinguishes letter case.
    """

    __slots__ = ("_segments", "case_sensitive", "pattern")

    def __init__(self, pattern: str, *, case_sensitive: bool = True) -> None:
        self.pattern = pattern
        self.case_sensitive = case_sensitive
        self._segments = self._compile(pattern, case_sensitive)

    @staticmethod
    def _compile(pattern: str, case_sensitive: bool) -> tuple[re.Pattern[str] | None, ...]:
        """Compile the pattern into per-segment regexes (None stands for ``**``)."""
        text = pattern.strip().replace("\\", "/")
        if not text:
            raise PatternSyntaxError(pattern, "pattern is empty")

        text = text.lstrip("/")
        if not text:
            raise PatternSyntaxError(pattern, "pattern has no path segments")
        if text.endswith("/"):
            text += _DOUBLE_STAR

        flags = 0 if case_sensitive else re.IGNORECASE
        compiled: list[re.Pattern[str] | None] = []
        for segment in text.split("/"):
            if not segment:
                raise PatternSyntaxError(pattern, "empty path segment")
            if segment in (".", ".."):
                raise PatternSyntaxError(pattern, f"relative segment '{segment}' not allowed")
            if segment == _DOUBLE_STAR:
                # Consecutive ** segments are equivalent to one
                if compiled and compiled[-1] is None:
                    continue
                compiled.append(None)
                continue
            if _DOUBLE_STAR in segment:
                raise PatternSyntaxError(pattern, "'**' must be a whole path segment")
            compiled.append(re.compile(_translate_segment(pattern, segment), flags))
        return tuple(compiled)

    def matches(self, path: str) -> bool:
        """Check whether a relative, slash-separated path matches.

        Args:
            path: Path relative to the collection root, e.g. ``workflow/1.txt``.

        Returns:
            True if the whole path matches the pattern.
        """
        names = tuple(name for name in path.split("/") if name)
        return _match_segments(self._segments, names)

    def __repr__(self) -> str:
        return f"GlobPattern({self.pattern!r}, case_sensitive={self.case_sensitive})"


def _match_segments(
    segments: Sequence[re.Pattern[str] | None],
    names: Sequence[str],
) -> bool:
    """Match pattern segments against path names, backtracking on ``**``."""
    if not segments:
        return not names

    head = segments[0]
    if head is None:
        rest = segments[1:]
        if not rest:
            return True
        return any(_match_segments(rest, names[k:]) for k in range(len(names) + 1))

    if not names or head.fullmatch(names[0]) is None:
        return False
    return _match_segments(segments[1:], names[1:])


def compile_patterns(
    patterns: Iterable[str],
    *,
    case_sensitive: bool = True,
) -> tuple[GlobPattern, ...]:
    """Compile a sequence of pattern strings.

    Args:
        patterns: Pattern strings, already split.
        case_sensitive: Whether matching distinguishes letter case.

    Returns:
        Tuple of compiled patterns in input order.

    Raises:
        PatternSyntaxError: If any pattern is malformed.
    """
    return tuple(GlobPattern(p, case_sensitive=case_sensitive) for p in patterns)


def matches_any(patterns: Iterable[GlobPattern], path: str) -> bool:
    """Return True if at least one pattern matches the path."""
    return any(p.matches(path) for p in patterns)
