"""Glob/regex matching backed by a process-wide compiled-pattern cache."""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class PatternError(ValueError):
    """Raised by a pattern compiler for a malformed glob."""


@dataclass(frozen=True)
class PatternFailure:
    """Cached marker for a pattern that failed to compile."""

    reason: str


class PatternCache:
    """Append-only memo table: raw pattern -> compiled pattern or failure.

    Lookups read the dict without locking (a single dict lookup is atomic).
    A miss takes the writer lock, re-checks the key so that racing callers
    compile a pattern only once, then stores either the compiled pattern or
    a PatternFailure. Failures are logged once, when first recorded.
    Entries live for the lifetime of the cache.
    """

    def __init__(self, compiler: Callable[[str], re.Pattern[str]], *, kind: str) -> None:
        self._compiler = compiler
        self._kind = kind
        self._entries: dict[str, re.Pattern[str] | PatternFailure] = {}
        self._lock = threading.Lock()

    def get(self, pattern: str) -> re.Pattern[str] | None:
        """Return the compiled pattern, or None if it cannot be compiled."""
        entry = self._entries.get(pattern)
        if entry is None:
            entry = self._insert(pattern)
        if isinstance(entry, PatternFailure):
            return None
        return entry

    def _insert(self, pattern: str) -> re.Pattern[str] | PatternFailure:
        with self._lock:
            entry = self._entries.get(pattern)
            if entry is not None:
                return entry
            try:
                entry = self._compiler(pattern)
            except (re.error, PatternError) as e:
                logger.warning(f"Invalid {self._kind} pattern '{pattern}': {e}")
                entry = PatternFailure(reason=str(e))
            self._entries[pattern] = entry
            return entry

    def failures(self) -> dict[str, str]:
        return {p: e.reason for p, e in self._entries.items() if isinstance(e, PatternFailure)}

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def _char_class(pattern: str, start: int) -> tuple[str, int]:
    """Translate the ``[...]`` class opening at ``start``; return (regex, next index)."""
    i = start + 1
    negate = i < len(pattern) and pattern[i] == "!"
    if negate:
        i += 1
    body_start = i
    # a leading ']' is a literal member
    if i < len(pattern) and pattern[i] == "]":
        i += 1
    close = pattern.find("]", i)
    if close == -1:
        raise PatternError(f"unterminated character class at position {start}")
    body = pattern[body_start:close]
    for ch in ("\\", "^", "[", "]"):
        body = body.replace(ch, "\\" + ch)
    return f"[{'^' if negate else ''}{body}]", close + 1


def compile_glob(pattern: str) -> re.Pattern[str]:
    """Translate a glob into an anchored regex.

    ``*`` matches any run of characters, path separators included. ``**``
    must be a whole path component: ``**/`` matches zero or more
    directories and a trailing ``**`` matches everything below. ``?``
    matches one character; ``[...]``/``[!...]`` are character classes.
    """
    if "***" in pattern:
        raise PatternError("wildcards are either regular `*` or recursive `**`")
    parts: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if pattern.startswith("**", i):
            end = i + 2
            if (i > 0 and pattern[i - 1] != "/") or (end < n and pattern[end] != "/"):
                raise PatternError("recursive wildcards must form a single path component")
            if end < n:
                parts.append("(?:.*/)?")
                i = end + 1
            else:
                parts.append(".*")
                i = end
        elif c == "*":
            parts.append(".*")
            i += 1
        elif c == "?":
            parts.append(".")
            i += 1
        elif c == "[":
            regex, i = _char_class(pattern, i)
            parts.append(regex)
        else:
            parts.append(re.escape(c))
            i += 1
    return re.compile("".join(parts) + r"\Z", re.DOTALL)


REGEX_CACHE = PatternCache(re.compile, kind="regex")
GLOB_CACHE = PatternCache(compile_glob, kind="glob")


def _regex_cache(cache: PatternCache | None) -> PatternCache:
    return REGEX_CACHE if cache is None else cache


def _glob_cache(cache: PatternCache | None) -> PatternCache:
    return GLOB_CACHE if cache is None else cache


def match_regex(
    pattern: str,
    values: Iterable[str],
    *,
    cache: PatternCache | None = None,
) -> bool:
    """True if the regex is found anywhere in at least one value. Never raises."""
    compiled = _regex_cache(cache).get(pattern)
    if compiled is None:
        return False
    return any(compiled.search(v) for v in values)


def match_glob(
    pattern: str,
    values: Iterable[str],
    *,
    cache: PatternCache | None = None,
) -> bool:
    """True if the glob matches at least one whole value. Never raises."""
    compiled = _glob_cache(cache).get(pattern)
    if compiled is None:
        return False
    return any(compiled.match(v) for v in values)
